"""Handles interactive mode for the lox interpreter. Uses cmd as backend."""

import cmd
import io

from lox.lang.error import ErrorHandler
from lox.syntax.scanner import Scanner, TokenKind


class Shell(cmd.Cmd):
    """lox interpreter shell. Every complete input is one execution unit of the shell's session."""
    intro = "lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    result_prefix = "=> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def needs_continuation(text):
        """Whether text has more opening than closing brace/parenthesis tokens. Strings and comments don't count, and
        scanning errors are left for the real execution to report.
        """
        tokens = Scanner(text, ErrorHandler(fatal=False, stream=io.StringIO())).scan_tokens()
        kinds = [token.kind for token in tokens]
        braces = kinds.count(TokenKind.LEFT_BRACE) - kinds.count(TokenKind.RIGHT_BRACE)
        parens = kinds.count(TokenKind.LEFT_PAREN) - kinds.count(TokenKind.RIGHT_PAREN)
        return braces > 0 or parens > 0

    def default(self, line):
        """Executes arbitrary lox code."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            text = self._tmp_line + line + "\n" if self._tmp_line else line

            if Shell.needs_continuation(text):
                self._tmp_line = text if text.endswith("\n") else text + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.execute(text)
            while self.sess.results:
                print(self.result_prefix + self.sess.pop(), file=self.stdout)

    def parseline(self, line):
        """Only 'help' and 'exit' are shell commands; everything else (including 'print ...') is lox code."""
        stripped = line.strip()
        if stripped == "EOF":
            return super().parseline(line)
        if self._tmp_line or stripped not in ("help", "exit"):
            return None, None, line
        return super().parseline(line)

    def do_help(self, arg):
        """Doesn't return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "lox is a small dynamically typed language with first-class functions, closures and classes.\n"
              "Statements end with ';'. Try 'var x = 40 + 2;' followed by 'x;', or define a function with\n"
              "'fn add(a, b) { return a + b; }'. The value of a trailing expression is shown after '=>'.\n"
              "Type 'exit' or press Ctrl-D to leave.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
