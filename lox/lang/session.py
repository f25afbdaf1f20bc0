"""Session control for the lox language. A Session owns everything that must survive from one execution unit to the
next (the global frame, registered natives, the running line number), so the same session can run a whole file or an
interactive shell one line at a time.

One execution unit = scan -> parse -> resolve -> evaluate over one chunk of source text.
"""

import time

from lox.lang.error import LoxError
from lox.lang.interpreter import ERROR, Interpreter, NO_VALUE
from lox.lang.objects import NativeFunction
from lox.lang.resolver import Resolver
from lox.syntax.parser import Parser
from lox.syntax.scanner import Scanner


class Session:
    """Governs a lox session. Natives in NATIVES are registered before any user code runs."""
    NATIVES = {
        "clock": (0, time.time),
    }

    def __init__(self, error_handler, stdout=None):
        self.error_handler = error_handler
        self.interpreter = Interpreter(error_handler, stdout)

        self.line = 1       # line the next unit starts on
        self.results = []   # values produced by units, oldest first

        for name, (arity, behavior) in Session.NATIVES.items():
            self.register_native(name, arity, behavior)

    @property
    def globals(self):
        return self.interpreter.globals

    def register_native(self, name, arity, behavior):
        """Installs a host function into the global frame."""
        self.globals.define(name, NativeFunction(name, arity, behavior))

    def scan(self, text):
        """Scans text as the continuation of everything this session has seen so far."""
        tokens = Scanner(text, self.error_handler, self.line).scan_tokens()

        self.line = tokens[-1].line
        if not text.endswith("\n"):
            self.line += 1  # shell lines arrive without their newline
        return tokens

    def parse(self, text):
        """Scans and parses text. Returns None if a static error occurred."""
        statements = Parser(self.scan(text), self.error_handler).parse()
        if self.error_handler.had_error:
            return None
        return statements

    def execute(self, text):
        """Runs text as one execution unit. Returns the unit's value, NO_VALUE or ERROR. Units that produce a value
        also append it to self.results.
        """
        self.error_handler.reset()
        start_line = self.line

        try:
            statements = self.parse(text)
            if statements is None:
                return ERROR
            table = Resolver(self.error_handler).resolve(statements)
        except RecursionError:
            self.error_handler.error(start_line, "too deeply nested")
            return ERROR
        if self.error_handler.had_error:
            return ERROR
        self.interpreter.resolve(table)

        result = self.interpreter.interpret(statements)
        if result is not NO_VALUE and result is not ERROR:
            self.results.append(result)
        return result

    def run_file(self, path):
        """Executes the file at path as a single unit."""
        try:
            with open(path, "r") as file:
                text = file.read()
        except OSError:
            raise LoxError(None, f"'{path}' could not be opened")
        return self.execute(text)

    def pop(self):
        """Removes and returns the display form of the oldest pending result."""
        return Interpreter.stringify(self.results.pop(0))
