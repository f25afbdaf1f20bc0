"""Error handling for the lox language. Only LoxErrors should be encountered while running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

There are two independent classes of error, tracked by separate sticky flags:
- static errors (scanning, parsing, resolving): reported and recovered from so that as many as possible are found
- runtime errors (evaluating): reported once, and abort the rest of the current execution unit
"""

import sys

from termcolor import colored

from lox.syntax.scanner import TokenKind


class LoxError(Exception):
    """Base class of every error the interpreter raises on purpose. token is the offending token (may be None)."""

    def __init__(self, token, msg, internal=False):
        super().__init__(msg)
        self.token = token
        self.msg = msg
        self.internal = internal

    @property
    def line(self):
        return self.token.line if self.token is not None else None


class ParseError(LoxError):
    """Unwinds the parser to the nearest declaration so it can resynchronize. Always reported before it is raised."""


class LoxRuntimeError(LoxError):
    """Raised while evaluating. Aborts the current execution unit."""


class ErrorHandler:
    """Collects and displays diagnostics. Also a context manager that turns stray Python errors into lox errors."""
    ERROR = "red"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream

        self.had_error = False
        self.had_runtime_error = False
        self.diagnostics = []  # list of (line, context, message), in reporting order

    def reset(self):
        """Clears both sticky flags. Called at the start of every execution unit."""
        self.had_error = False
        self.had_runtime_error = False

    def report(self, line, context, message):
        """Displays a diagnostic. Never raises."""
        self.diagnostics.append((line, context, message))

        error_msg = colored(f"[line {line}] ", attrs=["bold"]) if line is not None else ""
        error_msg += colored(f"error{context}: ", ErrorHandler.ERROR, attrs=["bold"]) + message
        print(error_msg, file=self.stream or sys.stderr)

    def error(self, where, message):
        """Reports a static error. where is either a Token or a bare line number."""
        self.had_error = True

        if isinstance(where, int):
            self.report(where, "", message)
        elif where.kind is TokenKind.EOF:
            self.report(where.line, " at end", message)
        else:
            self.report(where.line, f" at '{where.lexeme}'", message)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError."""
        self.had_runtime_error = True
        context = " [internal]" if error.internal else ""
        self.report(error.line, context, error.msg)

    def throw(self, error):
        """Reports a LoxError that escaped evaluation and, if fatal, exits."""
        if isinstance(error, LoxRuntimeError):
            self.runtime_error(error)
        else:
            self.had_error = True
            self.report(error.line, " [internal]" if error.internal else "", error.msg)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.report(None, "", "keyboard interrupt")
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxError(None, f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
