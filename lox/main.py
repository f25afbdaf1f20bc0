"""Runs the lox interpreter on a .lox file, or in command-line mode if no file is given. Also uses the error handling
context manager. Called from the lox executable script.

Basic program flow for every execution unit:
    1. Scanner: source text -> flat list of Tokens (lox/syntax/scanner.py)
    2. Parser: Tokens -> list of statement trees (lox/syntax/parser.py)
    3. Resolver: walks the trees once to work out which declaration every local name refers to (lox/lang/resolver.py)
    4. Interpreter: walks the trees again and executes them (lox/lang/interpreter.py)

Exit codes follow sysexits.h: 64 for static errors, 66 for unreadable input, 70 for runtime errors.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler, LoxError
from lox.lang.session import Session
from lox.lang.shell import Shell
from lox.syntax.parser import Parser
from lox.syntax.printer import AstPrinter
from lox.syntax.scanner import Scanner


EX_DATAERR = 64
EX_NOINPUT = 66
EX_SOFTWARE = 70


def build_parser():
    parser = argparse.ArgumentParser(prog="lox", description="Tree-walking interpreter for the lox language.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")

    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", action="store_true", help="print the token stream of file and exit")
    dump.add_argument("--ast", action="store_true", help="print the syntax tree of file and exit")
    return parser


def dump(path, error_handler, tokens_only):
    """Prints tokens or syntax trees of the file at path without running it."""
    try:
        with open(path, "r") as file:
            text = file.read()
    except OSError:
        raise LoxError(None, f"'{path}' could not be opened")

    tokens = Scanner(text, error_handler).scan_tokens()
    if tokens_only:
        for token in tokens:
            print(repr(token))
        return

    statements = Parser(tokens, error_handler).parse()
    if not error_handler.had_error:
        print(AstPrinter().print_all(statements))


def main(argv=None):
    """Runs lox interpreter. Called from lox executable script. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    if args.file is None:
        error_handler = ErrorHandler(fatal=False)
        Shell(Session(error_handler)).cmdloop()
        return 0

    error_handler = ErrorHandler(fatal=False)
    try:
        with open(args.file, "r"):
            pass
    except OSError:
        error_handler.report(None, "", f"'{args.file}' could not be opened")
        return EX_NOINPUT

    with error_handler:
        if args.tokens or args.ast:
            dump(args.file, error_handler, args.tokens)
        else:
            Session(error_handler).run_file(args.file)

    if error_handler.had_error:
        return EX_DATAERR
    if error_handler.had_runtime_error:
        return EX_SOFTWARE
    return 0


if __name__ == "__main__":
    sys.exit(main())
