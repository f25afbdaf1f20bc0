"""Lexical scanning for the lox language: raw source text in, flat list of Tokens out.

Token grammar, loosely:

```
<comment>    ::= "//" <char>* <newline>           ; skipped
               | "/*" (<char> | <comment>)* "*/"  ; skipped, may be nested to any depth
<operator>   ::= "==" | "!=" | "<=" | ">="        ; two-character operators win over one-character ones
               | "-" | "+" | "*" | "/" | "!" | "=" | "<" | ">"
<punct>      ::= "(" | ")" | "{" | "}" | "," | "." | ";"
<string>     ::= '"' (<char> | '\\"')* '"'        ; may span lines
<number>     ::= <digit>+ ("." <digit>+)?         ; always stored as a float
<identifier> ::= [_a-zA-Z] [_a-zA-Z0-9]*          ; keywords are identifiers from KEYWORDS
```

Scanning never stops early: bad characters are reported through the error handler and skipped.
"""

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Closed set of token kinds. Values are the lexemes for fixed-spelling kinds."""
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    SEMICOLON = ";"
    MINUS = "-"
    PLUS = "+"
    STAR = "*"
    SLASH = "/"

    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL = "="
    EQUAL_EQUAL = "=="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="

    NUMBER = "<number>"
    STRING = "<string>"
    IDENTIFIER = "<identifier>"

    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FOR = "for"
    FN = "fn"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "<eof>"


KEYWORDS = {kind.value: kind for kind in (
    TokenKind.AND, TokenKind.CLASS, TokenKind.ELSE, TokenKind.FALSE, TokenKind.FOR, TokenKind.FN, TokenKind.IF,
    TokenKind.NIL, TokenKind.OR, TokenKind.PRINT, TokenKind.RETURN, TokenKind.SUPER, TokenKind.THIS,
    TokenKind.TRUE, TokenKind.VAR, TokenKind.WHILE,
)}

OPERATORS = {kind.value: kind for kind in TokenKind if len(kind.value) <= 2 and not kind.value.isalpha()}


@dataclass(frozen=True)
class Token:
    """A single scanned token. literal holds the payload of numbers, strings and identifiers only."""
    kind: TokenKind
    lexeme: str
    literal: object
    line: int

    def __repr__(self):
        if self.literal is not None:
            return f"{self.kind.name}({self.literal!r})@{self.line}"
        return f"{self.kind.name}@{self.line}"


class Scanner:
    """Turns source text into Tokens. error_handler receives every malformed-input diagnostic."""
    WHITESPACE = re.compile(r"[ \t\r\n]+")
    LINE_COMMENT = re.compile(r"//[^\n]*")
    OPERATOR = re.compile(r"[!=<>]=|[-(){},.+;*/!=<>]")
    STRING = re.compile(r'"((?:\\"|[^"])*)"')
    NUMBER = re.compile(r"\d+(\.\d+)?")
    IDENTIFIER = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")

    def __init__(self, text, error_handler, line=1):
        self.text = text
        self.error_handler = error_handler
        self.line = line

        self.pos = 0
        self.tokens = []

    def scan_tokens(self):
        """Scans all of self.text. The result always ends with an EOF token carrying the final line."""
        while self.pos < len(self.text):
            self.scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        text, pos = self.text, self.pos

        match = Scanner.WHITESPACE.match(text, pos)
        if match:
            self.line += match.group().count("\n")
            self.pos = match.end()
            return

        match = Scanner.LINE_COMMENT.match(text, pos)
        if match:
            self.pos = match.end()
            return

        if text.startswith("/*", pos):
            self.block_comment()
            return

        match = Scanner.OPERATOR.match(text, pos)
        if match:
            self.add(OPERATORS[match.group()], match)
            return

        if text[pos] == '"':
            self.string()
            return

        match = Scanner.NUMBER.match(text, pos)
        if match:
            self.add(TokenKind.NUMBER, match, float(match.group()))
            return

        match = Scanner.IDENTIFIER.match(text, pos)
        if match:
            word = match.group()
            if word in KEYWORDS:
                self.add(KEYWORDS[word], match)
            else:
                self.add(TokenKind.IDENTIFIER, match, word)
            return

        self.error_handler.error(self.line, f"unknown character '{text[pos]}'")
        self.pos += 1

    def block_comment(self):
        """Skips a (possibly nested) block comment starting at self.pos. An unterminated comment is reported at the
        line it opened on, and scanning resumes just after the last '*/' that closed an inner level (or just after
        the opening '/*' if none did).
        """
        start_line = self.line
        line = self.line
        depth = 1
        pos = self.pos + 2
        resume = (pos, line)

        while pos < len(self.text):
            if self.text.startswith("/*", pos):
                depth += 1
                pos += 2
            elif self.text.startswith("*/", pos):
                depth -= 1
                pos += 2
                if depth == 0:
                    break
                resume = (pos, line)
            else:
                if self.text[pos] == "\n":
                    line += 1
                pos += 1

        if depth != 0:
            self.error_handler.error(start_line, "unmatched comments")
            pos, line = resume

        self.pos = pos
        self.line = line

    def string(self):
        match = Scanner.STRING.match(self.text, self.pos)
        if not match:
            self.error_handler.error(self.line, "unterminated string")
            self.line += self.text.count("\n", self.pos)
            self.pos = len(self.text)
            return

        self.add(TokenKind.STRING, match, match.group(1).replace('\\"', '"'))
        self.line += match.group().count("\n")  # token keeps the line the string started on

    def add(self, kind, match, literal=None):
        self.tokens.append(Token(kind, match.group(), literal, self.line))
        self.pos = match.end()


def scan_tokens(text, error_handler, line=1):
    """Shortcut for Scanner(text, error_handler, line).scan_tokens()."""
    return Scanner(text, error_handler, line).scan_tokens()
