"""Recursive-descent parser for the lox language: Tokens in, list of statements out. See lox/syntax/tree.py for the
grammar. Precedence is encoded by the call chain, lowest first:

    assignment -> or -> and -> equality -> comparison -> term -> factor -> unary -> call -> primary

On a syntax error the parser reports it, abandons the current declaration and skips ahead to a statement boundary, so
one broken statement produces one error while later, independent errors are still found.
"""

from lox.lang.error import ParseError
from lox.syntax.scanner import TokenKind
from lox.syntax.tree import (
    Assign, Binary, Block, Call, Class, Expression, Function, Get, Grouping, If, Lambda, Literal, Logical, Print,
    Return, Set, This, Unary, Var, Variable, While,
)


class Parser:
    """Parses one token list. error_handler receives every syntax error."""
    MAX_ARGS = 255
    SYNC_KINDS = (
        TokenKind.CLASS, TokenKind.FN, TokenKind.FOR, TokenKind.IF, TokenKind.WHILE, TokenKind.PRINT,
        TokenKind.RETURN,
    )

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    # ---------- TOP LEVEL ----------
    def parse(self):
        """Returns the list of successfully parsed declarations. Broken declarations are left out."""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # ---------- DECLARATIONS ----------
    def declaration(self):
        try:
            if self.match(TokenKind.CLASS):
                return self.class_declaration()
            if self.check(TokenKind.FN) and self.check_next(TokenKind.IDENTIFIER):
                self.advance()
                return self.function("function")
            if self.match(TokenKind.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "expected class name")
        self.consume(TokenKind.LEFT_BRACE, "expected '{' before class body")

        methods = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function("method"))

        self.consume(TokenKind.RIGHT_BRACE, "expected '}' after class body")
        return Class(name, methods)

    def function(self, kind):
        """Parses the part of a named function/method after 'fn'. kind is only used in error messages."""
        name = self.consume(TokenKind.IDENTIFIER, f"expected {kind} name")
        params, body = self.function_rest(name.lexeme)
        return Function(name, params, body)

    def function_rest(self, name):
        """Parses '(' params ')' '{' body '}' and returns (params, body)."""
        self.consume(TokenKind.LEFT_PAREN, f"expected '(' after {name}")
        params = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error_handler.error(self.peek(), f"can't have more than {Parser.MAX_ARGS} parameters")
                params.append(self.consume(TokenKind.IDENTIFIER, "expected parameter name"))
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after parameters")

        self.consume(TokenKind.LEFT_BRACE, f"expected '{{' before {name}'s body")
        return params, self.block()

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "expected variable name")
        initializer = self.expression() if self.match(TokenKind.EQUAL) else None
        self.consume(TokenKind.SEMICOLON, "expected ';' after variable declaration")
        return Var(name, initializer)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.match(TokenKind.PRINT):
            value = self.expression()
            self.consume(TokenKind.SEMICOLON, "expected ';' after value")
            return Print(value)
        if self.match(TokenKind.LEFT_BRACE):
            return Block(self.block())
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        return self.expression_statement()

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "expected '(' after 'if'")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after if condition")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenKind.ELSE) else None
        return If(condition, then_branch, else_branch)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "expected '(' after 'while'")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after while condition")
        return While(condition, self.statement())

    def for_statement(self):
        """Desugars for (init; cond; inc) body into { init; while (cond) { body; inc; } }. The initializer gets its
        own block, so loop variables are scoped to the loop.
        """
        self.consume(TokenKind.LEFT_PAREN, "expected '(' after 'for'")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = self.expression() if not self.check(TokenKind.SEMICOLON) else None
        self.consume(TokenKind.SEMICOLON, "expected ';' after loop condition")

        increment = self.expression() if not self.check(TokenKind.RIGHT_PAREN) else None
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after for clauses")

        body = self.statement()

        if increment is not None:
            body = Block([body, Expression(increment)])
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block([initializer, body])
        return body

    def return_statement(self):
        keyword = self.previous()
        value = self.expression() if not self.check(TokenKind.SEMICOLON) else None
        self.consume(TokenKind.SEMICOLON, "expected ';' after return value")
        return Return(keyword, value)

    def expression_statement(self):
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "expected ';' after expression")
        return Expression(value)

    def block(self):
        """Parses declarations up to and including the closing '}'. The opening '{' is already consumed."""
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(TokenKind.RIGHT_BRACE, "expected '}' after block")
        return statements

    # ---------- EXPRESSIONS ----------
    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            self.error(equals, "invalid assignment target")

        return expr

    def logic_or(self):
        expr = self.logic_and()
        while self.match(TokenKind.OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self):
        expr = self.equality()
        while self.match(TokenKind.AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.equality())
        return expr

    def equality(self):
        return self.binary(self.comparison, TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(
            self.term, TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL
        )

    def term(self):
        return self.binary(self.factor, TokenKind.MINUS, TokenKind.PLUS)

    def factor(self):
        return self.binary(self.unary, TokenKind.SLASH, TokenKind.STAR)

    def binary(self, operand, *kinds):
        """Left-associative binary level: operand ((kinds) operand)*."""
        expr = operand()
        while self.match(*kinds):
            operator = self.previous()
            expr = Binary(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenKind.BANG, TokenKind.MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()
        while True:
            if self.match(TokenKind.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenKind.DOT):
                name = self.consume(TokenKind.IDENTIFIER, "expected property name after '.'")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error_handler.error(self.peek(), f"can't have more than {Parser.MAX_ARGS} arguments")
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break

        paren = self.consume(TokenKind.RIGHT_PAREN, "expected ')' after arguments")
        return Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenKind.FALSE):
            return Literal(False)
        if self.match(TokenKind.TRUE):
            return Literal(True)
        if self.match(TokenKind.NIL):
            return Literal(None)
        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return Literal(self.previous().literal)
        if self.match(TokenKind.THIS):
            return This(self.previous())
        if self.match(TokenKind.IDENTIFIER):
            return Variable(self.previous())
        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "expected ')' after expression")
            return Grouping(expr)
        if self.match(TokenKind.FN):
            keyword = self.previous()
            params, body = self.function_rest("anonymous function")
            return Lambda(keyword, params, body)

        self.error(self.peek(), "expected expression")

    # ---------- UTILS ----------
    def match(self, *kinds):
        """Consumes the current token if it is one of kinds. Returns whether it did."""
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def check(self, kind):
        return not self.is_at_end() and self.peek().kind is kind

    def check_next(self, kind):
        if self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].kind is kind

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().kind is TokenKind.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def consume(self, kind, message):
        if self.check(kind):
            return self.advance()
        self.error(self.peek(), message)

    def error(self, token, message):
        """Reports a syntax error at token and unwinds to the enclosing declaration."""
        self.error_handler.error(token, message)
        raise ParseError(token, message)

    def synchronize(self):
        """Discards tokens until just after a ';' or just before a token that starts a new statement."""
        self.advance()
        while not self.is_at_end():
            if self.previous().kind is TokenKind.SEMICOLON:
                return
            if self.peek().kind in Parser.SYNC_KINDS:
                return
            self.advance()


def parse(tokens, error_handler):
    """Shortcut for Parser(tokens, error_handler).parse()."""
    return Parser(tokens, error_handler).parse()
