"""Static scope resolution. Walks a statement list once before it is evaluated and records, for every local variable
reference/assignment (and every 'this'), how many scopes lie between the use and the declaration. References that are
not found in any local scope are globals and are left out of the table.

The resolver also reports the static errors that need scope information:
- reading a local variable in its own initializer
- declaring the same name twice in one local scope
- 'return' outside a function, or 'return <value>' inside an initializer
- 'this' outside a class
"""

from enum import Enum

from lox.lang.objects import LoxClass
from lox.syntax.tree import ExprVisitor, StmtVisitor


class FunctionKind(Enum):
    NONE = "none"
    FUNCTION = "function"
    METHOD = "method"
    INITIALIZER = "initializer"


class ClassKind(Enum):
    NONE = "none"
    CLASS = "class"


class Resolver(ExprVisitor, StmtVisitor):
    """Computes the distance table for one statement list. The global scope is never pushed onto self.scopes."""

    def __init__(self, error_handler):
        self.error_handler = error_handler

        self.scopes = []     # list of {name: ready}, innermost last; ready is False between declare and define
        self.locals = {}     # node: distance
        self.current_function = FunctionKind.NONE
        self.current_class = ClassKind.NONE

    def resolve(self, statements):
        """Resolves statements and returns the distance table. Calling this again gives an equal table."""
        self.scopes = []
        self.locals = {}
        self.resolve_all(statements)
        return self.locals

    def resolve_all(self, statements):
        for stmt in statements:
            stmt.accept(self)

    def resolve_node(self, node):
        if node is not None:
            node.accept(self)

    # ---------- SCOPES ----------
    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error_handler.error(name, "already a variable with this name in this scope")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr, name):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve_all(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    # ---------- STATEMENTS ----------
    def visit_block(self, stmt):
        self.begin_scope()
        self.resolve_all(stmt.statements)
        self.end_scope()

    def visit_if(self, stmt):
        self.resolve_node(stmt.condition)
        self.resolve_node(stmt.then_branch)
        self.resolve_node(stmt.else_branch)

    def visit_while(self, stmt):
        self.resolve_node(stmt.condition)
        self.resolve_node(stmt.body)

    def visit_expression(self, stmt):
        self.resolve_node(stmt.expression)

    def visit_print(self, stmt):
        self.resolve_node(stmt.expression)

    def visit_var(self, stmt):
        self.declare(stmt.name)
        self.resolve_node(stmt.initializer)
        self.define(stmt.name)

    def visit_function(self, stmt):
        self.declare(stmt.name)
        self.define(stmt.name)  # defined before the body so the function can recurse
        self.resolve_function(stmt, FunctionKind.FUNCTION)

    def visit_return(self, stmt):
        if self.current_function is FunctionKind.NONE:
            self.error_handler.error(stmt.keyword, "can't return from top-level code")
        elif self.current_function is FunctionKind.INITIALIZER and stmt.value is not None:
            self.error_handler.error(stmt.keyword, "can't return a value from an initializer")
        self.resolve_node(stmt.value)

    def visit_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassKind.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            if method.name.lexeme == LoxClass.INITIALIZER:
                kind = FunctionKind.INITIALIZER
            else:
                kind = FunctionKind.METHOD
            self.resolve_function(method, kind)
        self.end_scope()

        self.current_class = enclosing_class

    # ---------- EXPRESSIONS ----------
    def visit_literal(self, expr):
        """Literals reference nothing."""

    def visit_grouping(self, expr):
        self.resolve_node(expr.expression)

    def visit_unary(self, expr):
        self.resolve_node(expr.right)

    def visit_binary(self, expr):
        self.resolve_node(expr.left)
        self.resolve_node(expr.right)

    def visit_logical(self, expr):
        self.resolve_node(expr.left)
        self.resolve_node(expr.right)

    def visit_variable(self, expr):
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.error_handler.error(expr.name, "can't read local variable in its own initializer")
        self.resolve_local(expr, expr.name)

    def visit_assign(self, expr):
        self.resolve_node(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_call(self, expr):
        self.resolve_node(expr.callee)
        for argument in expr.arguments:
            self.resolve_node(argument)

    def visit_get(self, expr):
        self.resolve_node(expr.object)

    def visit_set(self, expr):
        self.resolve_node(expr.value)
        self.resolve_node(expr.object)

    def visit_this(self, expr):
        if self.current_class is ClassKind.NONE:
            self.error_handler.error(expr.keyword, "can't use 'this' outside of a class")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_lambda(self, expr):
        self.resolve_function(expr, FunctionKind.FUNCTION)
