"""Tree-walking evaluator for the lox language.

Statements are executed by execute(), which returns an outcome: None when the statement completed normally, or a
Returning carrying the value of a 'return' that must unwind to the enclosing call. Every composite statement passes a
Returning straight up, so no Python exception is involved in returning from a function. Runtime errors on the other
hand are LoxRuntimeErrors and abort the whole execution unit.

Variables found by the Resolver are read at a fixed distance up the environment chain; everything else lives in the
global frame.
"""

import math
import sys
import weakref

from lox.lang.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.lang.objects import LoxCallable, LoxClass, LoxInstance, UserFunction
from lox.syntax.scanner import TokenKind
from lox.syntax.tree import Expression, ExprVisitor, StmtVisitor


class Returning:
    """Outcome of a statement that hit 'return'."""

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Returning({self.value!r})"


class _Sentinel:
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return self.name


NO_VALUE = _Sentinel("NO_VALUE")  # unit ended with something other than an expression statement
ERROR = _Sentinel("ERROR")        # unit was aborted by an error


class Interpreter(ExprVisitor, StmtVisitor):
    """Evaluates resolved statement lists. The global frame, and with it every global definition, lives as long as
    the Interpreter does.
    """

    def __init__(self, error_handler, stdout=None):
        self.error_handler = error_handler
        self.stdout = stdout

        self.globals = Environment()
        self.environment = self.globals
        self.locals = weakref.WeakKeyDictionary()  # node: distance; entries go away with their syntax trees

    def resolve(self, table):
        """Records a Resolver distance table."""
        self.locals.update(table)

    def interpret(self, statements):
        """Executes statements as one unit. Returns the value of a trailing expression statement, NO_VALUE, or ERROR
        if a runtime error aborted the unit.
        """
        result = NO_VALUE
        try:
            for stmt in statements:
                if isinstance(stmt, Expression):
                    result = self.evaluate(stmt.expression)
                else:
                    self.execute(stmt)
                    result = NO_VALUE
        except LoxRuntimeError as error:
            self.environment = self.globals
            self.error_handler.runtime_error(error)
            return ERROR
        except RecursionError:
            self.environment = self.globals
            self.error_handler.runtime_error(LoxRuntimeError(None, "stack overflow"))
            return ERROR
        return result

    # ---------- HELPERS ----------
    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        """Runs statements in environment, restoring the previous frame however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    @staticmethod
    def is_truthy(value):
        """Only nil and false are falsy."""
        return value is not None and value is not False

    @staticmethod
    def is_equal(left, right):
        """Equality by value that never mixes types, so 1 == true and 1 == "1" are both false."""
        if left is None or right is None:
            return left is right
        if type(left) is not type(right):
            return False
        return left == right

    @staticmethod
    def check_number_operands(operator, *operands):
        if all(isinstance(operand, float) for operand in operands):
            return
        if len(operands) == 1:
            raise LoxRuntimeError(operator, "operand must be a number")
        raise LoxRuntimeError(operator, "operands must be numbers")

    @staticmethod
    def divide(left, right):
        """IEEE division: x/0 is +-inf, 0/0 is nan."""
        if right == 0:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)
        return left / right

    @staticmethod
    def stringify(value):
        """Display form of a runtime value."""
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if value.is_integer():
                return str(int(value))
            return str(value)
        return str(value)

    # ---------- STATEMENTS ----------
    def visit_block(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_if(self, stmt):
        if Interpreter.is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_while(self, stmt):
        while Interpreter.is_truthy(self.evaluate(stmt.condition)):
            outcome = self.execute(stmt.body)
            if outcome is not None:
                return outcome
        return None

    def visit_expression(self, stmt):
        self.evaluate(stmt.expression)

    def visit_print(self, stmt):
        value = self.evaluate(stmt.expression)
        print(Interpreter.stringify(value), file=self.stdout or sys.stdout)

    def visit_var(self, stmt):
        value = self.evaluate(stmt.initializer) if stmt.initializer is not None else None
        self.environment.define(stmt.name.lexeme, value)

    def visit_function(self, stmt):
        self.environment.define(stmt.name.lexeme, UserFunction(stmt, self.environment))

    def visit_return(self, stmt):
        value = self.evaluate(stmt.value) if stmt.value is not None else None
        return Returning(value)

    def visit_class(self, stmt):
        methods = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == LoxClass.INITIALIZER
            methods[method.name.lexeme] = UserFunction(method, self.environment, is_initializer)
        self.environment.define(stmt.name.lexeme, LoxClass(stmt.name.lexeme, methods))

    # ---------- EXPRESSIONS ----------
    def visit_literal(self, expr):
        return expr.value

    def visit_grouping(self, expr):
        return self.evaluate(expr.expression)

    def visit_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is TokenKind.MINUS:
            Interpreter.check_number_operands(expr.operator, right)
            return -right
        return not Interpreter.is_truthy(right)

    def visit_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.kind

        if kind is TokenKind.EQUAL_EQUAL:
            return Interpreter.is_equal(left, right)
        if kind is TokenKind.BANG_EQUAL:
            return not Interpreter.is_equal(left, right)

        if kind is TokenKind.PLUS:
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            raise LoxRuntimeError(operator, "operands must be two numbers or two strings")

        Interpreter.check_number_operands(operator, left, right)
        if kind is TokenKind.MINUS:
            return left - right
        if kind is TokenKind.STAR:
            return left * right
        if kind is TokenKind.SLASH:
            return Interpreter.divide(left, right)
        if kind is TokenKind.GREATER:
            return left > right
        if kind is TokenKind.GREATER_EQUAL:
            return left >= right
        if kind is TokenKind.LESS:
            return left < right
        if kind is TokenKind.LESS_EQUAL:
            return left <= right

        raise LoxRuntimeError(operator, f"unknown binary operator '{operator.lexeme}'", internal=True)

    def visit_logical(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.kind is TokenKind.OR:
            if Interpreter.is_truthy(left):
                return left
        elif not Interpreter.is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def visit_variable(self, expr):
        return self.look_up_variable(expr.name, expr)

    def visit_assign(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name.lexeme, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def visit_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "can only call functions and classes")
        if len(arguments) != callee.arity:
            raise LoxRuntimeError(expr.paren, f"expected {callee.arity} arguments but got {len(arguments)}")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "stack overflow")

    def visit_get(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)
        raise LoxRuntimeError(expr.name, "only instances have properties")

    def visit_set(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "only instances have fields")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_this(self, expr):
        return self.look_up_variable(expr.keyword, expr)

    def visit_lambda(self, expr):
        return UserFunction(expr, self.environment)
