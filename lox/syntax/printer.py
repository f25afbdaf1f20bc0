"""Renders syntax trees as parenthesized prefix strings, e.g. `(+ 1 (* 2 3))`. Used by `lox --ast` and by tests."""

from lox.syntax.tree import ExprVisitor, StmtVisitor


class AstPrinter(ExprVisitor, StmtVisitor):
    """Stateless; a single instance can print any number of trees."""

    def print(self, node):
        return node.accept(self)

    def print_all(self, statements):
        return "\n".join(self.print(stmt) for stmt in statements)

    def parenthesize(self, name, *parts):
        rendered = []
        for part in parts:
            if isinstance(part, str):
                rendered.append(part)
            elif part is not None:
                rendered.append(part.accept(self))
        return "(" + " ".join([name] + rendered) + ")"

    @staticmethod
    def literal(value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else str(value)
        return repr(value)

    def function(self, name, params, body):
        params = "(" + " ".join(param.lexeme for param in params) + ")"
        return self.parenthesize(name, params, *body)

    # ---------- EXPRESSIONS ----------
    def visit_literal(self, expr):
        return AstPrinter.literal(expr.value)

    def visit_grouping(self, expr):
        return self.parenthesize("group", expr.expression)

    def visit_unary(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_binary(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_logical(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_variable(self, expr):
        return expr.name.lexeme

    def visit_assign(self, expr):
        return self.parenthesize("=", expr.name.lexeme, expr.value)

    def visit_call(self, expr):
        return self.parenthesize("call", expr.callee, *expr.arguments)

    def visit_get(self, expr):
        return self.parenthesize(".", expr.object, expr.name.lexeme)

    def visit_set(self, expr):
        return self.parenthesize(".=", expr.object, expr.name.lexeme, expr.value)

    def visit_this(self, expr):
        return "this"

    def visit_lambda(self, expr):
        return self.function("fn", expr.params, expr.body)

    # ---------- STATEMENTS ----------
    def visit_block(self, stmt):
        return self.parenthesize("block", *stmt.statements)

    def visit_if(self, stmt):
        return self.parenthesize("if", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_while(self, stmt):
        return self.parenthesize("while", stmt.condition, stmt.body)

    def visit_expression(self, stmt):
        return self.parenthesize(";", stmt.expression)

    def visit_print(self, stmt):
        return self.parenthesize("print", stmt.expression)

    def visit_var(self, stmt):
        return self.parenthesize("var", stmt.name.lexeme, stmt.initializer)

    def visit_function(self, stmt):
        return self.function(f"fn {stmt.name.lexeme}", stmt.params, stmt.body)

    def visit_return(self, stmt):
        return self.parenthesize("return", stmt.value)

    def visit_class(self, stmt):
        return self.parenthesize(f"class {stmt.name.lexeme}", *stmt.methods)
