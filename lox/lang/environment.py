"""Runtime scope frames. Frames form a chain that mirrors lexical nesting; closures keep a reference to the frame they
were declared in, so every closure sharing a frame sees later writes to it.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """One scope frame: a name -> value map plus an optional enclosing frame. A frame without one is the global
    frame.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this frame, overwriting any previous binding (redeclaring globals is legal)."""
        self.values[name] = value

    def get(self, name):
        """Reads name from this frame only. name is a Token."""
        try:
            return self.values[name.lexeme]
        except KeyError:
            raise LoxRuntimeError(name, f"undefined variable '{name.lexeme}'")

    def assign(self, name, value):
        """Writes an existing binding in this frame only. name is a Token."""
        if name.lexeme not in self.values:
            raise LoxRuntimeError(name, f"undefined variable '{name.lexeme}'")
        self.values[name.lexeme] = value

    def ancestor(self, distance):
        """Returns the frame distance hops up the chain (0 is self)."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a str) from the frame distance hops up. The resolver guarantees the binding exists."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name] = value

    def __repr__(self):
        depth = 0
        environment = self
        while environment.enclosing is not None:
            environment = environment.enclosing
            depth += 1
        return f"Environment(depth={depth}, names={sorted(self.values)})"
