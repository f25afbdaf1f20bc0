"""Runtime object model: everything callable (native functions, user functions, bound methods, classes) and class
instances. Values that are not objects map straight onto Python: nil is None, booleans are bool, numbers are float and
strings are str.
"""

from abc import ABC, abstractmethod

from lox.lang.environment import Environment
from lox.lang.error import LoxRuntimeError


class LoxCallable(ABC):
    """Anything that can appear before '(' in a call. Every callable has a fixed arity."""

    @property
    @abstractmethod
    def arity(self):
        """Exact number of arguments this callable accepts."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes this callable. The interpreter has already checked len(arguments) == arity."""


class NativeFunction(LoxCallable):
    """Host-provided function. behavior receives the argument values positionally."""

    def __init__(self, name, arity, behavior):
        self.name = name
        self._arity = arity
        self.behavior = behavior

    @property
    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.behavior(*arguments)

    def __str__(self):
        return "<native fn>"


class UserFunction(LoxCallable):
    """Function declared in lox code, closing over the frame it was declared in. Bound methods are UserFunctions whose
    closure is a one-slot frame holding 'this'.
    """

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def arity(self):
        return len(self.declaration.params)

    @property
    def name(self):
        if self.declaration.name is None:
            return "anonymous"
        return self.declaration.name.lexeme

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        outcome = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if outcome is not None:
            return outcome.value
        return None

    def bind(self, instance):
        """Returns this method bound to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return UserFunction(self.declaration, environment, self.is_initializer)

    def __str__(self):
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    """A class: a name and a flat map of methods. Calling it constructs an instance."""
    INITIALIZER = "init"

    def __init__(self, name, methods):
        self.name = name
        self.methods = methods

    def find_method(self, name):
        return self.methods.get(name)

    @property
    def arity(self):
        initializer = self.find_method(LoxClass.INITIALIZER)
        return initializer.arity if initializer is not None else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method(LoxClass.INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return f"<class {self.name}>"


class LoxInstance:
    """Instance of a LoxClass. Fields are created on first write."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Reads a field, or failing that a method bound to self. name is a Token."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"undefined property '{name.lexeme}'")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"<instance of {self.klass.name}>"
