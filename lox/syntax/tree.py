"""Abstract syntax tree for the lox language.

Every grammar production has exactly one node class. Nodes are built once by the Parser and never changed afterwards;
they compare and hash by identity so that the Resolver can key its distance table on them.

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fn_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER "{" <function>* "}"
<fn_decl>     ::= "fn" <function>
<function>    ::= IDENTIFIER "(" <parameters>? ")" <block>
<var_decl>    ::= "var" IDENTIFIER ("=" <expression>)? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>
<expression>  ::= <assignment>
<assignment>  ::= (<call> ".")? IDENTIFIER "=" <assignment> | <logic_or>
<logic_or>    ::= <logic_and> ("or" <logic_and>)*
<logic_and>   ::= <equality> ("and" <equality>)*
<equality>    ::= <comparison> (("!=" | "==") <comparison>)*
<comparison>  ::= <term> ((">" | ">=" | "<" | "<=") <term>)*
<term>        ::= <factor> (("-" | "+") <factor>)*
<factor>      ::= <unary> (("/" | "*") <unary>)*
<unary>       ::= ("!" | "-") <unary> | <call>
<call>        ::= <primary> ("(" <arguments>? ")" | "." IDENTIFIER)*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
                | "fn" "(" <parameters>? ")" <block>
```

`for` loops have no node of their own: the Parser desugars them into Block/While.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from lox.syntax.scanner import Token


class ExprVisitor(ABC):
    """Anything that walks expressions must handle every expression node."""

    @abstractmethod
    def visit_literal(self, expr): ...

    @abstractmethod
    def visit_grouping(self, expr): ...

    @abstractmethod
    def visit_unary(self, expr): ...

    @abstractmethod
    def visit_binary(self, expr): ...

    @abstractmethod
    def visit_logical(self, expr): ...

    @abstractmethod
    def visit_variable(self, expr): ...

    @abstractmethod
    def visit_assign(self, expr): ...

    @abstractmethod
    def visit_call(self, expr): ...

    @abstractmethod
    def visit_get(self, expr): ...

    @abstractmethod
    def visit_set(self, expr): ...

    @abstractmethod
    def visit_this(self, expr): ...

    @abstractmethod
    def visit_lambda(self, expr): ...


class StmtVisitor(ABC):
    """Anything that walks statements must handle every statement node."""

    @abstractmethod
    def visit_block(self, stmt): ...

    @abstractmethod
    def visit_if(self, stmt): ...

    @abstractmethod
    def visit_while(self, stmt): ...

    @abstractmethod
    def visit_expression(self, stmt): ...

    @abstractmethod
    def visit_print(self, stmt): ...

    @abstractmethod
    def visit_var(self, stmt): ...

    @abstractmethod
    def visit_function(self, stmt): ...

    @abstractmethod
    def visit_return(self, stmt): ...

    @abstractmethod
    def visit_class(self, stmt): ...


class Expr(ABC):
    """Superclass of all expression nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Dispatches to the visit_* method of visitor that handles this node."""


class Stmt(ABC):
    """Superclass of all statement nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Dispatches to the visit_* method of visitor that handles this node."""


# ---------- EXPRESSIONS ----------

@dataclass(eq=False)
class Literal(Expr):
    value: object

    def accept(self, visitor):
        return visitor.visit_literal(self)


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_grouping(self)


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_unary(self)


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_binary(self)


@dataclass(eq=False)
class Logical(Expr):
    """Short-circuiting 'and'/'or'. operator.kind tells which."""
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_logical(self)


@dataclass(eq=False)
class Variable(Expr):
    name: Token

    def accept(self, visitor):
        return visitor.visit_variable(self)


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_assign(self)


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used for error lines
    arguments: List[Expr]

    def accept(self, visitor):
        return visitor.visit_call(self)


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token

    def accept(self, visitor):
        return visitor.visit_get(self)


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_set(self)


@dataclass(eq=False)
class This(Expr):
    keyword: Token

    def accept(self, visitor):
        return visitor.visit_this(self)


@dataclass(eq=False)
class Lambda(Expr):
    """Anonymous function expression: fn (params) { body }."""
    keyword: Token
    params: List[Token]
    body: List[Stmt]

    name = None

    def accept(self, visitor):
        return visitor.visit_lambda(self)


# ---------- STATEMENTS ----------

@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt] = field(default_factory=list)

    def accept(self, visitor):
        return visitor.visit_block(self)


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None

    def accept(self, visitor):
        return visitor.visit_if(self)


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor):
        return visitor.visit_while(self)


@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_expression(self)


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_print(self)


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None

    def accept(self, visitor):
        return visitor.visit_var(self)


@dataclass(eq=False)
class Function(Stmt):
    """Named function declaration. Also the shape of every class method."""
    name: Token
    params: List[Token]
    body: List[Stmt]

    def accept(self, visitor):
        return visitor.visit_function(self)


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr] = None

    def accept(self, visitor):
        return visitor.visit_return(self)


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    methods: List[Function] = field(default_factory=list)

    def accept(self, visitor):
        return visitor.visit_class(self)
