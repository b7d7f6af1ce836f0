"""Lox AST: parse-time node definitions.

Both node families are closed: the parser builds only the classes below, and
the interpreter and emitter handle each one explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass

from .tokens import Token


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class Expr:
    """Base for all expressions."""


@dataclass(frozen=True)
class Assign(Expr):
    """name = value."""

    name: Token
    value: Expr


@dataclass(frozen=True)
class Binary(Expr):
    """left op right: arithmetic, comparison, equality."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    """( expression )."""

    expression: Expr


@dataclass(frozen=True)
class Literal(Expr):
    """nil, true/false, number or string."""

    value: float | str | bool | None


@dataclass(frozen=True)
class Logical(Expr):
    """left and/or right, short-circuiting."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Unary(Expr):
    """! right, - right."""

    operator: Token
    right: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Call(Expr):
    """callee(arguments); paren is the closing ')' for error reporting."""

    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True)
class Stmt:
    """Base for all statements."""


@dataclass(frozen=True)
class Block(Stmt):
    """{ statements }."""

    statements: tuple[Stmt, ...]


@dataclass(frozen=True)
class Expression(Stmt):
    """expression ;"""

    expression: Expr


@dataclass(frozen=True)
class Function(Stmt):
    """fun name(params) { body }."""

    name: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Return(Stmt):
    """return value? ; the keyword is kept for error reporting."""

    keyword: Token
    value: Expr | None


@dataclass(frozen=True)
class Var(Stmt):
    """var name (= initializer)? ;"""

    name: Token
    initializer: Expr | None


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: Stmt
