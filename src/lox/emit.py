"""Lox emitter: renders the AST as parenthesized prefix text.

Covers every node class in `lox/ast.py`: if a new
node type is added, this emitter should be updated alongside it.
"""

from __future__ import annotations

from typing import Sequence, Union

from .ast import (
    Assign,
    Binary,
    Block,
    Call,
    Expr,
    Expression,
    Function,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Stmt,
    Unary,
    Var,
    Variable,
    While,
)
from .runtime import stringify

Node = Union[Expr, Stmt, Sequence[Stmt]]


def to_source(node: Node) -> str:
    """Render an expression, a statement, or a program (one statement per line)."""
    if isinstance(node, Expr):
        return _expr(node)
    if isinstance(node, Stmt):
        return _stmt(node)
    return "\n".join(_stmt(s) for s in node)


def _parens(name: str, *parts: str) -> str:
    out = "(" + name
    for part in parts:
        out += " " + part
    return out + ")"


def _expr(expr: Expr) -> str:
    if isinstance(expr, Literal):
        if isinstance(expr.value, str):
            return '"' + expr.value + '"'
        return stringify(expr.value)
    if isinstance(expr, Grouping):
        return _parens("group", _expr(expr.expression))
    if isinstance(expr, Variable):
        return expr.name.lexeme
    if isinstance(expr, Assign):
        return _parens("=", expr.name.lexeme, _expr(expr.value))
    if isinstance(expr, (Binary, Logical)):
        return _parens(expr.operator.lexeme, _expr(expr.left), _expr(expr.right))
    if isinstance(expr, Unary):
        return _parens(expr.operator.lexeme, _expr(expr.right))
    if isinstance(expr, Call):
        return _parens("call", _expr(expr.callee), *[_expr(a) for a in expr.arguments])
    raise TypeError(f"cannot emit {type(expr).__name__}")


def _stmt(stmt: Stmt) -> str:
    if isinstance(stmt, Expression):
        return _parens(";", _expr(stmt.expression))
    if isinstance(stmt, Print):
        return _parens("print", _expr(stmt.expression))
    if isinstance(stmt, Var):
        if stmt.initializer is None:
            return _parens("var", stmt.name.lexeme)
        return _parens("var", stmt.name.lexeme, _expr(stmt.initializer))
    if isinstance(stmt, Block):
        return _parens("block", *[_stmt(s) for s in stmt.statements])
    if isinstance(stmt, If):
        if stmt.else_branch is None:
            return _parens("if", _expr(stmt.condition), _stmt(stmt.then_branch))
        return _parens(
            "if-else",
            _expr(stmt.condition),
            _stmt(stmt.then_branch),
            _stmt(stmt.else_branch),
        )
    if isinstance(stmt, While):
        return _parens("while", _expr(stmt.condition), _stmt(stmt.body))
    if isinstance(stmt, Function):
        params = "(" + " ".join(p.lexeme for p in stmt.params) + ")"
        return _parens("fun", stmt.name.lexeme, params, *[_stmt(s) for s in stmt.body])
    if isinstance(stmt, Return):
        if stmt.value is None:
            return _parens("return")
        return _parens("return", _expr(stmt.value))
    raise TypeError(f"cannot emit {type(stmt).__name__}")
