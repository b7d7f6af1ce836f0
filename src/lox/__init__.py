"""Lox lexer, parser and tree-walking interpreter."""

from __future__ import annotations

from .ast import Expr, Stmt
from .emit import to_source
from .errors import (
    CompileError as CompileError,
    LoxRuntimeError as LoxRuntimeError,
    Reporter as Reporter,
    StaticError as StaticError,
)
from .parse import Parser
from .runtime import Interpreter as Interpreter
from .tokens import Token as Token, tokenize as tokenize

__all__ = [
    "CompileError",
    "Expr",
    "Interpreter",
    "LoxRuntimeError",
    "Reporter",
    "StaticError",
    "Stmt",
    "Token",
    "parse",
    "run",
    "to_source",
    "tokenize",
]


def parse(source: str, reporter: Reporter | None = None) -> list[Stmt]:
    """Lex and parse Lox source into statements.

    With a reporter, static errors are recorded there and the statements that
    did parse are returned. Without one, any static error raises CompileError.
    """
    own = reporter is None
    rep = Reporter() if reporter is None else reporter
    tokens = tokenize(source, rep)
    statements = Parser(tokens, rep).parse()
    if own and rep.had_error:
        raise CompileError(rep.static_errors)
    return statements


def run(
    source: str,
    *,
    interpreter: Interpreter | None = None,
    reporter: Reporter | None = None,
) -> Reporter:
    """Run one unit of source. Nothing executes if any static error was found."""
    rep = Reporter() if reporter is None else reporter
    statements = parse(source, rep)
    if rep.had_error:
        return rep
    interp = Interpreter() if interpreter is None else interpreter
    interp.interpret(statements, rep)
    return rep
