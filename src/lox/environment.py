"""Lox environments: linked scopes of variable bindings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import LoxRuntimeError
from .tokens import Token

if TYPE_CHECKING:
    from .runtime import Value


class Environment:
    """One scope. Lookups walk outward through `enclosing`; the globals have none.

    Closures keep a reference to the environment they were declared in, so a
    scope stays alive for as long as any function created inside it.
    """

    def __init__(self, enclosing: Environment | None = None):
        self.enclosing: Environment | None = enclosing
        self.values: dict[str, Value] = {}

    def define(self, name: str, value: Value) -> None:
        self.values[name] = value

    def get(self, name: Token) -> Value:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
