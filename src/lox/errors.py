"""Lox diagnostics: static/runtime error types and the per-run reporter."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from .tokens import Token


class StaticError(Exception):
    """Error found while lexing or parsing."""

    def __init__(self, msg: str, line: int, where: str = ""):
        self.msg: str = msg
        self.line: int = line
        self.where: str = where
        super().__init__("[line " + str(line) + "] Error" + where + ": " + msg)


class CompileError(Exception):
    """One or more static errors, raised when no reporter collects them."""

    def __init__(self, errors: list[StaticError]):
        self.errors: list[StaticError] = errors
        super().__init__("\n".join(str(e) for e in errors))


class LoxRuntimeError(Exception):
    """Error raised while evaluating; carries the offending token."""

    def __init__(self, token: Token, msg: str):
        self.token = token
        self.msg = msg
        super().__init__(f"{msg}\n[line {token.line}]")


class NativeError(Exception):
    """Failure inside a native function, reported at the call site."""


class Reporter:
    """Collects the diagnostics of a single run.

    A fresh reporter is created for every unit of source; the lexer, parser and
    interpreter all write into the same one. When `err` is set, each
    diagnostic is also rendered there as it arrives.
    """

    def __init__(self, err: TextIO | None = None):
        self.err = err
        self.static_errors: list[StaticError] = []
        self.runtime_errors: list[LoxRuntimeError] = []

    @property
    def had_error(self) -> bool:
        return len(self.static_errors) > 0

    @property
    def had_runtime_error(self) -> bool:
        return len(self.runtime_errors) > 0

    def error(self, err: StaticError) -> None:
        self.static_errors.append(err)
        self._emit(str(err))

    def runtime_error(self, err: LoxRuntimeError) -> None:
        self.runtime_errors.append(err)
        self._emit(str(err))

    def messages(self) -> list[str]:
        out = [str(e) for e in self.static_errors]
        out.extend(str(e) for e in self.runtime_errors)
        return out

    def _emit(self, text: str) -> None:
        if self.err is not None:
            self.err.write(text + "\n")
