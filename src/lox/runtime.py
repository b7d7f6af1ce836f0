"""Lox runtime: values, callables and the tree-walking interpreter.

Values are plain Python objects: `None` for nil, `bool`, `float`, `str`, and
`LoxCallable` instances. Statements execute against an explicit environment
argument; `return` and runtime errors are the only exceptions that unwind
through the evaluator.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import sys
import time
from typing import Callable, Mapping, Sequence, TextIO, Union

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
from .environment import Environment
from .errors import LoxRuntimeError, NativeError, Reporter
from .tokens import (
    TK_BANG,
    TK_BANG_EQUAL,
    TK_EQUAL_EQUAL,
    TK_GREATER,
    TK_GREATER_EQUAL,
    TK_LESS,
    TK_LESS_EQUAL,
    TK_MINUS,
    TK_PLUS,
    TK_SLASH,
    TK_STAR,
    Token,
)


# ============================================================
# Values
# ============================================================


class LoxCallable:
    """Anything a call expression can invoke."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError


Value = Union[None, bool, float, str, LoxCallable]


class LoxFunction(LoxCallable):
    """A user function closed over the environment it was declared in."""

    def __init__(self, declaration: Function, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value:
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)
        try:
            interpreter.execute_block(self.declaration.body, env)
        except _Return as r:
            return r.value
        return None

    def to_string(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"


class NativeFunction(LoxCallable):
    """A host function; it has no closure and receives the interpreter."""

    def __init__(
        self,
        name: str,
        arity: int,
        fn: Callable[[Interpreter, list[Value]], Value],
    ):
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value:
        return self._fn(interpreter, arguments)

    def to_string(self) -> str:
        return "<native fn>"


def is_truthy(value: Value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def values_equal(a: Value, b: Value) -> bool:
    # Kinds never mix: Python would otherwise call True == 1.0.
    if type(a) is not type(b):
        return False
    if isinstance(a, LoxCallable):
        return a is b
    return a == b


def stringify(value: Value) -> str:
    """Render a value the way `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = repr(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    if isinstance(value, str):
        return value
    return value.to_string()


def _divide(left: float, right: float) -> float:
    # IEEE 754 semantics; Python raises instead.
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


# ============================================================
# Control flow signals (internal)
# ============================================================


@dataclass
class _Return(Exception):
    value: Value


# ============================================================
# Natives
# ============================================================


def _native_clock(interpreter: Interpreter, args: list[Value]) -> Value:
    return time.time()


NATIVES: dict[str, NativeFunction] = {
    "clock": NativeFunction("clock", 0, _native_clock),
}


# ============================================================
# Interpreter
# ============================================================


class Interpreter:
    """Evaluates parsed statements.

    Globals persist across `interpret` calls so a REPL can feed one line at a
    time; each call reports through the reporter it is given.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        natives: Mapping[str, LoxCallable] | None = None,
    ):
        self.out = out if out is not None else sys.stdout
        self.globals = Environment()
        for name, fn in (natives if natives is not None else NATIVES).items():
            self.globals.define(name, fn)

    def interpret(self, statements: Sequence[Stmt], reporter: Reporter) -> None:
        try:
            for stmt in statements:
                self.execute(stmt, self.globals)
        except LoxRuntimeError as e:
            reporter.runtime_error(e)
        except _Return:
            # a return outside any function ends the unit
            return

    # ---- Statements --------------------------------------------------------

    def execute_block(self, statements: Sequence[Stmt], env: Environment) -> None:
        for stmt in statements:
            self.execute(stmt, env)

    def execute(self, stmt: Stmt, env: Environment) -> None:
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expression, env)
            return

        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expression, env)
            self.out.write(stringify(value) + "\n")
            return

        if isinstance(stmt, Var):
            value: Value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer, env)
            env.define(stmt.name.lexeme, value)
            return

        if isinstance(stmt, Block):
            # The child scope is dropped on exit, normal or not.
            self.execute_block(stmt.statements, Environment(env))
            return

        if isinstance(stmt, If):
            if is_truthy(self.evaluate(stmt.condition, env)):
                self.execute(stmt.then_branch, env)
            elif stmt.else_branch is not None:
                self.execute(stmt.else_branch, env)
            return

        if isinstance(stmt, While):
            while is_truthy(self.evaluate(stmt.condition, env)):
                self.execute(stmt.body, env)
            return

        if isinstance(stmt, Function):
            env.define(stmt.name.lexeme, LoxFunction(stmt, env))
            return

        if isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value, env)
            raise _Return(value)

        raise TypeError(f"unsupported statement {type(stmt).__name__}")

    # ---- Expressions -------------------------------------------------------

    def evaluate(self, expr: Expr, env: Environment) -> Value:
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression, env)

        if isinstance(expr, Variable):
            return env.get(expr.name)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value, env)
            env.assign(expr.name, value)
            return value

        if isinstance(expr, Logical):
            left = self.evaluate(expr.left, env)
            if expr.operator.type == "or":
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right, env)

        if isinstance(expr, Unary):
            right = self.evaluate(expr.right, env)
            if expr.operator.type == TK_BANG:
                return not is_truthy(right)
            if expr.operator.type == TK_MINUS:
                _check_number(expr.operator, right)
                return -right
            raise LoxRuntimeError(expr.operator, "Unknown unary operator.")

        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, env)
            right = self.evaluate(expr.right, env)
            return _eval_binary(expr.operator, left, right)

        if isinstance(expr, Call):
            return self._eval_call(expr, env)

        raise TypeError(f"unsupported expression {type(expr).__name__}")

    def _eval_call(self, expr: Call, env: Environment) -> Value:
        callee = self.evaluate(expr.callee, env)
        arguments = [self.evaluate(arg, env) for arg in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        try:
            return callee.call(self, arguments)
        except NativeError as e:
            raise LoxRuntimeError(expr.paren, str(e)) from e


def _check_number(operator: Token, operand: Value) -> None:
    if isinstance(operand, float):
        return
    raise LoxRuntimeError(operator, "Operand must be a number.")


def _check_numbers(operator: Token, left: Value, right: Value) -> None:
    if isinstance(left, float) and isinstance(right, float):
        return
    raise LoxRuntimeError(operator, "Operands must be numbers.")


def _eval_binary(operator: Token, left: Value, right: Value) -> Value:
    op = operator.type
    if op == TK_EQUAL_EQUAL:
        return values_equal(left, right)
    if op == TK_BANG_EQUAL:
        return not values_equal(left, right)

    if op == TK_PLUS:
        if isinstance(left, float) and isinstance(right, float):
            return left + right
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

    _check_numbers(operator, left, right)
    assert isinstance(left, float) and isinstance(right, float)
    if op == TK_MINUS:
        return left - right
    if op == TK_STAR:
        return left * right
    if op == TK_SLASH:
        return _divide(left, right)
    if op == TK_GREATER:
        return left > right
    if op == TK_GREATER_EQUAL:
        return left >= right
    if op == TK_LESS:
        return left < right
    if op == TK_LESS_EQUAL:
        return left <= right
    raise LoxRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")
