"""Evaluation of expressions in nelly scripts."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Optional

from nelly.grammar import (
    ArrayLit,
    BinaryExpr,
    BoolLit,
    CallExpr,
    Expr,
    Ident,
    NumberLit,
    Semver,
    StringLit,
)
from nelly.state import ExecutionState


class EvalError(Exception):
    """An expression could not be evaluated."""


_TYPE_NAMES = {bool: "bool", float: "float64", int: "int", str: "string",
               list: "[]interface {}", type(None): "<nil>"}


def _format_float(value: float) -> str:
    """Shortest representation, in exponent form outside 1e-4 .. 1e6."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    number = Decimal(repr(value)).normalize()
    point = number.adjusted()
    if -4 <= point < 6:
        return format(number, "f")
    exp_sign = "-" if point < 0 else "+"
    return f"{format(number.scaleb(-point), 'f')}e{exp_sign}{abs(point):02d}"


def _format_value(value: Any) -> str:
    """Render a runtime value as text, as printing and command options do."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, list):
        return "[" + " ".join(map(_format_value, value)) + "]"
    return str(value)


def as_float(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value == value.strip() and "_" not in value:
        try:
            return float(value)
        except ValueError:
            return None
    return None


def equals(a: Any, b: Any) -> bool:
    """Compare two runtime values; numbers on the left accept numeric strings."""
    if isinstance(a, bool):
        return isinstance(b, bool) and a == b
    if isinstance(a, float):
        other = as_float(b)
        return other is not None and a == other
    if isinstance(a, str):
        return isinstance(b, str) and a == b
    return False


def evaluate(expr: Expr, state: ExecutionState) -> Any:
    """Evaluate ``expr`` against the variables in ``state``."""
    match expr:
        case Ident(name=name):
            try:
                return state.get_var(name)
            except KeyError:
                pass
            if name in ("true", "false"):
                return name == "true"
            raise EvalError(f"undefined variable: {name}")
        case StringLit(value=value):
            return value.strip('"')
        case NumberLit(value=value):
            return float(value)
        case BoolLit(value=value):
            return bool(value)
        case Semver():
            return str(expr)
        case ArrayLit(items=items):
            return [evaluate(item, state) for item in items]
        case CallExpr():
            return call_function(expr, state)
        case BinaryExpr():
            return _binary(expr, state)
    raise EvalError("invalid or unsupported expression")


def call_function(call: CallExpr, state: ExecutionState) -> Any:
    """Run one of the built-in functions ``len`` and ``print``."""
    if call.name == "len":
        if len(call.args) != 1:
            raise EvalError("len expects one argument")
        value = evaluate(call.args[0], state)
        if isinstance(value, str):
            return float(len(value.encode("utf-8")))
        if isinstance(value, list):
            return float(len(value))
        name = _TYPE_NAMES.get(type(value), type(value).__name__)
        raise EvalError(f"len: unsupported type {name}")
    if call.name == "print":
        values = [evaluate(arg, state) for arg in call.args]
        print(" ".join(map(_format_value, values)))
        return None
    raise EvalError(f"unsupported function: {call.name}")


_COMPARISONS = {
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}
_ARITHMETIC = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: a / b,
}


def _binary(expr: BinaryExpr, state: ExecutionState) -> Any:
    left = evaluate(expr.left, state)
    right = evaluate(expr.right, state)
    operator = expr.operator
    shown = f"{_format_value(left)} {_format_value(right)}"

    if operator == "==":
        return equals(left, right)
    if operator == "!=":
        return not equals(left, right)
    if operator in _COMPARISONS or operator in _ARITHMETIC:
        lf, rf = as_float(left), as_float(right)
        if lf is None or rf is None:
            kind = "comparison" if operator in _COMPARISONS else "arithmetic"
            raise EvalError(f"{kind} operands must be numbers: {shown}")
        if operator == "/" and rf == 0:
            raise EvalError("divide by zero")
        return {**_COMPARISONS, **_ARITHMETIC}[operator](lf, rf)
    if operator in ("&&", "||"):
        if not isinstance(left, bool) or not isinstance(right, bool):
            raise EvalError(f"logical operands must be booleans: {shown}")
        return (left and right) if operator == "&&" else (left or right)
    raise EvalError(f"unsupported binary operator: {operator}")