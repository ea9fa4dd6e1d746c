from __future__ import annotations

from ..runtime import (
    FALSE,
    NULL,
    TRUE,
    ErrorKind,
    MkBool,
    MkInteger,
    MkValue,
    native_bool,
    new_error,
)
from .helpers import type_label

_INT64_MIN = -(2**63)
_UINT64 = 2**64


def wrap_int64(value: int) -> int:
    """Reduce to signed 64-bit two's complement."""
    return (value - _INT64_MIN) % _UINT64 + _INT64_MIN


def eval_prefix(op: str, right: MkValue) -> MkValue:
    match op:
        case '!':
            return eval_bang(right)
        case '-':
            return eval_minus_prefix(right)
        case _:
            return new_error(ErrorKind.UNKNOWN_OPERATOR, f"unknown operator: {op}{type_label(right)}")


def eval_bang(right: MkValue) -> MkValue:
    if right is TRUE:
        return FALSE
    if right is FALSE or right is NULL:
        return TRUE
    return FALSE


def eval_minus_prefix(right: MkValue) -> MkValue:
    if not isinstance(right, MkInteger):
        return new_error(ErrorKind.UNKNOWN_OPERATOR, f"unknown operator: -{type_label(right)}")

    # Always a fresh value: the operand may be shared by other bindings.
    return MkInteger(wrap_int64(-right.value))


def eval_infix(op: str, left: MkValue, right: MkValue) -> MkValue:
    match (left, right):
        case (MkInteger(), MkInteger()):
            return eval_integer_infix(op, left, right)
        case (MkBool(), MkBool()):
            return eval_boolean_infix(op, left, right)

    if left.type_name != right.type_name:
        return new_error(
            ErrorKind.TYPE_MISMATCH,
            f"type mismatch: {type_label(left)} {op} {type_label(right)}",
        )

    return _unknown_infix(op, left, right)


def eval_integer_infix(op: str, left: MkInteger, right: MkInteger) -> MkValue:
    lhs, rhs = left.value, right.value

    match op:
        case '+':
            return MkInteger(wrap_int64(lhs + rhs))
        case '-':
            return MkInteger(wrap_int64(lhs - rhs))
        case '*':
            return MkInteger(wrap_int64(lhs * rhs))
        case '/':
            if rhs == 0:
                return new_error(ErrorKind.DIVISION_BY_ZERO, f"division by zero: {lhs} / 0")
            return MkInteger(wrap_int64(_truncating_div(lhs, rhs)))
        case '<':
            return native_bool(lhs < rhs)
        case '>':
            return native_bool(lhs > rhs)
        case '==':
            return native_bool(lhs == rhs)
        case '!=':
            return native_bool(lhs != rhs)
        case _:
            return _unknown_infix(op, left, right)


def eval_boolean_infix(op: str, left: MkBool, right: MkBool) -> MkValue:
    # Booleans are canonical, so identity is equality.
    match op:
        case '==':
            return native_bool(left is right)
        case '!=':
            return native_bool(left is not right)
        case _:
            return _unknown_infix(op, left, right)


def _truncating_div(lhs: int, rhs: int) -> int:
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs < 0) == (rhs < 0) else -quotient


def _unknown_infix(op: str, left: MkValue, right: MkValue) -> MkValue:
    return new_error(
        ErrorKind.UNKNOWN_OPERATOR,
        f"unknown operator: {type_label(left)} {op} {type_label(right)}",
    )
