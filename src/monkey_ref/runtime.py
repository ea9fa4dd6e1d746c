from __future__ import annotations

from typing import Optional

from .types import (
    ObjectType, ErrorKind,
    MkInteger, MkBool, MkNull, MkReturn, MkError, MkFn, MkValue,
    TRUE, FALSE, NULL,
    Environment, MonkeyRuntimeError,
    native_bool, new_error, is_error, is_abrupt,
)
from .utils import DEFAULT_MAX_DEPTH, Tracer, is_null_tracer

__all__ = [
    "ObjectType", "ErrorKind",
    "MkInteger", "MkBool", "MkNull", "MkReturn", "MkError", "MkFn", "MkValue",
    "TRUE", "FALSE", "NULL",
    "Environment", "MonkeyRuntimeError",
    "native_bool", "new_error", "is_error", "is_abrupt",
    "EvalContext", "stack_overflow", "nesting_overflow",
]


class EvalContext:
    """Per-evaluation state: call depth bookkeeping and the optional tracer."""

    def __init__(self, max_depth: Optional[int] = None, tracer: Optional[Tracer] = None):
        self.max_depth = DEFAULT_MAX_DEPTH if max_depth is None else max_depth
        self.depth = 0
        self.tracer = None if is_null_tracer(tracer) else tracer

    def push_call(self) -> bool:
        """Enter a function call. False when the depth limit would be exceeded."""
        if self.depth >= self.max_depth:
            return False
        self.depth += 1
        return True

    def pop_call(self) -> None:
        self.depth -= 1


def stack_overflow(max_depth: int) -> MkError:
    return new_error(
        ErrorKind.STACK_OVERFLOW,
        f"stack overflow: maximum call depth {max_depth} exceeded",
    )


def nesting_overflow() -> MkError:
    return new_error(
        ErrorKind.STACK_OVERFLOW,
        "stack overflow: expression nested too deeply",
    )
