from __future__ import annotations

from typing import Callable

from ..runtime import EvalContext, Environment, MkBool, MkNull, MkValue
from ..tree import Node

EvalFunc = Callable[[Node, Environment, EvalContext], MkValue]


def is_truthy(val: MkValue) -> bool:
    """Only null and false are falsy; 0 is truthy."""
    match val:
        case MkNull():
            return False
        case MkBool(value=b):
            return b
        case _:
            return True


def type_label(val: MkValue) -> str:
    return val.type_name.value
