from __future__ import annotations

from typing import Sequence

from ..runtime import NULL, EvalContext, Environment, MkError, MkReturn, MkValue
from ..tree import Statement
from .helpers import EvalFunc


def eval_program(statements: Sequence[Statement], env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    """Run top-level statements, returning the last value.

    A `return` at top level ends the program and is unwrapped here; an error
    ends it as-is.
    """
    result: MkValue = NULL

    for stmt in statements:
        result = eval_func(stmt, env, ctx)

        match result:
            case MkReturn(value=value):
                return value
            case MkError():
                return result

    return result


def eval_block_statement(statements: Sequence[Statement], env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    """Run a block, handing return and error wrappers up without unwrapping."""
    result: MkValue = NULL

    for stmt in statements:
        result = eval_func(stmt, env, ctx)

        if isinstance(result, (MkReturn, MkError)):
            return result

    return result
