from __future__ import annotations

from ..runtime import NULL, EvalContext, Environment, ErrorKind, MkValue, is_abrupt, new_error
from ..tree import Identifier, LetStatement
from .helpers import EvalFunc


def eval_let_statement(node: LetStatement, env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    """Bind in the current scope; an existing binding is overwritten."""
    val = eval_func(node.value, env, ctx)
    if is_abrupt(val):
        return val

    env.define(node.name.value, val)
    return NULL


def eval_identifier(node: Identifier, env: Environment) -> MkValue:
    val = env.get(node.value)
    if val is None:
        return new_error(ErrorKind.UNBOUND_IDENTIFIER, f"identifier not found: {node.value}")
    return val
