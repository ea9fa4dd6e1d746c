from __future__ import annotations

from ..runtime import NULL, EvalContext, Environment, MkReturn, MkValue, is_abrupt
from ..tree import IfExpression, ReturnStatement
from .blocks import eval_block_statement
from .helpers import EvalFunc, is_truthy


def eval_return_stmt(node: ReturnStatement, env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    val = eval_func(node.value, env, ctx)
    if is_abrupt(val):
        return val

    return MkReturn(val)


def eval_if_expression(node: IfExpression, env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    cond = eval_func(node.condition, env, ctx)
    if is_abrupt(cond):
        return cond

    if is_truthy(cond):
        return eval_block_statement(node.consequence.statements, env, ctx, eval_func)

    if node.alternative is not None:
        return eval_block_statement(node.alternative.statements, env, ctx, eval_func)

    return NULL
