from __future__ import annotations

from typing import List, Sequence

from ..runtime import (
    EvalContext,
    Environment,
    ErrorKind,
    MkFn,
    MkReturn,
    MkValue,
    is_abrupt,
    new_error,
    stack_overflow,
)
from ..tree import CallExpression, Expression, FunctionLiteral
from .blocks import eval_block_statement
from .helpers import EvalFunc, type_label


def eval_function_literal(node: FunctionLiteral, env: Environment) -> MkFn:
    """Capture the defining scope; the body runs only when called."""
    return MkFn(parameters=node.parameters, body=node.body, env=env)


def eval_call(node: CallExpression, env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    callee = eval_func(node.function, env, ctx)
    if is_abrupt(callee):
        return callee

    if not isinstance(callee, MkFn):
        return new_error(ErrorKind.NOT_A_FUNCTION, f"not a function: {type_label(callee)}")

    args = eval_args(node.arguments, env, ctx, eval_func)
    if is_abrupt(args):
        return args

    return call_fn(callee, args, ctx, eval_func)


def eval_args(nodes: Sequence[Expression], env: Environment, ctx: EvalContext, eval_func: EvalFunc) -> List[MkValue] | MkValue:
    """Evaluate arguments left to right in the caller's scope; first error wins."""
    values: List[MkValue] = []

    for arg in nodes:
        val = eval_func(arg, env, ctx)
        if is_abrupt(val):
            return val
        values.append(val)

    return values


def call_fn(fn: MkFn, args: List[MkValue], ctx: EvalContext, eval_func: EvalFunc) -> MkValue:
    if len(args) != len(fn.parameters):
        return new_error(
            ErrorKind.ARITY_MISMATCH,
            f"expected {len(fn.parameters)} arguments. got={len(args)}",
        )

    if not ctx.push_call():
        return stack_overflow(ctx.max_depth)

    try:
        call_env = extend_fn_env(fn, args)
        result = eval_block_statement(fn.body.statements, call_env, ctx, eval_func)
    finally:
        ctx.pop_call()

    return unwrap_return(result)


def extend_fn_env(fn: MkFn, args: List[MkValue]) -> Environment:
    call_env = fn.env.enclosed()

    for param, arg in zip(fn.parameters, args):
        call_env.define(param.value, arg)

    return call_env


def unwrap_return(val: MkValue) -> MkValue:
    if isinstance(val, MkReturn):
        return val.value
    return val
