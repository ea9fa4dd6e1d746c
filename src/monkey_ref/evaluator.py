from __future__ import annotations

from typing import Optional

from .runtime import (
    EvalContext,
    Environment,
    MkInteger,
    MkValue,
    is_abrupt,
    native_bool,
    nesting_overflow,
)
from .tree import (
    BlockStatement,
    Boolean,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
    node_label,
)
from .utils import Tracer, max_depth_from_env, recursion_headroom

from .eval.blocks import eval_block_statement, eval_program
from .eval.control import eval_if_expression, eval_return_stmt
from .eval.expr import eval_infix, eval_prefix
from .eval.fn import eval_call, eval_function_literal
from .eval.let import eval_identifier, eval_let_statement

# Python frames consumed per Monkey call level, with room to spare.
_FRAMES_PER_CALL = 16

# ---------------- Public API ----------------

def eval_expr(
    ast: Node,
    env: Optional[Environment] = None,
    *,
    max_depth: Optional[int] = None,
    tracer: Optional[Tracer] = None,
) -> MkValue:
    """Evaluate ``ast`` in ``env`` (a fresh global scope when omitted).

    Failures come back as MkError values; nothing is raised for Monkey-level
    errors.
    """
    if env is None:
        env = Environment()
    if max_depth is None:
        max_depth = max_depth_from_env()

    ctx = EvalContext(max_depth=max_depth, tracer=tracer)

    with recursion_headroom(max_depth * _FRAMES_PER_CALL):
        try:
            return eval_node(ast, env, ctx)
        except RecursionError:
            # Host stack exhausted without reaching the call-depth limit.
            return nesting_overflow()

# ---------------- Core evaluator ----------------

def eval_node(node: Node, env: Environment, ctx: EvalContext) -> MkValue:
    if ctx.tracer is not None:
        return _eval_node_traced(node, env, ctx)
    return _eval_node_inner(node, env, ctx)


def _eval_node_traced(node: Node, env: Environment, ctx: EvalContext) -> MkValue:
    label = f"eval {node_label(node)}"
    ctx.tracer.enter(label)
    try:
        return _eval_node_inner(node, env, ctx)
    finally:
        ctx.tracer.leave(label)


def _eval_node_inner(node: Node, env: Environment, ctx: EvalContext) -> MkValue:
    match node:
        # statements
        case Program(statements=stmts):
            return eval_program(stmts, env, ctx, eval_node)
        case BlockStatement(statements=stmts):
            return eval_block_statement(stmts, env, ctx, eval_node)
        case ExpressionStatement(expression=expr):
            return eval_node(expr, env, ctx)
        case ReturnStatement():
            return eval_return_stmt(node, env, ctx, eval_node)
        case LetStatement():
            return eval_let_statement(node, env, ctx, eval_node)

        # expressions
        case IntegerLiteral(value=value):
            return MkInteger(value)
        case Boolean(value=value):
            return native_bool(value)
        case Identifier():
            return eval_identifier(node, env)
        case PrefixExpression(operator=op, right=right_node):
            right = eval_node(right_node, env, ctx)
            if is_abrupt(right):
                return right
            return eval_prefix(op, right)
        case InfixExpression(left=left_node, operator=op, right=right_node):
            left = eval_node(left_node, env, ctx)
            if is_abrupt(left):
                return left
            right = eval_node(right_node, env, ctx)
            if is_abrupt(right):
                return right
            return eval_infix(op, left, right)
        case IfExpression():
            return eval_if_expression(node, env, ctx, eval_node)
        case FunctionLiteral():
            return eval_function_literal(node, env)
        case CallExpression():
            return eval_call(node, env, ctx, eval_node)
        case _:
            raise TypeError(f"cannot evaluate {type(node).__name__}")
