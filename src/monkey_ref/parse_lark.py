"""Grammar-driven Monkey front end built on lark.

The LALR grammar in ``grammar.lark`` describes the same language as the Pratt
parser, one rule per precedence level. ``parse_lark`` builds the very same
``tree.py`` nodes, which makes it a cross-check for the hand-written parser's
precedence and associativity handling.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import VisitError

from .parser_rd import INT64_MAX, ParseError
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
    PrefixExpression,
    Program,
    ReturnStatement,
)

GRAMMAR_PATH = Path(__file__).resolve().with_name("grammar.lark")


def _read_grammar(grammar_path: Optional[str] = None) -> str:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    return path.read_text(encoding="utf-8")


@lru_cache(maxsize=None)
def make_parser(grammar_path: Optional[str] = None) -> Lark:
    return Lark(_read_grammar(grammar_path), parser="lalr", maybe_placeholders=True)


def _infix(op: str):
    def build(self, left, right):
        return InfixExpression(left, op, right)
    return build


def _prefix(op: str):
    def build(self, right):
        return PrefixExpression(op, right)
    return build


@v_args(inline=True)
class ToAst(Transformer):
    """Turns the lark parse tree into tree.py nodes."""

    def start(self, *statements):
        return Program(tuple(statements))

    def let_stmt(self, name: Token, value):
        return LetStatement(Identifier(str(name)), value)

    def return_stmt(self, value):
        return ReturnStatement(value)

    def expr_stmt(self, expr):
        return ExpressionStatement(expr)

    def block(self, *statements):
        return BlockStatement(tuple(statements))

    eq = _infix("==")
    not_eq = _infix("!=")
    lt = _infix("<")
    gt = _infix(">")
    add = _infix("+")
    sub = _infix("-")
    mul = _infix("*")
    div = _infix("/")

    bang = _prefix("!")
    neg = _prefix("-")

    def call_expr(self, function, args):
        return CallExpression(function, tuple(args or ()))

    def args(self, *items):
        return list(items)

    def integer(self, tok: Token):
        value = int(tok)
        if value > INT64_MAX:
            raise ParseError([f"could not parse {tok} as integer"])
        return IntegerLiteral(value)

    def true(self):
        return Boolean(True)

    def false(self):
        return Boolean(False)

    def ident(self, tok: Token):
        return Identifier(str(tok))

    def if_expr(self, condition, consequence, alternative):
        return IfExpression(condition, consequence, alternative)

    def fn_lit(self, params, body):
        return FunctionLiteral(tuple(params or ()), body)

    def params(self, *names: Token):
        return [Identifier(str(name)) for name in names]


def parse_lark(source: str, grammar_path: Optional[str] = None) -> Program:
    """Parse with the reference grammar. lark's UnexpectedInput propagates."""
    tree = make_parser(grammar_path).parse(source)

    try:
        return ToAst().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ParseError):
            raise exc.orig_exc from None
        raise
