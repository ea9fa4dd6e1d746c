"""AST node classes produced by the parser and consumed by the evaluator.

Nodes are frozen dataclasses; child sequences are tuples, so a finished tree
cannot be mutated. Each node remembers the token that introduced it for
diagnostics, but that token takes no part in equality: trees built by
different front ends (the Pratt parser, the lark grammar) compare equal when
their structure does.

``string()`` renders a node as fully parenthesized source text which parses
back into an equal tree.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
from typing_extensions import TypeAlias

from .token_types import Tok


def _tok() -> Optional[Tok]:
    return field(default=None, compare=False, repr=False)


# ---------- Expressions ----------

@dataclass(frozen=True)
class Identifier:
    value: str
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral:
    value: int
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean:
    value: bool
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression:
    operator: str
    right: 'Expression'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return f"({self.operator}{self.right.string()})"


@dataclass(frozen=True)
class InfixExpression:
    left: 'Expression'
    operator: str
    right: 'Expression'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return f"({self.left.string()} {self.operator} {self.right.string()})"


@dataclass(frozen=True)
class IfExpression:
    condition: 'Expression'
    consequence: 'BlockStatement'
    alternative: Optional['BlockStatement'] = None
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        out = f"if ({self.condition.string()}) {self.consequence.string()}"
        if self.alternative is not None:
            out += f" else {self.alternative.string()}"
        return out


@dataclass(frozen=True)
class FunctionLiteral:
    parameters: Tuple[Identifier, ...]
    body: 'BlockStatement'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        params = ", ".join(p.string() for p in self.parameters)
        return f"fn({params}) {self.body.string()}"


@dataclass(frozen=True)
class CallExpression:
    function: 'Expression'
    arguments: Tuple['Expression', ...]
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        args = ", ".join(a.string() for a in self.arguments)
        return f"{self.function.string()}({args})"


# ---------- Statements ----------

@dataclass(frozen=True)
class LetStatement:
    name: Identifier
    value: 'Expression'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return f"let {self.name.string()} = {self.value.string()}"


@dataclass(frozen=True)
class ReturnStatement:
    value: 'Expression'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return f"return {self.value.string()}"


@dataclass(frozen=True)
class ExpressionStatement:
    expression: 'Expression'
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        return self.expression.string()


@dataclass(frozen=True)
class BlockStatement:
    statements: Tuple['Statement', ...]
    token: Optional[Tok] = _tok()

    def string(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + "; ".join(s.string() for s in self.statements) + " }"


@dataclass(frozen=True)
class Program:
    statements: Tuple['Statement', ...]

    def string(self) -> str:
        return "; ".join(s.string() for s in self.statements)

    def __str__(self) -> str:
        return self.string()


Expression: TypeAlias = Union[
    Identifier,
    IntegerLiteral,
    Boolean,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
]

Statement: TypeAlias = Union[LetStatement, ReturnStatement, ExpressionStatement]

Node: TypeAlias = Union[Program, BlockStatement, Statement, Expression]


def node_label(node: Node) -> str:
    return type(node).__name__
