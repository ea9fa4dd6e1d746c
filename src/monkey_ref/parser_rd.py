"""
Pratt Parser for Monkey

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: statement dispatch plus precedence climbing for expressions
- AST: frozen node classes from tree.py

The parser never stops at the first problem. Each error is recorded as a
message on ``Parser.errors`` and parsing continues best-effort, so callers get
a (possibly partial) Program together with every message at once.
"""

from __future__ import annotations

import functools
from enum import IntEnum
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .lexer_rd import tokenize
from .token_types import TT, Tok
from .tree import (
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
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
    Statement,
)
from .utils import Tracer, is_null_tracer, recursion_headroom

INT64_MAX = 2**63 - 1

# Deepest expression nesting accepted before parsing is abandoned.
MAX_NESTING = 256

# Python frames one nesting level may use, tracer wrappers included.
_FRAMES_PER_LEVEL = 16

# ============================================================================
# Precedence
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # > or <
    SUM = 4          # + or -
    PRODUCT = 5      # * or /
    PREFIX = 6       # -X or !X
    CALL = 7         # myFunction(X)


PRECEDENCES: Mapping[TT, Precedence] = MappingProxyType({
    TT.EQ: Precedence.EQUALS,
    TT.NOT_EQ: Precedence.EQUALS,
    TT.LT: Precedence.LESSGREATER,
    TT.GT: Precedence.LESSGREATER,
    TT.PLUS: Precedence.SUM,
    TT.MINUS: Precedence.SUM,
    TT.SLASH: Precedence.PRODUCT,
    TT.ASTERISK: Precedence.PRODUCT,
    TT.LPAREN: Precedence.CALL,
})

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]

# Methods wrapped with trace calls when a tracer is supplied.
_TRACED: Dict[str, Union[str, Callable[..., str]]] = {
    "parse_statement": "parseStatement",
    "parse_let_statement": "parseLetStatement",
    "parse_return_statement": "parseReturnStatement",
    "parse_expression_statement": "parseExpressionStatement",
    "parse_expression": lambda precedence: f"parseExpression: {Precedence(precedence).name}",
    "parse_identifier": "parseIdentifier",
    "parse_integer_literal": "parseIntegerLiteral",
    "parse_boolean": "parseBoolean",
    "parse_prefix_expression": "parsePrefixExpression",
    "parse_infix_expression": lambda left: "parseInfixExpression",
    "parse_grouped_expression": "parseGroupedExpression",
    "parse_if_expression": "parseIfExpression",
    "parse_block_statement": "parseBlockStatement",
    "parse_function_literal": "parseFunctionLiteral",
    "parse_function_parameters": "parseFunctionParameters",
    "parse_call_expression": lambda function: f"{function.string()}:parseCallExpression",
    "parse_expression_list": lambda end: "parseExpressionList",
}

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Raised by parse_source when the parser recorded any errors."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("\n".join(self.errors))


class _NestingTooDeep(Exception):
    pass


class Parser:
    """
    Pratt parser for Monkey.

    Expression precedence (lowest to highest):
    1. ==, !=
    2. <, >
    3. +, -
    4. *, /
    5. prefix -, !
    6. call f(...)
    """

    def __init__(self, tokens: Iterable[Tok], tracer: Optional[Tracer] = None):
        self.tokens: List[Tok] = list(tokens)
        if not self.tokens or self.tokens[-1].type != TT.EOF:
            last = self.tokens[-1] if self.tokens else None
            line = last.line if last is not None else 1
            self.tokens.append(Tok(TT.EOF, "", line, 0))

        self.errors: List[str] = []
        self.pos = 0
        self.depth = 0
        self.cur = self.tokens[0]
        self.peek_tok = self._token_at(1)

        self._tracer = None if is_null_tracer(tracer) else tracer
        if self._tracer is not None:
            for name, label in _TRACED.items():
                setattr(self, name, self._traced(label, getattr(self, name)))

        # Handler tables are fixed for the parser's lifetime.
        self.prefix_parse_fns: Mapping[TT, PrefixParseFn] = MappingProxyType({
            TT.IDENT: self.parse_identifier,
            TT.INT: self.parse_integer_literal,
            TT.BANG: self.parse_prefix_expression,
            TT.MINUS: self.parse_prefix_expression,
            TT.TRUE: self.parse_boolean,
            TT.FALSE: self.parse_boolean,
            TT.LPAREN: self.parse_grouped_expression,
            TT.IF: self.parse_if_expression,
            TT.FUNCTION: self.parse_function_literal,
        })
        self.infix_parse_fns: Mapping[TT, InfixParseFn] = MappingProxyType({
            TT.PLUS: self.parse_infix_expression,
            TT.MINUS: self.parse_infix_expression,
            TT.ASTERISK: self.parse_infix_expression,
            TT.SLASH: self.parse_infix_expression,
            TT.EQ: self.parse_infix_expression,
            TT.NOT_EQ: self.parse_infix_expression,
            TT.LT: self.parse_infix_expression,
            TT.GT: self.parse_infix_expression,
            TT.LPAREN: self.parse_call_expression,
        })

    def _traced(self, label, fn):
        tracer = self._tracer

        @functools.wraps(fn)
        def wrapper(*args):
            name = label(*args) if callable(label) else label
            tracer.enter(name)
            try:
                return fn(*args)
            finally:
                tracer.leave(name)

        return wrapper

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _token_at(self, idx: int) -> Tok:
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def next_token(self) -> None:
        self.pos += 1
        self.cur = self._token_at(self.pos)
        self.peek_tok = self._token_at(self.pos + 1)

    def cur_is(self, token_type: TT) -> bool:
        return self.cur.type == token_type

    def peek_is(self, token_type: TT) -> bool:
        return self.peek_tok.type == token_type

    def expect_peek(self, token_type: TT) -> bool:
        """Advance if the next token has the given type, else record an error"""
        if self.peek_is(token_type):
            self.next_token()
            return True

        self.peek_error(token_type)
        return False

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur.type, Precedence.LOWEST)

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_tok.type, Precedence.LOWEST)

    def _skip_optional_semicolon(self) -> None:
        if self.peek_is(TT.SEMICOLON):
            self.next_token()

    # ========================================================================
    # Errors
    # ========================================================================

    def peek_error(self, token_type: TT) -> None:
        self.errors.append(
            f"expected next token to be {token_type}. got {self.peek_tok.type} instead"
        )

    def no_prefix_parse_fn_error(self, token_type: TT) -> None:
        self.errors.append(f"no prefix parse function for {token_type} found")

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse_program(self) -> Program:
        """Parse entire program. Inspect ``errors`` before using the result."""
        statements: List[Statement] = []

        with recursion_headroom(MAX_NESTING * _FRAMES_PER_LEVEL):
            try:
                while not self.cur_is(TT.EOF):
                    stmt = self.parse_statement()
                    if stmt is not None:
                        statements.append(stmt)
                    self.next_token()
            except (_NestingTooDeep, RecursionError):
                self.errors.append("expression nested too deeply")

        return Program(tuple(statements))

    # ========================================================================
    # Statements
    # ========================================================================
    # Statement parsers start on the statement's first token and leave the
    # cursor on its last one (the semicolon, when present).

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_is(TT.LET):
            return self.parse_let_statement()
        if self.cur_is(TT.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        """let <ident> = <expr>[;]"""
        token = self.cur

        if not self.expect_peek(TT.IDENT):
            return None

        name = Identifier(self.cur.value, self.cur)

        if not self.expect_peek(TT.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()

        if value is None:
            return None
        return LetStatement(name, value, token)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        """return <expr>[;]"""
        token = self.cur

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()

        if value is None:
            return None
        return ReturnStatement(value, token)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        token = self.cur

        expr = self.parse_expression(Precedence.LOWEST)
        self._skip_optional_semicolon()

        if expr is None:
            return None
        return ExpressionStatement(expr, token)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        """Starts on '{' and ends on '}'"""
        token = self.cur
        statements: List[Statement] = []

        self.next_token()

        while not self.cur_is(TT.RBRACE):
            if self.cur_is(TT.EOF):
                self.errors.append(
                    f"expected next token to be {TT.RBRACE}. got {TT.EOF} instead"
                )
                return None

            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        return BlockStatement(tuple(statements), token)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        if self.depth >= MAX_NESTING:
            raise _NestingTooDeep

        self.depth += 1
        try:
            return self._parse_expression(precedence)
        finally:
            self.depth -= 1

    def _parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur.type)
            return None

        left = prefix()

        while left is not None and not self.peek_is(TT.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_tok.type)
            if infix is None:
                return left

            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Optional[Expression]:
        return Identifier(self.cur.value, self.cur)

    def parse_integer_literal(self) -> Optional[Expression]:
        literal = self.cur.value

        try:
            value = int(literal, 10)
        except ValueError:
            value = None

        if value is None or value > INT64_MAX:
            self.errors.append(f"could not parse {literal} as integer")
            return None

        return IntegerLiteral(value, self.cur)

    def parse_boolean(self) -> Optional[Expression]:
        return Boolean(self.cur_is(TT.TRUE), self.cur)

    def parse_prefix_expression(self) -> Optional[Expression]:
        token = self.cur

        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)

        if right is None:
            return None
        return PrefixExpression(token.value, right, token)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur
        precedence = self.cur_precedence()

        self.next_token()
        right = self.parse_expression(precedence)

        if right is None:
            return None
        return InfixExpression(left, token.value, right, token)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        expr = self.parse_expression(Precedence.LOWEST)

        if expr is None or not self.expect_peek(TT.RPAREN):
            return None
        return expr

    def parse_if_expression(self) -> Optional[Expression]:
        """if (<cond>) { ... } [else { ... }]"""
        token = self.cur

        if not self.expect_peek(TT.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TT.RPAREN):
            return None
        if not self.expect_peek(TT.LBRACE):
            return None

        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_is(TT.ELSE):
            self.next_token()

            if not self.expect_peek(TT.LBRACE):
                return None

            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(condition, consequence, alternative, token)

    def parse_function_literal(self) -> Optional[Expression]:
        """fn (<params>) { ... }"""
        token = self.cur

        if not self.expect_peek(TT.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TT.LBRACE):
            return None

        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(parameters, body, token)

    def parse_function_parameters(self) -> Optional[Tuple[Identifier, ...]]:
        """Starts on '(' and ends on ')'"""
        identifiers: List[Identifier] = []

        if self.peek_is(TT.RPAREN):
            self.next_token()
            return ()

        if not self.expect_peek(TT.IDENT):
            return None
        identifiers.append(Identifier(self.cur.value, self.cur))

        while self.peek_is(TT.COMMA):
            self.next_token()

            if not self.expect_peek(TT.IDENT):
                return None
            identifiers.append(Identifier(self.cur.value, self.cur))

        if not self.expect_peek(TT.RPAREN):
            return None

        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        token = self.cur

        arguments = self.parse_expression_list(TT.RPAREN)
        if arguments is None:
            return None

        return CallExpression(function, arguments, token)

    def parse_expression_list(self, end: TT) -> Optional[Tuple[Expression, ...]]:
        """Comma separated expressions up to ``end``; starts on the opener"""
        items: List[Expression] = []

        if self.peek_is(end):
            self.next_token()
            return ()

        self.next_token()
        item = self.parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)

        while self.peek_is(TT.COMMA):
            self.next_token()
            self.next_token()

            item = self.parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self.expect_peek(end):
            return None

        return tuple(items)

# ============================================================================
# Public API
# ============================================================================

def parse(tokens: Iterable[Tok], tracer: Optional[Tracer] = None) -> Tuple[Program, List[str]]:
    """Parse a token stream. Returns the program and the parser's error list."""
    parser = Parser(tokens, tracer=tracer)
    program = parser.parse_program()
    return program, list(parser.errors)


def parse_source(source: str, tracer: Optional[Tracer] = None) -> Program:
    """Tokenize and parse ``source``; raise ParseError if anything went wrong."""
    program, errors = parse(tokenize(source), tracer=tracer)

    if errors:
        raise ParseError(errors)

    return program
