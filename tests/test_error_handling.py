from __future__ import annotations

from textwrap import dedent
from typing import List

import pytest

from tests.support.harness import (
    ErrorKind,
    MonkeyRuntimeError,
    ParseError,
    eval_source,
    parse_errors,
    parse_source,
    run_runtime_case,
    verify_result,
)
from monkey_ref.lexer_rd import tokenize
from monkey_ref.parser_rd import parse

PARSE_ERROR_CASES = [
    pytest.param(
        "let x 5; let = 10; let 838383;",
        [
            "expected next token to be =. got INT instead",
            "expected next token to be IDENT. got = instead",
            "no prefix parse function for = found",
            "expected next token to be IDENT. got INT instead",
        ],
        id="let-errors-accumulate",
    ),
    pytest.param(
        "let x = ;",
        ["no prefix parse function for ; found"],
        id="let-missing-value",
    ),
    pytest.param(
        "return;",
        ["no prefix parse function for ; found"],
        id="return-missing-value",
    ),
    pytest.param(
        "9223372036854775808",
        ["could not parse 9223372036854775808 as integer"],
        id="integer-out-of-range",
    ),
    pytest.param(
        "a @ b",
        ["no prefix parse function for ILLEGAL found"],
        id="illegal-character",
    ),
    pytest.param(
        "(1 + 2",
        ["expected next token to be ). got EOF instead"],
        id="unclosed-group",
    ),
    pytest.param(
        "add(1, 2",
        ["expected next token to be ). got EOF instead"],
        id="unclosed-call",
    ),
    pytest.param(
        "if (x) { x",
        ["expected next token to be }. got EOF instead"],
        id="unterminated-block",
    ),
    pytest.param(
        "fn(x) { x",
        ["expected next token to be }. got EOF instead"],
        id="unterminated-fn-body",
    ),
    pytest.param("-" * 600 + "1", ["expression nested too deeply"], id="deep-prefix"),
    pytest.param("(" * 700 + "1" + ")" * 700, ["expression nested too deeply"], id="deep-parens"),
    pytest.param(
        "if (true) { " * 300 + "1" + " }" * 300,
        ["expression nested too deeply"],
        id="deep-if-blocks",
    ),
]


@pytest.mark.parametrize("source, expected", PARSE_ERROR_CASES)
def test_parse_error_messages(source: str, expected: List[str]) -> None:
    assert parse_errors(source) == expected


FIRST_PARSE_ERROR_CASES = [
    pytest.param("if x { x }", "expected next token to be (. got IDENT instead", id="if-missing-lparen"),
    pytest.param("if (x { x }", "expected next token to be ). got { instead", id="if-missing-rparen"),
    pytest.param("if (x) x", "expected next token to be {. got IDENT instead", id="if-missing-block"),
    pytest.param("if (x) { x } else x", "expected next token to be {. got IDENT instead", id="else-missing-block"),
    pytest.param("fn(1) { }", "expected next token to be IDENT. got INT instead", id="fn-param-not-ident"),
    pytest.param("fn(x, ) { }", "expected next token to be IDENT. got ) instead", id="fn-trailing-comma"),
    pytest.param("fn(x) x", "expected next token to be {. got IDENT instead", id="fn-missing-body"),
    pytest.param("fn x", "expected next token to be (. got IDENT instead", id="fn-missing-params"),
    pytest.param("f(1 2)", "expected next token to be ). got INT instead", id="call-missing-comma"),
    pytest.param("}", "no prefix parse function for } found", id="stray-brace"),
]


@pytest.mark.parametrize("source, first_error", FIRST_PARSE_ERROR_CASES)
def test_first_parse_error(source: str, first_error: str) -> None:
    errors = parse_errors(source)

    assert errors, "expected at least one parser error"
    assert errors[0] == first_error


def test_parser_keeps_going_after_errors() -> None:
    program, errors = parse(tokenize("let x = 5; let = 1; x"))

    assert errors == [
        "expected next token to be IDENT. got = instead",
        "no prefix parse function for = found",
    ]
    assert program.string() == "let x = 5; 1; x"


def test_failed_sub_expression_drops_whole_statement() -> None:
    program, errors = parse(tokenize("1 + (2 *; 3"))

    assert errors == ["no prefix parse function for ; found"]
    assert program.string() == "3"


def test_parse_source_raises_with_all_messages() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("let = 1; let 2;")

    err = exc_info.value
    assert err.errors[0] == "expected next token to be IDENT. got = instead"
    assert "expected next token to be IDENT. got INT instead" in err.errors
    assert str(err) == "\n".join(err.errors)


RUNTIME_ERROR_SCENARIOS = [
    pytest.param(
        "5 + true;",
        ("error", (ErrorKind.TYPE_MISMATCH, "type mismatch: INTEGER + BOOLEAN")),
        None,
        id="type-mismatch",
    ),
    pytest.param(
        "5 + true; 5;",
        ("error", (ErrorKind.TYPE_MISMATCH, "type mismatch: INTEGER + BOOLEAN")),
        None,
        id="type-mismatch-stops-program",
    ),
    pytest.param(
        "1 == true",
        ("error", (ErrorKind.TYPE_MISMATCH, "type mismatch: INTEGER == BOOLEAN")),
        None,
        id="type-mismatch-equality",
    ),
    pytest.param(
        "-true",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: -BOOLEAN")),
        None,
        id="negate-boolean",
    ),
    pytest.param(
        "true + false;",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: BOOLEAN + BOOLEAN")),
        None,
        id="add-booleans",
    ),
    pytest.param(
        "true < false",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: BOOLEAN < BOOLEAN")),
        None,
        id="compare-booleans",
    ),
    pytest.param(
        "5; true + false; 5",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: BOOLEAN + BOOLEAN")),
        None,
        id="error-mid-program",
    ),
    pytest.param(
        "if (10 > 1) { true + false; }",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: BOOLEAN + BOOLEAN")),
        None,
        id="error-in-block",
    ),
    pytest.param(
        dedent(
            """\
            if (10 > 1) {
              if (10 > 1) {
                return true + false;
              }

              return 1;
            }
            """
        ),
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: BOOLEAN + BOOLEAN")),
        None,
        id="error-in-nested-return",
    ),
    pytest.param(
        "foobar",
        ("error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: foobar")),
        None,
        id="unbound-identifier",
    ),
    pytest.param(
        "fn() { } + fn() { }",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: FUNCTION + FUNCTION")),
        None,
        id="add-functions",
    ),
    pytest.param(
        "-fn() { }",
        ("error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: -FUNCTION")),
        None,
        id="negate-function",
    ),
    pytest.param(
        "if (false) { 1 } + 1",
        ("error", (ErrorKind.TYPE_MISMATCH, "type mismatch: NULL + INTEGER")),
        None,
        id="null-plus-integer",
    ),
    pytest.param(
        "10 / 0",
        ("error", (ErrorKind.DIVISION_BY_ZERO, "division by zero: 10 / 0")),
        None,
        id="division-by-zero",
    ),
    pytest.param(
        "let f = 5; f(1)",
        ("error", (ErrorKind.NOT_A_FUNCTION, "not a function: INTEGER")),
        None,
        id="call-integer",
    ),
    pytest.param(
        "true()",
        ("error", (ErrorKind.NOT_A_FUNCTION, "not a function: BOOLEAN")),
        None,
        id="call-boolean",
    ),
    pytest.param(
        "fn(x) { x }(1, 2)",
        ("error", (ErrorKind.ARITY_MISMATCH, "expected 1 arguments. got=2")),
        None,
        id="too-many-arguments",
    ),
    pytest.param(
        "let add = fn(a, b) { a + b }; add(1)",
        ("error", (ErrorKind.ARITY_MISMATCH, "expected 2 arguments. got=1")),
        None,
        id="too-few-arguments",
    ),
    pytest.param(
        "let f = fn(a) { a }; f(missing)",
        ("error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: missing")),
        None,
        id="argument-error-propagates",
    ),
    pytest.param(
        "missing(1)",
        ("error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: missing")),
        None,
        id="callee-error-propagates",
    ),
    pytest.param(
        "if (missing) { 1 } else { 2 }",
        ("error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: missing")),
        None,
        id="condition-error-propagates",
    ),
    pytest.param(
        "let x = 1 + true; x",
        ("error", (ErrorKind.TYPE_MISMATCH, "type mismatch: INTEGER + BOOLEAN")),
        None,
        id="let-value-error",
    ),
    pytest.param(
        "foobar",
        None,
        MonkeyRuntimeError,
        id="runner-raises-on-error-value",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", RUNTIME_ERROR_SCENARIOS)
def test_runtime_errors(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_error_value_is_not_evaluated_further() -> None:
    result = eval_source("let x = -true; let y = x + 1; y")

    verify_result(result, "error", (ErrorKind.UNKNOWN_OPERATOR, "unknown operator: -BOOLEAN"))


def test_left_operand_error_wins() -> None:
    result = eval_source("a + b")

    verify_result(result, "error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: a"))


def test_first_argument_error_wins() -> None:
    result = eval_source("let f = fn(a, b) { a }; f(first, second)")

    verify_result(result, "error", (ErrorKind.UNBOUND_IDENTIFIER, "identifier not found: first"))


def test_error_inspect_prefix() -> None:
    result = eval_source("foo")
    assert result.inspect() == "ERROR: identifier not found: foo"


def test_moderate_nesting_still_parses() -> None:
    verify_result(eval_source("-" * 200 + "1"), "int", 1)
    verify_result(eval_source("(" * 200 + "7" + ")" * 200), "int", 7)


def test_deep_nesting_keeps_earlier_statements() -> None:
    program, errors = parse(tokenize("let a = 1; " + "!" * 400 + "true"))

    assert errors == ["expression nested too deeply"]
    assert program.string() == "let a = 1"


def test_deep_nesting_raises_parse_error() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("(" * 700 + "1" + ")" * 700)

    assert exc_info.value.errors == ["expression nested too deeply"]
