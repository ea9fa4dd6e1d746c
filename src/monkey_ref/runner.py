from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

from .evaluator import eval_expr
from .parser_rd import ParseError, parse_source
from .runtime import Environment, MkError, MkValue, MonkeyRuntimeError
from .tree import LetStatement
from .utils import StreamTracer, Tracer, tracer_from_env


def run(
    src: str,
    env: Optional[Environment] = None,
    *,
    max_depth: Optional[int] = None,
    tracer: Optional[Tracer] = None,
) -> MkValue:
    """Parse and evaluate ``src``.

    Raises ParseError when the source does not parse and MonkeyRuntimeError
    when evaluation ends in an error value.
    """
    program = parse_source(src, tracer=tracer)
    result = eval_expr(program, env if env is not None else Environment(), max_depth=max_depth, tracer=tracer)

    if isinstance(result, MkError):
        raise MonkeyRuntimeError(result)

    return result


def repl_eval(
    text: str,
    env: Environment,
    *,
    max_depth: Optional[int] = None,
    tracer: Optional[Tracer] = None,
) -> Tuple[MkValue, bool]:
    """Evaluate one REPL input in a persistent environment.

    Returns the value and whether the input ended with a `let` (nothing to
    echo). Error values are returned, not raised; parse errors still raise.
    """
    program = parse_source(text, tracer=tracer)
    result = eval_expr(program, env, max_depth=max_depth, tracer=tracer)
    is_binding = bool(program.statements) and isinstance(program.statements[-1], LetStatement)

    return result, is_binding and not isinstance(result, MkError)


def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = candidate.exists()
    except OSError:
        # Too long or otherwise invalid as a path name.
        return arg

    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg


def _parse_depth(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise SystemExit(f"--max-depth expects an integer, got {raw!r}") from None

    if value <= 0:
        raise SystemExit("--max-depth must be positive")
    return value


def main(argv: Optional[list[str]] = None) -> int:
    tracer = tracer_from_env()
    max_depth: Optional[int] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--trace":
            tracer = StreamTracer()
            continue

        if token.startswith("--max-depth="):
            max_depth = _parse_depth(token.split("=", 1)[1])
            continue

        if token == "--max-depth":
            try:
                max_depth = _parse_depth(next(it))
            except StopIteration:
                raise SystemExit("--max-depth flag requires a value") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    source = _load_source(arg or "-")

    try:
        result = run(source, max_depth=max_depth, tracer=tracer)
    except ParseError as exc:
        for msg in exc.errors:
            print(f"parser error: {msg}", file=sys.stderr)
        return 1
    except MonkeyRuntimeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(result.inspect())
    return 0


if __name__ == "__main__":
    sys.exit(main())
