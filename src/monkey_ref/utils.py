from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO
from typing_extensions import Protocol

DEFAULT_MAX_DEPTH = 500

_TRUE_WORDS = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_WORDS


def debug_py_trace_enabled() -> bool:
    """Whether the REPL should print Python tracebacks for internal faults."""
    return _env_flag("MONKEY_DEBUG_PY_TRACE")


def trace_enabled() -> bool:
    return _env_flag("MONKEY_TRACE")


def max_depth_from_env() -> int:
    raw = os.environ.get("MONKEY_MAX_DEPTH")
    if raw is None:
        return DEFAULT_MAX_DEPTH

    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_MAX_DEPTH

    return value if value > 0 else DEFAULT_MAX_DEPTH


# ---------------- Tracing ----------------

class Tracer(Protocol):
    def enter(self, label: str) -> None: ...
    def leave(self, label: str) -> None: ...


class NullTracer:
    """Tracer that records nothing."""

    def enter(self, label: str) -> None:
        pass

    def leave(self, label: str) -> None:
        pass


NULL_TRACER = NullTracer()


class StreamTracer:
    """Writes indented BEGIN/END lines for each traced call."""

    def __init__(self, stream: Optional[TextIO] = None, indent: str = "\t"):
        self.stream = stream
        self.indent = indent
        self.level = 0

    def _write(self, text: str) -> None:
        out = self.stream if self.stream is not None else sys.stderr
        print(f"{self.indent * (self.level - 1)}{text}", file=out)

    def enter(self, label: str) -> None:
        self.level += 1
        self._write(f"BEGIN {label}")

    def leave(self, label: str) -> None:
        self._write(f"END {label}")
        self.level -= 1


def is_null_tracer(tracer: Optional[Tracer]) -> bool:
    return tracer is None or isinstance(tracer, NullTracer)


def tracer_from_env() -> Optional[Tracer]:
    return StreamTracer() if trace_enabled() else None


@contextmanager
def recursion_headroom(extra_frames: int) -> Iterator[None]:
    """Temporarily raise the interpreter recursion limit by ``extra_frames``."""
    old = sys.getrecursionlimit()
    sys.setrecursionlimit(old + extra_frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(old)
