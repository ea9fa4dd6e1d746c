"""Interactive REPL for Monkey, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import tokenize
from .parser_rd import ParseError
from .repl_highlight import MonkeyLexer
from .runner import repl_eval
from .runtime import Environment, MkError
from .token_types import TT
from .utils import debug_py_trace_enabled, tracer_from_env

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/env": ("List bindings in the session environment", ""),
    "/py-traceback": ("Toggle Python traceback on internal errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
    "/trace": ("Toggle parser/evaluator tracing", "[on|off]"),
}

_DEPTH_OPEN = {TT.LPAREN, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAREN, TT.RBRACE}

_ON_WORDS = ("on", "1", "true", "yes")
_OFF_WORDS = ("off", "0", "false", "no")


def open_depth(text: str) -> int:
    """Count of unclosed '(' and '{' in *text* (never negative)."""
    depth = 0

    for tok in tokenize(text):
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)

    return depth


def needs_more_input(text: str) -> bool:
    return open_depth(text) > 0


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _toggle_env_flag(name: str, arg: str, enabled: bool) -> bool:
    """Apply on/off/toggle to an environment flag. False on a bad argument."""
    word = arg.lower()

    if word in _ON_WORDS or (word == "" and not enabled):
        os.environ[name] = "1"
    elif word in _OFF_WORDS or word == "":
        os.environ.pop(name, None)
    else:
        return False

    return True


def handle_slash(line: str, env_box: list[Environment]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/env":
        env = env_box[0]
        names = sorted(env.names())
        if not names:
            print("(no bindings)")
        for name in names:
            print(f"{name} = {env.get(name).inspect()}")
        return True

    if cmd == "/py-traceback":
        if not _toggle_env_flag("MONKEY_DEBUG_PY_TRACE", arg, debug_py_trace_enabled()):
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/trace":
        if not _toggle_env_flag("MONKEY_TRACE", arg, tracer_from_env() is not None):
            print("Usage: /trace [on|off]", file=sys.stderr)
            return True

        state = "on" if tracer_from_env() is not None else "off"
        print(f"Tracing: {state}")
        return True

    if cmd == "/reset":
        env_box[0] = Environment()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _compute_indent(text: str) -> str:
    """Auto-indent for the next continuation line: four spaces per open bracket."""
    return " " * (4 * open_depth(text))


def eval_and_print(text: str, env: Environment) -> None:
    """Evaluate one input and print its value or errors."""
    try:
        result, is_binding = repl_eval(text, env, tracer=tracer_from_env())
    except ParseError as exc:
        for msg in exc.errors:
            print(f"parser error: {msg}", file=sys.stderr)
        return

    if isinstance(result, MkError):
        print(result.inspect(), file=sys.stderr)
        return

    if not is_binding:
        print(result.inspect())


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the environment.
    env_box: list[Environment] = [Environment()]

    history = InMemoryHistory()
    lexer = MonkeyLexer()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.startswith("/") or not needs_more_input(text):
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("monkey repl: Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, env_box):
            continue

        try:
            eval_and_print(text, env_box[0])
        except Exception as exc:
            # Keep the session alive on interpreter bugs; report them.
            print(f"internal error: {exc!r}", file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                traceback.print_exc(file=sys.stderr)


def main() -> None:
    repl()


if __name__ == "__main__":
    main()
