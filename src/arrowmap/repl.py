"""Interactive arrow-map expander, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from dataclasses import dataclass

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .diagnostics import RewriteError, format_diagnostic
from .lexer_rd import LexError, tokenize
from .repl_highlight import ArrowMapLexer
from .runner import run
from .token_types import CLOSE_DELIMS, OPEN_DELIMS
from .utils import debug_py_trace_enabled, strict_from_env

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/lark": ("Toggle the Lark-backed reader", "[on|off]"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/strict": ("Toggle strict mode (malformed maps are errors)", "[on|off]"),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


@dataclass
class Session:
    strict: bool = False
    reader: str = "rd"


def _open_depth(text: str) -> int:
    """Return how many delimiters are still open at the end of *text*."""
    try:
        tokens = tokenize(text)
    except LexError:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type in OPEN_DELIMS:
            depth += 1
        elif tok.type in CLOSE_DELIMS:
            depth = max(depth - 1, 0)
    return depth


def _toggle(arg: str, current: bool) -> bool | None:
    """Parse an on/off argument; empty toggles. None means bad input."""
    if arg.lower() in _ON:
        return True
    if arg.lower() in _OFF:
        return False
    if arg == "":
        return not current
    return None


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


def _handle_slash(line: str, session: Session) -> bool:
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

    if cmd == "/py-traceback":
        state = _toggle(arg, debug_py_trace_enabled())
        if state is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True
        if state:
            os.environ["ARROWMAP_DEBUG_PY_TRACE"] = "1"
        else:
            os.environ.pop("ARROWMAP_DEBUG_PY_TRACE", None)
        print(f"Python traceback: {'on' if state else 'off'}")
        return True

    if cmd == "/strict":
        state = _toggle(arg, session.strict)
        if state is None:
            print("Usage: /strict [on|off]", file=sys.stderr)
            return True
        session.strict = state
        print(f"Strict mode: {'on' if state else 'off'}")
        return True

    if cmd == "/lark":
        state = _toggle(arg, session.reader == "lark")
        if state is None:
            print("Usage: /lark [on|off]", file=sys.stderr)
            return True
        session.reader = "lark" if state else "rd"
        print(f"Reader: {session.reader}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def evaluate(text: str, session: Session) -> str:
    """Expand one snippet; errors are returned as printable text."""
    try:
        return run(text, strict=session.strict, reader=session.reader)
    except LexError as exc:
        if debug_py_trace_enabled():
            traceback.print_exc()
        return f"Error: {exc}"
    except RewriteError as exc:
        if debug_py_trace_enabled():
            traceback.print_exc()
        return "\n".join(format_diagnostic(d, text, "<repl>") for d in exc.diagnostics)


def repl() -> None:
    """Interactive read-expand-print loop with prompt_toolkit."""
    state = Session(strict=strict_from_env())

    history = InMemoryHistory()
    lexer = ArrowMapLexer()

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

        # Keep reading while a delimiter is open.
        if _open_depth(text) > 0:
            buf.insert_text("\n    ")
            return

        # Multiline input submits on an empty last line.
        if "\n" in text and text.split("\n")[-1].strip() != "":
            buf.insert_text("\n")
            return

        buf.text = text.rstrip("\n")
        buf.cursor_position = len(buf.text)
        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("arrowmap repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        # Slash command?
        if _handle_slash(text, state):
            continue

        print(evaluate(text, state))


if __name__ == "__main__":
    repl()
