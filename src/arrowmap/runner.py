from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional, Tuple

from .diagnostics import Diagnostic, RewriteError, format_diagnostic
from .driver import expand, read_source, rewrite
from .lexer_rd import LexError
from .render import to_source
from .utils import debug_py_trace_enabled, strict_from_env

logger = logging.getLogger(__name__)

USAGE = "usage: arrowmap [--strict|--tolerant] [--lark] [--check] [--verbose] [FILE|-|SOURCE]"


def run(src: str, strict: Optional[bool] = None, reader: str = "rd") -> str:
    """Expand every arrow-map literal in ``src`` and return the rendered text."""
    if strict is None:
        strict = strict_from_env()

    stream = read_source(src, reader=reader)
    return to_source(expand(stream, strict=strict))


def check(src: str, reader: str = "rd") -> List[Diagnostic]:
    """Return every malformed-candidate diagnostic in ``src`` without failing."""
    stream = read_source(src, reader=reader)
    return list(rewrite(stream, strict=True).diagnostics)


def _load_source(arg: Optional[str]) -> Tuple[str, str]:
    """
    Resolve CLI input into (source text, display path).
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data, "<stdin>"

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8"), str(candidate)

    return arg, "<input>"


def _report(diagnostics: List[Diagnostic], source: str, path: str) -> None:
    for diag in diagnostics:
        print(format_diagnostic(diag, source, path), file=sys.stderr)


def _error_location(exc: LexError) -> str:
    if exc.line is None:
        return ""
    return f"{exc.line}:{exc.column}: "


def main(argv: Optional[List[str]] = None) -> None:
    strict = strict_from_env()
    reader = "rd"
    check_only = False
    verbose = False
    arg = None

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--strict":
            strict = True
            continue

        if token == "--tolerant":
            strict = False
            continue

        if token == "--lark":
            reader = "lark"
            continue

        if token == "--check":
            check_only = True
            continue

        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return

        if token.startswith("--"):
            raise SystemExit(f"Unknown flag: {token}\n{USAGE}")

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source, path = _load_source(arg or "-")
    logger.debug("loaded %d characters from %s (reader=%s, strict=%s)", len(source), path, reader, strict)

    try:
        if check_only:
            diagnostics = check(source, reader=reader)
            if diagnostics:
                _report(diagnostics, source, path)
                raise SystemExit(1)
            return

        print(run(source, strict=strict, reader=reader))
    except LexError as exc:
        if debug_py_trace_enabled():
            traceback.print_exc()
        print(f"{path}:{_error_location(exc)}error: {exc.message}", file=sys.stderr)
        raise SystemExit(1) from None
    except RewriteError as exc:
        if debug_py_trace_enabled():
            traceback.print_exc()
        _report(exc.diagnostics, source, path)
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
