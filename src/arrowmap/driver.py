"""
Driver: applies the detector and emitter across a whole token stream.

Every group is Pending until classified, then either Rewritten (replaced by
the emitted call) or PassedThrough (kept, after its children were processed
the same way when it was not a candidate). Traversal uses an explicit frame
stack, so nesting depth is not limited by Python's recursion limit.

The mode (``strict``) is an argument on every entry point; nothing here keeps
state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .detector import NOT_CANDIDATE, Classification, Malformed, WellFormed, classify
from .diagnostics import Diagnostic, RewriteError, report
from .emitter import emit
from .reader import parse_source as parse_rd
from .reader_lark import parse_source as parse_lark
from .render import to_source
from .tree import Group, Token, TokenStream, is_brace_group, is_ident, is_punct, with_children

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteResult:
    stream: TokenStream
    diagnostics: Tuple[Diagnostic, ...] = ()
    rewritten: int = 0
    passed_through: int = 0

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class _Frame:
    """A group whose children are being processed."""

    __slots__ = ('group', 'children', 'idx', 'out', 'changed', 'match_head')

    def __init__(self, group: Optional[Group], children: Sequence[Token]):
        self.group = group
        self.children = children
        self.idx = 0
        self.out: List[Token] = []
        self.changed = False
        # Inside `match <scrutinee>`: the next brace group is the match body
        self.match_head = False

    def finish(self):
        if self.group is None:
            return tuple(self.out) if self.changed else tuple(self.children)
        if not self.changed:
            return self.group
        return with_children(self.group, self.out)


def _classify_in_context(frame: _Frame, group: Group) -> Classification:
    if frame.match_head and is_brace_group(group):
        frame.match_head = False
        return NOT_CANDIDATE
    return classify(group)


def rewrite(stream: Sequence[Token], strict: bool = False) -> RewriteResult:
    """Rewrite every well-formed arrow-map group in ``stream``.

    Never raises for malformed candidates: they are passed through unchanged
    and reported in ``diagnostics`` whatever the mode. ``strict`` only changes
    how they are logged; use ``expand`` to turn them into an error.
    """
    diagnostics: List[Diagnostic] = []
    rewritten = 0
    passed = 0

    stack: List[_Frame] = [_Frame(None, stream)]

    while True:
        frame = stack[-1]

        if frame.idx >= len(frame.children):
            stack.pop()
            finished = frame.finish()
            if not stack:
                return RewriteResult(finished, tuple(diagnostics), rewritten, passed)
            parent = stack[-1]
            parent.out.append(finished)
            if frame.changed:
                parent.changed = True
            continue

        tok = frame.children[frame.idx]
        frame.idx += 1

        if not isinstance(tok, Group):
            if is_ident(tok, "match"):
                frame.match_head = True
            elif is_punct(tok, ";"):
                frame.match_head = False
            frame.out.append(tok)
            continue

        verdict = _classify_in_context(frame, tok)

        if isinstance(verdict, WellFormed):
            replacement = emit(verdict.candidate)
            logger.debug(
                "rewrote arrow map at %d:%d (%d pair(s))",
                tok.span_open.line, tok.span_open.column, len(verdict.candidate.pairs),
            )
            frame.out.extend(replacement)
            frame.changed = True
            rewritten += 1
            continue

        if isinstance(verdict, Malformed):
            diag = report(verdict.kind, verdict.span, verdict.detail)
            diagnostics.append(diag)
            if strict:
                logger.info("malformed arrow map: %s", diag)
            else:
                logger.debug("passing through malformed arrow map: %s", diag)
            frame.out.append(tok)
            passed += 1
            continue

        # Not a candidate: look for candidates inside it
        passed += 1
        stack.append(_Frame(tok, tok.children))


def expand(stream: Sequence[Token], strict: bool = False) -> TokenStream:
    """Invocation boundary: one stream in, one stream (or an error) out.

    Tolerant mode always succeeds. Strict mode raises ``RewriteError`` with
    every diagnostic found in the stream.
    """
    result = rewrite(stream, strict=strict)

    if strict and result.diagnostics:
        raise RewriteError(result.diagnostics)

    return result.stream


def expand_source(source: str, strict: bool = False, reader: str = "rd") -> str:
    """Read source text, expand it, and render the result back to text."""
    stream = read_source(source, reader=reader)
    return to_source(expand(stream, strict=strict))


def read_source(source: str, reader: str = "rd") -> TokenStream:
    match reader:
        case "rd":
            return parse_rd(source)
        case "lark":
            return parse_lark(source)
        case _:
            raise ValueError(f"unknown reader {reader!r}")
