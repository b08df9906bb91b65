"""
Pattern detector for brace-delimited arrow-map literals.

    { "key" => value, "other" => value2, }

``classify`` makes one left-to-right pass over a group's immediate children
with a four-state machine (no backtracking). Nested groups are never entered
here: a group in value position is an ordinary value, and recursion into
non-candidate groups is the driver's job.

Disambiguation from ordinary blocks:
- non-brace, empty, or not-literal-first groups are rejected before the scan
- a scan that fails before any `=>` was consumed is a block, not a broken map,
  unless an arrow still follows at the same level
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple, Union

from .diagnostics import ErrorKind
from .tree import (
    Delimiter,
    Group,
    Ident,
    KEY_LITERAL_KINDS,
    Literal,
    Punct,
    Span,
    Token,
    group_children,
    is_punct,
    token_span,
)
from .utils import ARROW


class MatchState(Enum):
    EXPECT_KEY_OR_END = auto()
    EXPECT_SEPARATOR = auto()
    EXPECT_VALUE = auto()
    EXPECT_COMMA_OR_END = auto()


@dataclass(frozen=True)
class Pair:
    key: Literal
    separator: Tuple[Punct, Punct]
    value: Token
    comma: Optional[Punct] = None

    @property
    def separator_span(self) -> Span:
        return Span.join(self.separator[0].span, self.separator[1].span)


@dataclass(frozen=True)
class Candidate:
    """View over one well-formed brace group; lives for a single rewrite."""

    group: Group
    pairs: Tuple[Pair, ...]
    trailing_comma: bool = False

    @property
    def delimiter(self) -> Delimiter:
        return self.group.delimiter


@dataclass(frozen=True)
class NotCandidate:
    pass


@dataclass(frozen=True)
class WellFormed:
    candidate: Candidate


@dataclass(frozen=True)
class Malformed:
    kind: ErrorKind
    span: Span
    detail: Optional[str] = None

    @property
    def reason(self) -> str:
        return self.kind.value


Classification = Union[NotCandidate, WellFormed, Malformed]

NOT_CANDIDATE = NotCandidate()


def describe(tok: Token) -> str:
    """Short human-readable rendering of a token for diagnostics."""
    if isinstance(tok, Group):
        return f"'{tok.delimiter.open or 'group'}'"
    if isinstance(tok, Ident):
        return f"'{tok.text}'"
    if isinstance(tok, Literal):
        return tok.text
    return f"'{tok.char}'"


def arrow_at(children: Sequence[Token], idx: int) -> bool:
    """True if children[idx:idx+2] is the joint `=` `>` separator."""
    if idx + 1 >= len(children):
        return False

    first, second = children[idx], children[idx + 1]
    return (
        is_punct(first, ARROW[0])
        and first.joint
        and is_punct(second, ARROW[1])
    )


def has_arrow(children: Sequence[Token], start: int = 0) -> bool:
    return any(arrow_at(children, idx) for idx in range(start, len(children) - 1))


def is_key(tok: Token) -> bool:
    return isinstance(tok, Literal) and tok.kind in KEY_LITERAL_KINDS


def classify(group: Group) -> Classification:
    """Classify one group as NotCandidate, WellFormed or Malformed."""
    children = group_children(group)

    # Cheap rejections before the state machine
    if group.delimiter is not Delimiter.BRACE:
        return NOT_CANDIDATE
    if not children or not isinstance(children[0], Literal):
        return NOT_CANDIDATE

    state = MatchState.EXPECT_KEY_OR_END
    pairs: List[Pair] = []
    key: Optional[Literal] = None
    separator: Optional[Tuple[Punct, Punct]] = None
    value: Optional[Token] = None
    separated = False
    idx = 0

    def fail(kind: ErrorKind, tok: Token) -> Classification:
        # Before the first arrow this might just be a block like { "a".len() }
        if not separated and not has_arrow(children, idx):
            return NOT_CANDIDATE
        return Malformed(kind, token_span(tok), f"found {describe(tok)}")

    while idx < len(children):
        tok = children[idx]

        if state is MatchState.EXPECT_KEY_OR_END:
            if not is_key(tok):
                return fail(ErrorKind.EXPECTED_KEY_LITERAL, tok)
            key = tok
            state = MatchState.EXPECT_SEPARATOR
            idx += 1

        elif state is MatchState.EXPECT_SEPARATOR:
            if not arrow_at(children, idx):
                return fail(ErrorKind.EXPECTED_SEPARATOR, tok)
            separator = (children[idx], children[idx + 1])
            separated = True
            state = MatchState.EXPECT_VALUE
            idx += 2

        elif state is MatchState.EXPECT_VALUE:
            if isinstance(tok, Punct):
                return Malformed(ErrorKind.EXPECTED_VALUE, tok.span, f"found {describe(tok)}")
            value = tok
            state = MatchState.EXPECT_COMMA_OR_END
            idx += 1

        else:
            if not is_punct(tok, ","):
                return Malformed(ErrorKind.UNTERMINATED_PAIR_LIST, token_span(tok), f"expected ',' but found {describe(tok)}")
            pairs.append(Pair(key, separator, value, tok))
            state = MatchState.EXPECT_KEY_OR_END
            idx += 1

    # End of group
    if state is MatchState.EXPECT_COMMA_OR_END:
        pairs.append(Pair(key, separator, value))
        return WellFormed(Candidate(group, tuple(pairs), trailing_comma=False))

    if state is MatchState.EXPECT_KEY_OR_END:
        # Only reachable after a comma, so at least one pair exists
        return WellFormed(Candidate(group, tuple(pairs), trailing_comma=True))

    if state is MatchState.EXPECT_SEPARATOR:
        if not separated:
            return NOT_CANDIDATE
        return Malformed(ErrorKind.EXPECTED_SEPARATOR, group.span_close, "found end of group")

    return Malformed(ErrorKind.EXPECTED_VALUE, group.span_close, "found end of group")
