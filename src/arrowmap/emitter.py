"""Rewrite emitter: well-formed candidate -> constructor call tokens.

    { "a" => x, "b" => y, }
becomes
    ::sugars_macros::hash_map_fn!(("a", x), ("b", y))

Key and value tokens keep their own spans; the comma inside each pair takes the
span of the `=>` it replaces, and commas between pairs keep the span of the
input comma. Everything else (path, bang, added parentheses) is stamped with
the span of the original opening brace.
"""

from __future__ import annotations

from typing import List

from .detector import Candidate
from .tree import Delimiter, Ident, Punct, Span, Token, TokenStream, make_group
from .utils import TARGET_IS_MACRO, TARGET_PATH


def call_target(anchor: Span) -> List[Token]:
    """Fully-qualified path tokens of the constructor (`::a::b!`)."""
    out: List[Token] = []
    for segment in TARGET_PATH:
        out.append(Punct(":", True, anchor))
        out.append(Punct(":", False, anchor))
        out.append(Ident(segment, anchor))
    if TARGET_IS_MACRO:
        out.append(Punct("!", False, anchor))
    return out


def emit(candidate: Candidate) -> TokenStream:
    """Build the replacement tokens for one well-formed candidate."""
    anchor = candidate.group.span_open
    args: List[Token] = []

    for idx, pair in enumerate(candidate.pairs):
        if idx:
            # The previous pair's comma exists: only the last pair may lack one
            prev = candidate.pairs[idx - 1].comma
            args.append(Punct(",", False, prev.span if prev is not None else anchor))

        args.append(make_group(
            Delimiter.PARENTHESIS,
            (pair.key, Punct(",", False, pair.separator_span), pair.value),
            anchor,
        ))

    return (*call_target(anchor), make_group(Delimiter.PARENTHESIS, args, anchor))
