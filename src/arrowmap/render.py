"""Print token streams back as source text.

Spacing is deterministic and depends only on the tokens, never on spans:
- nothing after a joint punct (`=>`, `::`, `'a`) or after `.`
- nothing before `,` `;` `.` `?` or a lone `:`
- paths print as `a::b`, macro calls as `name!(..)`, calls and indexing as `f(..)` / `a[..]`
- braces are padded: `{ a }`, and `{}` when empty
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .tree import Delimiter, Group, Ident, Literal, Punct, Token, is_punct

NO_SPACE_BEFORE = frozenset({",", ";", ".", "?"})
CALL_DELIMS = (Delimiter.PARENTHESIS, Delimiter.BRACKET)


def _space_before(seq: Sequence[Token], idx: int) -> bool:
    prev, tok = seq[idx - 1], seq[idx]
    nxt = seq[idx + 1] if idx + 1 < len(seq) else None

    if isinstance(prev, Punct):
        if prev.joint or prev.char == ".":
            return False
        # second colon of `::`
        if prev.char == ":" and idx >= 2 and is_punct(seq[idx - 2], ":") and seq[idx - 2].joint:
            return False

    if isinstance(tok, Punct):
        if tok.char in NO_SPACE_BEFORE:
            return False
        if tok.char == ":":
            # `x: T` and the path separator in `a::b`
            if not tok.joint or (isinstance(prev, Ident) and is_punct(nxt, ":")):
                return False
        if tok.char == "!" and isinstance(prev, Ident) and isinstance(nxt, Group):
            return False

    if isinstance(tok, Group) and tok.delimiter in CALL_DELIMS:
        if isinstance(prev, Ident) or is_punct(prev, "!"):
            return False
        if isinstance(prev, Group) and prev.delimiter in CALL_DELIMS:
            return False

    return True


def _text(tok: Token) -> str:
    if isinstance(tok, (Ident, Literal)):
        return tok.text
    return tok.char


def _open(group: Group) -> str:
    if group.delimiter is Delimiter.BRACE and group.children:
        return "{ "
    return group.delimiter.open


def _close(group: Group) -> str:
    if group.delimiter is Delimiter.BRACE and group.children:
        return " }"
    return group.delimiter.close


def to_source(stream: Sequence[Token]) -> str:
    """Render a token stream as text (iterative, any nesting depth)."""
    out: List[str] = []
    stack: List[Tuple[Sequence[Token], int, Optional[Group]]] = [(stream, 0, None)]

    while stack:
        seq, idx, group = stack.pop()

        if idx >= len(seq):
            if group is not None:
                out.append(_close(group))
            continue

        tok = seq[idx]
        if idx and _space_before(seq, idx):
            out.append(" ")

        stack.append((seq, idx + 1, group))

        if isinstance(tok, Group):
            out.append(_open(tok))
            stack.append((tok.children, 0, tok))
        else:
            out.append(_text(tok))

    return "".join(out)
