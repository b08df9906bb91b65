"""Token tree model shared by the readers, the detector and the emitter.

A token is one of four closed variants: ``Ident``, ``Literal``, ``Punct`` or
``Group``. Groups own their children; nothing in this module mutates a token
after construction, so rewritten streams never alias back into their input.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard


@dataclass(frozen=True)
class Span:
    """Opaque source position. Propagated and re-anchored, never matched on."""

    start: int = 0
    end: int = 0
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    @classmethod
    def call_site(cls) -> Span:
        return cls()

    @classmethod
    def join(cls, first: Span, last: Span) -> Span:
        """Span covering ``first`` through ``last``."""
        return cls(first.start, last.end, first.line, first.column, last.end_line, last.end_column)


class Delimiter(Enum):
    PARENTHESIS = "()"
    BRACE = "{}"
    BRACKET = "[]"
    NONE = ""

    @property
    def open(self) -> str:
        return self.value[:1]

    @property
    def close(self) -> str:
        return self.value[1:]


class LiteralKind(Enum):
    STR = "str"
    RAW_STR = "raw_str"
    BYTE_STR = "byte_str"
    RAW_BYTE_STR = "raw_byte_str"
    CHAR = "char"
    BYTE = "byte"
    INTEGER = "integer"
    FLOAT = "float"


# Literal kinds accepted as map keys; floats are not hashable keys.
KEY_LITERAL_KINDS = frozenset(kind for kind in LiteralKind if kind is not LiteralKind.FLOAT)


@dataclass(frozen=True)
class Ident:
    text: str
    span: Span = field(default_factory=Span.call_site, compare=False)

    def __repr__(self) -> str:
        return f"Ident({self.text!r})"


@dataclass(frozen=True)
class Literal:
    kind: LiteralKind
    text: str
    span: Span = field(default_factory=Span.call_site, compare=False)

    def __repr__(self) -> str:
        return f"Literal({self.kind.value}, {self.text!r})"


@dataclass(frozen=True)
class Punct:
    char: str
    joint: bool = False
    span: Span = field(default_factory=Span.call_site, compare=False)

    def __repr__(self) -> str:
        return f"Punct({self.char!r}{', joint' if self.joint else ''})"


@dataclass(frozen=True)
class Group:
    delimiter: Delimiter
    children: Tuple[Token, ...]
    span_open: Span = field(default_factory=Span.call_site, compare=False)
    span_close: Span = field(default_factory=Span.call_site, compare=False)

    @property
    def span(self) -> Span:
        return Span.join(self.span_open, self.span_close)

    def __repr__(self) -> str:
        return f"Group({self.delimiter.name}, {list(self.children)!r})"


Token: TypeAlias = Union[Ident, Literal, Punct, Group]
TokenStream: TypeAlias = Tuple[Token, ...]


# ---------- Inspection ----------

def is_brace_group(tok: Token) -> TypeGuard[Group]:
    return isinstance(tok, Group) and tok.delimiter is Delimiter.BRACE

def is_punct(tok: Token, char: Optional[str] = None) -> TypeGuard[Punct]:
    if not isinstance(tok, Punct):
        return False
    return char is None or tok.char == char

def is_ident(tok: Token, text: Optional[str] = None) -> TypeGuard[Ident]:
    if not isinstance(tok, Ident):
        return False
    return text is None or tok.text == text

def token_span(tok: Token) -> Span:
    """Span of a token; groups report the span of their opening delimiter."""
    if isinstance(tok, Group):
        return tok.span_open
    return tok.span

def group_children(group: Group) -> TokenStream:
    return group.children


# ---------- Construction ----------

def make_group(delimiter: Delimiter, children: Sequence[Token], anchor: Span) -> Group:
    """Build a group whose delimiters are both stamped with ``anchor``."""
    return Group(delimiter, tuple(children), anchor, anchor)

def with_children(group: Group, children: Sequence[Token]) -> Group:
    """Same delimiter and spans, new children."""
    return Group(group.delimiter, tuple(children), group.span_open, group.span_close)


# ---------- Traversal ----------

def walk(stream: Sequence[Token]) -> Iterator[Token]:
    """Pre-order walk using an explicit stack, so depth is bounded by memory only."""
    stack: List[Iterator[Token]] = [iter(stream)]

    while stack:
        tok = next(stack[-1], None)
        if tok is None:
            stack.pop()
            continue

        yield tok

        if isinstance(tok, Group):
            stack.append(iter(tok.children))

def count_groups(stream: Sequence[Token], delimiter: Optional[Delimiter] = None) -> int:
    return sum(
        1 for tok in walk(stream)
        if isinstance(tok, Group) and (delimiter is None or tok.delimiter is delimiter)
    )

def strip_spans(stream: Sequence[Token]) -> tuple:
    """Span-free structural key: equal keys mean identical tokens apart from spans.

    The key is flat (groups become ``open``/``close`` markers), so building and
    comparing it costs no recursion however deep the stream is.
    """
    out: List[tuple] = []
    stack: List[Iterator[Token]] = [iter(stream)]

    while stack:
        tok = next(stack[-1], None)
        if tok is None:
            stack.pop()
            if stack:
                out.append(("close",))
            continue

        if isinstance(tok, Ident):
            out.append(("ident", tok.text))
        elif isinstance(tok, Literal):
            out.append(("literal", tok.kind.value, tok.text))
        elif isinstance(tok, Punct):
            out.append(("punct", tok.char, tok.joint))
        else:
            out.append(("open", tok.delimiter.name))
            stack.append(iter(tok.children))

    return tuple(out)


def pretty(stream: Sequence[Token], indent: str = '  ') -> str:
    """Return pretty-printed tree representation."""
    lines: List[str] = []
    stack: List[Tuple[Token, int]] = [(tok, 0) for tok in reversed(stream)]

    while stack:
        tok, level = stack.pop()
        if not isinstance(tok, Group):
            lines.append(f'{indent * level}{tok!r}\n')
            continue
        lines.append(f'{indent * level}group {tok.delimiter.value or "none"}\n')
        stack.extend((child, level + 1) for child in reversed(tok.children))

    return ''.join(lines)
