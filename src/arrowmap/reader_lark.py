"""
Grammar-driven token tree reader built on Lark.

An alternative to the hand-written lexer + reader pair. Both front ends feed
the same token model; tests keep them in agreement.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Transformer, Tree, UnexpectedInput
from lark import Token as LarkToken

from .lexer_rd import LexError, PUNCT_CHARS
from .tree import Delimiter, Group, Ident, Literal, LiteralKind, Punct, Span, Token, TokenStream

GRAMMAR_PATH = Path(__file__).resolve().with_name("token_tree.lark")


def _read_grammar(grammar_path: Optional[str] = None) -> str:
    if grammar_path:
        p = Path(grammar_path)
        if p.exists():
            return p.read_text(encoding="utf-8")

    if GRAMMAR_PATH.exists():
        return GRAMMAR_PATH.read_text(encoding="utf-8")

    raise FileNotFoundError("token_tree.lark not found. pass an explicit path")


def make_parser(grammar_path: Optional[str] = None) -> Lark:
    return Lark(
        _read_grammar(grammar_path),
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=False,
    )


def lark_span(tok: LarkToken) -> Span:
    return Span(tok.start_pos, tok.end_pos, tok.line, tok.column, tok.end_line, tok.end_column)


def _flatten(children: List[object]) -> List[Token]:
    out: List[Token] = []
    for child in children:
        if isinstance(child, tuple):
            out.extend(child)
        else:
            out.append(child)
    return out


class TreeBuilder(Transformer):
    """Turns the Lark parse tree into arrowmap tokens."""

    def __init__(self, source: str):
        super().__init__()
        self.source = source

    def transform(self, tree: Tree):
        """Bottom-up over `iter_subtrees`, so nesting depth never recurses."""
        built = {}

        for subtree in tree.iter_subtrees():
            children = [
                built.pop(id(child)) if isinstance(child, Tree) else self._leaf(child)
                for child in subtree.children
            ]
            built[id(subtree)] = getattr(self, subtree.data)(children)

        return built[id(tree)]

    def _leaf(self, tok: LarkToken):
        callback = getattr(self, tok.type, None)
        return tok if callback is None else callback(tok)

    # ---------- groups ----------

    def _group(self, delimiter: Delimiter, children: List[object]) -> Group:
        opener, *inner, closer = children
        return Group(delimiter, tuple(_flatten(inner)), lark_span(opener), lark_span(closer))

    def paren(self, children):
        return self._group(Delimiter.PARENTHESIS, children)

    def bracket(self, children):
        return self._group(Delimiter.BRACKET, children)

    def brace(self, children):
        return self._group(Delimiter.BRACE, children)

    def start(self, children) -> TokenStream:
        return tuple(_flatten(children))

    # ---------- leaves ----------

    def IDENT(self, tok):
        return Ident(str(tok), lark_span(tok))

    def LIFETIME(self, tok):
        span = lark_span(tok)
        quote = Span(span.start, span.start + 1, span.line, span.column, span.line, span.column + 1)
        name = Span(span.start + 1, span.end, span.line, span.column + 1, span.end_line, span.end_column)
        return (Punct("'", True, quote), Ident(str(tok)[1:], name))

    def PUNCT(self, tok):
        nxt = self.source[tok.end_pos:tok.end_pos + 1]
        return Punct(str(tok), nxt != "" and nxt in PUNCT_CHARS, lark_span(tok))

    def _literal(self, kind: LiteralKind, tok) -> Literal:
        return Literal(kind, str(tok), lark_span(tok))

    def STRING(self, tok):
        return self._literal(LiteralKind.STR, tok)

    def RAW_STRING(self, tok):
        return self._literal(LiteralKind.RAW_STR, tok)

    def BYTE_STRING(self, tok):
        return self._literal(LiteralKind.BYTE_STR, tok)

    def RAW_BYTE_STRING(self, tok):
        return self._literal(LiteralKind.RAW_BYTE_STR, tok)

    def CHAR(self, tok):
        return self._literal(LiteralKind.CHAR, tok)

    def BYTE(self, tok):
        return self._literal(LiteralKind.BYTE, tok)

    def INTEGER(self, tok):
        return self._literal(LiteralKind.INTEGER, tok)

    def FLOAT(self, tok):
        return self._literal(LiteralKind.FLOAT, tok)


def parse_source(source: str, grammar_path: Optional[str] = None) -> TokenStream:
    """Parse source text into a token stream with the Lark grammar."""
    parser = make_parser(grammar_path)

    try:
        tree = parser.parse(source)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        if line is not None and line < 0:
            line = column = None
        raise LexError(f"Unexpected input: {exc.__class__.__name__}", line, column) from exc

    return TreeBuilder(source).transform(tree)
