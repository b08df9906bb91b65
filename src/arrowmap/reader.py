"""
Token tree reader

Folds the lexer's flat token list into the nested token tree. Delimiters are
matched with an explicit stack, so arbitrarily deep nesting never touches the
Python recursion limit.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .lexer_rd import LexError, tokenize
from .token_types import CLOSE_DELIMS, CLOSER_OF, OPEN_DELIMS, TT, Tok
from .tree import Delimiter, Group, Ident, Literal, LiteralKind, Punct, Span, Token, TokenStream

DELIMITER_OF = {
    TT.LPAR: Delimiter.PARENTHESIS,
    TT.LSQB: Delimiter.BRACKET,
    TT.LBRACE: Delimiter.BRACE,
}

LITERAL_KIND_OF = {
    TT.STRING: LiteralKind.STR,
    TT.RAW_STRING: LiteralKind.RAW_STR,
    TT.BYTE_STRING: LiteralKind.BYTE_STR,
    TT.RAW_BYTE_STRING: LiteralKind.RAW_BYTE_STR,
    TT.CHAR: LiteralKind.CHAR,
    TT.BYTE: LiteralKind.BYTE,
    TT.INTEGER: LiteralKind.INTEGER,
    TT.FLOAT: LiteralKind.FLOAT,
}


def tok_span(tok: Tok) -> Span:
    """Span for a flat token. Lexer tokens never cross a newline except strings."""
    text = str(tok.value) if tok.value is not None else ""
    newlines = text.count("\n")
    if newlines:
        end_line = tok.line + newlines
        end_column = len(text) - text.rfind("\n")
    else:
        end_line = tok.line
        end_column = tok.column + (tok.end_pos - tok.start_pos)
    return Span(tok.start_pos, tok.end_pos, tok.line, tok.column, end_line, end_column)


def leaf_tokens(tok: Tok) -> Tuple[Token, ...]:
    """Convert one non-delimiter flat token into tree leaves."""
    span = tok_span(tok)

    if tok.type is TT.IDENT:
        return (Ident(tok.value, span),)

    if tok.type is TT.PUNCT:
        return (Punct(tok.value, tok.joint, span),)

    if tok.type is TT.LIFETIME:
        # 'a is a joint quote followed by the name
        quote = Span(span.start, span.start + 1, span.line, span.column, span.line, span.column + 1)
        name = Span(span.start + 1, span.end, span.line, span.column + 1, span.end_line, span.end_column)
        return (Punct("'", True, quote), Ident(tok.value[1:], name))

    kind = LITERAL_KIND_OF.get(tok.type)
    if kind is None:
        raise LexError(f"Unexpected token {tok.type.name}", tok.line, tok.column)
    return (Literal(kind, tok.value, span),)


class _Frame:
    """An open delimiter waiting for its closer."""

    __slots__ = ('opener', 'children')

    def __init__(self, opener: Optional[Tok]):
        self.opener = opener
        self.children: List[Token] = []


def read_tokens(tokens: List[Tok]) -> TokenStream:
    """Build the token tree from a flat token list (EOF optional)."""
    stack: List[_Frame] = [_Frame(None)]

    for tok in tokens:
        if tok.type is TT.EOF:
            break

        if tok.type in OPEN_DELIMS:
            stack.append(_Frame(tok))
            continue

        if tok.type in CLOSE_DELIMS:
            frame = stack[-1]
            if frame.opener is None:
                raise LexError(f"Unmatched closing delimiter '{tok.value}'", tok.line, tok.column)
            if CLOSER_OF[frame.opener.type] is not tok.type:
                raise LexError(
                    f"Mismatched closing delimiter '{tok.value}' for '{frame.opener.value}' "
                    f"opened at line {frame.opener.line}, col {frame.opener.column}",
                    tok.line,
                    tok.column,
                )
            stack.pop()
            group = Group(
                DELIMITER_OF[frame.opener.type],
                tuple(frame.children),
                tok_span(frame.opener),
                tok_span(tok),
            )
            stack[-1].children.append(group)
            continue

        stack[-1].children.extend(leaf_tokens(tok))

    if len(stack) > 1:
        opener = stack[-1].opener
        assert opener is not None
        raise LexError(f"Unclosed delimiter '{opener.value}'", opener.line, opener.column)

    return tuple(stack[0].children)


def parse_source(source: str) -> TokenStream:
    """Lex and read source text into a token stream."""
    return read_tokens(tokenize(source))
