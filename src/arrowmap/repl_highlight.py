"""prompt_toolkit lexer for live arrow-map highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as ArrowLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "lifetime": "italic ansiyellow",
    "identifier": "",
    "macro": "bold ansiyellow",
    "arrow": "bold ansired",
    "operator": "",
    "punctuation": "",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.STRING: "string",
    TT.RAW_STRING: "string",
    TT.BYTE_STRING: "string",
    TT.RAW_BYTE_STRING: "string",
    TT.CHAR: "string",
    TT.BYTE: "string",
    TT.INTEGER: "number",
    TT.FLOAT: "number",
    TT.LIFETIME: "lifetime",
    TT.IDENT: "identifier",
    TT.PUNCT: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
}

KEYWORDS = frozenset({
    "as", "async", "await", "break", "const", "continue", "else", "enum", "fn",
    "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut",
    "pub", "ref", "return", "self", "static", "struct", "trait", "type", "use",
    "where", "while", "true", "false",
})


def _token_group(tokens: List[Tok], idx: int) -> str:
    tok = tokens[idx]

    if tok.type is TT.IDENT:
        if tok.value in KEYWORDS:
            return "keyword"
        nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
        if nxt is not None and nxt.type is TT.PUNCT and nxt.value == "!":
            return "macro"

    if tok.type is TT.PUNCT:
        # `=>` halves
        nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
        prev = tokens[idx - 1] if idx else None
        if tok.value == "=" and tok.joint and nxt is not None and nxt.value == ">":
            return "arrow"
        if tok.value == ">" and prev is not None and prev.value == "=" and prev.joint:
            return "arrow"

    return _TT_GROUP.get(tok.type, "")


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = ArrowLexer(text).tokenize()
    except LexError:
        return [(GROUP_STYLE["error"], text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type is TT.EOF:
            continue

        # Unstyled gap (whitespace, comments) before token.
        if tok.start_pos > pos:
            result.append(("", text[pos:tok.start_pos]))

        style = GROUP_STYLE.get(_token_group(tokens, i), "")
        result.append((style, text[tok.start_pos:tok.end_pos]))
        pos = tok.end_pos

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class ArrowMapLexer(Lexer):
    """prompt_toolkit Lexer that highlights source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
