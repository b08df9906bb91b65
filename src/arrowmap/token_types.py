"""
Token Types for the arrowmap front end

Shared between the lexer and the tree readers to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types produced by the flat lexer"""

    # Words
    IDENT = auto()
    LIFETIME = auto()  # 'a

    # Literals
    STRING = auto()
    RAW_STRING = auto()
    BYTE_STRING = auto()
    RAW_BYTE_STRING = auto()
    CHAR = auto()
    BYTE = auto()
    INTEGER = auto()
    FLOAT = auto()

    # Single-character punctuation (joint flag carried on the token)
    PUNCT = auto()

    # Delimiters
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Special
    EOF = auto()


OPEN_DELIMS = frozenset({TT.LPAR, TT.LSQB, TT.LBRACE})
CLOSE_DELIMS = frozenset({TT.RPAR, TT.RSQB, TT.RBRACE})

# Opening delimiter -> matching closer.
CLOSER_OF = {
    TT.LPAR: TT.RPAR,
    TT.LSQB: TT.RSQB,
    TT.LBRACE: TT.RBRACE,
}


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    start_pos: int = 0
    end_pos: int = 0
    joint: bool = False

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
