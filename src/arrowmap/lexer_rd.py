"""
Lexer for arrowmap - hand-written, single pass

Tokenizes Rust-flavoured source into a flat stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column, offsets)
- One token per punctuation character, with a joint flag (`=>` is `=` joint, `>`)
- String literal handling (raw, byte, raw-byte, char, byte char)
- Lifetimes versus char literals
- Nested block comments
"""

from typing import List, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

PUNCT_CHARS = frozenset("~!@#$%^&*-=+|;:,.<>/?")

DELIMITERS = {
    '(': TT.LPAR,
    ')': TT.RPAR,
    '[': TT.LSQB,
    ']': TT.RSQB,
    '{': TT.LBRACE,
    '}': TT.RBRACE,
}

FLOAT_SUFFIXES = ('f32', 'f64')


class LexError(Exception):
    """Lexical analysis error with position info"""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            super().__init__(f"{message} at line {line}, col {column}")
        else:
            super().__init__(message)


class Lexer:
    """
    arrowmap lexer.

    Whitespace and comments are dropped; every other character belongs to
    exactly one token. Token values keep their source text verbatim so the
    renderer can print them back unchanged.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.tok_pos = 0
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (newlines included)
        if self.skip_whitespace():
            return

        self.mark()
        ch = self.peek()

        # Comments
        if ch == '/' and self.peek(1) == '/':
            self.skip_line_comment()
            return
        if ch == '/' and self.peek(1) == '*':
            self.skip_block_comment()
            return

        # Delimiters
        if ch in DELIMITERS:
            self.advance()
            self.emit(DELIMITERS[ch], ch)
            return

        # Prefixed literals: r"..", r#".."#, b"..", br"..", b'.'
        if ch in ('r', 'b') and self.scan_prefixed_literal():
            return

        # String literals
        if ch == '"':
            self.scan_string(TT.STRING)
            return

        # Char literals and lifetimes
        if ch == "'":
            self.scan_quote()
            return

        # Numbers
        if ch.isdigit():
            self.scan_number()
            return

        # Identifiers and keywords
        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return

        # Punctuation
        if ch in PUNCT_CHARS:
            self.advance()
            self.emit(TT.PUNCT, ch, joint=self.peek() in PUNCT_CHARS)
            return

        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_prefixed_literal(self) -> bool:
        """Scan raw/byte string prefixes. Returns False when the 'r'/'b' starts an identifier."""
        if self.peek() == 'b':
            if self.peek(1) == '"':
                self.advance()
                self.scan_string(TT.BYTE_STRING)
                return True
            if self.peek(1) == "'":
                self.advance()
                self.scan_char(TT.BYTE)
                return True
            if self.peek(1) == 'r' and self.peek(2) in ('"', '#'):
                if self.raw_string_ahead(2):
                    self.advance(2)
                    self.scan_raw_string(TT.RAW_BYTE_STRING)
                    return True
            return False

        # 'r'
        if self.peek(1) in ('"', '#') and self.raw_string_ahead(1):
            self.advance()
            self.scan_raw_string(TT.RAW_STRING)
            return True
        return False

    def raw_string_ahead(self, offset: int) -> bool:
        """True if hashes (possibly none) followed by a quote start at offset."""
        while self.peek(offset) == '#':
            offset += 1
        return self.peek(offset) == '"'

    def scan_string(self, token_type: TT):
        """Scan string literal: "..." (escapes kept as written)"""
        self.advance()  # opening quote

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\\':
                self.advance(2)
            else:
                self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", self.tok_line, self.tok_column)

        self.advance()  # closing quote
        self.scan_suffix()
        self.emit(token_type, self.text())

    def scan_raw_string(self, token_type: TT):
        """Scan raw string body: #*"..."#* with matching hash count"""
        hashes = 0
        while self.peek() == '#':
            hashes += 1
            self.advance()
        self.advance()  # opening quote

        closer = '"' + '#' * hashes
        end = self.source.find(closer, self.pos)
        if end < 0:
            raise LexError("Unterminated raw string", self.tok_line, self.tok_column)

        self.advance(end + len(closer) - self.pos)
        self.scan_suffix()
        self.emit(token_type, self.text())

    def scan_quote(self):
        """Disambiguate a char literal from a lifetime"""
        nxt = self.peek(1)
        is_lifetime = (
            (nxt.isalpha() or nxt == '_')
            and self.peek(2) != "'"
        )

        if not is_lifetime:
            self.scan_char(TT.CHAR)
            return

        self.advance()  # '
        while self.peek().isalnum() or self.peek() == '_':
            self.advance()
        self.emit(TT.LIFETIME, self.text())

    def scan_char(self, token_type: TT):
        """Scan char literal: 'x', '\\n', '\\u{1F600}'"""
        self.advance()  # opening quote

        if self.peek() == '\\':
            self.advance(2)
            while self.pos < len(self.source) and self.peek() not in ("'", '\n'):
                self.advance()
        elif self.pos < len(self.source) and self.peek() != '\n':
            self.advance()

        if self.peek() != "'":
            raise LexError("Unterminated char literal", self.tok_line, self.tok_column)

        self.advance()  # closing quote
        self.scan_suffix()
        self.emit(token_type, self.text())

    def scan_number(self):
        """Scan number literal (with optional type suffix)"""
        is_float = False

        if self.peek() == '0' and self.peek(1) in ('x', 'o', 'b'):
            self.advance(2)
            while self.peek().isalnum() or self.peek() == '_':
                self.advance()
            self.emit(TT.INTEGER, self.text())
            return

        self.scan_digits()

        # Decimal part; `1..2` and `1.foo()` are not floats
        if self.peek() == '.' and self.peek(1).isdigit():
            is_float = True
            self.advance()
            self.scan_digits()

        # Scientific notation
        if self.peek() in ('e', 'E'):
            offset = 1
            if self.peek(offset) in ('+', '-'):
                offset += 1
            if self.peek(offset).isdigit():
                is_float = True
                self.advance(offset)
                self.scan_digits()

        suffix_start = self.pos
        self.scan_suffix()
        if self.source[suffix_start:self.pos] in FLOAT_SUFFIXES:
            is_float = True

        self.emit(TT.FLOAT if is_float else TT.INTEGER, self.text())

    def scan_digits(self):
        while self.peek().isdigit() or self.peek() == '_':
            self.advance()

    def scan_suffix(self):
        """Consume an identifier-shaped literal suffix (`u8`, `f32`, `_usize`)"""
        if self.peek().isalpha() or self.peek() == '_':
            while self.peek().isalnum() or self.peek() == '_':
                self.advance()

    def scan_identifier(self):
        """Scan identifier or raw identifier (r#type)"""
        if self.peek() == 'r' and self.peek(1) == '#':
            self.advance(2)

        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        self.emit(TT.IDENT, self.text())

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        start = self.pos
        for _ in range(n):
            if self.pos >= len(self.source):
                break
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1
        return self.source[start:self.pos]

    def skip_whitespace(self) -> bool:
        """Skip whitespace, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\n', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_line_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def skip_block_comment(self):
        """Skip /* ... */ honouring nesting"""
        depth = 0
        while self.pos < len(self.source):
            if self.peek() == '/' and self.peek(1) == '*':
                depth += 1
                self.advance(2)
            elif self.peek() == '*' and self.peek(1) == '/':
                depth -= 1
                self.advance(2)
                if depth == 0:
                    return
            else:
                self.advance()

        raise LexError("Unterminated block comment", self.tok_line, self.tok_column)

    def mark(self):
        """Remember where the current token starts"""
        self.tok_pos = self.pos
        self.tok_line = self.line
        self.tok_column = self.column

    def text(self) -> str:
        return self.source[self.tok_pos:self.pos]

    def emit(self, token_type: TT, value, joint: bool = False):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            start_pos=self.tok_pos,
            end_pos=self.pos,
            joint=joint,
        )
        self.tokens.append(tok)


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()


if __name__ == '__main__':
    test_source = '''
let agent = Agent::new("example")
    .additional_params({"beta" => "true"})
    .metadata({"key" => "val", "foo" => "bar"});
'''

    for tok in tokenize(test_source):
        print(tok)
