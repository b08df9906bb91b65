"""Diagnostics for malformed arrow-map literals.

Detection errors are plain data (``Diagnostic``). They only become an
exception, ``RewriteError``, when a strict expansion asks for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .tree import Span


class ErrorKind(Enum):
    UNTERMINATED_PAIR_LIST = "unterminated pair list"
    EXPECTED_SEPARATOR = "expected separator after key"
    EXPECTED_VALUE = "expected value after separator"
    EXPECTED_KEY_LITERAL = "expected literal key"


@dataclass(frozen=True)
class Diagnostic:
    kind: ErrorKind
    message: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def __str__(self) -> str:
        return f"{self.message} at line {self.span.line}, col {self.span.column}"


def report(kind: ErrorKind, span: Span, detail: Optional[str] = None) -> Diagnostic:
    """Build the diagnostic for ``kind`` anchored at ``span``."""
    message = kind.value
    if detail:
        message = f"{message}: {detail}"
    return Diagnostic(kind, message, span)


class RewriteError(Exception):
    """Strict-mode failure carrying every diagnostic of one expansion."""

    def __init__(self, diagnostics: Sequence[Diagnostic]):
        if not diagnostics:
            raise ValueError("RewriteError requires at least one diagnostic")
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        first = self.diagnostics[0]
        self.line = first.line
        self.column = first.column
        extra = len(self.diagnostics) - 1
        suffix = f" (and {extra} more)" if extra else ""
        super().__init__(f"{first}{suffix}")


def format_diagnostic(diag: Diagnostic, source: Optional[str] = None, path: str = "<input>") -> str:
    """Render ``path:line:col: error: message`` plus the source line and a caret."""
    head = f"{path}:{diag.line}:{diag.column}: error: {diag.message}"
    if not source or diag.line < 1:
        return head

    lines = source.splitlines()
    if diag.line > len(lines):
        return head

    text = lines[diag.line - 1]
    width = 1
    if diag.span.end_line == diag.span.line and diag.span.end_column > diag.column:
        width = diag.span.end_column - diag.column

    marker = " " * (diag.column - 1) + "^" * width
    return f"{head}\n    {text}\n    {marker}"
