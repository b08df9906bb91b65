"""Rewrites `{"key" => value}` literals in token streams into hash-map constructor calls."""

from .detector import Candidate, Malformed, NotCandidate, WellFormed, classify
from .diagnostics import Diagnostic, ErrorKind, RewriteError, report
from .driver import RewriteResult, expand, expand_source, rewrite
from .emitter import emit

__all__ = [
    "Candidate",
    "Diagnostic",
    "ErrorKind",
    "Malformed",
    "NotCandidate",
    "RewriteError",
    "RewriteResult",
    "WellFormed",
    "classify",
    "emit",
    "expand",
    "expand_source",
    "report",
    "rewrite",
]
