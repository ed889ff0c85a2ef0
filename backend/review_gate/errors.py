"""Error taxonomy for the review gate.

Every failure the pipeline reports is a single ``ReviewGateError`` tagged
with an ``ErrorKind``.  Callers branch on ``error.kind`` rather than on
exception subclasses.

Usage:
    from review_gate.errors import ErrorKind, ReviewGateError

    raise ReviewGateError(ErrorKind.INDEXING, "Inconsistent embedding dimensions")
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced by the pipeline."""
    CONFIGURATION = "configuration"  # missing/unreadable/malformed config or index
    INDEXING = "indexing"            # index-wide consistency check failed, build aborted
    EMBEDDING = "embedding"          # a single embedding call failed
    RETRIEVAL = "retrieval"          # invalid query or dimension mismatch
    REVIEW_CALL = "review_call"      # a generation call failed
    CHANGE_SOURCE = "change_source"  # the staged diff could not be read


class ReviewGateError(Exception):
    """A tagged pipeline failure.

    Attributes:
        kind: Failure category.
        message: Short operator-facing diagnostic.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ReviewGateError({self.kind.value!r}, {self.message!r})"
