"""Exception taxonomy for statement processing.

Terminal errors (``UnsupportedFileType``, ``NoTransactionsFound``,
``ProcessingTimeout``) reach the caller and mark a statement ``failed``.
``ExternalClassifierError``/``ExternalClassifierTimeout`` never leave the
classification orchestrator, and ``MalformedRecord`` never leaves the
extraction/normalization layer: both are recovered locally.
"""

from __future__ import annotations


class StatementAnalysisError(Exception):
    """Base class for all errors raised by ``statement_analysis``."""


class UnsupportedFileType(StatementAnalysisError):
    def __init__(self, file_type: str) -> None:
        self.file_type = file_type
        super().__init__(
            f"Unsupported file type: {file_type!r}. Expected one of: pdf, csv, xlsx, xls"
        )


class NoTransactionsFound(StatementAnalysisError):
    def __init__(self, detail: str | None = None) -> None:
        msg = "No transactions found in the statement"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ProcessingTimeout(StatementAnalysisError):
    def __init__(self, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(f"Statement processing timed out after {timeout_s:g}s")


class MalformedRecord(StatementAnalysisError):
    """A single raw record could not be turned into a transaction."""

    def __init__(self, reason: str, *, source: str | None = None) -> None:
        self.reason = reason
        self.source = source
        super().__init__(reason if source is None else f"{reason}: {source!r}")


class ExternalClassifierError(StatementAnalysisError):
    """The external classifier failed or returned an unusable answer."""


class ExternalClassifierTimeout(ExternalClassifierError):
    def __init__(self, operation: str, timeout_s: float) -> None:
        self.operation = operation
        self.timeout_s = timeout_s
        super().__init__(f"{operation} timed out after {timeout_s:g}s")


__all__ = [
    "StatementAnalysisError",
    "UnsupportedFileType",
    "NoTransactionsFound",
    "ProcessingTimeout",
    "MalformedRecord",
    "ExternalClassifierError",
    "ExternalClassifierTimeout",
]
