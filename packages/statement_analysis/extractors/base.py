"""Common extractor contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..dialects import GENERIC
from ..models import RawTransactionRecord


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    records: tuple[RawTransactionRecord, ...]
    dialect: str = GENERIC
    dropped: int = 0
    # Full document text when the source was a document; used for bank detection.
    text: str | None = field(default=None, repr=False)


class Extractor(Protocol):
    family: str

    def extract(self, data: bytes, dialect: str | None = None) -> ExtractionResult:
        """Turn raw file bytes into raw records; never raise on a bad row."""
        ...
