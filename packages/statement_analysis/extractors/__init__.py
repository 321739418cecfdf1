"""Format extractors: raw file bytes -> raw transaction records.

The file family is chosen from the declared extension or media type;
document-text files additionally pick a line grammar by dialect.
"""

from __future__ import annotations

from ..errors import UnsupportedFileType
from .base import ExtractionResult, Extractor
from .delimited import DelimitedExtractor
from .document import DocumentExtractor
from .spreadsheet import SpreadsheetExtractor

_FAMILIES: dict[str, str] = {
    "csv": "delimited",
    "text/csv": "delimited",
    "application/csv": "delimited",
    "xlsx": "spreadsheet",
    "xls": "spreadsheet",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "spreadsheet",
    "application/vnd.ms-excel": "spreadsheet",
    "pdf": "document",
    "application/pdf": "document",
}


def resolve_file_family(file_type: str) -> str:
    """Map an extension (``.csv``, ``PDF``) or media type to an extractor family."""

    key = (file_type or "").strip().lower()
    if ";" in key:
        key = key.split(";", 1)[0].strip()
    if "/" not in key:
        key = key.rsplit(".", 1)[-1]
    family = _FAMILIES.get(key)
    if family is None:
        raise UnsupportedFileType(file_type)
    return family


def extractor_for(file_type: str) -> Extractor:
    family = resolve_file_family(file_type)
    if family == "delimited":
        return DelimitedExtractor()
    if family == "spreadsheet":
        return SpreadsheetExtractor()
    return DocumentExtractor()


__all__ = [
    "ExtractionResult",
    "Extractor",
    "DelimitedExtractor",
    "SpreadsheetExtractor",
    "DocumentExtractor",
    "resolve_file_family",
    "extractor_for",
]
