"""Document-text (PDF) extractor.

Text comes from ``pdfplumber``; the dialect detector picks the line grammar.
When a dedicated grammar finds nothing (a layout revision the grammar does not
know yet), the generic cascade gets a pass over the same lines before the
document is given up on.
"""

from __future__ import annotations

import io

import pdfplumber

from ..dialects import GENERIC, detect_dialect
from ..logging_setup import get_logger
from .base import ExtractionResult
from .grammars import generic, grammar_for, split_lines

_logger = get_logger("statement_analysis.extractors.document")


def extract_pdf_text(data: bytes) -> str:
    """Concatenated page text, or ``""`` when the file cannot be read as a PDF."""

    pages: list[str] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                text = page.extract_text()
                if text and text.strip():
                    pages.append(text)
    except Exception as e:  # noqa: BLE001 - pdfminer raises many unrelated types
        _logger.warning("extract_pdf:unreadable error=%s", e.__class__.__name__)
        return ""
    if not pages:
        _logger.warning("extract_pdf:no_text (scanned document without a text layer?)")
    return "\n".join(pages)


def extract_from_text(text: str, dialect: str | None = None) -> ExtractionResult:
    """Run the grammar for ``dialect`` (detected from ``text`` when omitted)."""

    tag = dialect or detect_dialect(text)
    lines = split_lines(text)
    parsed = grammar_for(tag)(lines, tag)
    _logger.info(
        "extract_pdf:grammar dialect=%s lines=%d records=%d dropped=%d",
        tag,
        len(lines),
        len(parsed.records),
        parsed.dropped,
    )
    if not parsed.records and tag != GENERIC:
        parsed = generic.parse_lines(lines, tag)
        _logger.info(
            "extract_pdf:generic_retry dialect=%s records=%d dropped=%d",
            tag,
            len(parsed.records),
            parsed.dropped,
        )
    return ExtractionResult(
        records=tuple(parsed.records), dialect=tag, dropped=parsed.dropped, text=text
    )


class DocumentExtractor:
    family = "document"

    def extract(self, data: bytes, dialect: str | None = None) -> ExtractionResult:
        text = extract_pdf_text(data)
        if not text:
            return ExtractionResult(records=(), dialect=dialect or GENERIC, text="")
        return extract_from_text(text, dialect)
