"""Delimited-text (CSV) extractor.

Bank CSV exports often open with a preamble (account holder, period, opening
balance) above the real column header. Like the spreadsheet extractor, the
header is located by scoring the first rows against the field vocabulary; when
no row scores as a header, the first non-empty row is used.
"""

from __future__ import annotations

import csv
import io

from ..dialects import GENERIC
from ..logging_setup import get_logger
from ..models import RawTransactionRecord
from .base import ExtractionResult
from .fields import find_header_row, map_row, resolve_columns

_logger = get_logger("statement_analysis.extractors.delimited")

_DELIMITERS = ",;\t|"


def decode_text(data: bytes) -> str:
    """UTF-8 (BOM tolerant) with a Latin-1 fallback, which never fails."""

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _sniff_dialect(sample: str) -> type[csv.Dialect] | csv.Dialect:
    try:
        return csv.Sniffer().sniff(sample, delimiters=_DELIMITERS)
    except csv.Error:
        return csv.excel


def read_rows(text: str) -> list[list[str]]:
    sample = "\n".join(text.splitlines()[:20])
    reader = csv.reader(io.StringIO(text, newline=""), _sniff_dialect(sample))
    rows: list[list[str]] = []
    try:
        for row in reader:
            rows.append(row)
    except csv.Error as e:
        # Keep what was read before the broken quote/field.
        _logger.warning("extract_csv:read_stopped rows=%d error=%s", len(rows), e)
    return rows


class DelimitedExtractor:
    family = "delimited"

    def extract(self, data: bytes, dialect: str | None = None) -> ExtractionResult:
        rows = [r for r in read_rows(decode_text(data)) if any(c.strip() for c in r)]
        if not rows:
            _logger.info("extract_csv:empty")
            return ExtractionResult(records=(), dialect=dialect or GENERIC)

        header_idx = find_header_row(rows)
        if header_idx is None:
            header_idx = 0
        headers = [h.strip() for h in rows[header_idx]]
        columns = resolve_columns(headers)
        _logger.info(
            "extract_csv:header row=%d columns=%s",
            header_idx,
            ",".join(f"{k}={v}" for k, v in columns.columns.items()),
        )

        records: list[RawTransactionRecord] = []
        dropped = 0
        for line_no, cells in enumerate(rows[header_idx + 1 :], start=header_idx + 2):
            row = {headers[i]: cells[i] for i in range(min(len(headers), len(cells)))}
            record = map_row(row, columns, dialect=dialect or GENERIC)
            if record is None:
                dropped += 1
                _logger.debug("extract_csv:dropped line=%d", line_no)
                continue
            records.append(record)

        _logger.info("extract_csv:done records=%d dropped=%d", len(records), dropped)
        return ExtractionResult(records=tuple(records), dialect=dialect or GENERIC, dropped=dropped)
