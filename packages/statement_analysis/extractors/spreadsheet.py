"""Spreadsheet (XLSX/XLS) extractor backed by ``openpyxl``.

Only the first worksheet is read. Title and account-metadata rows above the
column header are discarded; the header is the first row within the first 10
that has at least three non-empty cells, 60% or more of them field names.

Date cells arrive as ``datetime`` when the workbook formats them as dates; a
bare number in the date column is a spreadsheet serial and is converted through
the workbook epoch, never parsed as text.

Legacy binary ``.xls`` workbooks cannot be opened by ``openpyxl``; they are
logged and yield no records.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Sequence
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..dialects import GENERIC
from ..logging_setup import get_logger
from ..models import RawTransactionRecord
from .base import ExtractionResult
from .fields import find_header_row, map_row, resolve_columns

_logger = get_logger("statement_analysis.extractors.spreadsheet")


def read_sheet_rows(data: bytes) -> list[tuple[Any, ...]] | None:
    """All rows of the first worksheet as value tuples; ``None`` if unreadable."""

    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        _logger.warning("extract_xlsx:unreadable error=%s", e.__class__.__name__)
        return None
    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            return []
        return [tuple(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _header_names(cells: Sequence[Any]) -> list[str]:
    names: list[str] = []
    for i, c in enumerate(cells):
        text = str(c).strip() if c is not None else ""
        names.append(text or f"column_{i + 1}")
    return names


def _is_blank(row: Sequence[Any]) -> bool:
    return all(c is None or (isinstance(c, str) and not c.strip()) for c in row)


class SpreadsheetExtractor:
    family = "spreadsheet"

    def extract(self, data: bytes, dialect: str | None = None) -> ExtractionResult:
        tag = dialect or GENERIC
        rows = read_sheet_rows(data)
        if not rows:
            return ExtractionResult(records=(), dialect=tag)

        header_idx = find_header_row(rows)
        if header_idx is None:
            _logger.warning("extract_xlsx:no_header scanned=%d", min(len(rows), 10))
            return ExtractionResult(records=(), dialect=tag, dropped=len(rows))

        headers = _header_names(rows[header_idx])
        columns = resolve_columns(headers)
        _logger.info(
            "extract_xlsx:header row=%d columns=%s",
            header_idx + 1,
            ",".join(f"{k}={v}" for k, v in columns.columns.items()),
        )

        records: list[RawTransactionRecord] = []
        dropped = 0
        for row_no, cells in enumerate(rows[header_idx + 1 :], start=header_idx + 2):
            if _is_blank(cells):
                continue
            row = {headers[i]: cells[i] for i in range(min(len(headers), len(cells)))}
            record = map_row(row, columns, dialect=tag)
            if record is None:
                dropped += 1
                _logger.debug("extract_xlsx:dropped row=%d", row_no)
                continue
            records.append(record)

        _logger.info("extract_xlsx:done records=%d dropped=%d", len(records), dropped)
        return ExtractionResult(records=tuple(records), dialect=tag, dropped=dropped)
