"""Column vocabulary shared by the delimited-text and spreadsheet extractors.

Both families see rows of cells under a header row. This module owns:

- the prioritized header synonyms per field (first synonym that matches wins),
- header-row detection (a row where at least 60% of the non-empty cells look
  like field names),
- :func:`map_row`, a pure ``row -> RawTransactionRecord | None`` mapping.

Rows that do not yield a parseable date, a non-empty description and a
positive amount map to ``None``; statements routinely contain totals and
section headings between transactions.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..models import RawTransactionRecord, TransactionType
from ..normalize import (
    amount_direction,
    collapse_whitespace,
    excel_serial_to_date,
    format_amount,
    parse_amount,
    parse_date,
)

FIELD_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": (
        "transaction date",
        "date",
        "trans date",
        "txn date",
        "value date",
        "posting date",
        "booking date",
    ),
    "description": (
        "narration",
        "description",
        "memo",
        "details",
        "transaction description",
        "transaction details",
        "remarks",
        "particulars",
    ),
    "type": ("type", "transaction type", "trans type", "dr/cr", "cr/dr"),
    "debit": ("debit", "dr", "withdrawal", "withdrawals", "debit amount", "money out"),
    "credit": ("credit", "cr", "deposit", "deposits", "credit amount", "money in"),
    "amount": ("amount", "value", "transaction amount"),
    "balance": ("balance", "running balance", "account balance", "closing balance"),
    "reference": (
        "reference",
        "ref",
        "transaction id",
        "trans id",
        "reference number",
        "ref no",
    ),
}

HEADER_TOKENS: tuple[str, ...] = (
    "date",
    "transaction date",
    "trans date",
    "value date",
    "description",
    "narration",
    "memo",
    "details",
    "remarks",
    "amount",
    "debit",
    "credit",
    "balance",
    "type",
    "reference",
    "ref",
    "withdrawal",
    "deposit",
)

HEADER_SCAN_ROWS = 10
HEADER_MIN_CELLS = 3
HEADER_MIN_SHARE = 0.6

_WORD_SPLIT_RE = re.compile(r"[_\.\-]+")
_TYPE_DEBIT_RE = re.compile(r"\b(?:debit|dr|withdrawal|dbt)\b", re.IGNORECASE)
_TYPE_CREDIT_RE = re.compile(r"\b(?:credit|cr|deposit|cdt)\b", re.IGNORECASE)


def header_key(value: Any) -> str:
    """Lowercase a header cell and fold ``_``/``.``/``-`` into spaces."""

    if value is None:
        return ""
    return collapse_whitespace(_WORD_SPLIT_RE.sub(" ", str(value))).lower()


def _contains_word(haystack: str, needle: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(needle)}(?![a-z0-9])", haystack) is not None


# ---------------------------------------------------------------------------
# Header detection
# ---------------------------------------------------------------------------


def looks_like_header(cells: Sequence[Any]) -> bool:
    keys = [header_key(c) for c in cells]
    keys = [k for k in keys if k]
    if len(keys) < HEADER_MIN_CELLS:
        return False
    hits = sum(1 for k in keys if any(_contains_word(k, t) for t in HEADER_TOKENS))
    return hits / len(keys) >= HEADER_MIN_SHARE


def find_header_row(rows: Sequence[Sequence[Any]], *, scan: int = HEADER_SCAN_ROWS) -> int | None:
    """Index of the first header-looking row within the first ``scan`` rows."""

    for idx, cells in enumerate(rows[:scan]):
        if looks_like_header(cells):
            return idx
    return None


# ---------------------------------------------------------------------------
# Column resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Field name -> header name, for the fields present in a file."""

    columns: Mapping[str, str]

    def get(self, field: str) -> str | None:
        return self.columns.get(field)

    def has_amount(self) -> bool:
        return any(f in self.columns for f in ("amount", "debit", "credit"))


def resolve_columns(headers: Sequence[Any]) -> ColumnMap:
    """Assign each field to one header.

    Exact (case-insensitive) matches are resolved for every field first, then
    whole-word containment for the fields still missing. A header is claimed
    by at most one field, and only the date field may claim a header that
    mentions "date" (so ``Value Date`` never becomes the amount column).
    """

    originals = [str(h) for h in headers if h is not None and str(h).strip()]
    keyed = [(header_key(h), h) for h in originals]
    claimed: set[str] = set()
    resolved: dict[str, str] = {}

    for field, synonyms in FIELD_SYNONYMS.items():
        for syn in synonyms:
            hit = next((orig for key, orig in keyed if key == syn and orig not in claimed), None)
            if hit is not None:
                resolved[field] = hit
                claimed.add(hit)
                break

    for field, synonyms in FIELD_SYNONYMS.items():
        if field in resolved:
            continue
        for syn in synonyms:
            hit = next(
                (
                    orig
                    for key, orig in keyed
                    if orig not in claimed
                    and _contains_word(key, syn)
                    and (field == "date" or "date" not in key)
                ),
                None,
            )
            if hit is not None:
                resolved[field] = hit
                claimed.add(hit)
                break

    return ColumnMap(columns=resolved)


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return collapse_whitespace(str(value))


def _date_text(value: Any) -> str | None:
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        converted = excel_serial_to_date(value)
        return converted.isoformat() if converted else None
    text = _cell_text(value)
    return text or None


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:f}"
    return str(value)


def type_from_text(value: Any) -> TransactionType | None:
    text = _cell_text(value)
    if not text:
        return None
    if _TYPE_DEBIT_RE.search(text):
        return TransactionType.DEBIT
    if _TYPE_CREDIT_RE.search(text):
        return TransactionType.CREDIT
    return None


def _amount_and_type(
    row: Mapping[str, Any], columns: ColumnMap
) -> tuple[Decimal, TransactionType] | None:
    debit_col, credit_col = columns.get("debit"), columns.get("credit")
    debit = parse_amount(row.get(debit_col)) if debit_col else Decimal(0)
    credit = parse_amount(row.get(credit_col)) if credit_col else Decimal(0)
    if debit > 0 and credit == 0:
        return debit, TransactionType.DEBIT
    if credit > 0 and debit == 0:
        return credit, TransactionType.CREDIT

    amount_col = columns.get("amount")
    if amount_col is None:
        return None
    raw_amount = row.get(amount_col)
    amount = parse_amount(raw_amount)
    if amount <= 0:
        return None

    type_col = columns.get("type")
    direction = type_from_text(row.get(type_col)) if type_col else None
    if direction is None:
        direction = amount_direction(raw_amount)
    # A bare unsigned amount in a single amount column reads as money in.
    return amount, direction or TransactionType.CREDIT


def map_row(
    row: Mapping[str, Any], columns: ColumnMap, *, dialect: str = "generic"
) -> RawTransactionRecord | None:
    """Map one header-keyed row to a raw record, or ``None`` to drop it."""

    date_col = columns.get("date")
    desc_col = columns.get("description")
    if date_col is None or desc_col is None:
        return None

    date_text = _date_text(row.get(date_col))
    if not date_text or parse_date(date_text) is None:
        return None

    description = _cell_text(row.get(desc_col))
    if not description:
        return None

    resolved = _amount_and_type(row, columns)
    if resolved is None:
        return None
    amount, direction = resolved

    balance_col, ref_col = columns.get("balance"), columns.get("reference")
    balance = _cell_text(row.get(balance_col)) if balance_col else ""
    reference = _cell_text(row.get(ref_col)) if ref_col else ""

    return RawTransactionRecord(
        date=date_text,
        description=description,
        amount=format_amount(amount),
        type=direction,
        balance=balance or None,
        reference=reference or None,
        dialect=dialect,
        raw={str(k): _jsonable(v) for k, v in row.items() if k is not None},
    )


__all__ = [
    "FIELD_SYNONYMS",
    "HEADER_TOKENS",
    "ColumnMap",
    "header_key",
    "looks_like_header",
    "find_header_row",
    "resolve_columns",
    "type_from_text",
    "map_row",
]
