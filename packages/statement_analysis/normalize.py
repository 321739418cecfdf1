"""Amount and date normalization shared by every extractor.

Contract
--------
- :func:`parse_amount` never raises and never returns a negative value. Text it
  cannot read becomes ``Decimal(0)``; the transaction normalizer drops records
  whose amount is not positive, so "unparseable" and "zero" both mean "skip".
- Direction is never read from the magnitude. :func:`amount_direction` reports
  what explicit markers (``+``/``-``, parentheses, ``DR``/``CR``) say, and the
  caller combines that with column placement or keywords.
- :func:`parse_date` tries an ordered list of explicit layouts and then a
  generic parse via ``dateutil``. It returns ``None`` instead of raising.

Locales that use a comma as the decimal separator are not supported: commas
are always thousands separators here.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel

from .models import TransactionType

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_CURRENCY_SYMBOLS_RE = re.compile(r"[₦$€£¥]")
_CURRENCY_CODES_RE = re.compile(r"\b(?:NGN|USD|EUR|GBP)\b", re.IGNORECASE)
_CREDIT_MARKER_RE = re.compile(r"(?:^|[\s\d.])(?:CR|CREDIT)\.?$|^(?:CR|CREDIT)\b", re.IGNORECASE)
_DEBIT_MARKER_RE = re.compile(r"(?:^|[\s\d.])(?:DR|DEBIT)\.?$|^(?:DR|DEBIT)\b", re.IGNORECASE)
_NON_NUMERIC_RE = re.compile(r"[^\d.]")

_ZERO = Decimal(0)


def parse_amount(raw: Any) -> Decimal:
    """Return the non-negative magnitude of ``raw``.

    Accepts strings such as ``"₦1,234.50"``, ``"-2,000.00 DR"``, ``"(15.00)"`` or
    ``"1.234.567"`` (all dots but the last are treated as thousands separators),
    and numeric cell values (``int``/``float``/``Decimal``).
    """

    if raw is None or isinstance(raw, bool):
        return _ZERO
    if isinstance(raw, Decimal):
        return abs(raw) if raw.is_finite() else _ZERO
    if isinstance(raw, (int, float)):
        try:
            d = Decimal(str(raw))
        except InvalidOperation:
            return _ZERO
        return abs(d) if d.is_finite() else _ZERO

    s = _CURRENCY_SYMBOLS_RE.sub("", str(raw))
    s = _CURRENCY_CODES_RE.sub("", s)
    s = _NON_NUMERIC_RE.sub("", s)
    if not any(ch.isdigit() for ch in s):
        return _ZERO
    if s.count(".") > 1:
        head, _, tail = s.rpartition(".")
        s = head.replace(".", "") + "." + tail
    try:
        d = Decimal(s)
    except InvalidOperation:
        return _ZERO
    return abs(d)


def format_amount(value: Decimal) -> str:
    """Plain decimal text (no exponent, no separators) that parses back to ``value``."""

    return f"{abs(value):f}"


def amount_direction(raw: Any) -> TransactionType | None:
    """Direction stated by explicit markers on an amount, or ``None``."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        return TransactionType.DEBIT if raw < 0 else None

    s = _CURRENCY_CODES_RE.sub("", _CURRENCY_SYMBOLS_RE.sub("", str(raw))).strip()
    if not s:
        return None
    if _DEBIT_MARKER_RE.search(s):
        return TransactionType.DEBIT
    if _CREDIT_MARKER_RE.search(s):
        return TransactionType.CREDIT
    if s.startswith("-") or (s.startswith("(") and s.endswith(")")):
        return TransactionType.DEBIT
    if s.startswith("+"):
        return TransactionType.CREDIT
    return None


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# A match must end the string or be followed by a time/separator.
_TAIL = r"(?=$|[\sT,])"


def _month_number(token: str) -> int | None:
    return _MONTHS.get(token[:3].lower()) if len(token) >= 3 else None


def _year(value: str) -> int:
    y = int(value)
    return y + 2000 if y < 100 else y


def _make(y: int, m: int, d: int) -> dt.date | None:
    try:
        return dt.date(y, m, d)
    except ValueError:
        return None


def _ymd(m: re.Match[str]) -> dt.date | None:
    return _make(_year(m.group(1)), int(m.group(2)), int(m.group(3)))


def _day_first_then_month_first(m: re.Match[str]) -> dt.date | None:
    a, b, y = int(m.group(1)), int(m.group(2)), _year(m.group(3))
    return _make(y, b, a) or _make(y, a, b)


def _day_mon_year(m: re.Match[str]) -> dt.date | None:
    month = _month_number(m.group(2))
    return None if month is None else _make(_year(m.group(3)), month, int(m.group(1)))


def _year_mon_day(m: re.Match[str]) -> dt.date | None:
    month = _month_number(m.group(2))
    return None if month is None else _make(int(m.group(1)), month, int(m.group(3)))


def _mon_day_year(m: re.Match[str]) -> dt.date | None:
    month = _month_number(m.group(1))
    return None if month is None else _make(_year(m.group(3)), month, int(m.group(2)))


_DATE_PATTERNS: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], dt.date | None]], ...] = (
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$"), _ymd),
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})" + _TAIL), _ymd),
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})" + _TAIL), _ymd),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})" + _TAIL), _day_first_then_month_first),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4}|\d{2})" + _TAIL), _day_first_then_month_first),
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4}|\d{2})" + _TAIL), _day_first_then_month_first),
    (
        re.compile(r"^(\d{1,2})[\s\-/]+([A-Za-z]{3,9})\.?[\s\-/,]+(\d{4}|\d{2})" + _TAIL),
        _day_mon_year,
    ),
    (re.compile(r"^(\d{4})[\s\-/]+([A-Za-z]{3,9})\.?[\s\-/]+(\d{1,2})" + _TAIL), _year_mon_day),
    (
        re.compile(r"^([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})" + _TAIL),
        _mon_day_year,
    ),
)

_FALLBACK_DEFAULT = dt.datetime(2000, 1, 1)


def parse_date(raw: Any) -> dt.date | None:
    """Parse a statement date; ``None`` means the record should be skipped.

    Slash, dash and dotted numeric dates are read day-first and only read
    month-first when the day-first reading is not a valid date. Two-digit years
    land in the 2000s.
    """

    if raw is None:
        return None
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw

    s = " ".join(str(raw).split())
    if not s:
        return None

    for pattern, build in _DATE_PATTERNS:
        m = pattern.match(s)
        if m is None:
            continue
        parsed = build(m)
        if parsed is not None:
            return parsed

    if not any(ch.isdigit() for ch in s):
        return None
    if s.isdigit() and len(s) != 8:
        return None
    try:
        fallback = date_parser.parse(s, dayfirst=True, default=_FALLBACK_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if fallback.year < 100:
        return _make(fallback.year + 2000, fallback.month, fallback.day)
    return fallback.date()


def excel_serial_to_date(value: Any) -> dt.date | None:
    """Convert a spreadsheet serial day number through the workbook epoch."""

    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    serial = float(value)
    if not 1 <= serial < 2958466:
        return None
    converted = from_excel(serial)
    if isinstance(converted, dt.datetime):
        return converted.date()
    if isinstance(converted, dt.date):
        return converted
    return None


def collapse_whitespace(text: str | None) -> str:
    return " ".join((text or "").split())


__all__ = [
    "parse_amount",
    "format_amount",
    "amount_direction",
    "parse_date",
    "excel_serial_to_date",
    "collapse_whitespace",
]
