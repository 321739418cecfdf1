"""Generic line cascade for statements without a dedicated grammar.

Strategies run from most to least specific; the first one that produces a
valid record wins for the line:

1. ``date description amount DR|CR balance``
2. ``date description debit credit balance``
3. ``date description amount balance``
4. numeric dates with any separator and 2- or 4-digit years, then one amount
5. ISO-style ``YYYY-MM-DD`` / ``YYYY/MM/DD`` dates, then one amount
6. ``DD Mon YYYY`` dates, then one amount
7. anything date-like, a run of non-digits, then a number

Before any pattern is tried, lines shorter than 10 characters and lines that
read like headers, totals or carried balances are skipped. Direction comes
from an explicit marker when the layout has one, otherwise from wording.
"""

from __future__ import annotations

import re
from dataclasses import replace

from ...models import RawTransactionRecord, TransactionType
from ...normalize import parse_amount
from .common import (
    LOOSE_MONEY,
    MONEY,
    LineParse,
    LineStrategy,
    build_record,
    direction_from_keywords,
    phrase_skipper,
    run_strategies,
)

_NUM_DATE = r"(?<!\d)\d{1,2}[-/]\d{1,2}[-/]\d{4}"

_TYPED_RE = re.compile(
    rf"({_NUM_DATE})\s+(.+?)\s+({LOOSE_MONEY})\s+(DR|CR|DEBIT|CREDIT)\s+({LOOSE_MONEY})",
    re.IGNORECASE,
)
_DEBIT_CREDIT_RE = re.compile(rf"({_NUM_DATE})\s+(.+?)\s+({MONEY})\s+({MONEY})\s+({MONEY})\s*$")
_AMOUNT_BALANCE_RE = re.compile(rf"({_NUM_DATE})\s+(.+?)\s+({MONEY})\s+({MONEY})\s*$")
_FLEXIBLE_RE = re.compile(
    rf"((?<!\d)\d{{1,2}}[-/.]\d{{1,2}}[-/.]\d{{2,4}})\s+(.+?)\s+({LOOSE_MONEY})"
)
_ISO_RE = re.compile(rf"((?<!\d)\d{{4}}[-/]\d{{1,2}}[-/]\d{{1,2}})\s+(.+?)\s+({LOOSE_MONEY})")
_TEXT_MONTH_RE = re.compile(
    rf"((?<!\d)\d{{1,2}}[\s\-][A-Za-z]{{3,9}}[\s\-]\d{{2,4}})\s+(.+?)\s+({LOOSE_MONEY})"
)
_PERMISSIVE_RE = re.compile(
    rf"((?<!\d)\d{{1,4}}[-/.]\d{{1,2}}[-/.]\d{{1,4}})\s+([^0-9]+?)\s*({LOOSE_MONEY})"
)

SKIP_PHRASES: tuple[str, ...] = (
    "statement",
    "balance brought forward",
    "balance b/f",
    "opening balance",
    "closing balance",
    "balance carried forward",
    "sub total",
    "subtotal",
    "grand total",
    "total debit",
    "total credit",
    "total withdrawal",
    "total deposit",
    "total amount",
)
_HEADER_RES = (
    re.compile(r"^total\b", re.IGNORECASE),
    re.compile(r"\bdate\b.*\b(?:description|narration|details|particulars)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:description|narration)\b.*\b(?:debit|credit|balance|amount)\b", re.IGNORECASE
    ),
)

_skip = phrase_skipper(min_length=10, phrases=SKIP_PHRASES, patterns=_HEADER_RES)


def typed_line(line: str) -> RawTransactionRecord | None:
    m = _TYPED_RE.search(line)
    if m is None:
        return None
    date_text, description, amount, marker, balance = m.groups()
    marker = marker.upper()
    direction = TransactionType.CREDIT if marker in ("CR", "CREDIT") else TransactionType.DEBIT
    return build_record(
        date_text=date_text,
        description=description,
        amount_text=amount,
        direction=direction,
        balance_text=balance,
        dialect="generic",
        line=line,
    )


def debit_credit_line(line: str) -> RawTransactionRecord | None:
    m = _DEBIT_CREDIT_RE.search(line)
    if m is None:
        return None
    date_text, description, debit_text, credit_text, balance = m.groups()
    debit, credit = parse_amount(debit_text), parse_amount(credit_text)
    if debit > 0 and credit == 0:
        amount_text, direction = debit_text, TransactionType.DEBIT
    elif credit > 0 and debit == 0:
        amount_text, direction = credit_text, TransactionType.CREDIT
    else:
        return None
    return build_record(
        date_text=date_text,
        description=description,
        amount_text=amount_text,
        direction=direction,
        balance_text=balance,
        dialect="generic",
        line=line,
    )


def amount_balance_line(line: str) -> RawTransactionRecord | None:
    m = _AMOUNT_BALANCE_RE.search(line)
    if m is None:
        return None
    date_text, description, amount, balance = m.groups()
    return build_record(
        date_text=date_text,
        description=description,
        amount_text=amount,
        direction=direction_from_keywords(description),
        balance_text=balance,
        dialect="generic",
        line=line,
    )


def _single_amount(pattern: re.Pattern[str]) -> LineStrategy:
    def strategy(line: str) -> RawTransactionRecord | None:
        m = pattern.search(line)
        if m is None:
            return None
        date_text, description, amount = m.groups()
        return build_record(
            date_text=date_text,
            description=description,
            amount_text=amount,
            direction=direction_from_keywords(description),
            dialect="generic",
            line=line,
        )

    return strategy


flexible_date_line = _single_amount(_FLEXIBLE_RE)
iso_date_line = _single_amount(_ISO_RE)
text_month_line = _single_amount(_TEXT_MONTH_RE)
permissive_line = _single_amount(_PERMISSIVE_RE)

STRATEGIES = (
    typed_line,
    debit_credit_line,
    amount_balance_line,
    flexible_date_line,
    iso_date_line,
    text_month_line,
    permissive_line,
)


def skip_line(line: str) -> bool:
    return _skip(line)


def parse_lines(lines: list[str], dialect: str = "generic") -> LineParse:
    parsed = run_strategies(lines, STRATEGIES, skip=_skip)
    if dialect != "generic":
        # Records keep the dialect the document was detected as.
        parsed.records = [_retag(r, dialect) for r in parsed.records]
    return parsed


def _retag(record: RawTransactionRecord, dialect: str) -> RawTransactionRecord:
    return replace(record, dialect=dialect, raw={**(record.raw or {}), "bank": dialect})
