"""GTBank statement lines.

Columns: transaction time, value date, description, signed amount, balance,
channel, reference, e.g.::

    2025 Jul 14 06:00:02 14 Jul 2025 TRANSFER FROM JOHN DOE +76,695.00 76,695.00 MOBILE 0003921

Some exports lose the column separators and print the same fields run
together (``06:00:0214 Jul 2025TRANSFER...+76,695.0076,695.00MOBILE0003921``);
the concatenated strategy relies on the two-decimal money format to find the
field edges. The value date is the transaction date; ``+`` marks a credit.
"""

from __future__ import annotations

import re

from ...models import RawTransactionRecord, TransactionType
from .common import (
    MONEY,
    LineParse,
    build_record,
    phrase_skipper,
    run_strategies,
)

_TIME = r"\d{4}\s+[A-Za-z]{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2}"
_VALUE_DATE = r"\d{1,2}\s+[A-Za-z]{3}\s+\d{4}"

_SPACED_RE = re.compile(
    rf"^({_TIME})\s+({_VALUE_DATE})\s+(.+?)\s+([+\-]?{MONEY})\s+({MONEY})"
    r"\s+([\w\-]+)\s+(\w+)$"
)
_CONCATENATED_RE = re.compile(
    r"^(\d{4}\s*[A-Za-z]{3}\s*\d{1,2}\s*\d{2}:\d{2}:\d{2})\s*(\d{1,2}\s*[A-Za-z]{3}\s*\d{4})"
    rf"\s*(.+?)\s*([+\-]\s*{MONEY})\s*({MONEY})\s*([A-Za-z\-]+)?\s*(\d\w*)?$"
)
_SHORT_RE = re.compile(
    rf"^(\d{{4}}\s+[A-Za-z]{{3}}\s+\d{{1,2}})\s+.*?\s+({_VALUE_DATE})\s+(.+?)"
    rf"\s+([+\-]{MONEY})\s+({MONEY})"
)
_SPLIT_DATE_RE = re.compile(r"(\d{1,2})\s*([A-Za-z]{3})\s*(\d{4})")

_skip = phrase_skipper(
    min_length=20,
    phrases=(
        "trans. time",
        "value date",
        "opening balance",
        "closing balance",
        "available balance",
        "total debit",
        "total credit",
    ),
)


def _value_date(raw: str) -> str:
    m = _SPLIT_DATE_RE.fullmatch(raw.strip())
    return f"{m.group(1)} {m.group(2)} {m.group(3)}" if m else raw


def _direction(amount: str) -> TransactionType:
    return TransactionType.CREDIT if amount.lstrip().startswith("+") else TransactionType.DEBIT


def _from_match(m: re.Match[str], line: str, *, with_tail: bool) -> RawTransactionRecord | None:
    amount = m.group(4).replace(" ", "")
    reference = m.group(7) if with_tail else None
    return build_record(
        date_text=_value_date(m.group(2)),
        description=m.group(3),
        amount_text=amount,
        direction=_direction(amount),
        balance_text=m.group(5),
        reference=reference,
        dialect="gtbank",
        line=line,
    )


def spaced_line(line: str) -> RawTransactionRecord | None:
    m = _SPACED_RE.match(line)
    return _from_match(m, line, with_tail=True) if m else None


def concatenated_line(line: str) -> RawTransactionRecord | None:
    m = _CONCATENATED_RE.match(line)
    return _from_match(m, line, with_tail=True) if m else None


def short_line(line: str) -> RawTransactionRecord | None:
    m = _SHORT_RE.search(line)
    return _from_match(m, line, with_tail=False) if m else None


STRATEGIES = (spaced_line, concatenated_line, short_line)


def parse_lines(lines: list[str], dialect: str = "gtbank") -> LineParse:
    return run_strategies(lines, STRATEGIES, skip=_skip)
