"""Access Bank statement lines.

``DD-MM-YYYY [DD-MM-YYYY] description DR|CR amount balance``; the optional
second date is the value date. The DR/CR token carries the direction.
"""

from __future__ import annotations

import re

from ...models import RawTransactionRecord, TransactionType
from .common import MONEY, LineParse, build_record, phrase_skipper, run_strategies

_DATE = r"\d{2}[-/]\d{2}[-/]\d{4}"

_LINE_RE = re.compile(
    rf"({_DATE})(?:\s+{_DATE})?\s+(.+?)\s+(DR|CR)\s+({MONEY})\s+({MONEY})",
    re.IGNORECASE,
)
_AMOUNT_FIRST_RE = re.compile(
    rf"({_DATE})(?:\s+{_DATE})?\s+(.+?)\s+({MONEY})\s*(DR|CR)\s+({MONEY})",
    re.IGNORECASE,
)

_skip = phrase_skipper(
    min_length=15,
    phrases=("opening balance", "closing balance"),
    patterns=(re.compile(r"^\s*total\b", re.IGNORECASE),),
)


def typed_line(line: str) -> RawTransactionRecord | None:
    m = _LINE_RE.search(line)
    if m is None:
        return None
    date_text, description, marker, amount, balance = m.groups()
    return build_record(
        date_text=date_text,
        description=description,
        amount_text=amount,
        direction=TransactionType.DEBIT if marker.upper() == "DR" else TransactionType.CREDIT,
        balance_text=balance,
        dialect="access",
        line=line,
    )


def amount_first_line(line: str) -> RawTransactionRecord | None:
    m = _AMOUNT_FIRST_RE.search(line)
    if m is None:
        return None
    date_text, description, amount, marker, balance = m.groups()
    return build_record(
        date_text=date_text,
        description=description,
        amount_text=amount,
        direction=TransactionType.DEBIT if marker.upper() == "DR" else TransactionType.CREDIT,
        balance_text=balance,
        dialect="access",
        line=line,
    )


STRATEGIES = (typed_line, amount_first_line)


def parse_lines(lines: list[str], dialect: str = "access") -> LineParse:
    return run_strategies(lines, STRATEGIES, skip=_skip)
