"""Debit / credit / balance column layouts (First Bank, Zenith Bank).

The printed statement has ``date  description  debit  credit  balance`` with
one of debit/credit empty. After text extraction the empty cell disappears,
so a line carries either three money tokens (debit, credit, balance with a
zero placeholder) or two (amount, balance). With two tokens the direction is
read from the running balance: when the new balance equals the previous one
minus the amount it is a debit, plus the amount a credit. Without a usable
previous balance the description wording decides.

This grammar keeps state across lines (the running balance), so it is a
small class rather than a list of pure strategies.
"""

from __future__ import annotations

import re
from decimal import Decimal

from ...models import RawTransactionRecord, TransactionType
from ...normalize import parse_amount
from .common import (
    MONEY,
    LineParse,
    build_record,
    direction_from_keywords,
    money_tokens,
    phrase_skipper,
)

_DATE = r"\d{1,2}[-/.](?:\d{1,2}|[A-Za-z]{3})[-/.]\d{2,4}"

_LINE_RE = re.compile(
    rf"^({_DATE})(?:\s+{_DATE})?\s+(.+?)((?:\s+{MONEY}){{2,3}})\s*$"
)
_OPENING_RE = re.compile(
    r"(opening\s+balance|balance\s+b/?f|brought\s+forward)", re.IGNORECASE
)

_skip = phrase_skipper(
    min_length=15,
    phrases=("closing balance", "total debit", "total credit"),
    patterns=(re.compile(r"^\s*page\s+\d+(?:\s+of\s+\d+)?\s*$", re.IGNORECASE),),
)

_TOLERANCE = Decimal("0.01")


class ColumnarGrammar:
    def __init__(self, dialect: str) -> None:
        self.dialect = dialect
        self._balance: Decimal | None = None

    def _direction(
        self, amount: Decimal, balance: Decimal, description: str
    ) -> TransactionType:
        prev = self._balance
        if prev is not None:
            if abs(prev - amount - balance) <= _TOLERANCE:
                return TransactionType.DEBIT
            if abs(prev + amount - balance) <= _TOLERANCE:
                return TransactionType.CREDIT
        return direction_from_keywords(description)

    def parse_line(self, line: str) -> RawTransactionRecord | None:
        m = _LINE_RE.match(line)
        if m is None:
            return None
        date_text, description = m.group(1), m.group(2)
        tokens = money_tokens(m.group(3))
        balance_text = tokens[-1]
        balance = parse_amount(balance_text)

        if len(tokens) == 3:
            debit, credit = parse_amount(tokens[0]), parse_amount(tokens[1])
            if debit > 0 and credit == 0:
                amount_text, direction = tokens[0], TransactionType.DEBIT
            elif credit > 0 and debit == 0:
                amount_text, direction = tokens[1], TransactionType.CREDIT
            else:
                return None
        else:
            amount_text = tokens[0]
            direction = self._direction(parse_amount(amount_text), balance, description)

        record = build_record(
            date_text=date_text,
            description=description,
            amount_text=amount_text,
            direction=direction,
            balance_text=balance_text,
            dialect=self.dialect,
            line=line,
        )
        if record is not None:
            self._balance = balance
        return record

    def parse_lines(self, lines: list[str]) -> LineParse:
        out = LineParse()
        for line in lines:
            if _OPENING_RE.search(line):
                tokens = money_tokens(line)
                if tokens:
                    self._balance = parse_amount(tokens[-1])
                continue
            if _skip(line):
                continue
            record = self.parse_line(line)
            if record is None:
                out.dropped += 1
            else:
                out.records.append(record)
        return out


def parse_lines(lines: list[str], dialect: str) -> LineParse:
    return ColumnarGrammar(dialect).parse_lines(lines)
