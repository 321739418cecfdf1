"""OPay wallet statements.

OPay prints each transaction as a block of a few lines: a line that opens
with the transaction date (``2025 Jul 14 06:00:02`` or ``14 Jul 2025``), then
the value date, description, signed amount (``+₦76,695.00`` / ``-₦50.00``),
balance, channel and reference on the following lines, in varying order.

A block starts at a date-led line and runs for at most six lines or until the
next date-led line (the line right after the opener always belongs to the
block, since it usually carries the value date).
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from ...models import RawTransactionRecord, TransactionType
from .common import MONEY, LineParse, build_record

_BLOCK_MAX_LINES = 6
_DEFAULT_DESCRIPTION = "OPay Transaction"

_START_RE = re.compile(r"^(?:\d{4}\s+[A-Za-z]{3}\s+\d{1,2}|\d{1,2}\s+[A-Za-z]{3}\s+\d{4})\b")
_YMD_RE = re.compile(r"\d{4}\s+[A-Za-z]{3}\s+\d{1,2}\b")
_DMY_RE = re.compile(r"\b\d{1,2}\s+[A-Za-z]{3}\s+\d{4}")
_SIGNED_NAIRA_RE = re.compile(rf"([+\-])\s*₦\s*({MONEY})")
_SIGNED_RE = re.compile(rf"(?<![\w])([+\-])\s*({MONEY})")
_TIME_RE = re.compile(r"\b\d{2}:\d{2}(?::\d{2})?\b")
_MONEY_LEFTOVER_RE = re.compile(rf"₦?\s*{MONEY}")


def is_block_start(line: str) -> bool:
    return _START_RE.match(line) is not None


def collect_blocks(lines: Sequence[str]) -> list[list[str]]:
    blocks: list[list[str]] = []
    i = 0
    while i < len(lines):
        if not is_block_start(lines[i]):
            i += 1
            continue
        start = i
        block = [lines[i]]
        i += 1
        while i < len(lines) and i < start + _BLOCK_MAX_LINES:
            if i > start + 1 and is_block_start(lines[i]):
                break
            block.append(lines[i])
            i += 1
        blocks.append(block)
    return blocks


def parse_block(block: Sequence[str]) -> RawTransactionRecord | None:
    text = " ".join(block)

    date_match = _YMD_RE.search(text) or _DMY_RE.search(text)
    if date_match is None:
        return None

    amount_match = _SIGNED_NAIRA_RE.search(text) or _SIGNED_RE.search(text)
    if amount_match is None:
        return None
    sign, amount = amount_match.group(1), amount_match.group(2)

    description = _YMD_RE.sub(" ", text)
    description = _DMY_RE.sub(" ", description)
    description = description.replace(amount_match.group(0), " ", 1)
    description = _TIME_RE.sub(" ", description)
    description = _MONEY_LEFTOVER_RE.sub(" ", description)
    description = " ".join(description.split())
    if len(description) < 3:
        description = _DEFAULT_DESCRIPTION

    return build_record(
        date_text=date_match.group(0),
        description=description,
        amount_text=amount,
        direction=TransactionType.CREDIT if sign == "+" else TransactionType.DEBIT,
        dialect="opay",
        line=block,
    )


def parse_lines(lines: list[str], dialect: str = "opay") -> LineParse:
    out = LineParse()
    for block in collect_blocks(lines):
        record = parse_block(block)
        if record is None:
            out.dropped += 1
        else:
            out.records.append(record)
    return out
