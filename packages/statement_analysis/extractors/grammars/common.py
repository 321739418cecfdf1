"""Building blocks shared by the document-text line grammars.

A grammar is a function ``(lines, dialect) -> LineParse``. Most grammars are an
ordered list of pure line strategies ``(line) -> RawTransactionRecord | None``
run through :func:`run_strategies`; the first strategy that returns a record
wins for that line.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from ...models import RawTransactionRecord, TransactionType
from ...normalize import collapse_whitespace, parse_amount, parse_date

type LineStrategy = Callable[[str], RawTransactionRecord | None]

# Amount with exactly two decimals, as printed by the statement generators.
MONEY = r"[\d,]*\d\.\d{2}"
# Looser amount used by the permissive generic patterns.
LOOSE_MONEY = r"[\d,]*\d(?:\.\d+)?"

_MONEY_RE = re.compile(rf"(?<![\w.]){MONEY}(?![\w])")

_CREDIT_WORDS = ("credit", "deposit", "salary", "transfer in", "reversal", "refund", "inflow")


@dataclass(slots=True)
class LineParse:
    records: list[RawTransactionRecord] = field(default_factory=list)
    dropped: int = 0


def split_lines(text: str) -> list[str]:
    return [ln for ln in (collapse_whitespace(raw) for raw in text.splitlines()) if ln]


def money_tokens(line: str) -> list[str]:
    return _MONEY_RE.findall(line)


def direction_from_keywords(description: str) -> TransactionType:
    """Best guess from wording; debit when the description says nothing."""

    lower = description.lower()
    if any(w in lower for w in _CREDIT_WORDS):
        return TransactionType.CREDIT
    return TransactionType.DEBIT


def build_record(
    *,
    date_text: str,
    description: str,
    amount_text: str,
    direction: TransactionType,
    dialect: str,
    line: str | Sequence[str],
    balance_text: str | None = None,
    reference: str | None = None,
    min_description: int = 2,
) -> RawTransactionRecord | None:
    """Validate captured pieces and assemble a record, or ``None``."""

    if parse_date(date_text) is None:
        return None
    desc = collapse_whitespace(description)
    if len(desc) < min_description:
        return None
    if parse_amount(amount_text) <= 0:
        return None
    lines = (line,) if isinstance(line, str) else tuple(line)
    raw: dict[str, object] = {"bank": dialect, "line": " ".join(lines)}
    if balance_text:
        raw["balance"] = balance_text
    return RawTransactionRecord(
        date=date_text.strip(),
        description=desc,
        amount=amount_text.strip(),
        type=direction,
        balance=balance_text.strip() if balance_text else None,
        reference=reference.strip() if reference else None,
        source_lines=lines,
        dialect=dialect,
        raw=raw,
    )


def run_strategies(
    lines: Iterable[str],
    strategies: Sequence[LineStrategy],
    *,
    skip: Callable[[str], bool],
) -> LineParse:
    out = LineParse()
    for line in lines:
        if skip(line):
            continue
        for strategy in strategies:
            record = strategy(line)
            if record is not None:
                out.records.append(record)
                break
        else:
            out.dropped += 1
    return out


def phrase_skipper(
    *, min_length: int, phrases: Sequence[str] = (), patterns: Sequence[re.Pattern[str]] = ()
) -> Callable[[str], bool]:
    # Phrases match whole words only.
    words = tuple(
        re.compile(rf"(?<![a-z0-9]){re.escape(p.lower())}(?![a-z0-9])") for p in phrases
    )

    def _skip(line: str) -> bool:
        if len(line) < min_length:
            return True
        lower = line.lower()
        return any(w.search(lower) for w in words) or any(rx.search(line) for rx in patterns)

    return _skip


__all__ = [
    "LineStrategy",
    "LineParse",
    "MONEY",
    "LOOSE_MONEY",
    "split_lines",
    "money_tokens",
    "direction_from_keywords",
    "build_record",
    "run_strategies",
    "phrase_skipper",
]
