"""Transaction normalizer: raw records -> canonical ledger.

Every transaction that leaves this module has a calendar date, a non-empty
single-spaced description, a positive amount and a direction. Records that
cannot meet that are dropped (``MalformedRecord`` is raised and handled here,
never by callers); an empty result is ``NoTransactionsFound``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .errors import MalformedRecord, NoTransactionsFound
from .logging_setup import get_logger
from .models import RawTransactionRecord, StatementPeriod, Transaction, TransactionType
from .normalize import amount_direction, collapse_whitespace, parse_amount, parse_date

_logger = get_logger("statement_analysis.ledger")


def _balance(raw: str | None) -> Decimal | None:
    if raw is None or not any(ch.isdigit() for ch in raw):
        return None
    value = parse_amount(raw)
    # A balance printed as "(1,000.00)" or "-1,000.00" is an overdraft.
    if amount_direction(raw) is TransactionType.DEBIT:
        return -value
    return value


def to_transaction(record: RawTransactionRecord) -> Transaction:
    """Normalize one record; raise :class:`MalformedRecord` if it is unusable."""

    source = " | ".join(record.source_lines) or None
    date = parse_date(record.date)
    if date is None:
        raise MalformedRecord(f"unparseable date {record.date!r}", source=source)

    description = collapse_whitespace(record.description)
    if not description:
        raise MalformedRecord("empty description", source=source)

    amount = parse_amount(record.amount)
    if amount <= 0:
        raise MalformedRecord(f"non-positive amount {record.amount!r}", source=source)

    direction = record.type or amount_direction(record.amount) or TransactionType.DEBIT
    reference = collapse_whitespace(record.reference) or None

    return Transaction(
        date=date,
        description=description,
        amount=amount,
        type=direction,
        balance=_balance(record.balance),
        reference=reference,
        raw=record.raw,
    )


def normalize_records(records: Iterable[RawTransactionRecord]) -> list[Transaction]:
    """Normalize records in order, dropping malformed ones.

    Raises
    ------
    NoTransactionsFound
        When no record survives normalization.
    """

    ledger: list[Transaction] = []
    dropped = 0
    for record in records:
        try:
            ledger.append(to_transaction(record))
        except MalformedRecord as e:
            dropped += 1
            _logger.debug("normalize:dropped dialect=%s reason=%s", record.dialect, e.reason)

    _logger.info("normalize:done transactions=%d dropped=%d", len(ledger), dropped)
    if not ledger:
        raise NoTransactionsFound(
            f"{dropped} candidate record(s) were malformed" if dropped else None
        )
    return ledger


def statement_period(ledger: Sequence[Transaction]) -> StatementPeriod | None:
    if not ledger:
        return None
    dates = [t.date for t in ledger]
    return StatementPeriod(start_date=min(dates), end_date=max(dates))


__all__ = ["to_transaction", "normalize_records", "statement_period"]
