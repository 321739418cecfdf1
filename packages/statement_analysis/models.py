"""Data models for ``statement_analysis``.

Three layers of shapes flow through the pipeline:

- :class:`RawTransactionRecord`: what an extractor pulled out of a row or a
  text line, still as strings. Ephemeral.
- :class:`Transaction`: the canonical ledger entry. Amounts are always stored
  positive and the direction lives only in ``type``. The classification
  orchestrator fills ``category``/``merchant``/``confidence`` in place; nothing
  else mutates a transaction after normalization.
- :class:`AnalysisResult` and its parts: immutable pydantic models built once
  per statement and serialized to JSON for the store.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator


class TransactionType(StrEnum):
    DEBIT = "debit"
    CREDIT = "credit"


class StatementStatus(StrEnum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Extraction / ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransactionRecord:
    """A transaction as found in the source file, before normalization.

    ``amount`` may carry its own sign or DR/CR marker; ``type`` is set when the
    layout states the direction separately (a DR/CR column, a debit vs credit
    column, a ``+``/``-`` prefix already interpreted by the grammar).
    """

    date: str
    description: str
    amount: str
    type: TransactionType | None = None
    balance: str | None = None
    reference: str | None = None
    source_lines: tuple[str, ...] = ()
    dialect: str = "generic"
    raw: Mapping[str, Any] | None = None


@dataclass(slots=True)
class Transaction:
    date: dt.date
    description: str
    amount: Decimal
    type: TransactionType
    balance: Decimal | None = None
    reference: str | None = None
    category: str | None = None
    merchant: str | None = None
    confidence: float | None = None
    raw: Mapping[str, Any] | None = field(default=None, compare=False, repr=False)

    @property
    def is_classified(self) -> bool:
        return self.category is not None and self.merchant is not None and (
            self.confidence is not None
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": f"{self.amount:f}",
            "type": self.type.value,
            "balance": None if self.balance is None else f"{self.balance:f}",
            "reference": self.reference,
            "category": self.category,
            "merchant": self.merchant,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Category/merchant/confidence for one transaction or group.

    ``source`` is ``"ai"`` when the external classifier answered and
    ``"fallback"`` for the keyword classifier (fixed confidence 0.3).
    """

    category: str
    merchant: str
    confidence: float
    source: Literal["ai", "fallback"]

    def apply(self, tx: Transaction) -> None:
        tx.category = self.category
        tx.merchant = self.merchant
        tx.confidence = self.confidence


# ---------------------------------------------------------------------------
# Analytics (immutable, JSON-serializable)
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class StatementPeriod(_Frozen):
    start_date: dt.date
    end_date: dt.date


class StatementSummary(_Frozen):
    total_transactions: int
    total_income: Decimal
    total_expenses: Decimal
    net_cash_flow: Decimal
    average_balance: Decimal
    statement_period: StatementPeriod | None = None


class CategoryBreakdown(_Frozen):
    name: str
    amount: Decimal
    percentage: float
    transaction_count: int


class MerchantTotal(_Frozen):
    name: str
    amount: Decimal
    transaction_count: int


class MonthlyBreakdown(_Frozen):
    month: str  # YYYY-MM
    income: Decimal
    expenses: Decimal
    net_flow: Decimal
    transaction_count: int


type Frequency = Literal["weekly", "monthly", "quarterly", "irregular"]
type TrendDirection = Literal["increasing", "decreasing", "stable"]


class RecurringPayment(_Frozen):
    merchant: str
    amount: Decimal
    frequency: Frequency
    last_date: dt.date
    transaction_count: int


class UnusualTransaction(_Frozen):
    date: dt.date
    description: str
    amount: Decimal
    ratio: float
    reason: str


class SpendingTrend(_Frozen):
    category: str
    amount: Decimal
    trend: TrendDirection
    percentage: float


class SpendingPatterns(_Frozen):
    recurring_payments: tuple[RecurringPayment, ...] = ()
    unusual_transactions: tuple[UnusualTransaction, ...] = ()
    spending_trends: tuple[SpendingTrend, ...] = ()


class AnalysisResult(_Frozen):
    summary: StatementSummary
    categories: tuple[CategoryBreakdown, ...] = ()
    top_merchants: tuple[MerchantTotal, ...] = ()
    monthly_breakdown: tuple[MonthlyBreakdown, ...] = ()
    patterns: SpendingPatterns = SpendingPatterns()
    insights: tuple[str, ...] = ()

    @field_validator("insights")
    @classmethod
    def _drop_blank_insights(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s.strip() for s in v if s and s.strip())

    def with_insights(self, insights: tuple[str, ...] | list[str]) -> AnalysisResult:
        """Return a copy carrying ``insights`` (validated like construction)."""

        data = self.model_dump()
        data["insights"] = tuple(insights)
        return AnalysisResult.model_validate(data)


__all__ = [
    "TransactionType",
    "StatementStatus",
    "RawTransactionRecord",
    "Transaction",
    "ClassificationResult",
    "StatementPeriod",
    "StatementSummary",
    "CategoryBreakdown",
    "MerchantTotal",
    "MonthlyBreakdown",
    "RecurringPayment",
    "UnusualTransaction",
    "SpendingTrend",
    "SpendingPatterns",
    "AnalysisResult",
]
