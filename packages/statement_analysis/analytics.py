"""Pure aggregation over a classified ledger.

``analyze`` never fails on an empty ledger: it returns a zeroed summary and
empty breakdowns. Amounts stay :class:`~decimal.Decimal`; percentages and
ratios are floats rounded for display.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from statistics import fmean

from .classification.fallback import DEFAULT_CATEGORY
from .ledger import statement_period
from .models import (
    AnalysisResult,
    CategoryBreakdown,
    Frequency,
    MerchantTotal,
    MonthlyBreakdown,
    RecurringPayment,
    SpendingPatterns,
    SpendingTrend,
    StatementSummary,
    Transaction,
    TransactionType,
    TrendDirection,
    UnusualTransaction,
)

TOP_CATEGORIES = 10
TOP_MERCHANTS = 10
TOP_RECURRING = 5
TOP_UNUSUAL = 5
RECURRING_MIN_COUNT = 3
UNUSUAL_MULTIPLE = 3
TREND_BAND_PCT = 5.0
LARGE_AVERAGE_AMOUNT = Decimal("50000")

_ZERO = Decimal("0")
_CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT)


def _debits(ledger: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in ledger if t.type is TransactionType.DEBIT]


def summarize(ledger: Sequence[Transaction]) -> StatementSummary:
    income = sum((t.amount for t in ledger if t.type is TransactionType.CREDIT), _ZERO)
    expenses = sum((t.amount for t in _debits(ledger)), _ZERO)
    balances = [t.balance for t in ledger if t.balance is not None]
    average_balance = _money(sum(balances, _ZERO) / len(balances)) if balances else _ZERO
    return StatementSummary(
        total_transactions=len(ledger),
        total_income=income,
        total_expenses=expenses,
        net_cash_flow=income - expenses,
        average_balance=average_balance,
        statement_period=statement_period(ledger),
    )


def category_totals(ledger: Iterable[Transaction]) -> dict[str, tuple[Decimal, int]]:
    """Debit amount and count per category, in first-seen order."""

    totals: dict[str, tuple[Decimal, int]] = {}
    for t in _debits(ledger):
        name = t.category or DEFAULT_CATEGORY
        amount, count = totals.get(name, (_ZERO, 0))
        totals[name] = (amount + t.amount, count + 1)
    return totals


def category_breakdown(ledger: Sequence[Transaction]) -> list[CategoryBreakdown]:
    totals = category_totals(ledger)
    spent = sum((amount for amount, _ in totals.values()), _ZERO)
    rows = [
        CategoryBreakdown(
            name=name,
            amount=amount,
            percentage=round(float(amount / spent * 100), 2) if spent else 0.0,
            transaction_count=count,
        )
        for name, (amount, count) in totals.items()
    ]
    rows.sort(key=lambda r: r.amount, reverse=True)
    return rows[:TOP_CATEGORIES]


def _by_merchant(ledger: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    groups: dict[str, list[Transaction]] = defaultdict(list)
    for t in _debits(ledger):
        if t.merchant:
            groups[t.merchant].append(t)
    return groups


def top_merchants(ledger: Sequence[Transaction]) -> list[MerchantTotal]:
    rows = [
        MerchantTotal(
            name=name,
            amount=sum((t.amount for t in txs), _ZERO),
            transaction_count=len(txs),
        )
        for name, txs in _by_merchant(ledger).items()
    ]
    rows.sort(key=lambda r: r.amount, reverse=True)
    return rows[:TOP_MERCHANTS]


def monthly_breakdown(ledger: Sequence[Transaction]) -> list[MonthlyBreakdown]:
    months: dict[str, list[Decimal | int]] = {}
    for t in ledger:
        key = f"{t.date.year:04d}-{t.date.month:02d}"
        bucket = months.setdefault(key, [_ZERO, _ZERO, 0])
        if t.type is TransactionType.CREDIT:
            bucket[0] += t.amount
        else:
            bucket[1] += t.amount
        bucket[2] += 1
    return [
        MonthlyBreakdown(
            month=key,
            income=income,
            expenses=expenses,
            net_flow=income - expenses,
            transaction_count=count,
        )
        for key, (income, expenses, count) in sorted(months.items())
    ]


def infer_frequency(txs: Sequence[Transaction]) -> Frequency:
    dates = sorted(t.date for t in txs)
    if len(dates) < 2:
        return "irregular"
    gap = fmean((b - a).days for a, b in zip(dates, dates[1:]))
    if gap <= 7:
        return "weekly"
    if gap <= 31:
        return "monthly"
    if gap <= 93:
        return "quarterly"
    return "irregular"


def recurring_payments(ledger: Sequence[Transaction]) -> list[RecurringPayment]:
    rows = [
        RecurringPayment(
            merchant=merchant,
            amount=_money(sum((t.amount for t in txs), _ZERO) / len(txs)),
            frequency=infer_frequency(txs),
            last_date=max(t.date for t in txs),
            transaction_count=len(txs),
        )
        for merchant, txs in _by_merchant(ledger).items()
        if len(txs) >= RECURRING_MIN_COUNT
    ]
    rows.sort(key=lambda r: r.transaction_count, reverse=True)
    return rows[:TOP_RECURRING]


def unusual_transactions(ledger: Sequence[Transaction]) -> list[UnusualTransaction]:
    """Debits above three times the mean debit, in ledger order.

    Amounts ``[100, 100, 100, 100, 5000]`` have a mean of 1080, so only the
    5000 debit (ratio 4.6) is reported.
    """

    debits = _debits(ledger)
    if not debits:
        return []
    mean = sum((t.amount for t in debits), _ZERO) / len(debits)
    if mean <= 0:
        return []
    threshold = mean * UNUSUAL_MULTIPLE
    rows: list[UnusualTransaction] = []
    for t in debits:
        if t.amount <= threshold:
            continue
        ratio = round(float(t.amount / mean), 1)
        rows.append(
            UnusualTransaction(
                date=t.date,
                description=t.description,
                amount=t.amount,
                ratio=ratio,
                reason=f"Amount is {ratio:.1f}x higher than average",
            )
        )
        if len(rows) == TOP_UNUSUAL:
            break
    return rows


def spending_trends(
    ledger: Sequence[Transaction],
    previous_category_totals: Mapping[str, Decimal] | None = None,
) -> list[SpendingTrend]:
    """Per-category debit totals with a direction against an earlier period.

    Without ``previous_category_totals`` every trend is ``stable`` at 0%. A
    category absent from the previous period (or at zero there) counts as
    ``increasing`` by 100%.
    """

    rows: list[SpendingTrend] = []
    for name, (amount, _) in category_totals(ledger).items():
        trend: TrendDirection = "stable"
        pct = 0.0
        if previous_category_totals is not None:
            before = Decimal(previous_category_totals.get(name, _ZERO))
            if before > 0:
                pct = round(float((amount - before) / before * 100), 2)
            else:
                pct = 100.0
            if pct > TREND_BAND_PCT:
                trend = "increasing"
            elif pct < -TREND_BAND_PCT:
                trend = "decreasing"
        rows.append(SpendingTrend(category=name, amount=amount, trend=trend, percentage=pct))
    rows.sort(key=lambda r: r.amount, reverse=True)
    return rows


def summary_insights(summary: StatementSummary) -> list[str]:
    """Rule-based insights used when no insight writer is configured."""

    insights: list[str] = []
    if summary.total_transactions == 0:
        return insights
    net = summary.net_cash_flow
    if net > 0:
        insights.append(f"Positive cash flow of ₦{net:,.2f} during this period.")
    else:
        insights.append(f"Negative cash flow of ₦{abs(net):,.2f} during this period.")
    if summary.total_expenses > summary.total_income * Decimal("0.8"):
        insights.append(
            "Your expenses are quite high relative to your income. "
            "Consider reviewing your spending habits."
        )
    turnover = summary.total_income + summary.total_expenses
    if turnover / summary.total_transactions > LARGE_AVERAGE_AMOUNT:
        insights.append(
            "You tend to make large transactions. Consider budgeting for better financial control."
        )
    return insights


def analyze(
    ledger: Sequence[Transaction],
    *,
    insights: Iterable[str] = (),
    previous_category_totals: Mapping[str, Decimal] | None = None,
) -> AnalysisResult:
    return AnalysisResult(
        summary=summarize(ledger),
        categories=tuple(category_breakdown(ledger)),
        top_merchants=tuple(top_merchants(ledger)),
        monthly_breakdown=tuple(monthly_breakdown(ledger)),
        patterns=SpendingPatterns(
            recurring_payments=tuple(recurring_payments(ledger)),
            unusual_transactions=tuple(unusual_transactions(ledger)),
            spending_trends=tuple(spending_trends(ledger, previous_category_totals)),
        ),
        insights=tuple(insights),
    )


__all__ = [
    "analyze",
    "summarize",
    "category_totals",
    "category_breakdown",
    "top_merchants",
    "monthly_breakdown",
    "infer_frequency",
    "recurring_payments",
    "unusual_transactions",
    "spending_trends",
    "summary_insights",
]
