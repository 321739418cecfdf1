"""Bounded, sequential classification of a normalized ledger.

Every transaction ends the run with ``category``, ``merchant`` and
``confidence`` set, whatever the external classifier does. Work is split into
units (one transaction for the direct strategy, one description group for the
grouped strategy) and processed in batches; inside a batch, calls run one at a
time. A unit resolves exactly once: from the external classifier, or from the
keyword fallback when a call fails, the breaker is open, the deadline has
passed or the run was cancelled.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from ..config import ClassifierConfig
from ..errors import ExternalClassifierError, ExternalClassifierTimeout
from ..logging_setup import get_logger
from ..models import ClassificationResult, Transaction
from .breaker import CircuitBreaker
from .client import TransactionClassifier
from .fallback import DEFAULT_CATEGORY, fallback_classification, fallback_merchant
from .grouping import group_by_description

type Strategy = Literal["direct", "grouped"]
type Outcome = Literal["exhausted", "breaker_tripped", "deadline_exceeded", "cancelled"]

_logger = get_logger("statement_analysis.classification.orchestrator")


@dataclass(slots=True)
class ClassificationReport:
    """What happened during one run; counts are per transaction, not per unit."""

    strategy: Strategy
    outcome: Outcome = "exhausted"
    ai_classified: int = 0
    fallback_classified: int = 0
    external_calls: int = 0
    failures: int = 0
    elapsed_ms: int = 0

    def to_json(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "outcome": self.outcome,
            "ai_classified": self.ai_classified,
            "fallback_classified": self.fallback_classified,
            "external_calls": self.external_calls,
            "failures": self.failures,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass(slots=True)
class _Run:
    ledger: Sequence[Transaction]
    report: ClassificationReport
    breaker: CircuitBreaker
    started: float
    deadline_at: float
    cancel: asyncio.Event | None
    units: list[tuple[int, ...]] = field(default_factory=list)
    resolved: list[bool] = field(default_factory=list)


def _clamp(confidence: Any) -> float:
    if confidence is None:
        return 0.5
    try:
        value = float(confidence)
    except (TypeError, ValueError):
        return 0.5
    return min(1.0, max(0.0, value))


class ClassificationOrchestrator:
    """Classify a ledger in place and report how the run ended.

    ``classifier=None`` means no external classifier is available: every
    transaction takes the fallback without any call. ``clock`` and ``sleep``
    are injectable so deadlines and pauses can be driven by tests.
    """

    def __init__(
        self,
        classifier: TransactionClassifier | None,
        config: ClassifierConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.classifier = classifier
        self.config = config or ClassifierConfig()
        self._clock = clock
        self._sleep = sleep

    def strategy_for(self, size: int) -> Strategy:
        return "grouped" if size > self.config.grouping_threshold else "direct"

    async def classify(
        self, ledger: Sequence[Transaction], *, cancel: asyncio.Event | None = None
    ) -> ClassificationReport:
        cfg = self.config
        strategy = self.strategy_for(len(ledger))
        started = self._clock()
        run = _Run(
            ledger=ledger,
            report=ClassificationReport(strategy=strategy),
            breaker=CircuitBreaker(cfg.breaker_threshold),
            started=started,
            deadline_at=started + cfg.deadline_for(strategy),
            cancel=cancel,
            resolved=[False] * len(ledger),
        )

        if strategy == "grouped":
            run.units = [g.members for g in group_by_description(ledger)]
        else:
            eligible = min(cfg.max_ai_transactions, len(ledger))
            run.units = [(i,) for i in range(eligible)]
            for i in range(eligible, len(ledger)):
                self._resolve_fallback(run, (i,))

        _logger.info(
            "classify:start strategy=%s transactions=%d units=%d external=%s",
            strategy,
            len(ledger),
            len(run.units),
            self.classifier is not None,
        )

        try:
            if self.classifier is not None:
                await self._run_batches(run, self.classifier)
        except asyncio.CancelledError:
            run.report.outcome = "cancelled"
            self._finish(run)
            _logger.warning("classify:cancelled fallback=%d", run.report.fallback_classified)
            raise
        self._finish(run)
        return run.report

    async def _run_batches(self, run: _Run, classifier: TransactionClassifier) -> None:
        size = self.config.batch_size
        units = run.units
        for batch_no, start in enumerate(range(0, len(units), size)):
            if batch_no > 0 and self.config.batch_pause:
                await self._sleep(self.config.batch_pause)
            if self._check_deadline(run) or self._should_stop(run):
                return
            for members in units[start : start + size]:
                if self._should_stop(run):
                    return
                description = run.ledger[members[0]].description
                result = await self._classify_description(run, classifier, description)
                if result is None:
                    self._resolve_fallback(run, members)
                else:
                    self._resolve(run, members, result)
            _logger.debug(
                "classify:batch_done batch=%d ai=%d fallback=%d failures=%d",
                batch_no,
                run.report.ai_classified,
                run.report.fallback_classified,
                run.report.failures,
            )

    def _check_deadline(self, run: _Run) -> bool:
        if self._clock() >= run.deadline_at:
            run.report.outcome = "deadline_exceeded"
            _logger.warning(
                "classify:deadline_exceeded strategy=%s budget_s=%g",
                run.report.strategy,
                self.config.deadline_for(run.report.strategy),
            )
            return True
        return False

    def _should_stop(self, run: _Run) -> bool:
        if run.cancel is not None and run.cancel.is_set():
            run.report.outcome = "cancelled"
            _logger.info("classify:cancel_requested")
            return True
        if run.breaker.is_open:
            run.report.outcome = "breaker_tripped"
            return True
        return False

    async def _classify_description(
        self, run: _Run, classifier: TransactionClassifier, description: str
    ) -> ClassificationResult | None:
        category = await self._call(run, classifier, "classify_category", description)
        if category is None:
            return None
        if self.config.call_pause:
            await self._sleep(self.config.call_pause)
        if self._should_stop(run):
            return None
        merchant = await self._call(run, classifier, "extract_merchant", description)
        if merchant is None:
            return None
        category_name = (getattr(category, "category", None) or "").strip()
        merchant_name = (getattr(merchant, "name", None) or "").strip()
        return ClassificationResult(
            category=category_name or DEFAULT_CATEGORY,
            merchant=merchant_name or fallback_merchant(description),
            confidence=_clamp(getattr(category, "confidence", None)),
            source="ai",
        )

    async def _call(
        self, run: _Run, classifier: TransactionClassifier, operation: str, description: str
    ) -> Any | None:
        """One external call with retries; ``None`` once every attempt failed."""

        fn = getattr(classifier, operation)
        timeout = self.config.call_timeout
        for attempt in range(self.config.max_retries + 1):
            if run.breaker.is_open:
                return None
            run.report.external_calls += 1
            try:
                result = await asyncio.wait_for(fn(description), timeout=timeout)
            except TimeoutError:
                err: Exception = ExternalClassifierTimeout(operation, timeout)
            except ExternalClassifierError as e:
                err = e
            except Exception as e:  # noqa: BLE001 - any classifier fault is a failed call
                err = ExternalClassifierError(f"{operation} raised {e.__class__.__name__}: {e}")
            else:
                run.breaker.record_success()
                return result
            run.breaker.record_failure()
            run.report.failures += 1
            _logger.warning(
                "classify:call_failed op=%s attempt=%d consecutive=%d error=%s",
                operation,
                attempt + 1,
                run.breaker.consecutive_failures,
                err,
            )
            if run.breaker.is_open:
                _logger.warning(
                    "classify:breaker_open threshold=%d total_failures=%d",
                    run.breaker.threshold,
                    run.breaker.total_failures,
                )
        return None

    def _resolve(self, run: _Run, members: Sequence[int], result: ClassificationResult) -> None:
        for i in members:
            if run.resolved[i]:
                continue
            result.apply(run.ledger[i])
            run.resolved[i] = True
            if result.source == "ai":
                run.report.ai_classified += 1
            else:
                run.report.fallback_classified += 1

    def _resolve_fallback(self, run: _Run, members: Sequence[int]) -> None:
        self._resolve(run, members, fallback_classification(run.ledger[members[0]].description))

    def _finish(self, run: _Run) -> None:
        for members in run.units:
            pending = [i for i in members if not run.resolved[i]]
            if pending:
                self._resolve_fallback(run, pending)
        for i, done in enumerate(run.resolved):
            if not done:
                self._resolve_fallback(run, (i,))
        if run.report.outcome == "exhausted" and run.breaker.is_open:
            run.report.outcome = "breaker_tripped"
        run.report.elapsed_ms = int((self._clock() - run.started) * 1000)
        _logger.info(
            "classify:done strategy=%s outcome=%s ai=%d fallback=%d calls=%d failures=%d",
            run.report.strategy,
            run.report.outcome,
            run.report.ai_classified,
            run.report.fallback_classified,
            run.report.external_calls,
            run.report.failures,
        )


__all__ = ["ClassificationOrchestrator", "ClassificationReport", "Strategy", "Outcome"]
