"""End-to-end statement processing.

``process_statement`` is the caller-facing operation: bytes and a declared
file type in, a classified ledger and its analysis out. ``StatementProcessor``
wraps it with the store lifecycle (``processing`` -> ``completed`` |
``failed``) and the outer processing timeout.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .analytics import analyze, summary_insights
from .classification import ClassificationOrchestrator, ClassificationReport
from .classification.client import TransactionClassifier
from .config import PipelineConfig
from .dialects import GENERIC, bank_name_for, detect_bank_name
from .errors import NoTransactionsFound, ProcessingTimeout
from .extractors import ExtractionResult, extractor_for
from .insights import INSIGHTS_UNAVAILABLE, InsightWriter
from .ledger import normalize_records, statement_period
from .logging_setup import get_logger
from .models import (
    AnalysisResult,
    StatementPeriod,
    StatementStatus,
    StatementSummary,
    Transaction,
)

_logger = get_logger("statement_analysis.pipeline")


@dataclass(frozen=True, slots=True)
class StatementResult:
    transactions: tuple[Transaction, ...]
    analysis: AnalysisResult
    bank_name: str | None
    statement_period: StatementPeriod | None
    dialect: str
    classification: ClassificationReport

    def to_json(self) -> dict[str, Any]:
        return {
            "bank_name": self.bank_name,
            "dialect": self.dialect,
            "statement_period": (
                None
                if self.statement_period is None
                else self.statement_period.model_dump(mode="json")
            ),
            "transactions": [t.to_json() for t in self.transactions],
            "analysis": self.analysis.model_dump(mode="json"),
            "classification": self.classification.to_json(),
        }


def extract_ledger(
    file_bytes: bytes, file_type: str
) -> tuple[list[Transaction], ExtractionResult]:
    """Extract and normalize; raises ``UnsupportedFileType``/``NoTransactionsFound``."""

    extractor = extractor_for(file_type)
    extraction = extractor.extract(file_bytes)
    _logger.info(
        "extract:done family=%s dialect=%s records=%d dropped=%d",
        extractor.family,
        extraction.dialect,
        len(extraction.records),
        extraction.dropped,
    )
    if not extraction.records:
        raise NoTransactionsFound(f"no rows matched a known {extractor.family} layout")
    return normalize_records(extraction.records), extraction


def statement_bank_name(extraction: ExtractionResult, ledger: Sequence[Transaction]) -> str | None:
    if extraction.dialect != GENERIC:
        name = bank_name_for(extraction.dialect)
        if name:
            return name
    texts: list[str | None] = []
    for t in ledger:
        texts.append(t.description)
        texts.append(t.reference)
    return detect_bank_name(texts)


async def _generate_insights(
    ledger: Sequence[Transaction],
    summary: StatementSummary,
    writer: InsightWriter | None,
    timeout: float,
) -> list[str]:
    if writer is None:
        return summary_insights(summary)
    try:
        insights = await asyncio.wait_for(writer.generate_insights(ledger, summary), timeout)
    except TimeoutError:
        _logger.warning("insights:timeout timeout_s=%g", timeout)
        return [INSIGHTS_UNAVAILABLE]
    except Exception as e:  # noqa: BLE001 - insight failures never fail the statement
        _logger.warning("insights:failed error=%s", e)
        return [INSIGHTS_UNAVAILABLE]
    return list(insights) or [INSIGHTS_UNAVAILABLE]


async def process_statement(
    file_bytes: bytes,
    file_type: str,
    *,
    classifier: TransactionClassifier | None = None,
    insight_writer: InsightWriter | None = None,
    config: PipelineConfig | None = None,
    cancel: asyncio.Event | None = None,
) -> StatementResult:
    """Extract, normalize, classify and analyze one statement.

    Without a ``classifier`` every transaction gets the keyword fallback;
    without an ``insight_writer`` insights are rule based.
    """

    cfg = config or PipelineConfig()
    ledger, extraction = extract_ledger(file_bytes, file_type)

    orchestrator = ClassificationOrchestrator(classifier, cfg.classifier)
    report = await orchestrator.classify(ledger, cancel=cancel)

    analysis = analyze(ledger)
    insights = await _generate_insights(
        ledger, analysis.summary, insight_writer, cfg.insights_timeout
    )
    return StatementResult(
        transactions=tuple(ledger),
        analysis=analysis.with_insights(insights),
        bank_name=statement_bank_name(extraction, ledger),
        statement_period=statement_period(ledger),
        dialect=extraction.dialect,
        classification=report,
    )


# ---------------------------------------------------------------------------
# Store lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StoredStatement:
    id: str
    file_name: str
    file_type: str
    file_size: int
    status: StatementStatus
    user_id: str | None = None
    bank_name: str | None = None
    statement_period: StatementPeriod | None = None
    error_message: str | None = None
    processing_time_ms: int | None = None
    analysis: dict[str, Any] | None = None
    transactions: tuple[dict[str, Any], ...] = ()


class StatementStore(Protocol):
    def create_statement(
        self,
        *,
        file_name: str,
        file_type: str,
        file_size: int,
        user_id: str | None = None,
        bank_name: str | None = None,
    ) -> str: ...

    def complete_statement(
        self, statement_id: str, *, result: StatementResult, processing_time_ms: int
    ) -> None: ...

    def fail_statement(
        self, statement_id: str, *, error_message: str, processing_time_ms: int
    ) -> None: ...

    def get_statement(self, statement_id: str) -> StoredStatement | None: ...

    def list_statements(self, user_id: str, *, limit: int = 10) -> list[StoredStatement]: ...

    def delete_statement(self, statement_id: str, user_id: str | None = None) -> None: ...


@dataclass(frozen=True, slots=True)
class ProcessedStatement:
    statement_id: str
    result: StatementResult
    processing_time_ms: int


class StatementProcessor:
    """Run ``process_statement`` for one upload and record the outcome.

    A statement ends either ``completed`` with its ledger and analysis, or
    ``failed`` with a message; partial work is never committed. Terminal
    errors are re-raised after the store is updated.
    """

    def __init__(
        self,
        store: StatementStore,
        *,
        classifier: TransactionClassifier | None = None,
        insight_writer: InsightWriter | None = None,
        config: PipelineConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.insight_writer = insight_writer
        self.config = config or PipelineConfig()
        self._clock = clock

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)

    async def run(
        self,
        file_bytes: bytes,
        file_name: str,
        file_type: str | None = None,
        user_id: str | None = None,
        bank_name: str | None = None,
    ) -> ProcessedStatement:
        declared = file_type or file_name
        statement_id = self.store.create_statement(
            file_name=file_name,
            file_type=declared,
            file_size=len(file_bytes),
            user_id=user_id,
            bank_name=bank_name,
        )
        _logger.info(
            "statement:processing id=%s file=%s size=%d", statement_id, file_name, len(file_bytes)
        )
        started = self._clock()
        timeout = self.config.processing_timeout
        try:
            async with asyncio.timeout(timeout):
                result = await process_statement(
                    file_bytes,
                    declared,
                    classifier=self.classifier,
                    insight_writer=self.insight_writer,
                    config=self.config,
                )
        except TimeoutError as e:
            err = ProcessingTimeout(timeout)
            self._fail(statement_id, str(err), started)
            raise err from e
        except asyncio.CancelledError:
            self._fail(statement_id, "Statement processing was cancelled", started)
            raise
        except Exception as e:
            self._fail(statement_id, str(e) or e.__class__.__name__, started)
            raise

        if bank_name:
            result = dataclasses.replace(result, bank_name=bank_name)
        elapsed = self._elapsed_ms(started)
        try:
            self.store.complete_statement(statement_id, result=result, processing_time_ms=elapsed)
        except Exception as e:
            message = f"Could not save statement results: {str(e) or e.__class__.__name__}"
            try:
                self._fail(statement_id, message, started, elapsed_ms=elapsed)
            except Exception as fail_error:  # noqa: BLE001 - the save error is the one to surface
                _logger.error(
                    "statement:fail_unrecorded id=%s error=%s", statement_id, fail_error
                )
            raise
        _logger.info(
            "statement:completed id=%s transactions=%d bank=%s elapsed_ms=%d",
            statement_id,
            len(result.transactions),
            result.bank_name,
            elapsed,
        )
        return ProcessedStatement(
            statement_id=statement_id, result=result, processing_time_ms=elapsed
        )

    def _fail(
        self, statement_id: str, message: str, started: float, *, elapsed_ms: int | None = None
    ) -> None:
        elapsed = self._elapsed_ms(started) if elapsed_ms is None else elapsed_ms
        self.store.fail_statement(statement_id, error_message=message, processing_time_ms=elapsed)
        _logger.warning(
            "statement:failed id=%s elapsed_ms=%d error=%s", statement_id, elapsed, message
        )


__all__ = [
    "StatementResult",
    "extract_ledger",
    "statement_bank_name",
    "process_statement",
    "StoredStatement",
    "StatementStore",
    "ProcessedStatement",
    "StatementProcessor",
]
