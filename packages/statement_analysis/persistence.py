"""SQLAlchemy-backed :class:`~statement_analysis.pipeline.StatementStore`.

Each method runs in its own ``db.client.session_scope`` transaction. The
ledger and the analysis of a completed statement are written together in the
transaction that flips the status, so a statement is either fully committed
or not committed at all.
"""

from __future__ import annotations

from typing import Any

from db.client import session_scope
from db.models import BankStatement, StatementTransaction
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import StatementPeriod, StatementStatus
from .pipeline import StatementResult, StoredStatement

_logger = get_logger("statement_analysis.persistence")


def _row_to_json(row: StatementTransaction) -> dict[str, Any]:
    return {
        "date": row.date.isoformat(),
        "description": row.description,
        "amount": f"{row.amount:f}",
        "type": row.type,
        "balance": None if row.balance is None else f"{row.balance:f}",
        "reference": row.reference,
        "category": row.category,
        "merchant": row.merchant,
        "confidence": row.confidence,
    }


class SqlStatementStore:
    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    def _load(self, s: Session, statement_id: str) -> BankStatement:
        row = s.get(BankStatement, statement_id)
        if row is None:
            raise LookupError(f"Unknown statement id: {statement_id}")
        return row

    def create_statement(
        self,
        *,
        file_name: str,
        file_type: str,
        file_size: int,
        user_id: str | None = None,
        bank_name: str | None = None,
    ) -> str:
        with session_scope(database_url=self.database_url) as s:
            row = BankStatement(
                file_name=file_name,
                file_type=file_type,
                file_size=file_size,
                user_id=user_id,
                bank_name=bank_name,
                status=StatementStatus.PROCESSING.value,
            )
            s.add(row)
            s.flush()
            statement_id = row.id
        _logger.debug("store:created id=%s", statement_id)
        return statement_id

    def complete_statement(
        self, statement_id: str, *, result: StatementResult, processing_time_ms: int
    ) -> None:
        with session_scope(database_url=self.database_url) as s:
            row = self._load(s, statement_id)
            row.status = StatementStatus.COMPLETED.value
            row.bank_name = result.bank_name or row.bank_name
            row.dialect = result.dialect
            row.statement_period = (
                None
                if result.statement_period is None
                else result.statement_period.model_dump(mode="json")
            )
            row.analysis_result = result.analysis.model_dump(mode="json")
            row.classification = result.classification.to_json()
            row.processing_time = processing_time_ms
            row.error_message = None
            row.transactions = [
                StatementTransaction(
                    position=i,
                    date=t.date,
                    description=t.description,
                    amount=t.amount,
                    type=t.type.value,
                    balance=t.balance,
                    reference=t.reference,
                    category=t.category,
                    merchant=t.merchant,
                    confidence=t.confidence,
                    raw_data=dict(t.raw) if t.raw is not None else None,
                )
                for i, t in enumerate(result.transactions)
            ]
        _logger.debug(
            "store:completed id=%s transactions=%d", statement_id, len(result.transactions)
        )

    def fail_statement(
        self, statement_id: str, *, error_message: str, processing_time_ms: int
    ) -> None:
        with session_scope(database_url=self.database_url) as s:
            row = self._load(s, statement_id)
            row.status = StatementStatus.FAILED.value
            row.error_message = error_message
            row.processing_time = processing_time_ms
            row.transactions = []
            row.analysis_result = None
        _logger.debug("store:failed id=%s", statement_id)

    def get_statement(self, statement_id: str) -> StoredStatement | None:
        with session_scope(database_url=self.database_url) as s:
            row = s.get(BankStatement, statement_id)
            if row is None:
                return None
            return _to_stored(row, with_transactions=True)

    def list_statements(self, user_id: str, *, limit: int = 10) -> list[StoredStatement]:
        """Most recent statements of ``user_id``, newest first, without ledgers."""

        if limit < 1:
            raise ValueError("limit must be >= 1")
        stmt = (
            select(BankStatement)
            .where(BankStatement.user_id == user_id)
            .order_by(BankStatement.created_at.desc())
            .limit(limit)
        )
        with session_scope(database_url=self.database_url) as s:
            return [_to_stored(row) for row in s.scalars(stmt)]

    def delete_statement(self, statement_id: str, user_id: str | None = None) -> None:
        """Delete a statement and its ledger.

        With ``user_id`` the statement must belong to that user; without it
        the ownership check is skipped (no-auth mode).
        """

        with session_scope(database_url=self.database_url) as s:
            row = self._load(s, statement_id)
            if user_id is not None and row.user_id != user_id:
                raise PermissionError(
                    f"Statement {statement_id} does not belong to user {user_id}"
                )
            s.delete(row)
        _logger.debug("store:deleted id=%s", statement_id)


def _to_stored(row: BankStatement, *, with_transactions: bool = False) -> StoredStatement:
    return StoredStatement(
        id=row.id,
        file_name=row.file_name,
        file_type=row.file_type,
        file_size=row.file_size,
        status=StatementStatus(row.status),
        user_id=row.user_id,
        bank_name=row.bank_name,
        statement_period=(
            None
            if row.statement_period is None
            else StatementPeriod.model_validate(row.statement_period)
        ),
        error_message=row.error_message,
        processing_time_ms=row.processing_time,
        analysis=row.analysis_result,
        transactions=(
            tuple(_row_to_json(t) for t in row.transactions) if with_transactions else ()
        ),
    )


__all__ = ["SqlStatementStore"]
