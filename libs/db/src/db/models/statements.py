from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------
# bank_statements
# ---------------------------


class BankStatement(Base):
    __tablename__ = "bank_statements"
    __table_args__ = (
        Index("bank_statements_user_id_idx", "user_id"),
        Index("bank_statements_status_idx", "status"),
        Index("bank_statements_created_at_idx", "created_at"),
        CheckConstraint(
            "status IN ('processing','completed','failed')",
            name="ck_bank_statements_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_type: Mapped[str] = mapped_column(String, nullable=False)
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    dialect: Mapped[str | None] = mapped_column(String, nullable=True)
    # {"start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD"}
    statement_period: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # processing | completed | failed
    status: Mapped[str] = mapped_column(String, nullable=False, default="processing")
    analysis_result: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    classification: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_time: Mapped[int | None] = mapped_column(Integer, nullable=True)  # ms
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    transactions: Mapped[list[StatementTransaction]] = relationship(
        back_populates="statement",
        cascade="all, delete-orphan",
        order_by="StatementTransaction.position",
    )


# ---------------------------
# statement_transactions
# ---------------------------


class StatementTransaction(Base):
    __tablename__ = "statement_transactions"
    __table_args__ = (
        Index("statement_transactions_statement_id_idx", "statement_id"),
        Index("statement_transactions_date_idx", "date"),
        Index("statement_transactions_category_idx", "category"),
        CheckConstraint("amount > 0", name="ck_statement_transactions_amount_positive"),
        CheckConstraint("type IN ('debit','credit')", name="ck_statement_transactions_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    statement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bank_statements.id", ondelete="CASCADE"), nullable=False
    )
    # Ledger order within the statement.
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)  # debit | credit
    balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    reference: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    merchant: Mapped[str | None] = mapped_column(String, nullable=True)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    raw_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    statement: Mapped[BankStatement] = relationship(back_populates="transactions")
