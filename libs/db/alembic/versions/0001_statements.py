# ruff: noqa: I001
"""Bank statement and statement transaction tables.

Revision ID: 0001_statements
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_statements"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "bank_statements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=False),
        sa.Column("bank_name", sa.String(), nullable=True),
        sa.Column("dialect", sa.String(), nullable=True),
        sa.Column("statement_period", sa.JSON(), nullable=True),
        sa.Column(
            "status",
            sa.String(),
            nullable=False,
            server_default=sa.text("'processing'"),
        ),
        sa.Column("analysis_result", sa.JSON(), nullable=True),
        sa.Column("classification", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("processing_time", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "status IN ('processing','completed','failed')",
            name="ck_bank_statements_status",
        ),
    )
    op.create_index("bank_statements_user_id_idx", "bank_statements", ["user_id"])
    op.create_index("bank_statements_status_idx", "bank_statements", ["status"])
    op.create_index("bank_statements_created_at_idx", "bank_statements", ["created_at"])

    op.create_table(
        "statement_transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "statement_id",
            sa.String(36),
            sa.ForeignKey("bank_statements.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("balance", sa.Numeric(18, 2), nullable=True),
        sa.Column("reference", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("merchant", sa.String(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("raw_data", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("amount > 0", name="ck_statement_transactions_amount_positive"),
        sa.CheckConstraint(
            "type IN ('debit','credit')", name="ck_statement_transactions_type"
        ),
    )
    op.create_index(
        "statement_transactions_statement_id_idx", "statement_transactions", ["statement_id"]
    )
    op.create_index("statement_transactions_date_idx", "statement_transactions", ["date"])
    op.create_index(
        "statement_transactions_category_idx", "statement_transactions", ["category"]
    )


def downgrade() -> None:
    op.drop_index("statement_transactions_category_idx", table_name="statement_transactions")
    op.drop_index("statement_transactions_date_idx", table_name="statement_transactions")
    op.drop_index("statement_transactions_statement_id_idx", table_name="statement_transactions")
    op.drop_table("statement_transactions")
    op.drop_index("bank_statements_created_at_idx", table_name="bank_statements")
    op.drop_index("bank_statements_status_idx", table_name="bank_statements")
    op.drop_index("bank_statements_user_id_idx", table_name="bank_statements")
    op.drop_table("bank_statements")
