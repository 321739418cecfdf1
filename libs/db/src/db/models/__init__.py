"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the statement tables used by ``statement_analysis``.
"""

from .statements import Base, BankStatement, StatementTransaction

__all__ = [
    "Base",
    "BankStatement",
    "StatementTransaction",
]
