"""Public interface for the ``statement_analysis`` package.

Symbol re-exports only: the caller-facing operation, the statement processor,
the collaborator protocols and the public models. The SQL store lives in
``statement_analysis.persistence`` and is imported on demand.
"""

from .analytics import analyze
from .classification import (
    ClassificationOrchestrator,
    ClassificationReport,
    OpenAIClassifier,
    TransactionClassifier,
)
from .config import ClassifierConfig, PipelineConfig
from .errors import (
    ExternalClassifierError,
    ExternalClassifierTimeout,
    MalformedRecord,
    NoTransactionsFound,
    ProcessingTimeout,
    StatementAnalysisError,
    UnsupportedFileType,
)
from .insights import INSIGHTS_UNAVAILABLE, InsightWriter, OpenAIInsightWriter
from .models import (
    AnalysisResult,
    RawTransactionRecord,
    StatementPeriod,
    StatementStatus,
    StatementSummary,
    Transaction,
    TransactionType,
)
from .pipeline import (
    ProcessedStatement,
    StatementProcessor,
    StatementResult,
    StatementStore,
    StoredStatement,
    process_statement,
)

__all__ = [
    # Operations
    "process_statement",
    "analyze",
    "StatementProcessor",
    "ClassificationOrchestrator",
    # Collaborators
    "TransactionClassifier",
    "OpenAIClassifier",
    "InsightWriter",
    "OpenAIInsightWriter",
    "StatementStore",
    "INSIGHTS_UNAVAILABLE",
    # Config
    "ClassifierConfig",
    "PipelineConfig",
    # Models / types
    "RawTransactionRecord",
    "Transaction",
    "TransactionType",
    "StatementStatus",
    "StatementPeriod",
    "StatementSummary",
    "AnalysisResult",
    "ClassificationReport",
    "StatementResult",
    "StoredStatement",
    "ProcessedStatement",
    # Errors
    "StatementAnalysisError",
    "UnsupportedFileType",
    "NoTransactionsFound",
    "ProcessingTimeout",
    "MalformedRecord",
    "ExternalClassifierError",
    "ExternalClassifierTimeout",
]
