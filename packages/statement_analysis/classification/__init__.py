"""Transaction classification: orchestrator, external client and fallback."""

from __future__ import annotations

from .fallback import (
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    FALLBACK_CONFIDENCE,
    fallback_classification,
)
from .breaker import CircuitBreaker
from .grouping import DescriptionGroup, group_by_description, normalize_description_key
from .client import (
    CategoryGuess,
    MerchantGuess,
    OpenAIClassifier,
    TransactionClassifier,
)
from .orchestrator import ClassificationOrchestrator, ClassificationReport

__all__ = [
    "CATEGORY_KEYWORDS",
    "DEFAULT_CATEGORY",
    "FALLBACK_CONFIDENCE",
    "fallback_classification",
    "CircuitBreaker",
    "DescriptionGroup",
    "group_by_description",
    "normalize_description_key",
    "CategoryGuess",
    "MerchantGuess",
    "OpenAIClassifier",
    "TransactionClassifier",
    "ClassificationOrchestrator",
    "ClassificationReport",
]
