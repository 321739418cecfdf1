"""Deterministic keyword classifier used whenever the external one is not.

Always available and instant: category by keyword substring (first matching
category in table order wins, otherwise ``Other``), merchant from the first
three words of the description, confidence fixed at 0.3.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..models import ClassificationResult

FALLBACK_CONFIDENCE = 0.3
DEFAULT_CATEGORY = "Other"
MERCHANT_WORDS = 3

CATEGORY_KEYWORDS: Mapping[str, Sequence[str]] = {
    "Food & Dining": (
        "restaurant",
        "food",
        "lunch",
        "dinner",
        "cafe",
        "pizza",
        "chicken",
        "mcdonald",
        "kfc",
    ),
    "Transportation": ("uber", "taxi", "bus", "transport", "fuel", "petrol", "gas"),
    "Shopping": ("shoprite", "mall", "store", "market", "purchase", "buy"),
    "Bills & Utilities": (
        "electric",
        "water",
        "phone",
        "internet",
        "dstv",
        "cable",
        "subscription",
    ),
    "Banking": ("bank", "atm", "transfer", "fee", "charge"),
    "Healthcare": ("hospital", "clinic", "pharmacy", "medical", "doctor"),
    "Entertainment": ("cinema", "movie", "game", "entertainment", "music"),
}


def fallback_category(description: str) -> str:
    lower = description.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(k in lower for k in keywords):
            return category
    return DEFAULT_CATEGORY


def fallback_merchant(description: str) -> str:
    words = description.split()
    return " ".join(words[:MERCHANT_WORDS]) or description.strip() or "Unknown"


def fallback_classification(description: str) -> ClassificationResult:
    return ClassificationResult(
        category=fallback_category(description),
        merchant=fallback_merchant(description),
        confidence=FALLBACK_CONFIDENCE,
        source="fallback",
    )


__all__ = [
    "FALLBACK_CONFIDENCE",
    "DEFAULT_CATEGORY",
    "CATEGORY_KEYWORDS",
    "fallback_category",
    "fallback_merchant",
    "fallback_classification",
]
