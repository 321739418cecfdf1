from __future__ import annotations

import pytest

from statement_analysis.classification import (
    DEFAULT_CATEGORY,
    FALLBACK_CONFIDENCE,
    fallback_classification,
)
from statement_analysis.classification.breaker import CircuitBreaker
from statement_analysis.classification.fallback import fallback_category, fallback_merchant
from statement_analysis.classification.grouping import (
    group_by_description,
    normalize_description_key,
)
from tests.helpers.stubs import ledger_of


@pytest.mark.parametrize(
    ("description", "category"),
    [
        ("KFC LEKKI PHASE 1", "Food & Dining"),
        ("UBER TRIP 4471", "Transportation"),
        ("POS PURCHASE SHOPRITE IKEJA", "Shopping"),
        ("DSTV SUBSCRIPTION", "Bills & Utilities"),
        ("ATM WITHDRAWAL", "Banking"),
        ("CITY PHARMACY", "Healthcare"),
        ("FILMHOUSE CINEMA", "Entertainment"),
        ("MISC 123", DEFAULT_CATEGORY),
    ],
)
def test_fallback_category_keywords(description: str, category: str) -> None:
    assert fallback_category(description) == category


def test_fallback_category_takes_first_matching_category() -> None:
    # "food" (Food & Dining) precedes "market" (Shopping) in table order.
    assert fallback_category("FOOD MARKET") == "Food & Dining"


def test_fallback_merchant_is_first_three_words() -> None:
    assert fallback_merchant("POS PURCHASE SHOPRITE IKEJA LAGOS") == "POS PURCHASE SHOPRITE"
    assert fallback_merchant("NETFLIX") == "NETFLIX"
    assert fallback_merchant("   ") == "Unknown"


def test_fallback_classification_has_fixed_confidence() -> None:
    result = fallback_classification("UBER TRIP")

    assert result.category == "Transportation"
    assert result.merchant == "UBER TRIP"
    assert result.confidence == FALLBACK_CONFIDENCE == 0.3
    assert result.source == "fallback"


@pytest.mark.parametrize(
    ("description", "key"),
    [
        ("POS PURCHASE SHOPRITE #1234", "pos purchase shoprite"),
        ("pos purchase - shoprite 99", "pos purchase shoprite"),
        ("NETFLIX.COM", "netflix com"),
        ("TRF_TO_JOHN", "trf to john"),
        ("1234-5678", None),
        (None, None),
    ],
)
def test_normalize_description_key(description: str | None, key: str | None) -> None:
    assert normalize_description_key(description) == key


def test_group_by_description_keeps_first_appearance_order() -> None:
    ledger = ledger_of(
        [
            "POS PURCHASE SHOPRITE #1234",
            "NETFLIX 555",
            "pos purchase - shoprite 99",
            "0000",
            "NETFLIX 777",
            "0000",
        ]
    )

    groups = group_by_description(ledger)

    assert [(g.key, g.members) for g in groups] == [
        ("pos purchase shoprite", (0, 2)),
        ("netflix", (1, 4)),
        (None, (3,)),
        (None, (5,)),
    ]
    assert groups[0].representative == 0


def test_breaker_opens_on_consecutive_failures_and_stays_open() -> None:
    breaker = CircuitBreaker(3)

    breaker.record_failure()
    breaker.record_failure()
    breaker.record_success()
    assert breaker.consecutive_failures == 0
    assert not breaker.is_open

    for _ in range(3):
        breaker.record_failure()
    assert breaker.is_open
    assert breaker.total_failures == 5

    breaker.record_success()
    assert breaker.is_open


def test_breaker_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError):
        CircuitBreaker(0)
