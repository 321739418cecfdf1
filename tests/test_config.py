from __future__ import annotations

import pytest

from statement_analysis.config import ClassifierConfig, PipelineConfig


def test_classifier_defaults() -> None:
    cfg = ClassifierConfig()

    assert cfg.grouping_threshold == 100
    assert cfg.batch_size == 5
    assert cfg.max_ai_transactions == 30
    assert cfg.breaker_threshold == 3
    assert cfg.deadline_for("direct") == 90.0
    assert cfg.deadline_for("grouped") == 180.0


def test_classifier_from_env_overrides_only_given_fields() -> None:
    cfg = ClassifierConfig.from_env(
        {
            "STATEMENT_ANALYSIS_BATCH_SIZE": "10",
            "STATEMENT_ANALYSIS_CALL_TIMEOUT": "2.5",
            "STATEMENT_ANALYSIS_MAX_RETRIES": " ",
            "UNRELATED": "1",
        }
    )

    assert cfg.batch_size == 10
    assert cfg.call_timeout == 2.5
    assert cfg.max_retries == 1


def test_classifier_from_env_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATEMENT_ANALYSIS_GROUPING_THRESHOLD", "7")

    assert ClassifierConfig.from_env().grouping_threshold == 7


def test_from_env_rejects_unparseable_values() -> None:
    with pytest.raises(ValueError, match="STATEMENT_ANALYSIS_BATCH_SIZE must be a int"):
        ClassifierConfig.from_env({"STATEMENT_ANALYSIS_BATCH_SIZE": "five"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"batch_size": 0},
        {"grouping_threshold": 0},
        {"breaker_threshold": 0},
        {"max_ai_transactions": -1},
        {"max_retries": -1},
        {"call_timeout": 0},
        {"direct_deadline": -5},
        {"batch_pause": -0.1},
    ],
)
def test_classifier_validation(overrides: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        ClassifierConfig(**overrides)


def test_zero_ai_budget_is_allowed() -> None:
    assert ClassifierConfig(max_ai_transactions=0, max_retries=0).max_ai_transactions == 0


def test_without_pauses() -> None:
    cfg = ClassifierConfig(batch_size=3).without_pauses()

    assert (cfg.call_pause, cfg.batch_pause) == (0.0, 0.0)
    assert cfg.batch_size == 3


def test_pipeline_from_env_builds_nested_classifier() -> None:
    cfg = PipelineConfig.from_env(
        {
            "STATEMENT_ANALYSIS_PROCESSING_TIMEOUT": "60",
            "STATEMENT_ANALYSIS_MODEL": " gpt-4.1-mini ",
            "STATEMENT_ANALYSIS_BREAKER_THRESHOLD": "5",
        }
    )

    assert cfg.processing_timeout == 60.0
    assert cfg.insights_timeout == 30.0
    assert cfg.model == "gpt-4.1-mini"
    assert cfg.classifier.breaker_threshold == 5


@pytest.mark.parametrize("field", ["processing_timeout", "insights_timeout"])
def test_pipeline_validation(field: str) -> None:
    with pytest.raises(ValueError, match=field):
        PipelineConfig(**{field: 0})
