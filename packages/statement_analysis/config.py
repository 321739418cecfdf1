"""Explicit configuration objects.

Nothing in the pipeline reads tunables from module globals: a
:class:`ClassifierConfig` is handed to the classification orchestrator and a
:class:`PipelineConfig` to the statement processor. ``from_env`` builds
either from ``STATEMENT_ANALYSIS_*`` variables (CLI and worker entrypoints
load ``.env`` first).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Self

_ENV_PREFIX = "STATEMENT_ANALYSIS_"


def _read_env(cls: type, env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``<PREFIX><FIELD>`` overrides for the int/float fields of ``cls``."""

    values: dict[str, Any] = {}
    for f in fields(cls):
        raw = env.get(_ENV_PREFIX + f.name.upper())
        if raw is None or not raw.strip():
            continue
        kind = f.type if isinstance(f.type, str) else getattr(f.type, "__name__", "")
        try:
            if kind == "int":
                values[f.name] = int(raw)
            elif kind == "float":
                values[f.name] = float(raw)
            elif kind == "str":
                values[f.name] = raw.strip()
        except ValueError as e:
            raise ValueError(
                f"{_ENV_PREFIX}{f.name.upper()} must be a {kind}, got {raw!r}"
            ) from e
    return values


@dataclass(frozen=True, slots=True)
class ClassifierConfig:
    """Limits for one classification run.

    Attributes
    ----------
    grouping_threshold:
        Ledgers with more transactions than this use the grouped strategy.
    batch_size:
        Transactions (direct) or groups (grouped) per batch.
    max_ai_transactions:
        Direct strategy only: how many leading transactions may be sent to the
        external classifier; the rest take the fallback.
    max_retries:
        Extra attempts per external call after the first one fails.
    breaker_threshold:
        Consecutive failed external calls that stop all further calls.
    direct_deadline / grouped_deadline:
        Wall-clock budget (seconds) for the whole run, per strategy.
    call_timeout:
        Seconds before a single external call counts as failed.
    call_pause / batch_pause:
        Seconds to wait between the category and merchant calls and between
        batches.
    """

    grouping_threshold: int = 100
    batch_size: int = 5
    max_ai_transactions: int = 30
    max_retries: int = 1
    breaker_threshold: int = 3
    direct_deadline: float = 90.0
    grouped_deadline: float = 180.0
    call_timeout: float = 10.0
    call_pause: float = 0.1
    batch_pause: float = 0.5

    def __post_init__(self) -> None:
        for name in ("grouping_threshold", "batch_size", "breaker_threshold"):
            if getattr(self, name) < 1:
                raise ValueError(f"ClassifierConfig.{name} must be >= 1")
        for name in ("max_ai_transactions", "max_retries"):
            if getattr(self, name) < 0:
                raise ValueError(f"ClassifierConfig.{name} must be >= 0")
        for name in ("direct_deadline", "grouped_deadline", "call_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"ClassifierConfig.{name} must be > 0")
        for name in ("call_pause", "batch_pause"):
            if getattr(self, name) < 0:
                raise ValueError(f"ClassifierConfig.{name} must be >= 0")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Self:
        return cls(**_read_env(cls, os.environ if env is None else env))

    def deadline_for(self, strategy: str) -> float:
        return self.grouped_deadline if strategy == "grouped" else self.direct_deadline

    def without_pauses(self) -> ClassifierConfig:
        return replace(self, call_pause=0.0, batch_pause=0.0)


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Settings for processing one statement end to end."""

    processing_timeout: float = 300.0
    insights_timeout: float = 30.0
    model: str = "gpt-4o-mini"
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    def __post_init__(self) -> None:
        if self.processing_timeout <= 0:
            raise ValueError("PipelineConfig.processing_timeout must be > 0")
        if self.insights_timeout <= 0:
            raise ValueError("PipelineConfig.insights_timeout must be > 0")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Self:
        source = os.environ if env is None else env
        return cls(classifier=ClassifierConfig.from_env(source), **_read_env(cls, source))


__all__ = ["ClassifierConfig", "PipelineConfig"]
