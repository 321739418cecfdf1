"""Insight text generation over aggregated statement figures."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from . import analytics, prompting
from .classification.client import DEFAULT_MODEL, extract_response_json
from .errors import ExternalClassifierError
from .logging_setup import get_logger
from .models import StatementSummary, Transaction

INSIGHTS_UNAVAILABLE = "Unable to generate insights for this statement at this time."
MAX_INSIGHTS = 5

_logger = get_logger("statement_analysis.insights")


@runtime_checkable
class InsightWriter(Protocol):
    async def generate_insights(
        self, transactions: Sequence[Transaction], summary: StatementSummary
    ) -> list[str]: ...


class _Insights(BaseModel):
    insights: list[str]


def insight_figures(transactions: Sequence[Transaction]) -> dict[str, object]:
    """Aggregates sent to the model; individual rows never leave the process."""

    return {
        "top_categories": prompting.top_lines(
            [c.model_dump(mode="json") for c in analytics.category_breakdown(transactions)]
        ),
        "top_merchants": prompting.top_lines(
            [m.model_dump(mode="json") for m in analytics.top_merchants(transactions)]
        ),
        "monthly": [m.model_dump(mode="json") for m in analytics.monthly_breakdown(transactions)],
    }


class OpenAIInsightWriter:
    def __init__(self, client: AsyncOpenAI | None = None, *, model: str = DEFAULT_MODEL) -> None:
        self._client = client
        self.model = model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def generate_insights(
        self, transactions: Sequence[Transaction], summary: StatementSummary
    ) -> list[str]:
        payload = prompting.build_insights_input(
            summary.model_dump(mode="json"), insight_figures(transactions)
        )
        try:
            resp = await self._get_client().responses.create(
                model=self.model,
                instructions=prompting.insights_instructions(),
                input=payload,
                text={"format": prompting.insights_response_format()},
            )
            parsed = _Insights.model_validate(extract_response_json(resp))
        except openai.OpenAIError as e:
            raise ExternalClassifierError(f"generate_insights failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ExternalClassifierError(f"generate_insights returned unusable output: {e}") from e
        insights = [s.strip() for s in parsed.insights if s and s.strip()]
        _logger.debug("insights:generated count=%d", len(insights))
        return insights[:MAX_INSIGHTS]


__all__ = [
    "INSIGHTS_UNAVAILABLE",
    "InsightWriter",
    "OpenAIInsightWriter",
    "insight_figures",
]
