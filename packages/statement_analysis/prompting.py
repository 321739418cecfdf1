"""Prompts and strict JSON response formats for the OpenAI-backed collaborators.

- Transaction category and merchant extraction (one description per call).
- Spending insights over aggregated figures.

Response formats follow the Responses API ``text.format`` shape with
``strict: true`` so the model output can be validated with pydantic.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .classification.fallback import CATEGORY_KEYWORDS, DEFAULT_CATEGORY

ALLOWED_CATEGORIES: tuple[str, ...] = (
    *CATEGORY_KEYWORDS.keys(),
    "Income",
    "Education",
    "Savings & Investments",
    DEFAULT_CATEGORY,
)


def category_instructions() -> str:
    return (
        "You are a financial classification expert for Nigerian bank and wallet statements. "
        "Given one transaction description, choose exactly one category from the allowed "
        "list and report how confident you are as a number between 0 and 1. Descriptions "
        "are often truncated narrations such as 'POS PURCHASE SHOPRITE LEKKI' or "
        "'NIP TRF TO JOHN DOE'. Never invent categories; use 'Other' when nothing fits. "
        "Respond with JSON only, per the schema.\n\nAllowed categories: "
        + ", ".join(ALLOWED_CATEGORIES)
    )


def merchant_instructions() -> str:
    return (
        "You extract the merchant or counterparty name from a bank transaction "
        "description. Return the shortest recognizable business or person name, without "
        "channel prefixes (POS, NIP, TRF, WEB), reference numbers or locations. Report a "
        "confidence between 0 and 1. Respond with JSON only, per the schema."
    )


def insights_instructions() -> str:
    return (
        "You are a Nigerian personal finance advisor. From the aggregated statement figures "
        "provided, write 3 to 5 short, practical insights about the account holder's cash "
        "flow and spending, focusing on the top 2-3 spending categories. Amounts are in "
        "Naira (₦). Respond with JSON only, per the schema."
    )


def _object_schema(
    name: str, properties: Mapping[str, Any]
) -> ResponseFormatTextJSONSchemaConfigParam:
    return {
        "type": "json_schema",
        "name": name,
        "schema": {
            "type": "object",
            "properties": dict(properties),
            "required": list(properties.keys()),
            "additionalProperties": False,
        },
        "strict": True,
    }


def category_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    return _object_schema(
        "transaction_category",
        {
            "category": {"type": "string", "enum": list(ALLOWED_CATEGORIES)},
            "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        },
    )


def merchant_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    return _object_schema(
        "transaction_merchant",
        {
            "name": {"type": "string"},
            "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        },
    )


def insights_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    return _object_schema(
        "statement_insights",
        {"insights": {"type": "array", "items": {"type": "string"}}},
    )


def build_insights_input(summary: Mapping[str, Any], figures: Mapping[str, Any]) -> str:
    """User content for the insights call: aggregated figures only, no raw rows."""

    payload = {"summary": dict(summary), **dict(figures)}
    return "STATEMENT_FIGURES_JSON\n" + json.dumps(payload, ensure_ascii=False, default=str)


def top_lines(items: Sequence[Mapping[str, Any]], limit: int = 5) -> list[dict[str, Any]]:
    return [dict(i) for i in items[:limit]]


__all__ = [
    "ALLOWED_CATEGORIES",
    "category_instructions",
    "merchant_instructions",
    "insights_instructions",
    "category_response_format",
    "merchant_response_format",
    "insights_response_format",
    "build_insights_input",
    "top_lines",
]
