"""External classifier contract and its OpenAI Responses implementation.

The orchestrator only depends on :class:`TransactionClassifier`: two async,
side-effect-free calls that may fail or hang. Timeouts are applied by the
orchestrator, not here; this module turns SDK and parsing failures into
:class:`~statement_analysis.errors.ExternalClassifierError`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar, runtime_checkable

import openai
from openai import AsyncOpenAI
from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .. import prompting
from ..errors import ExternalClassifierError
from ..logging_setup import get_logger

DEFAULT_MODEL = "gpt-4o-mini"

_logger = get_logger("statement_analysis.classification.client")


def _clamp_confidence(v: Any) -> float:
    if v is None:
        return 0.5
    f = float(v)
    return min(1.0, max(0.0, f))


class CategoryGuess(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    category: str
    confidence: float = 0.5

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_in_unit_interval(cls, v: Any) -> float:
        return _clamp_confidence(v)


class MerchantGuess(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str
    confidence: float = 0.5

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_in_unit_interval(cls, v: Any) -> float:
        return _clamp_confidence(v)


@runtime_checkable
class TransactionClassifier(Protocol):
    async def classify_category(self, description: str) -> CategoryGuess: ...

    async def extract_merchant(self, description: str) -> MerchantGuess: ...


def extract_response_json(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON object from a Responses API result.

    Prefers ``resp.output_text`` and falls back to
    ``resp.output[0].content[0].text``; raises ``ValueError`` when no text is
    present or it is not a JSON object.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        try:
            first = resp.output[0] if getattr(resp, "output", None) else None
            content = getattr(first, "content", None)
            if content:
                txt_obj = getattr(content[0], "text", None)
                if isinstance(txt_obj, str):
                    text = txt_obj
                else:
                    maybe_val = getattr(txt_obj, "value", None)
                    if isinstance(maybe_val, str):
                        text = maybe_val
        except (AttributeError, IndexError, TypeError):
            text = None
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Model output was not a JSON object")
    return decoded


_M = TypeVar("_M", bound=BaseModel)


class OpenAIClassifier:
    """:class:`TransactionClassifier` backed by ``AsyncOpenAI().responses``."""

    def __init__(self, client: AsyncOpenAI | None = None, *, model: str = DEFAULT_MODEL) -> None:
        self._client = client
        self.model = model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def _ask(
        self,
        operation: str,
        description: str,
        *,
        instructions: str,
        response_format: ResponseFormatTextJSONSchemaConfigParam,
        model_cls: type[_M],
    ) -> _M:
        try:
            resp = await self._get_client().responses.create(
                model=self.model,
                instructions=instructions,
                input=description,
                text={"format": response_format},
            )
            return model_cls.model_validate(extract_response_json(resp))
        except openai.OpenAIError as e:
            status = getattr(e, "status_code", None)
            _logger.warning(
                "classifier:api_error op=%s status=%s error=%s",
                operation,
                status,
                e.__class__.__name__,
            )
            raise ExternalClassifierError(f"{operation} failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ExternalClassifierError(f"{operation} returned unusable output: {e}") from e

    async def classify_category(self, description: str) -> CategoryGuess:
        return await self._ask(
            "classify_category",
            description,
            instructions=prompting.category_instructions(),
            response_format=prompting.category_response_format(),
            model_cls=CategoryGuess,
        )

    async def extract_merchant(self, description: str) -> MerchantGuess:
        return await self._ask(
            "extract_merchant",
            description,
            instructions=prompting.merchant_instructions(),
            response_format=prompting.merchant_response_format(),
            model_cls=MerchantGuess,
        )


__all__ = [
    "DEFAULT_MODEL",
    "CategoryGuess",
    "MerchantGuess",
    "TransactionClassifier",
    "OpenAIClassifier",
    "extract_response_json",
]
