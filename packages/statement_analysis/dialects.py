"""Institution dialect registry and detection.

A *dialect* is the statement layout of one institution. Detection is an
ordered, case-insensitive search of the document text against each dialect's
indicators; unmatched text is ``generic``.

Indicators come in two strengths. Phrases (longer than four characters, such
as "guaranty trust bank") are tried first, dialect by dialect in registry
order. Short codes (``gtb``, ``uba``, ``opay``) are tried only after no phrase
matched anywhere, again in registry order, and only as whole words, so that an
address token such as "Agtbola Street" cannot claim a GTBank match and a
GTBank statement listing a transfer "TO OPAY" is still GTBank. Weak phrases,
generic wording such as "wallet account" that also turns up in narrations at
other banks, are tried last, once neither pass matched. A dialect added later
must be placed with this in mind.

The indicator lists are data tuned against sample statements; extend them
here rather than in the grammars.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property

from .logging_setup import get_logger

GENERIC = "generic"

_logger = get_logger("statement_analysis.dialects")

# Indicators at or below this length are short codes: whole words, second pass.
_SHORT_CODE_MAX_LEN = 4


def _is_short_code(indicator: str) -> bool:
    return len(indicator.strip()) <= _SHORT_CODE_MAX_LEN


def _indicator_pattern(indicator: str) -> re.Pattern[str]:
    escaped = re.escape(indicator.strip())
    if _is_short_code(indicator):
        return re.compile(rf"(?<![A-Za-z0-9]){escaped}(?![A-Za-z0-9])", re.IGNORECASE)
    return re.compile(escaped, re.IGNORECASE)


@dataclass(frozen=True)
class DialectSpec:
    tag: str
    bank_name: str
    indicators: tuple[str, ...]
    weak: tuple[str, ...] = ()
    _phrases: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)
    _codes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)
    _weak: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        phrases = tuple(_indicator_pattern(i) for i in self.indicators if not _is_short_code(i))
        codes = tuple(_indicator_pattern(i) for i in self.indicators if _is_short_code(i))
        weak = tuple(re.compile(re.escape(w.strip()), re.IGNORECASE) for w in self.weak)
        object.__setattr__(self, "_phrases", phrases)
        object.__setattr__(self, "_codes", codes)
        object.__setattr__(self, "_weak", weak)

    def matches_phrase(self, text: str) -> bool:
        return any(p.search(text) for p in self._phrases)

    def matches_code(self, text: str) -> bool:
        return any(p.search(text) for p in self._codes)

    def matches_weak(self, text: str) -> bool:
        return any(p.search(text) for p in self._weak)

    def matches(self, text: str) -> bool:
        return self.matches_phrase(text) or self.matches_code(text) or self.matches_weak(text)


# Evaluation order within each pass.
DIALECTS: tuple[DialectSpec, ...] = (
    DialectSpec(
        "opay",
        "OPay",
        (
            "opay digital services",
            "owealth balance",
            "blue ridge microfinance",
            "opay",
        ),
        weak=("wallet account",),
    ),
    DialectSpec("access", "Access Bank", ("access bank", "accessbank", "diamond bank")),
    DialectSpec("firstbank", "First Bank", ("first bank of nigeria", "firstbank", "first bank")),
    DialectSpec("zenith", "Zenith Bank", ("zenith bank", "zenithbank")),
    DialectSpec("fidelity", "Fidelity Bank", ("fidelity bank", "fidelitybank")),
    DialectSpec("wema", "Wema Bank", ("wema bank", "alat by wema", "wemabank")),
    DialectSpec("union", "Union Bank", ("union bank of nigeria", "union bank", "unionbank")),
    DialectSpec("uba", "UBA", ("united bank for africa", "uba")),
    DialectSpec("gtbank", "GTBank", ("guaranty trust bank", "guaranty trust", "gtbank", "gtb")),
)


@dataclass(frozen=True)
class DialectRegistry:
    """Ordered collection of :class:`DialectSpec` entries."""

    specs: Sequence[DialectSpec] = DIALECTS

    @cached_property
    def by_tag(self) -> dict[str, DialectSpec]:
        return {s.tag: s for s in self.specs}

    def detect(self, text: str) -> str:
        if not text:
            return GENERIC
        for spec in self.specs:
            if spec.matches_phrase(text):
                return spec.tag
        for spec in self.specs:
            if spec.matches_code(text):
                return spec.tag
        for spec in self.specs:
            if spec.matches_weak(text):
                return spec.tag
        return GENERIC

    def bank_name_for(self, tag: str) -> str | None:
        spec = self.by_tag.get(tag)
        return spec.bank_name if spec else None

    def tags(self) -> tuple[str, ...]:
        return tuple(s.tag for s in self.specs) + (GENERIC,)


DEFAULT_REGISTRY = DialectRegistry()


def detect_dialect(text: str, *, registry: DialectRegistry = DEFAULT_REGISTRY) -> str:
    tag = registry.detect(text)
    _logger.debug("dialect:detected tag=%s text_len=%d", tag, len(text or ""))
    return tag


def bank_name_for(tag: str, *, registry: DialectRegistry = DEFAULT_REGISTRY) -> str | None:
    return registry.bank_name_for(tag)


def detect_bank_name(
    texts: Iterable[str | None], *, registry: DialectRegistry = DEFAULT_REGISTRY
) -> str | None:
    """Guess the institution from transaction descriptions/references.

    Used for delimited and spreadsheet exports, which carry no letterhead.
    Returns ``None`` when nothing matches.
    """

    joined = "\n".join(t for t in texts if t)
    tag = registry.detect(joined)
    return None if tag == GENERIC else registry.bank_name_for(tag)


__all__ = [
    "GENERIC",
    "DialectSpec",
    "DialectRegistry",
    "DIALECTS",
    "DEFAULT_REGISTRY",
    "detect_dialect",
    "bank_name_for",
    "detect_bank_name",
]
