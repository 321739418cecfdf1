"""Normalization keys and description groups for the grouped strategy."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass

from ..models import Transaction

_DIGITS_RE = re.compile(r"\d+")
_PUNCT_RE = re.compile(r"[^\w\s]|_")


def normalize_description_key(description: str | None) -> str | None:
    """Lowercase, drop digits, turn punctuation into spaces, squeeze whitespace.

    ``"POS PURCHASE SHOPRITE #1234"`` and ``"pos purchase - shoprite 99"`` share
    the key ``"pos purchase shoprite"``. Returns ``None`` when nothing is left
    (a description made only of digits and punctuation), which callers treat
    as a group of one.
    """

    if description is None:
        return None
    s = unicodedata.normalize("NFKC", description).lower()
    s = _DIGITS_RE.sub("", s)
    s = _PUNCT_RE.sub(" ", s)
    s = " ".join(s.split())
    return s or None


@dataclass(frozen=True, slots=True)
class DescriptionGroup:
    key: str | None
    members: tuple[int, ...]  # ledger positions, ascending

    @property
    def representative(self) -> int:
        return self.members[0]


def group_by_description(ledger: Sequence[Transaction]) -> list[DescriptionGroup]:
    """Groups in order of first appearance; keyless transactions stand alone."""

    by_key: dict[str, list[int]] = {}
    order: list[tuple[str | None, list[int]]] = []
    for i, tx in enumerate(ledger):
        key = normalize_description_key(tx.description)
        if key is None:
            order.append((None, [i]))
            continue
        members = by_key.get(key)
        if members is None:
            members = by_key[key] = []
            order.append((key, members))
        members.append(i)
    return [DescriptionGroup(key=k, members=tuple(m)) for k, m in order]


__all__ = ["normalize_description_key", "DescriptionGroup", "group_by_description"]
