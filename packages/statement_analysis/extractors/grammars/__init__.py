"""Line grammars for document-text statements, keyed by dialect tag.

Dialects without a dedicated grammar (``uba``, ``fidelity``, ``wema``,
``union``) use the generic cascade.
"""

from __future__ import annotations

from collections.abc import Callable

from . import access, columnar, gtbank, opay
from . import generic
from .common import LineParse, split_lines

type Grammar = Callable[[list[str], str], LineParse]

GRAMMARS: dict[str, Grammar] = {
    "gtbank": gtbank.parse_lines,
    "access": access.parse_lines,
    "firstbank": columnar.parse_lines,
    "zenith": columnar.parse_lines,
    "opay": opay.parse_lines,
}


def grammar_for(dialect: str) -> Grammar:
    return GRAMMARS.get(dialect, generic.parse_lines)


__all__ = ["GRAMMARS", "Grammar", "LineParse", "grammar_for", "split_lines"]
