"""Pytest configuration for test isolation.

Puts the workspace sources on ``sys.path`` (``packages/`` for
``statement_analysis``, ``libs/db/src`` for ``db``) so the suite runs from a
plain checkout, and strips ``STATEMENT_ANALYSIS_*``, ``OPENAI_API_KEY`` and
``DATABASE_URL`` from the environment so a developer's ``.env`` or shell never
leaks into configuration-sensitive tests.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT))
    if p not in sys.path
]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("STATEMENT_ANALYSIS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Iterator[str]:
    """File-backed SQLite database with the statement schema; engine reset after."""

    from db.client import dispose_engine
    from tests.helpers.db import bootstrap_sqlite_db

    dispose_engine()
    url = bootstrap_sqlite_db(tmp_path / "statements.db")
    try:
        yield url
    finally:
        dispose_engine()
