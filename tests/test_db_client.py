from __future__ import annotations

from pathlib import Path

import pytest
from db import BankStatement
from db.client import dispose_engine, get_engine, session_scope

from tests.helpers.db import count_rows


def test_missing_database_url_is_reported() -> None:
    dispose_engine()

    with pytest.raises(RuntimeError, match="DATABASE_URL is not set"):
        get_engine()


def test_database_url_is_read_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    dispose_engine()
    url = f"sqlite+pysqlite:///{tmp_path / 'env.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    try:
        assert str(get_engine().url) == url
    finally:
        dispose_engine()


def test_engine_refuses_a_second_url_until_disposed(sqlite_url: str, tmp_path: Path) -> None:
    other = f"sqlite+pysqlite:///{tmp_path / 'other.db'}"

    with pytest.raises(RuntimeError, match="dispose_engine"):
        get_engine(database_url=other)

    dispose_engine()
    assert str(get_engine(database_url=other).url) == other


def test_session_scope_rolls_back_on_error(sqlite_url: str) -> None:
    with pytest.raises(ValueError):
        with session_scope(database_url=sqlite_url) as s:
            s.add(BankStatement(file_name="a.csv", file_type="csv", file_size=1))
            s.flush()
            raise ValueError("boom")

    assert count_rows(sqlite_url) == (0, 0)
