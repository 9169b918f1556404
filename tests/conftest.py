# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from h2odb.logging.init import reset_logging


@pytest.fixture()
def fake_execute_values(monkeypatch):
    """Replace execute_values so inserts land in FakeCursor.inserted."""
    import h2odb.db.batch_insert as bi

    def fake(cursor, sql, rows, page_size=1000):
        cursor.executed.append((sql, list(rows)))
        table = sql.split('"')[1]
        if getattr(cursor, "fail_insert_table", None) == table:
            raise RuntimeError(f"insert into {table} failed")
        cursor.inserted.setdefault(table, []).extend(rows)

    monkeypatch.setattr(bi, "execute_values", fake)
    return fake


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: waterdb
analyses_agency: NMBGMR
sheet: 0
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()
