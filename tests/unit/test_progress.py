from __future__ import annotations

from h2odb.services import progress
from h2odb.services.progress import RowProgress


def test_progress_disabled_without_tty(monkeypatch):
    monkeypatch.setattr(progress, "is_tty_enabled", lambda: False)
    with RowProgress(3) as p:
        assert p.pbar is None
        assert list(p.track([1, 2, 3])) == [1, 2, 3]


def test_progress_counts_rows_on_tty(monkeypatch):
    monkeypatch.setattr(progress, "is_tty_enabled", lambda: True)
    p = RowProgress(2, description="report.xlsx")
    assert p.pbar is not None
    assert list(p.track("ab")) == ["a", "b"]
    assert p.pbar.n == 2
    p.close()
    assert p.pbar is None
