from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

In non-TTY environments (CI, redirected output) no bar is created, so logs
are not interleaved with ANSI control sequences.
"""

__all__ = [
    "is_tty_enabled",
    "RowProgress",
]

T = TypeVar("T")


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Progress bar over the rows of one report."""

    def __init__(self, total_rows: int | None, *, description: str = "Reading rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def track(self, items: Iterable[T]) -> Iterator[T]:
        """Yield ``items`` unchanged, advancing the bar once per item."""
        for item in items:
            yield item
            if self.pbar is not None:
                self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
