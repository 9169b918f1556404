from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from h2odb.models.cell_value import CellValue

"""Row sources feeding the table reader.

A RowSource yields ``Row(index, cells)`` in increasing index order and can be
iterated again from the start (every ``__iter__`` call returns a fresh
iterator). Blank rows are never produced, but indices keep counting sheet
positions, so gaps are expected.
"""

__all__ = [
    "Row",
    "RowSource",
    "SequenceRowSource",
]


@dataclass(frozen=True)
class Row:
    index: int  # 0-based sheet row position
    cells: tuple[CellValue, ...]

    def is_blank(self) -> bool:
        return all(c.is_blank for c in self.cells)


@runtime_checkable
class RowSource(Protocol):
    def __iter__(self) -> Iterator[Row]: ...


class SequenceRowSource:
    """In-memory RowSource over a list of cell lists.

    Row indices are the list positions; blank rows (empty or all Blank) are
    skipped the same way the spreadsheet reader skips them.
    """

    def __init__(self, rows: Sequence[Sequence[CellValue]]) -> None:
        self._rows = [tuple(r) for r in rows]

    def __iter__(self) -> Iterator[Row]:
        for index, cells in enumerate(self._rows):
            row = Row(index, cells)
            if row.is_blank():
                continue
            yield row

    def __len__(self) -> int:
        return len(self._rows)

    @classmethod
    def from_rows(cls, rows: Iterable[Row]) -> SequenceRowSource:
        """Build from explicit rows, keeping their indices (gaps become blank rows)."""
        by_index = {r.index: r.cells for r in rows}
        if not by_index:
            return cls([])
        last = max(by_index)
        return cls([by_index.get(i, ()) for i in range(last + 1)])
