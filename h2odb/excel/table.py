from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from enum import Enum
from itertools import chain, repeat

from h2odb.excel.row_source import Row
from h2odb.models.cell_value import BLANK, CellKind, CellValue
from h2odb.models.errors import CellType, InvalidHeader, RowHeaderConflict
from h2odb.models.validated import Invalid, Valid, Validated

"""Table reader: header interpretation and per-column type checks.

The reader is an explicit state machine. ``step(state, row)`` is pure and
returns the next state plus at most one output row; ``read_table`` drives it
over a RowSource.

Phases:
    UNINITIALIZED --header ok--> READY (no output, next row is pulled at once)
    UNINITIALIZED --header bad--> DONE (emits InvalidHeader)
    READY --row--> READY (emits column map, or CellType errors for the row)
    READY --row width conflict--> DONE (emits RowHeaderConflict)
    any --end of input--> DONE
"""

__all__ = [
    "TablePhase",
    "TableState",
    "TableRow",
    "initial_state",
    "step",
    "read_table",
]

ColumnMap = dict[str, CellValue]


class TablePhase(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DONE = "done"


@dataclass(frozen=True)
class TableState:
    phase: TablePhase = TablePhase.UNINITIALIZED
    columns: tuple[str, ...] = ()
    # None until the first non-blank value of the column has been seen
    templates: tuple[CellKind | None, ...] = ()
    pad_short_rows: bool = False


@dataclass(frozen=True)
class TableRow:
    index: int
    result: Validated[ColumnMap]


def initial_state(pad_short_rows: bool = False) -> TableState:
    return TableState(pad_short_rows=pad_short_rows)


def _read_header(state: TableState, row: Row) -> tuple[TableState, TableRow | None]:
    bad = tuple(i for i, c in enumerate(row.cells) if c.kind is not CellKind.TEXT)
    if bad:
        done = replace(state, phase=TablePhase.DONE)
        return done, TableRow(row.index, Invalid((InvalidHeader(bad),)))
    columns = tuple(str(c.value) for c in row.cells)
    ready = replace(
        state,
        phase=TablePhase.READY,
        columns=columns,
        templates=tuple(None for _ in columns),
    )
    return ready, None


def _check_cells(
    templates: tuple[CellKind | None, ...], cells: tuple[CellValue, ...]
) -> tuple[tuple[CellKind | None, ...], list[CellType]]:
    new_templates: list[CellKind | None] = []
    errors: list[CellType] = []
    for col, (template, cell) in enumerate(zip(templates, cells)):
        if cell.is_blank:
            new_templates.append(template)
        elif template is None:
            new_templates.append(cell.kind)
        else:
            if cell.kind is not template:
                errors.append(CellType(col, template.value))
            new_templates.append(template)
    return tuple(new_templates), errors


def _read_data_row(state: TableState, row: Row) -> tuple[TableState, TableRow | None]:
    width = len(state.columns)
    cells = row.cells
    if len(cells) > width or (len(cells) < width and not state.pad_short_rows):
        done = replace(state, phase=TablePhase.DONE)
        return done, TableRow(row.index, Invalid((RowHeaderConflict(width, len(cells)),)))
    if len(cells) < width:
        cells = tuple(chain(cells, repeat(BLANK, width - len(cells))))

    templates, errors = _check_cells(state.templates, cells)
    next_state = replace(state, templates=templates)
    if errors:
        return next_state, TableRow(row.index, Invalid(tuple(errors)))
    return next_state, TableRow(row.index, Valid(dict(zip(state.columns, cells))))


def step(state: TableState, row: Row | None) -> tuple[TableState, TableRow | None]:
    """Advance the reader by one input row (``None`` = end of input)."""
    if row is None or state.phase is TablePhase.DONE:
        return replace(state, phase=TablePhase.DONE), None
    if state.phase is TablePhase.UNINITIALIZED:
        return _read_header(state, row)
    return _read_data_row(state, row)


def read_table(rows: Iterable[Row], pad_short_rows: bool = False) -> Iterator[TableRow]:
    """Yield one TableRow per data row until the input or the table is exhausted."""
    state = initial_state(pad_short_rows)
    for row in rows:
        state, output = step(state, row)
        if output is not None:
            yield output
        if state.phase is TablePhase.DONE:
            return
    step(state, None)
