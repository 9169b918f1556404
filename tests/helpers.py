"""Test helpers: report rows, cell builders, xlsx writer and a fake cursor."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from h2odb.models.cell_value import BLANK, CellValue
from h2odb.models.config_models import TableNames

REPORT_HEADER = [
    "Param",
    "Test",
    "SamplePointID",
    "ReportedND",
    "LowerLimit",
    "Dilution",
    "Method",
    "Total",
    "Results_Units",
    "SampleNumber",
    "AnalysisTime",
]

ANALYSIS_TIME = datetime(2016, 3, 1, 10, 30)


def report_row(
    param: str = "Iron",
    test: str = "Trace metals",
    spid: str = "SP-001",
    reported_nd: str = "0.2",
    lower_limit: float | None = 0.01,
    dilution: float = 1.0,
    method: str = "EPA 200.8",
    total: str | None = None,
    units: str = "mg/L",
    sample_number: str = "L-100",
    analysis_time: datetime | None = ANALYSIS_TIME,
) -> list[object]:
    """One report row as plain Python values (None = empty cell)."""
    return [
        param,
        test,
        spid,
        reported_nd,
        lower_limit,
        dilution,
        method,
        total,
        units,
        sample_number,
        analysis_time,
    ]


def to_cell(value: object) -> CellValue:
    if value is None:
        return BLANK
    if isinstance(value, str):
        return CellValue.text(value)
    if isinstance(value, bool):
        return CellValue.boolean(value)
    if isinstance(value, datetime):
        return CellValue.date(value)
    return CellValue.number(float(value))  # type: ignore[arg-type]


def to_cells(rows: list[list[object]]) -> list[list[CellValue]]:
    return [[to_cell(v) for v in row] for row in rows]


def make_report(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
    """Write rows (header included) to an .xlsx file without pandas header/index."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


class FakeCursor:
    """Minimal psycopg2 cursor stand-in.

    Answers the reference data queries from in-memory tables and records
    every statement (inserts go through the patched execute_values).
    """

    def __init__(
        self,
        guids: dict[str, str] | None = None,
        existing: dict[str, list[tuple[str, str]]] | None = None,
        present_tables: list[str] | None = None,
        table_names: TableNames | None = None,
        fail_insert_table: str | None = None,
    ) -> None:
        self.table_names = table_names or TableNames()
        self.guids = {"SP-001": "GUID-1", "SP-002": "GUID-2"} if guids is None else guids
        self.existing = existing or {}
        self.present_tables = (
            list(self.table_names.required) if present_tables is None else present_tables
        )
        self.fail_insert_table = fail_insert_table
        self.executed: list[tuple[str, Any]] = []
        self.inserted: dict[str, list[tuple[Any, ...]]] = {}
        self._result: list[tuple[Any, ...]] = []

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append((sql, params))
        if "information_schema.tables" in sql:
            wanted = set(params[0]) if params else set()
            self._result = [(t,) for t in self.present_tables if t in wanted]
        elif f'FROM "{self.table_names.sample_info}"' in sql:
            self._result = list(self.guids.items())
        else:
            self._result = []
            for table in self.table_names.chemistry:
                if f'FROM "{table}"' in sql:
                    self._result = list(self.existing.get(table, []))

    def fetchall(self) -> list[tuple[Any, ...]]:
        return self._result


