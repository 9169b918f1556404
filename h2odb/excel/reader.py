from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from h2odb.excel.row_source import Row
from h2odb.models.cell_value import BLANK, CellValue

"""Spreadsheet reader (pandas based).

The whole worksheet is read without a header (``header=None``) so that the
DataFrame index equals the 0-based sheet row position. Every cell is then
decoded into a ``CellValue``; the header row is interpreted later by the
table reader, not here.
"""

__all__ = [
    "ReportReadError",
    "read_excel_sheet",
    "cell_from_value",
    "ExcelRowSource",
    "EXCEL_ERROR_CODES",
    "trim_trailing_blanks",
]

# Excel error literals -> BIFF error byte
EXCEL_ERROR_CODES = {
    "#NULL!": 0x00,
    "#DIV/0!": 0x07,
    "#VALUE!": 0x0F,
    "#REF!": 0x17,
    "#NAME?": 0x1D,
    "#NUM!": 0x24,
    "#N/A": 0x2A,
}


class ReportReadError(Exception):
    """Raised when the report file or the requested worksheet cannot be opened."""


def read_excel_sheet(
    path: Path, sheet: int | str = 0, keep_na_strings: Iterable[str] | None = None
) -> pd.DataFrame:
    """Read one worksheet of a report as a raw DataFrame.

    Parameters
    ----------
    path: Excel ファイルパス (.xls / .xlsx)
    sheet: worksheet index or name
    keep_na_strings: Pandasの既定NaN変換から除外する文字列リスト (例: ['NA'])
    """
    import pandas._libs.parsers as parsers

    keep = list(keep_na_strings or [])
    if keep:
        # 既定のNA値から keep_na_strings を除外
        na_values = list(parsers.STR_NA_VALUES - set(keep))
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    if not path.exists():
        raise ReportReadError(f"report file not found: {path}")
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise ReportReadError(f"Failed to open {path.name} as an Excel file: {e}") from e

    names = [str(n) for n in xls.sheet_names]
    if isinstance(sheet, int):
        if not 0 <= sheet < len(names):
            raise ReportReadError(f"Failed to open worksheet {sheet} of {path.name}")
        name = xls.sheet_names[sheet]
    else:
        if sheet not in names:
            raise ReportReadError(f"worksheet '{sheet}' not found in {path.name}")
        name = sheet

    # ExcelFile.parse keeps blank rows, so the index stays aligned with sheet rows
    try:
        return xls.parse(
            name,
            header=None,
            keep_default_na=keep_default_na,
            na_values=na_values,
        )
    except Exception as e:
        raise ReportReadError(f"Failed to read worksheet '{name}' of {path.name}: {e}") from e


def cell_from_value(value: Any) -> CellValue:
    """Decode one pandas cell into a CellValue."""
    if isinstance(value, str):
        if value == "":
            return BLANK
        code = EXCEL_ERROR_CODES.get(value.strip())
        if code is not None:
            return CellValue.error(code)
        return CellValue.text(value)
    # None / NaN / NaT
    if value is None or pd.isna(value):
        return BLANK
    if isinstance(value, (bool, np.bool_)):
        return CellValue.boolean(bool(value))
    if isinstance(value, pd.Timestamp):
        return CellValue.date(value.to_pydatetime())
    if isinstance(value, datetime):
        return CellValue.date(value)
    if isinstance(value, date):
        return CellValue.date(datetime.combine(value, time()))
    if isinstance(value, (int, float, np.integer, np.floating)):
        return CellValue.number(float(value))
    # Anything else pandas hands us (e.g. time objects) is kept as text
    return CellValue.text(str(value))


def trim_trailing_blanks(cells: tuple[CellValue, ...]) -> tuple[CellValue, ...]:
    end = len(cells)
    while end and cells[end - 1].is_blank:
        end -= 1
    return cells[:end]


class ExcelRowSource:
    """RowSource over a worksheet DataFrame.

    Blank rows are skipped; the row index still counts them.

    pandas pads every row to the widest row of the sheet, so the true row
    length is lost. Rows are cut back to their last non-blank cell and rows
    shorter than the first (header) row are filled with Blank up to its width.
    A row carrying cells beyond the header therefore keeps its extra width.
    """

    def __init__(self, df: pd.DataFrame) -> None:
        self._df = df

    @classmethod
    def from_file(
        cls, path: Path, sheet: int | str = 0, keep_na_strings: Iterable[str] | None = None
    ) -> ExcelRowSource:
        return cls(read_excel_sheet(path, sheet=sheet, keep_na_strings=keep_na_strings))

    def __len__(self) -> int:
        return int(self._df.shape[0])

    @property
    def non_blank_rows(self) -> int:
        """Number of rows the source yields (header included)."""
        return sum(1 for _ in self)

    def __iter__(self) -> Iterator[Row]:
        width: int | None = None
        for raw in self._df.itertuples(index=True, name=None):
            index, values = raw[0], raw[1:]
            cells = trim_trailing_blanks(tuple(cell_from_value(v) for v in values))
            if not cells:
                continue
            if width is None:
                width = len(cells)
            elif len(cells) < width:
                cells = cells + (BLANK,) * (width - len(cells))
            yield Row(int(index), cells)
