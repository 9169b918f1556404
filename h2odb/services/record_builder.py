from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from h2odb.models.analysis_record import AnalysisRecord
from h2odb.models.cell_value import CellKind, CellValue
from h2odb.models.errors import FieldType, MissingField
from h2odb.models.validated import Invalid, Valid, Validated, combine

"""Column map -> AnalysisRecord.

Every field is read independently and all field errors of a row are reported
together. Every column must be present. Required fields must hold a non-blank
value of the expected kind; optional fields turn a blank cell into ``None``.
"""

__all__ = [
    "PARAM",
    "TEST",
    "SAMPLE_POINT_ID",
    "REPORTED_ND",
    "LOWER_LIMIT",
    "DILUTION",
    "METHOD",
    "TOTAL",
    "RESULTS_UNITS",
    "SAMPLE_NUMBER",
    "ANALYSIS_TIME",
    "REPORT_COLUMNS",
    "build_analysis_record",
]

PARAM = "Param"
TEST = "Test"
SAMPLE_POINT_ID = "SamplePointID"
REPORTED_ND = "ReportedND"
LOWER_LIMIT = "LowerLimit"
DILUTION = "Dilution"
METHOD = "Method"
TOTAL = "Total"
RESULTS_UNITS = "Results_Units"
SAMPLE_NUMBER = "SampleNumber"
ANALYSIS_TIME = "AnalysisTime"

REPORT_COLUMNS: tuple[str, ...] = (
    PARAM,
    TEST,
    SAMPLE_POINT_ID,
    REPORTED_ND,
    LOWER_LIMIT,
    DILUTION,
    METHOD,
    TOTAL,
    RESULTS_UNITS,
    SAMPLE_NUMBER,
    ANALYSIS_TIME,
)

RowMap = Mapping[str, CellValue]


def _field(
    row: RowMap,
    name: str,
    kind: CellKind,
    convert: Callable[[Any], Any],
    *,
    required: bool,
) -> Validated[Any]:
    cell = row.get(name)
    if cell is None:
        return Invalid((MissingField(name),))
    if cell.is_blank:
        if required:
            return Invalid((MissingField(name),))
        return Valid(None)
    if cell.kind is not kind:
        return Invalid((FieldType(name),))
    return Valid(convert(cell.value))


def _text(row: RowMap, name: str, *, required: bool = True) -> Validated[str | None]:
    return _field(row, name, CellKind.TEXT, str, required=required)


def _number(row: RowMap, name: str, *, required: bool = True) -> Validated[float | None]:
    return _field(row, name, CellKind.NUMBER, float, required=required)


def _date(row: RowMap, name: str, *, required: bool = True) -> Validated[datetime | None]:
    return _field(row, name, CellKind.DATE, lambda v: v, required=required)


def build_analysis_record(row: RowMap) -> Validated[AnalysisRecord]:
    """Build an AnalysisRecord from one table row, accumulating every field error."""
    fields = combine(
        _text(row, PARAM),
        _text(row, TEST),
        _text(row, SAMPLE_POINT_ID),
        _text(row, REPORTED_ND),
        _number(row, LOWER_LIMIT, required=False),
        _number(row, DILUTION),
        _text(row, METHOD),
        _text(row, TOTAL, required=False),
        _text(row, RESULTS_UNITS),
        _text(row, SAMPLE_NUMBER),
        _date(row, ANALYSIS_TIME, required=False),
    )
    if isinstance(fields, Invalid):
        return fields
    return Valid(AnalysisRecord(*fields.value))
