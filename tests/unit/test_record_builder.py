from __future__ import annotations

from h2odb.models.analysis_record import AnalysisRecord
from h2odb.models.cell_value import BLANK, CellValue
from h2odb.models.errors import FieldType, MissingField
from h2odb.models.validated import Invalid, Valid
from h2odb.services.record_builder import REPORT_COLUMNS, build_analysis_record
from tests.helpers import ANALYSIS_TIME, REPORT_HEADER, report_row, to_cell


def _row_map(**overrides):
    return {k: to_cell(v) for k, v in zip(REPORT_HEADER, report_row(**overrides))}


def test_report_columns_match_header():
    assert list(REPORT_COLUMNS) == REPORT_HEADER


def test_all_fields_present_builds_record_with_same_payloads():
    res = build_analysis_record(_row_map(total="yes"))
    assert res == Valid(
        AnalysisRecord(
            parameter="Iron",
            test="Trace metals",
            sample_point_id="SP-001",
            reported_nd="0.2",
            lower_limit=0.01,
            dilution=1.0,
            method="EPA 200.8",
            total="yes",
            units="mg/L",
            sample_number="L-100",
            analysis_time=ANALYSIS_TIME,
        )
    )


def test_optional_blank_fields_become_none():
    res = build_analysis_record(_row_map(lower_limit=None, total=None, analysis_time=None))
    assert isinstance(res, Valid)
    assert res.value.lower_limit is None
    assert res.value.total is None
    assert res.value.analysis_time is None


def test_missing_optional_columns_are_missing_fields():
    row = _row_map()
    for name in ("LowerLimit", "Total", "AnalysisTime"):
        del row[name]
    res = build_analysis_record(row)
    assert res == Invalid(
        (MissingField("LowerLimit"), MissingField("Total"), MissingField("AnalysisTime"))
    )


def test_field_errors_are_accumulated():
    row = _row_map()
    del row["Param"]
    row["Dilution"] = CellValue.text("one")
    row["Method"] = BLANK
    row["AnalysisTime"] = CellValue.text("yesterday")
    res = build_analysis_record(row)
    assert isinstance(res, Invalid)
    assert res.errors == (
        MissingField("Param"),
        FieldType("Dilution"),
        MissingField("Method"),
        FieldType("AnalysisTime"),
    )
