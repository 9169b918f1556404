from __future__ import annotations

from dataclasses import replace

from h2odb.models.db_record import DbRecord
from h2odb.models.domain_tables import DEFAULT_TABLES
from h2odb.models.errors import DbError, InvalidSamplePointId, MissingField
from h2odb.models.processing_result import LoadResult, LoadStatus
from h2odb.services.standards import check_standards
from h2odb.services.summary import (
    NO_RECORDS_LINE,
    render_db_error,
    render_row_errors,
    render_success,
    render_summary_line,
)

RECORD = DbRecord(
    analyses_agency="NMBGMR",
    analysis_date=None,
    analysis_method="M",
    analyte="Fe",
    lab_id="L-1",
    priority=0,
    sample_point_guid="GUID-1",
    sample_point_id="SP-002",
    sample_value=0.2,
    symbol=None,
    table="MinorandTraceChemistry",
    units="mg/L",
)


def test_row_errors_sorted_and_one_based():
    lines = render_row_errors(
        "report.xlsx",
        [(7, InvalidSamplePointId("X")), (2, MissingField("Param"))],
    )
    assert lines == [
        "ERROR: in report.xlsx, row 3: Field 'Param' is missing a value",
        "ERROR: in report.xlsx, row 8: Sample point id 'X' is not in database",
    ]


def test_success_report():
    records = [RECORD, replace(RECORD, sample_point_id="SP-001"), replace(RECORD, analyte="Ca")]
    lines = render_success(records, check_standards(records, DEFAULT_TABLES))
    assert lines == [
        "Added 3 records with the following sample point IDs to database:",
        "SP-001",
        "SP-002",
        "----------",
        "All records meet water quality standards",
    ]


def test_no_records():
    assert render_success([], check_standards([], DEFAULT_TABLES)) == [NO_RECORDS_LINE]


def test_db_error_line():
    assert render_db_error(DbError("boom")) == ["ERROR: Database error: boom"]


def test_summary_line_formats_elapsed():
    r = LoadResult(
        source="r.xlsx",
        status=LoadStatus.REJECTED,
        rows_read=10,
        inserted_records=0,
        error_count=2,
        failing_standards=0,
        elapsed_seconds=0.8412,
    )
    assert render_summary_line(r) == (
        "SUMMARY file=r.xlsx status=rejected rows=10 inserted=0 errors=2 "
        "failing_standards=0 elapsed_sec=0.841"
    )
    assert render_summary_line(replace(r, elapsed_seconds=0.0)).endswith("elapsed_sec=0")
    assert render_summary_line(replace(r, elapsed_seconds=0.0005)).endswith("elapsed_sec=0.0005")
