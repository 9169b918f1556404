from __future__ import annotations

from dataclasses import replace

from h2odb.models.db_record import DbRecord
from h2odb.models.domain_tables import DEFAULT_TABLES
from h2odb.services.standards import ALL_PASS_LINE, check_standards, meets_standards

IRON = DbRecord(
    analyses_agency="NMBGMR",
    analysis_date=None,
    analysis_method="M",
    analyte="Fe",
    lab_id="L-1",
    priority=0,
    sample_point_guid="GUID-1",
    sample_point_id="SP-001",
    sample_value=0.2,
    symbol=None,
    table="MinorandTraceChemistry",
    units="mg/L",
)


def test_iron_range():
    assert meets_standards(IRON, DEFAULT_TABLES)
    assert not meets_standards(replace(IRON, sample_value=0.5), DEFAULT_TABLES)


def test_total_variant_uses_base_range():
    assert not meets_standards(replace(IRON, analyte="Fe(total)", sample_value=0.5), DEFAULT_TABLES)


def test_analyte_without_range_always_passes():
    assert meets_standards(replace(IRON, analyte="Ca", sample_value=1e9), DEFAULT_TABLES)


def test_bounds_are_inclusive():
    assert meets_standards(replace(IRON, sample_value=0.3), DEFAULT_TABLES)
    assert meets_standards(replace(IRON, analyte="pHL", sample_value=6.5), DEFAULT_TABLES)


def test_report_lines_all_pass():
    assert check_standards([IRON], DEFAULT_TABLES).lines() == [ALL_PASS_LINE]


def test_report_lines_single_failure():
    report = check_standards([IRON, replace(IRON, sample_value=0.5)], DEFAULT_TABLES)
    assert len(report.passing) == 1
    assert report.lines() == [
        "1 record fails to meet water quality standards:",
        "SP-001 - Fe (0.5 mg/L)",
    ]


def test_report_lines_sorted_by_sample_point_then_analyte():
    failing = [
        replace(IRON, sample_point_id="SP-002", sample_value=1.5),
        replace(IRON, analyte="Mn", sample_value=0.25),
        replace(IRON, sample_value=0.75),
    ]
    report = check_standards(failing, DEFAULT_TABLES)
    assert report.failing_count == 3
    assert report.lines() == [
        "3 records fail to meet water quality standards:",
        "SP-001 - Fe (0.75 mg/L)",
        "SP-001 - Mn (0.25 mg/L)",
        "SP-002 - Fe (1.5 mg/L)",
    ]
