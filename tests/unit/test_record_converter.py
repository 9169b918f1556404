from __future__ import annotations

import pytest

from h2odb.models.analysis_record import AnalysisRecord
from h2odb.models.config_models import TableNames
from h2odb.models.domain_tables import DEFAULT_TABLES
from h2odb.models.errors import (
    DuplicateSample,
    InvalidSamplePointId,
    MissingLowerLimit,
    MissingParamConversion,
    ReportedNDFormat,
)
from h2odb.models.validated import Invalid, Valid
from h2odb.services.record_converter import check_duplicate_sample, convert_analysis_record

GUIDS = {"SP-001": "GUID-1"}


def _record(**overrides):
    values = dict(
        parameter="Iron",
        test="Trace metals",
        sample_point_id="SP-001",
        reported_nd="0.25",
        lower_limit=None,
        dilution=1.0,
        method="EPA 200.8",
        total=None,
        units="mg/L",
        sample_number="L-100",
        analysis_time=None,
    )
    values.update(overrides)
    return AnalysisRecord(**values)


def _convert(rec, guids=GUIDS, **kwargs):
    return convert_analysis_record(rec, DEFAULT_TABLES, guids, **kwargs)


def test_detected_value_is_parsed():
    res = _convert(_record())
    assert isinstance(res, Valid)
    db = res.value
    assert db.sample_value == 0.25
    assert db.symbol is None
    assert db.analyte == "Fe"
    assert db.sample_point_guid == "GUID-1"
    assert db.table == "MinorandTraceChemistry"
    assert db.lab_id == "L-100"
    assert db.analyses_agency == "NMBGMR"
    assert db.priority == 0


def test_non_detect_uses_lower_limit_times_dilution():
    res = _convert(_record(reported_nd="ND", lower_limit=2.0, dilution=5.0))
    assert isinstance(res, Valid)
    assert res.value.sample_value == pytest.approx(10.0)
    assert res.value.symbol == "<"


def test_non_detect_without_lower_limit():
    res = _convert(_record(reported_nd="ND", lower_limit=None))
    assert res == Invalid((MissingLowerLimit(),))


def test_value_and_guid_errors_accumulate():
    res = _convert(_record(reported_nd="n/a", sample_point_id="SP-404"))
    assert res == Invalid((ReportedNDFormat("n/a"), InvalidSamplePointId("SP-404")))


def test_unknown_parameter_is_reported():
    assert _convert(_record(parameter="Unobtainium")) == Invalid(
        (MissingParamConversion("Unobtainium"),)
    )


def test_total_suffix_method_suffix_and_units_override():
    res = _convert(
        _record(parameter="Hardness", total=" x ", method="Calc", units="ppm"),
    )
    assert isinstance(res, Valid)
    db = res.value
    assert db.analyte == "HRD(total)"
    assert db.analysis_method == "Calc, As CaCO3"
    assert db.units == "mg/L"
    assert db.table == "MajorChemistry"


def test_blank_total_is_not_a_total_variant():
    res = _convert(_record(total="   "))
    assert isinstance(res, Valid)
    assert res.value.analyte == "Fe"


def test_priority_is_index_of_first_matching_pattern():
    preferred = _convert(_record(parameter="Strontium", test="Trace Metals by ICPMS"))
    fallback = _convert(_record(parameter="Strontium", test="Cations"))
    assert isinstance(preferred, Valid) and isinstance(fallback, Valid)
    assert preferred.value.priority == 0
    assert fallback.value.priority == 1


def test_custom_table_names_and_agency():
    names = TableNames(minor_chemistry="minor")
    res = _convert(_record(), table_names=names, agency="LAB")
    assert isinstance(res, Valid)
    assert res.value.table == "minor"
    assert res.value.analyses_agency == "LAB"


def test_duplicate_sample_check():
    db = _convert(_record()).value
    assert check_duplicate_sample(db, frozenset()) == Valid(db)
    assert check_duplicate_sample(db, {("SP-001", "Fe")}) == Invalid(
        (DuplicateSample("SP-001", "Fe"),)
    )
