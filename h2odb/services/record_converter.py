from __future__ import annotations

from collections.abc import Collection, Mapping

from h2odb.models.analysis_record import AnalysisRecord
from h2odb.models.config_models import DEFAULT_ANALYSES_AGENCY, TableNames
from h2odb.models.db_record import DbRecord
from h2odb.models.domain_tables import DomainTables, total_analyte
from h2odb.models.errors import (
    DuplicateSample,
    InvalidSamplePointId,
    MissingLowerLimit,
    MissingParamConversion,
    ReportedNDFormat,
)
from h2odb.models.validated import Invalid, Valid, Validated, combine

"""AnalysisRecord -> DbRecord conversion.

Two checks can fail independently (sample value, sample point GUID) and their
errors are accumulated. Everything else is derived from the static domain
tables and cannot fail for a record that passed the record validator.
"""

__all__ = [
    "NON_DETECT_SYMBOL",
    "sample_value",
    "sample_point_guid",
    "test_priority",
    "analyte_code",
    "analysis_method",
    "convert_analysis_record",
    "check_duplicate_sample",
]

NON_DETECT_SYMBOL = "<"


def sample_value(record: AnalysisRecord) -> Validated[tuple[float, str | None]]:
    """Return ``(value, symbol)``; non-detects are reported as lower limit x dilution."""
    if not record.is_non_detect:
        try:
            return Valid((float(record.reported_nd), None))
        except ValueError:
            return Invalid((ReportedNDFormat(record.reported_nd),))
    if record.lower_limit is None:
        return Invalid((MissingLowerLimit(),))
    return Valid((record.lower_limit * record.dilution, NON_DETECT_SYMBOL))


def sample_point_guid(record: AnalysisRecord, guids: Mapping[str, str]) -> Validated[str]:
    guid = guids.get(record.sample_point_id)
    if guid is None:
        return Invalid((InvalidSamplePointId(record.sample_point_id),))
    return Valid(guid)


def test_priority(record: AnalysisRecord, tables: DomainTables) -> int:
    """Lower is preferred; a test matching no registered pattern ranks last."""
    rank = tables.test_rank(record.parameter, record.test)
    if rank is None:
        return len(tables.test_patterns(record.parameter) or ())
    return rank


def analyte_code(record: AnalysisRecord, tables: DomainTables) -> str:
    code = tables.analytes[record.parameter]
    if record.is_total:
        return total_analyte(code)
    return code


def analysis_method(record: AnalysisRecord, tables: DomainTables) -> str:
    suffix = tables.methods.get(record.parameter)
    if suffix is None:
        return record.method
    return f"{record.method}, {suffix}"


def convert_analysis_record(
    record: AnalysisRecord,
    tables: DomainTables,
    guids: Mapping[str, str],
    table_names: TableNames | None = None,
    agency: str = DEFAULT_ANALYSES_AGENCY,
) -> Validated[DbRecord]:
    if record.parameter not in tables.analytes:
        return Invalid((MissingParamConversion(record.parameter),))
    table_names = table_names or TableNames()

    checked = combine(sample_value(record), sample_point_guid(record, guids))
    if isinstance(checked, Invalid):
        return checked
    (value, symbol), guid = checked.value

    return Valid(
        DbRecord(
            analyses_agency=agency,
            analysis_date=record.analysis_time,
            analysis_method=analysis_method(record, tables),
            analyte=analyte_code(record, tables),
            lab_id=record.sample_number,
            priority=test_priority(record, tables),
            sample_point_guid=guid,
            sample_point_id=record.sample_point_id,
            sample_value=value,
            symbol=symbol,
            table=table_names.resolve(tables.chemistry_tables[record.parameter]),
            units=tables.units.get(record.parameter, record.units),
        )
    )


def check_duplicate_sample(
    record: DbRecord, existing_samples: Collection[tuple[str, str]]
) -> Validated[DbRecord]:
    """Reject a record whose (sample point, analyte) pair is already stored."""
    if (record.sample_point_id, record.analyte) in existing_samples:
        return Invalid((DuplicateSample(record.sample_point_id, record.analyte),))
    return Valid(record)
