from __future__ import annotations

from h2odb.models.analysis_record import AnalysisRecord
from h2odb.models.domain_tables import DomainTables
from h2odb.models.errors import InvalidTestDescription, MissingParamConversion
from h2odb.models.validated import Invalid, Valid, Validated, combine

"""Domain validation of AnalysisRecord values (parameter and test description)."""

__all__ = [
    "validate_parameter",
    "validate_test",
    "validate_analysis_record",
]


def validate_parameter(record: AnalysisRecord, tables: DomainTables) -> Validated[str]:
    if record.parameter in tables.analytes:
        return Valid(record.parameter)
    return Invalid((MissingParamConversion(record.parameter),))


def validate_test(record: AnalysisRecord, tables: DomainTables) -> Validated[str]:
    # Parameters without a priority list accept any test description
    if tables.test_rank(record.parameter, record.test) is not None:
        return Valid(record.test)
    return Invalid(
        (InvalidTestDescription(record.sample_point_id, record.parameter, record.test),)
    )


def validate_analysis_record(
    record: AnalysisRecord, tables: DomainTables
) -> Validated[AnalysisRecord]:
    """Run both checks and report all of their errors together."""
    checked = combine(validate_parameter(record, tables), validate_test(record, tables))
    if isinstance(checked, Invalid):
        return checked
    return Valid(record)
