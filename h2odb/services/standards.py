from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from h2odb.models.db_record import DbRecord
from h2odb.models.domain_tables import DomainTables, base_analyte

"""Drinking-water standards check for inserted records."""

__all__ = [
    "ALL_PASS_LINE",
    "StandardsReport",
    "meets_standards",
    "check_standards",
]

ALL_PASS_LINE = "All records meet water quality standards"


def meets_standards(record: DbRecord, tables: DomainTables) -> bool:
    """True when the value lies in the analyte's range; analytes without a range always pass.

    The "(total)" variant of an analyte shares the range of the base analyte.
    """
    bounds = tables.standards.get(base_analyte(record.analyte))
    if bounds is None:
        return True
    low, high = bounds
    return low <= record.sample_value <= high


@dataclass(frozen=True)
class StandardsReport:
    passing: list[DbRecord] = field(default_factory=list)
    failing: list[DbRecord] = field(default_factory=list)

    @property
    def failing_count(self) -> int:
        return len(self.failing)

    def lines(self) -> list[str]:
        if not self.failing:
            return [ALL_PASS_LINE]
        n = len(self.failing)
        head = "1 record fails" if n == 1 else f"{n} records fail"
        out = [f"{head} to meet water quality standards:"]
        for rec in sorted(self.failing, key=lambda r: r.sort_key):
            out.append(f"{rec.sample_point_id} - {rec.analyte} ({rec.sample_value:g} {rec.units})")
        return out


def check_standards(records: Iterable[DbRecord], tables: DomainTables) -> StandardsReport:
    passing: list[DbRecord] = []
    failing: list[DbRecord] = []
    for rec in records:
        (passing if meets_standards(rec, tables) else failing).append(rec)
    return StandardsReport(passing=passing, failing=failing)
