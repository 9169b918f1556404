from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

"""DbRecord: a converted analysis ready for insertion into a chemistry table.

``INSERT_COLUMNS`` is the fixed column list used for every batch insert; the
order matches ``DbRecord.insert_values()``.
"""

__all__ = [
    "DbRecord",
    "INSERT_COLUMNS",
    "SAMPLE_POINT_ID_COLUMN",
    "SAMPLE_POINT_GUID_COLUMN",
    "ANALYTE_COLUMN",
]

ANALYSES_AGENCY_COLUMN = "AnalysesAgency"
ANALYSIS_DATE_COLUMN = "AnalysisDate"
ANALYSIS_METHOD_COLUMN = "AnalysisMethod"
ANALYTE_COLUMN = "Analyte"
LAB_ID_COLUMN = "WCLab_ID"
SAMPLE_POINT_GUID_COLUMN = "SamplePtID"
SAMPLE_POINT_ID_COLUMN = "SamplePointID"
SAMPLE_VALUE_COLUMN = "SampleValue"
SYMBOL_COLUMN = "Symbol"
UNITS_COLUMN = "Units"

INSERT_COLUMNS: tuple[str, ...] = (
    ANALYSES_AGENCY_COLUMN,
    ANALYSIS_DATE_COLUMN,
    ANALYSIS_METHOD_COLUMN,
    ANALYTE_COLUMN,
    LAB_ID_COLUMN,
    SAMPLE_POINT_GUID_COLUMN,
    SAMPLE_POINT_ID_COLUMN,
    SAMPLE_VALUE_COLUMN,
    SYMBOL_COLUMN,
    UNITS_COLUMN,
)


@dataclass(frozen=True)
class DbRecord:
    analyses_agency: str
    analysis_date: datetime | None
    analysis_method: str
    analyte: str  # analyte code, possibly suffixed "(total)"
    lab_id: str
    priority: int  # lower = preferred test method
    sample_point_guid: str
    sample_point_id: str
    sample_value: float
    symbol: str | None  # "<" for non-detects
    table: str  # resolved target table name
    units: str

    @property
    def result_id(self) -> tuple[str, str]:
        """Uniqueness key within a batch and against the stored samples."""
        return (self.analyte, self.sample_point_id)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.sample_point_id, self.analyte)

    def insert_values(self) -> tuple[Any, ...]:
        return (
            self.analyses_agency,
            self.analysis_date,
            self.analysis_method,
            self.analyte,
            self.lab_id,
            self.sample_point_guid,
            self.sample_point_id,
            self.sample_value,
            self.symbol,
            self.units,
        )
