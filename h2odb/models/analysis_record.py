from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""AnalysisRecord: one typed row of a water analysis report.

Only presence and cell types are guaranteed here. Domain checks (known
parameter, acceptable test description) happen in the record validator.
"""

__all__ = [
    "AnalysisRecord",
    "ND",
]

# ReportedND value used by the lab for non-detects
ND = "ND"


@dataclass(frozen=True)
class AnalysisRecord:
    parameter: str  # Param
    test: str  # Test
    sample_point_id: str  # SamplePointID
    reported_nd: str  # ReportedND: "ND" or a numeric string
    lower_limit: float | None  # LowerLimit
    dilution: float  # Dilution
    method: str  # Method
    total: str | None  # Total: non-blank marks the "(total)" analyte variant
    units: str  # Results_Units
    sample_number: str  # SampleNumber
    analysis_time: datetime | None  # AnalysisTime

    @property
    def is_non_detect(self) -> bool:
        return self.reported_nd == ND

    @property
    def is_total(self) -> bool:
        return self.total is not None and self.total.strip() != ""
