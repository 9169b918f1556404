from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "ReferenceData",
]


@dataclass(frozen=True)
class ReferenceData:
    """Snapshot of the destination database taken once before a run.

    guids: sample point id -> sample point GUID (from the sample info table)
    existing_samples: (sample point id, analyte) pairs already stored in
        either chemistry table
    """
    guids: dict[str, str] = field(default_factory=dict)
    existing_samples: frozenset[tuple[str, str]] = frozenset()
