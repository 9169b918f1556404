from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from enum import Enum

"""Result models for one report load run.

LoadResult carries everything the CLI needs: the status used for the exit
code, counters for the SUMMARY line and the report text shown to the user.
"""


class LoadStatus(Enum):
    """Outcome of a load run.

    - SUCCESS: every row validated and the batch was written (or had no rows)
    - REJECTED: row validation errors, nothing written
    - DB_FAILED: the write failed and the transaction was rolled back
    - DRY_RUN: every row validated, the write was rolled back on request
    """
    SUCCESS = "success"
    REJECTED = "rejected"
    DB_FAILED = "db_failed"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class TableStat:
    """Per-table insert statistics, including batch timing."""
    table_name: str
    inserted_rows: int
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class LoadResult:
    source: str  # report file name
    status: LoadStatus
    rows_read: int  # data rows pulled from the sheet (header excluded)
    inserted_records: int
    error_count: int
    failing_standards: int
    elapsed_seconds: float
    report_lines: list[str] = field(default_factory=list)
    table_stats: list[TableStat] = field(default_factory=list)

    @property
    def report_text(self) -> str:
        return "\n".join(self.report_lines)


class BatchStatsAccumulator:
    """Collects individual batch timings and summarizes them."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile (19th out of 20 quantiles, 0-indexed)

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
