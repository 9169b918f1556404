from __future__ import annotations

from collections.abc import Iterable, Sequence

from h2odb.models.db_record import DbRecord
from h2odb.models.errors import DbError, PipelineError
from h2odb.models.processing_result import LoadResult

from .standards import StandardsReport

"""Report text and SUMMARY line rendering.

Report text is what the user reads after a run: either the row errors that
rejected the batch, or the list of added sample points followed by the
water quality standards section. The SUMMARY line is a single machine
readable line with the run counters.
"""

__all__ = [
    "NO_RECORDS_LINE",
    "SEPARATOR_LINE",
    "render_row_errors",
    "render_db_error",
    "render_added",
    "render_success",
    "render_summary_line",
]

NO_RECORDS_LINE = "Added 0 rows to database"
SEPARATOR_LINE = "----------"


def render_row_errors(source: str, errors: Iterable[tuple[int, PipelineError]]) -> list[str]:
    """One line per error, ordered by row; row numbers are 1-based sheet rows."""
    ordered = sorted(errors, key=lambda e: e[0])
    return [f"ERROR: in {source}, row {row + 1}: {err.message}" for row, err in ordered]


def render_db_error(error: DbError) -> list[str]:
    return [f"ERROR: {error.message}"]


def render_added(records: Sequence[DbRecord]) -> list[str]:
    ids = sorted({r.sample_point_id for r in records})
    return [
        f"Added {len(records)} records with the following sample point IDs to database:",
        *ids,
    ]


def render_success(records: Sequence[DbRecord], standards: StandardsReport) -> list[str]:
    if not records:
        return [NO_RECORDS_LINE]
    return [*render_added(records), SEPARATOR_LINE, *standards.lines()]


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: LoadResult) -> str:
    """Render the SUMMARY line for one load run.

    Examples:
        >>> from h2odb.models.processing_result import LoadStatus
        >>> r = LoadResult(source="r.xlsx", status=LoadStatus.SUCCESS, rows_read=3,
        ...                inserted_records=3, error_count=0, failing_standards=1,
        ...                elapsed_seconds=2.0)
        >>> render_summary_line(r)
        'SUMMARY file=r.xlsx status=success rows=3 inserted=3 errors=0 failing_standards=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY file={result.source} "
        f"status={result.status.value} "
        f"rows={result.rows_read} "
        f"inserted={result.inserted_records} "
        f"errors={result.error_count} "
        f"failing_standards={result.failing_standards} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
