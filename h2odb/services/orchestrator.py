from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from h2odb.db.batch_insert import BatchInsertError, BatchMetrics, write_records
from h2odb.db.reference import ReferenceDataError, load_reference_data
from h2odb.excel.reader import ExcelRowSource, ReportReadError
from h2odb.excel.row_source import Row
from h2odb.excel.table import TableRow, read_table
from h2odb.logging.error_log import ErrorLogBuffer
from h2odb.models.config_models import DEFAULT_ANALYSES_AGENCY, ImportConfig, TableNames
from h2odb.models.db_record import DbRecord
from h2odb.models.domain_tables import DEFAULT_TABLES, DomainTables
from h2odb.models.errors import DbError
from h2odb.models.processing_result import (
    BatchStatsAccumulator,
    LoadResult,
    LoadStatus,
    TableStat,
)
from h2odb.models.reference_data import ReferenceData
from h2odb.models.validated import Invalid, Validated, and_then

from .accumulator import RecordAccumulator, RowError
from .progress import RowProgress
from .record_builder import build_analysis_record
from .record_converter import check_duplicate_sample, convert_analysis_record
from .record_validator import validate_analysis_record
from .standards import check_standards
from .summary import render_db_error, render_row_errors, render_success

logger = logging.getLogger(__name__)

"""Load orchestration for one water analysis report.

``run_pipeline`` is the pure core: rows in, accumulated DbRecords (or every
row error) out. ``process_report`` wraps it with the file, the reference data
read from the database, the transactional write, the standards check and the
error log, and returns a LoadResult for the CLI.

Transaction boundary: all chemistry tables are written between one BEGIN and
one COMMIT. Any insert failure rolls the whole batch back.
"""

__all__ = [
    "ProcessingError",
    "PipelineOutcome",
    "convert_row",
    "run_pipeline",
    "process_report",
]


class ProcessingError(Exception):
    """Fatal error that prevents a report from being processed at all."""


@dataclass(frozen=True)
class PipelineOutcome:
    rows_read: int  # data rows emitted by the table reader
    result: Validated[dict[tuple[str, str], DbRecord]]
    superseded: int = 0  # duplicates dropped in favour of a preferred test

    @property
    def errors(self) -> list[RowError]:
        if isinstance(self.result, Invalid):
            return list(self.result.errors)
        return []

    @property
    def records(self) -> list[DbRecord]:
        if isinstance(self.result, Invalid):
            return []
        return sorted(self.result.value.values(), key=lambda r: r.sort_key)


def convert_row(
    row: TableRow,
    tables: DomainTables,
    reference: ReferenceData,
    table_names: TableNames,
    agency: str,
) -> Validated[DbRecord]:
    """Column map -> record -> domain checks -> DbRecord -> duplicate check."""
    built = and_then(row.result, build_analysis_record)
    checked = and_then(built, lambda rec: validate_analysis_record(rec, tables))
    converted = and_then(
        checked,
        lambda rec: convert_analysis_record(rec, tables, reference.guids, table_names, agency),
    )
    return and_then(converted, lambda rec: check_duplicate_sample(rec, reference.existing_samples))


def run_pipeline(
    rows: Iterable[Row],
    tables: DomainTables = DEFAULT_TABLES,
    reference: ReferenceData | None = None,
    table_names: TableNames | None = None,
    agency: str = DEFAULT_ANALYSES_AGENCY,
    pad_short_rows: bool = False,
) -> PipelineOutcome:
    reference = reference or ReferenceData()
    table_names = table_names or TableNames()
    acc = RecordAccumulator()
    rows_read = 0
    for table_row in read_table(rows, pad_short_rows=pad_short_rows):
        rows_read += 1
        acc.add(table_row.index, convert_row(table_row, tables, reference, table_names, agency))
    return PipelineOutcome(rows_read=rows_read, result=acc.result(), superseded=acc.superseded)


def _elapsed(start: datetime) -> float:
    return (datetime.now(UTC) - start).total_seconds()


def _table_stats(inserted: dict[str, int], timings: dict[str, BatchStatsAccumulator]) -> list[TableStat]:
    stats: list[TableStat] = []
    for table, n in inserted.items():
        total, avg, p95 = timings.get(table, BatchStatsAccumulator()).get_stats()
        stats.append(
            TableStat(
                table_name=table,
                inserted_rows=n,
                total_batches=total,
                avg_batch_seconds=avg,
                p95_batch_seconds=p95,
            )
        )
    return stats


def _write_batch(
    cursor: Any,
    records: list[DbRecord],
    page_size: int,
    dry_run: bool,
) -> tuple[dict[str, int], list[TableStat], DbError | None]:
    """Write every record inside one transaction; returns (inserted, stats, error)."""
    timings: dict[str, BatchStatsAccumulator] = {}

    def on_batch(metrics: BatchMetrics) -> None:
        timings.setdefault(metrics.table, BatchStatsAccumulator()).add_batch_time(
            metrics.elapsed_seconds
        )

    try:
        cursor.execute("BEGIN")
    except Exception as e:
        return {}, [], DbError(f"failed to begin transaction: {e}")

    try:
        inserted = write_records(cursor, records, page_size=page_size, metrics_callback=on_batch)
    except BatchInsertError as e:
        _rollback(cursor)
        return {}, [], DbError(f"{e.table}: {e}" if e.table else str(e))

    try:
        cursor.execute("ROLLBACK" if dry_run else "COMMIT")
    except Exception as e:
        _rollback(cursor)
        return {}, [], DbError(f"commit failed: {e}")
    return inserted, _table_stats(inserted, timings), None


def _rollback(cursor: Any) -> None:
    try:
        cursor.execute("ROLLBACK")
    except Exception as e:  # pragma: no cover - the insert error is reported instead
        logger.warning("rollback failed: %s", e)


def process_report(
    path: Path,
    config: ImportConfig,
    cursor: Any,
    *,
    tables: DomainTables = DEFAULT_TABLES,
    dry_run: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> LoadResult:
    """Load one report file into the chemistry tables.

    Args:
        path: report spreadsheet (.xls / .xlsx)
        config: loaded configuration
        cursor: psycopg2 cursor on a connection in autocommit mode; the
            transaction is opened and closed here
        tables: static domain tables
        dry_run: validate and insert, then roll back instead of committing
        error_log: buffer receiving one record per error (flushed before returning)

    Returns:
        LoadResult with status, counters and report text

    Raises:
        ProcessingError: report unreadable or reference data unavailable
    """
    start = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    source = path.name
    sheet = str(config.sheet)

    try:
        row_source = ExcelRowSource.from_file(
            path, sheet=config.sheet, keep_na_strings=config.keep_na_strings
        )
        reference = load_reference_data(cursor, config.tables)
    except ReportReadError as e:
        error_log.add_file_error(source, sheet, "REPORT_READ_ERROR", str(e))
        error_log.flush()
        raise ProcessingError(str(e)) from e
    except ReferenceDataError as e:
        error_log.add_file_error(source, sheet, "REFERENCE_DATA_ERROR", str(e))
        error_log.flush()
        raise ProcessingError(str(e)) from e

    total_rows = row_source.non_blank_rows
    logger.info(f"Reading {source} (sheet {sheet}, {total_rows} rows)")
    with RowProgress(total_rows, description=source) as progress:
        outcome = run_pipeline(
            progress.track(row_source),
            tables=tables,
            reference=reference,
            table_names=config.tables,
            agency=config.analyses_agency,
            pad_short_rows=config.pad_short_rows,
        )
    if outcome.superseded:
        logger.debug(f"{outcome.superseded} lower priority duplicate records dropped")

    if outcome.errors:
        errors = outcome.errors
        error_log.add_row_errors(source, sheet, errors)
        report = render_row_errors(source, errors)
        for line in report:
            logger.error(line)
        _flush(error_log)
        return LoadResult(
            source=source,
            status=LoadStatus.REJECTED,
            rows_read=outcome.rows_read,
            inserted_records=0,
            error_count=len(errors),
            failing_standards=0,
            elapsed_seconds=_elapsed(start),
            report_lines=report,
        )

    records = outcome.records
    inserted: dict[str, int] = {}
    stats: list[TableStat] = []
    if records:
        inserted, stats, db_error = _write_batch(cursor, records, config.page_size, dry_run)
        if db_error is not None:
            error_log.add_file_error(source, sheet, db_error.error_type, db_error.message)
            report = render_db_error(db_error)
            logger.error(db_error.message)
            _flush(error_log)
            return LoadResult(
                source=source,
                status=LoadStatus.DB_FAILED,
                rows_read=outcome.rows_read,
                inserted_records=0,
                error_count=1,
                failing_standards=0,
                elapsed_seconds=_elapsed(start),
                report_lines=report,
            )

    standards = check_standards(records, tables)
    report = render_success(records, standards)
    if dry_run:
        report.append("Dry run: changes rolled back")
    for stat in stats:
        logger.info(
            f"{stat.table_name}: {stat.inserted_rows} rows {'validated' if dry_run else 'inserted'}"
        )
        logger.debug(
            f"{stat.table_name}: batches={stat.total_batches} "
            f"avg={stat.avg_batch_seconds:.6f}s p95={stat.p95_batch_seconds:.6f}s"
        )
    _flush(error_log)
    return LoadResult(
        source=source,
        status=LoadStatus.DRY_RUN if dry_run else LoadStatus.SUCCESS,
        rows_read=outcome.rows_read,
        inserted_records=0 if dry_run else sum(inserted.values()),
        error_count=0,
        failing_standards=standards.failing_count,
        elapsed_seconds=_elapsed(start),
        report_lines=report,
        table_stats=stats,
    )


def _flush(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        # the run result stands even when the log cannot be written
        logger.warning(f"failed to write error log: {e}")
        return
    if path is not None:
        logger.info(f"error log written: {path}")
