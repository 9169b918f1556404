from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from itertools import islice
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from h2odb.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from h2odb.excel.reader import ExcelRowSource, ReportReadError
from h2odb.logging.init import log_summary, setup_logging
from h2odb.models.config_models import ImportConfig
from h2odb.models.processing_result import LoadStatus
from h2odb.services.orchestrator import ProcessingError, process_report
from h2odb.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (overrides the process environment) and the YAML config
- open one database connection
- load the report in a single transaction
- print the report text, then the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2  # batch rejected (row errors or database error)
EXIT_FATAL = 1

INSPECT_ROWS = 5


def resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string, in priority order.

        1. DATABASE_URL / PGDSN (.env が既存環境変数を上書き済み)
        2. config の database.dsn
        3. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, 不足分は config の値
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a psycopg2 cursor.

    The connection runs in autocommit mode so that the orchestrator's explicit
    BEGIN / COMMIT / ROLLBACK are the only transaction boundaries.
    """
    conn = psycopg2.connect(resolve_dsn(cfg))
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override existing variables)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="h2odb", description="Load a water chemistry analysis report into the database"
    )
    p.add_argument("report", type=Path, help="Report spreadsheet (.xls / .xlsx)")
    p.add_argument(
        "--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file"
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--dry-run", action="store_true", help="Validate and insert, then roll back"
    )
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print the first rows as decoded cells then exit",
    )
    return p.parse_args(argv)


def _inspect_data(report: Path, cfg: ImportConfig) -> int:
    try:
        source = ExcelRowSource.from_file(
            report, sheet=cfg.sheet, keep_na_strings=cfg.keep_na_strings
        )
    except ReportReadError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {report.name} sheet={cfg.sheet} rows={len(source)}")
    for row in islice(source, INSPECT_ROWS):
        print(f"  row {row.index + 1}: {list(row.cells)}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む (テストで main([...]) を直接呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.report, cfg)

    if not args.report.exists():
        logger.error(f"report file not found: {args.report}")
        return EXIT_FATAL

    try:
        with _db_connection(cfg) as cur:
            result = process_report(args.report, cfg, cur, dry_run=args.dry_run)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    print(result.report_text)
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.status in (LoadStatus.REJECTED, LoadStatus.DB_FAILED):
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
