from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from h2odb.models.db_record import INSERT_COLUMNS, DbRecord

"""DB batch insert via psycopg2.extras.execute_values.

``batch_insert`` writes one table; ``write_records`` groups DbRecords by
target table and writes every group, stopping at the first failure.
Transactions are managed by the caller.
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "quote_ident",
    "batch_insert",
    "write_records",
]


class BatchInsertError(Exception):
    def __init__(self, message: str, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


@dataclass(frozen=True)
class BatchMetrics:
    """Metrics data for a single batch insert operation."""
    table: str
    batch_size: int  # Number of rows in this batch
    elapsed_seconds: float  # Time spent on execute_values call
    start_time: float  # Start timestamp (time.time())
    end_time: float  # End timestamp (time.time())


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


def quote_ident(name: str) -> str:
    """Double-quote an identifier (table names such as "Chemistry SampleInfo" contain spaces)."""
    return '"' + name.replace('"', '""') + '"'


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (未クォート)
    columns: 挿入列
    rows: 行シーケンス (columns と同順)
    page_size: execute_values の page_size (性能調整)
    metrics_callback: receives one BatchMetrics per call. Not invoked when
        ``rows`` is empty (the function returns early).
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(quote_ident(c) for c in columns)
    sql = f"INSERT INTO {quote_ident(table)} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(str(e), table=table) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    table=table,
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return InsertResult(inserted_rows=len(rows_list))


def write_records(
    cursor: Any,
    records: Iterable[DbRecord],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> dict[str, int]:
    """Insert records grouped by target table (tables in sorted order).

    Returns:
        table name -> inserted row count

    Raises:
        BatchInsertError: on the first failing table; later tables are not attempted
    """
    by_table: dict[str, list[DbRecord]] = defaultdict(list)
    for rec in records:
        by_table[rec.table].append(rec)

    inserted: dict[str, int] = {}
    for table in sorted(by_table):
        recs = sorted(by_table[table], key=lambda r: r.sort_key)
        result = batch_insert(
            cursor,
            table,
            INSERT_COLUMNS,
            (r.insert_values() for r in recs),
            page_size=page_size,
            metrics_callback=metrics_callback,
        )
        inserted[table] = result.inserted_rows
    return inserted
