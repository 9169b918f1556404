from __future__ import annotations

import logging
from typing import Any

from h2odb.db.batch_insert import quote_ident
from h2odb.models.config_models import TableNames
from h2odb.models.db_record import ANALYTE_COLUMN, SAMPLE_POINT_GUID_COLUMN, SAMPLE_POINT_ID_COLUMN
from h2odb.models.reference_data import ReferenceData

"""Per-run reference data read from the destination database.

The three tables a run depends on are checked up front and every missing
one is reported in a single ReferenceDataError.
"""

__all__ = [
    "ReferenceDataError",
    "find_missing_tables",
    "load_guids",
    "load_existing_samples",
    "load_reference_data",
]

logger = logging.getLogger(__name__)


class ReferenceDataError(Exception):
    def __init__(self, missing: list[str] | None = None, message: str | None = None) -> None:
        self.missing = list(missing or [])
        if message is None:
            message = "Required tables missing from database: " + ", ".join(self.missing)
        super().__init__(message)


def find_missing_tables(cursor: Any, table_names: TableNames) -> list[str]:
    cursor.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_name = ANY(%s)",
        (list(table_names.required),),
    )
    present = {r[0] for r in cursor.fetchall()}
    return [t for t in table_names.required if t not in present]


def load_guids(cursor: Any, table_names: TableNames) -> dict[str, str]:
    cursor.execute(
        f"SELECT {quote_ident(SAMPLE_POINT_ID_COLUMN)}, {quote_ident(SAMPLE_POINT_GUID_COLUMN)} "
        f"FROM {quote_ident(table_names.sample_info)}"
    )
    return {str(spid): str(guid) for spid, guid in cursor.fetchall() if spid is not None}


def load_existing_samples(cursor: Any, table_names: TableNames) -> frozenset[tuple[str, str]]:
    pairs: set[tuple[str, str]] = set()
    for table in table_names.chemistry:
        cursor.execute(
            f"SELECT {quote_ident(SAMPLE_POINT_ID_COLUMN)}, {quote_ident(ANALYTE_COLUMN)} "
            f"FROM {quote_ident(table)} "
            f"WHERE {quote_ident(SAMPLE_POINT_ID_COLUMN)} IS NOT NULL "
            f"AND {quote_ident(ANALYTE_COLUMN)} IS NOT NULL"
        )
        pairs.update(
            (str(spid), str(analyte))
            for spid, analyte in cursor.fetchall()
            if spid is not None and analyte is not None
        )
    return frozenset(pairs)


def load_reference_data(cursor: Any, table_names: TableNames | None = None) -> ReferenceData:
    """Check the required tables exist, then read the GUID map and stored samples.

    Raises:
        ReferenceDataError: naming every missing table, or wrapping a query failure
    """
    table_names = table_names or TableNames()
    try:
        missing = find_missing_tables(cursor, table_names)
        if missing:
            raise ReferenceDataError(missing)
        guids = load_guids(cursor, table_names)
        existing = load_existing_samples(cursor, table_names)
    except ReferenceDataError:
        raise
    except Exception as e:
        raise ReferenceDataError(message=f"Failed to read reference data: {e}") from e

    logger.debug(
        "reference data loaded sample_points=%d existing_samples=%d", len(guids), len(existing)
    )
    return ReferenceData(guids=guids, existing_samples=existing)
