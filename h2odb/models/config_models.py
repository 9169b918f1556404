from __future__ import annotations

from dataclasses import dataclass, field

from .domain_tables import ChemistryTable

"""Config dataclasses for the water analysis report loader.

These are built by ``h2odb.config.loader.load_config`` after schema
validation; everything downstream only sees these typed objects.
"""

DEFAULT_SAMPLE_INFO_TABLE = "Chemistry SampleInfo"
DEFAULT_MAJOR_CHEMISTRY_TABLE = "MajorChemistry"
DEFAULT_MINOR_CHEMISTRY_TABLE = "MinorandTraceChemistry"
DEFAULT_ANALYSES_AGENCY = "NMBGMR"
DEFAULT_KEEP_NA_STRINGS = ("NA", "N/A", "#N/A")


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None
    port: int | None
    user: str | None
    password: str | None
    database: str | None
    dsn: str | None


@dataclass(frozen=True)
class TableNames:
    """Names of the three reference/target tables in the destination database."""
    sample_info: str = DEFAULT_SAMPLE_INFO_TABLE
    major_chemistry: str = DEFAULT_MAJOR_CHEMISTRY_TABLE
    minor_chemistry: str = DEFAULT_MINOR_CHEMISTRY_TABLE

    @property
    def chemistry(self) -> tuple[str, str]:
        return (self.major_chemistry, self.minor_chemistry)

    @property
    def required(self) -> tuple[str, str, str]:
        return (self.sample_info, self.major_chemistry, self.minor_chemistry)

    def resolve(self, table: ChemistryTable) -> str:
        if table is ChemistryTable.MAJOR:
            return self.major_chemistry
        return self.minor_chemistry


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for one load run."""
    database: DatabaseConfig
    tables: TableNames = field(default_factory=TableNames)
    analyses_agency: str = DEFAULT_ANALYSES_AGENCY
    sheet: int | str = 0  # worksheet index or name
    keep_na_strings: tuple[str, ...] = DEFAULT_KEEP_NA_STRINGS  # pandas の NaN 変換から除外する文字列
    pad_short_rows: bool = False  # True: 短い行を Blank で補完 / False: RowHeaderConflict
    page_size: int = 1000  # execute_values page_size
