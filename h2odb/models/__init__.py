"""Domain models for the water analysis report loader.

This package contains the value types shared by every pipeline stage: decoded
cells, typed report records, database records, errors and run results.
"""

from .analysis_record import AnalysisRecord
from .cell_value import BLANK, CellKind, CellValue
from .config_models import DatabaseConfig, ImportConfig, TableNames
from .db_record import INSERT_COLUMNS, DbRecord
from .domain_tables import DEFAULT_TABLES, ChemistryTable, DomainTables
from .reference_data import ReferenceData
from .validated import Invalid, Valid

__all__ = [
    # Cell / record models
    "AnalysisRecord",
    "BLANK",
    "CellKind",
    "CellValue",
    "DbRecord",
    "INSERT_COLUMNS",
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "TableNames",
    # Static tables / reference data
    "ChemistryTable",
    "DEFAULT_TABLES",
    "DomainTables",
    "ReferenceData",
    # Validation results
    "Invalid",
    "Valid",
]
