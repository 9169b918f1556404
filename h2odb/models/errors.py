from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

"""Row and batch level errors of the loading pipeline.

These are plain values carried inside ``Invalid`` results, not exceptions.
Each one has an UPPER_SNAKE ``error_type`` (used for the JSON Lines error log)
and a human readable ``message`` (used for the report text).
"""

__all__ = [
    "PipelineError",
    "InvalidHeader",
    "RowHeaderConflict",
    "CellType",
    "MissingField",
    "FieldType",
    "MissingParamConversion",
    "InvalidTestDescription",
    "ReportedNDFormat",
    "MissingLowerLimit",
    "InvalidSamplePointId",
    "DuplicateSample",
    "DbError",
]


class PipelineError:
    error_type: ClassVar[str] = "PIPELINE_ERROR"

    @property
    def message(self) -> str:  # pragma: no cover - overridden everywhere
        raise NotImplementedError


@dataclass(frozen=True)
class InvalidHeader(PipelineError):
    columns: tuple[int, ...]
    error_type: ClassVar[str] = "INVALID_HEADER"

    @property
    def message(self) -> str:
        return f"Invalid cell values in header row, columns {list(self.columns)}: must be text"


@dataclass(frozen=True)
class RowHeaderConflict(PipelineError):
    header_columns: int
    row_columns: int
    error_type: ClassVar[str] = "ROW_HEADER_CONFLICT"

    @property
    def message(self) -> str:
        return (
            f"Row has {self.row_columns} cells but the header row has "
            f"{self.header_columns} columns"
        )


@dataclass(frozen=True)
class CellType(PipelineError):
    column: int
    expected_type: str
    error_type: ClassVar[str] = "CELL_TYPE"

    @property
    def message(self) -> str:
        return f"Cell value in column {self.column} has incorrect type: must be {self.expected_type}"


@dataclass(frozen=True)
class MissingField(PipelineError):
    name: str
    error_type: ClassVar[str] = "MISSING_FIELD"

    @property
    def message(self) -> str:
        return f"Field '{self.name}' is missing a value"


@dataclass(frozen=True)
class FieldType(PipelineError):
    name: str
    error_type: ClassVar[str] = "FIELD_TYPE"

    @property
    def message(self) -> str:
        return f"Value in field '{self.name}' has the wrong data type"


@dataclass(frozen=True)
class MissingParamConversion(PipelineError):
    parameter: str
    error_type: ClassVar[str] = "MISSING_PARAM_CONVERSION"

    @property
    def message(self) -> str:
        return f"Param value '{self.parameter}' has no known conversion to an analyte code"


@dataclass(frozen=True)
class InvalidTestDescription(PipelineError):
    sample_point_id: str
    parameter: str
    test: str
    error_type: ClassVar[str] = "INVALID_TEST_DESCRIPTION"

    @property
    def message(self) -> str:
        return f"Invalid test description ({self.sample_point_id}, {self.parameter}, {self.test})"


@dataclass(frozen=True)
class ReportedNDFormat(PipelineError):
    value: str = ""
    error_type: ClassVar[str] = "REPORTED_ND_FORMAT"

    @property
    def message(self) -> str:
        return f"Value in 'ReportedND' field has invalid format: '{self.value}'"


@dataclass(frozen=True)
class MissingLowerLimit(PipelineError):
    error_type: ClassVar[str] = "MISSING_LOWER_LIMIT"

    @property
    def message(self) -> str:
        return "'LowerLimit' field value is missing"


@dataclass(frozen=True)
class InvalidSamplePointId(PipelineError):
    sample_point_id: str
    error_type: ClassVar[str] = "INVALID_SAMPLE_POINT_ID"

    @property
    def message(self) -> str:
        return f"Sample point id '{self.sample_point_id}' is not in database"


@dataclass(frozen=True)
class DuplicateSample(PipelineError):
    sample_point_id: str
    analyte: str
    error_type: ClassVar[str] = "DUPLICATE_SAMPLE"

    @property
    def message(self) -> str:
        return f"Sample for ({self.sample_point_id}, {self.analyte}) already exists in database"


@dataclass(frozen=True)
class DbError(PipelineError):
    detail: str
    error_type: ClassVar[str] = "DATABASE_INSERT_ERROR"

    @property
    def message(self) -> str:
        return f"Database error: {self.detail}"

