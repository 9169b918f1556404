from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

"""Decoded spreadsheet cell values.

A cell is a single frozen ``CellValue`` tagged with its ``CellKind``. Type
comparisons only look at the tag, never at the payload, so the table reader can
infer and enforce one kind per column.
"""

__all__ = [
    "CellKind",
    "CellValue",
    "BLANK",
]


class CellKind(Enum):
    """Closed set of cell variants.

    The member value doubles as the type name shown in error messages.
    """
    TEXT = "String"
    NUMBER = "Numeric"
    DATE = "Date"
    BOOLEAN = "Boolean"
    BLANK = "Blank"
    FORMULA = "Formula"
    ERROR = "Error"


@dataclass(frozen=True)
class CellValue:
    kind: CellKind
    value: Any = None

    @staticmethod
    def text(value: str) -> CellValue:
        return CellValue(CellKind.TEXT, value)

    @staticmethod
    def number(value: float) -> CellValue:
        return CellValue(CellKind.NUMBER, float(value))

    @staticmethod
    def date(value: datetime) -> CellValue:
        return CellValue(CellKind.DATE, value)

    @staticmethod
    def boolean(value: bool) -> CellValue:
        return CellValue(CellKind.BOOLEAN, bool(value))

    @staticmethod
    def formula(value: str) -> CellValue:
        return CellValue(CellKind.FORMULA, value)

    @staticmethod
    def error(code: int) -> CellValue:
        # Excel error codes fit in one byte (#NULL! = 0x00 ... #N/A = 0x2A)
        return CellValue(CellKind.ERROR, int(code) & 0xFF)

    @property
    def is_blank(self) -> bool:
        return self.kind is CellKind.BLANK

    @property
    def type_description(self) -> str:
        return self.kind.value

    def has_same_type_as(self, other: CellValue) -> bool:
        """True when both cells carry the same variant tag (payload ignored)."""
        return self.kind is other.kind

    def __repr__(self) -> str:
        if self.is_blank:
            return "CellValue.BLANK"
        return f"CellValue.{self.kind.name.lower()}({self.value!r})"


BLANK = CellValue(CellKind.BLANK)
