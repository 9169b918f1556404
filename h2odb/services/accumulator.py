from __future__ import annotations

from collections.abc import Iterable

from h2odb.models.db_record import DbRecord
from h2odb.models.errors import PipelineError
from h2odb.models.validated import Invalid, Valid, Validated

"""Fold per-row conversion results into one batch outcome.

The accumulator is in one of two modes. While no error has been seen it keeps
a map ``result_id -> DbRecord`` where a later record only replaces a stored
one when its priority number is strictly lower. The first error switches it
to error mode for good: records are ignored from then on and every further
error is appended as ``(row_index, error)``.
"""

__all__ = [
    "RowError",
    "RecordAccumulator",
    "accumulate",
]

RowError = tuple[int, PipelineError]


class RecordAccumulator:
    def __init__(self) -> None:
        self._records: dict[tuple[str, str], DbRecord] = {}
        self._errors: list[RowError] = []
        self.superseded = 0  # lower priority duplicates dropped

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    def add(self, row_index: int, result: Validated[DbRecord]) -> None:
        if isinstance(result, Invalid):
            self._errors.extend((row_index, e) for e in result.errors)
            return
        if self._errors:
            return
        record = result.value
        prior = self._records.get(record.result_id)
        if prior is not None:
            self.superseded += 1
            if record.priority >= prior.priority:
                return
        self._records[record.result_id] = record

    def result(self) -> Validated[dict[tuple[str, str], DbRecord]]:
        if self._errors:
            return Invalid(tuple(self._errors))
        return Valid(dict(self._records))


def accumulate(
    rows: Iterable[tuple[int, Validated[DbRecord]]],
) -> Validated[dict[tuple[str, str], DbRecord]]:
    acc = RecordAccumulator()
    for row_index, result in rows:
        acc.add(row_index, result)
    return acc.result()
