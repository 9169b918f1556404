from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

"""Error-accumulating validation results.

Every pipeline stage returns either ``Valid(value)`` or ``Invalid(errors)``.
``combine`` runs independent checks and concatenates all their errors instead
of stopping at the first one; ``and_then`` chains dependent stages.
"""

__all__ = [
    "Valid",
    "Invalid",
    "Validated",
    "valid",
    "invalid",
    "combine",
    "combine_all",
    "and_then",
    "map_valid",
    "errors_of",
]

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("Invalid requires at least one error")


Validated = Union[Valid[T], Invalid]


def valid(value: T) -> Valid[T]:
    return Valid(value)


def invalid(*errors: Any) -> Invalid:
    return Invalid(tuple(errors))


def combine(*results: Validated[Any]) -> Validated[tuple[Any, ...]]:
    """Merge independent results: all values when every one is valid, else all errors."""
    errors: list[Any] = []
    values: list[Any] = []
    for result in results:
        if isinstance(result, Invalid):
            errors.extend(result.errors)
        else:
            values.append(result.value)
    if errors:
        return Invalid(tuple(errors))
    return Valid(tuple(values))


def combine_all(results: Iterable[Validated[Any]]) -> Validated[tuple[Any, ...]]:
    return combine(*results)


def and_then(result: Validated[T], fn: Callable[[T], Validated[U]]) -> Validated[U]:
    if isinstance(result, Invalid):
        return result
    return fn(result.value)


def map_valid(result: Validated[T], fn: Callable[[T], U]) -> Validated[U]:
    if isinstance(result, Invalid):
        return result
    return Valid(fn(result.value))


def errors_of(result: Validated[Any]) -> Sequence[Any]:
    if isinstance(result, Invalid):
        return result.errors
    return ()
