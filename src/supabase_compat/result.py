"""Uniform ``{data, error, count}`` envelope returned by every operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import StructuredError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    data: T | None = None
    error: StructuredError | None = None
    count: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "error": self.error.to_dict() if self.error else None,
            "count": self.count,
        }


def failure(error: StructuredError, data: Any = None) -> Result[Any]:
    """Build an error envelope. ``data`` is only set for call-shape placeholders."""
    return Result(data=data, error=error, count=None)
