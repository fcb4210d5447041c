"""Error types for the compatibility layer.

Two layers:

- ``ApiError`` and its subclasses are raised by :class:`ApiClient` for any
  transport or backend failure. They never leave the public API.
- ``StructuredError`` is the value placed in ``Result.error``. Every public
  method converts ``ApiError`` into one before returning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    """Base error for backend requests."""

    status_code: int
    message: str
    code: str | None = None
    details: Any = None

    def __str__(self) -> str:
        bits: list[str] = [f"ApiError(status={self.status_code})", self.message]
        if self.code:
            bits.append(f"code={self.code}")
        return " ".join(bits)


class ApiAuthError(ApiError):
    """401/403 responses (missing or expired token)."""


class ApiNotFoundError(ApiError):
    """404 responses (unknown table, route or object)."""


class ApiConflictError(ApiError):
    """409 responses (unique violations, etc.)."""


@dataclass(frozen=True, slots=True)
class StructuredError:
    """Error value returned inside a result envelope."""

    message: str
    code: str
    details: Any = None
    status_code: int | None = None

    @classmethod
    def from_exception(cls, exc: ApiError, default_code: str) -> StructuredError:
        # Backend codes pass through; transport failures get the operation default.
        return cls(
            message=exc.message,
            code=exc.code or default_code,
            details=exc.details,
            status_code=exc.status_code or None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details is not None:
            out["details"] = self.details
        if self.status_code is not None:
            out["status_code"] = self.status_code
        return out
