"""Predicate model and query-string encoding for ``GET /rest/{table}``.

Query parameters:
  - ``select={cols}``            omitted when columns == "*"
  - ``{column}={operator}.{value}`` one per predicate, in insertion order
  - ``order={column}.{asc|desc}``
  - ``limit={n}``

Predicates are AND-combined; there is no OR form.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Operator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    IS = "is"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (Sequence, set, frozenset)) and not isinstance(
        value, (str, bytes, bytearray)
    )


@dataclass(frozen=True, slots=True)
class Predicate:
    column: str
    operator: Operator
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.operator, Operator):
            # Raises ValueError for anything outside the closed set.
            object.__setattr__(self, "operator", Operator(self.operator))
        if self.operator is Operator.IN:
            if not _is_sequence(self.value):
                raise ValueError("in operator requires a sequence of values")
            # Freeze so a later mutation of the caller's list cannot leak in.
            object.__setattr__(self, "value", tuple(self.value))

    def encode(self) -> str:
        return f"{self.operator.value}.{encode_filter_value(self.operator, self.value)}"


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def encode_filter_value(op: Operator, value: Any) -> str:
    if op is Operator.IN:
        return ",".join(_scalar(v) for v in value)
    return _scalar(value)


@dataclass(frozen=True, slots=True)
class OrderClause:
    column: str
    ascending: bool = True

    def encode(self) -> str:
        return f"{self.column}.{'asc' if self.ascending else 'desc'}"


@dataclass(frozen=True, slots=True)
class QueryIntent:
    """Accumulated query state. Replaced, never mutated, on each chain call."""

    table: str
    select_columns: str = "*"
    predicates: tuple[Predicate, ...] = field(default_factory=tuple)
    order: OrderClause | None = None
    limit: Any = None
    single: bool = False

    def with_predicate(self, predicate: Predicate) -> QueryIntent:
        return replace(self, predicates=(*self.predicates, predicate))

    def to_params(self) -> list[tuple[str, str]]:
        # A list keeps duplicate column names (e.g. gte + lte on one column).
        params: list[tuple[str, str]] = []
        if self.select_columns != "*":
            params.append(("select", self.select_columns))
        for p in self.predicates:
            params.append((p.column, p.encode()))
        if self.order is not None:
            params.append(("order", self.order.encode()))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        return params

    @property
    def path(self) -> str:
        return f"/rest/{self.table}"
