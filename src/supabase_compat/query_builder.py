"""Chainable query builder emulating the Supabase PostgREST calling convention.

Usage::

    result = await (
        client.from_("projects")
        .select("id,name")
        .eq("status", "in_progress")
        .order("created_at", ascending=False)
        .limit(10)
    )

Every chain call returns the same builder but swaps in a new
:class:`QueryIntent`. Execution snapshots the intent, so one network call is
issued per intent no matter how often the builder is awaited or executed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Generator, Mapping

from .errors import ApiError, StructuredError
from .filters import Operator, OrderClause, Predicate, QueryIntent
from .http_client import ApiClient
from .result import Result

logger = logging.getLogger(__name__)

QUERY_ERROR = "QUERY_ERROR"


def _shape_response(body: Any, single: bool) -> Result[Any]:
    if isinstance(body, list):
        count = len(body)
        if single:
            return Result(data=body[0] if body else None, count=count)
        return Result(data=body, count=count)
    if body is None:
        return Result(data=None, count=0)
    return Result(data=body, count=1)


class QueryBuilder:
    """Accumulates one query against ``table`` and runs it on demand."""

    def __init__(self, api: ApiClient, table: str) -> None:
        if not table:
            raise ValueError("table is required")
        self._api = api
        self._intent = QueryIntent(table=table)
        self._pending: tuple[QueryIntent, asyncio.Future[Result[Any]]] | None = None

    @property
    def intent(self) -> QueryIntent:
        return self._intent

    def _update(self, **changes: Any) -> QueryBuilder:
        self._intent = replace(self._intent, **changes)
        return self

    def _filter(self, column: str, op: Operator, value: Any) -> QueryBuilder:
        self._intent = self._intent.with_predicate(Predicate(column, op, value))
        return self

    # ── Projection ────────────────────────────────────────────────

    def select(self, columns: str = "*") -> QueryBuilder:
        return self._update(select_columns=columns)

    # ── Filters ───────────────────────────────────────────────────

    def eq(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.EQ, value)

    def neq(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.NEQ, value)

    def gt(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.GT, value)

    def gte(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.GTE, value)

    def lt(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.LT, value)

    def lte(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.LTE, value)

    def like(self, column: str, pattern: str) -> QueryBuilder:
        return self._filter(column, Operator.LIKE, pattern)

    def ilike(self, column: str, pattern: str) -> QueryBuilder:
        return self._filter(column, Operator.ILIKE, pattern)

    def in_(self, column: str, values: Any) -> QueryBuilder:
        return self._filter(column, Operator.IN, values)

    def is_(self, column: str, value: Any) -> QueryBuilder:
        return self._filter(column, Operator.IS, value)

    def match(self, query: Mapping[str, Any]) -> QueryBuilder:
        """Add one ``eq`` predicate per key."""
        for column, value in query.items():
            self.eq(column, value)
        return self

    # ── Modifiers ─────────────────────────────────────────────────

    def order(self, column: str, *, ascending: bool = True) -> QueryBuilder:
        """Set the sort clause. A second call replaces the first."""
        return self._update(order=OrderClause(column, ascending))

    def limit(self, count: int) -> QueryBuilder:
        return self._update(limit=count)

    def single(self) -> QueryBuilder:
        return self._update(single=True)

    # ── Execution ─────────────────────────────────────────────────

    def as_future(self) -> asyncio.Future[Result[Any]]:
        """Return the memoized execution for the current intent.

        Must be called with a running event loop. A future cancelled by a
        caller holding it directly is replaced on the next call.
        """
        intent = self._intent
        pending = self._pending
        if pending is None or pending[0] is not intent or pending[1].cancelled():
            self._pending = pending = (intent, asyncio.ensure_future(self._run(intent)))
        return pending[1]

    async def execute(self) -> Result[Any]:
        # Shielded: one awaiter giving up must not cancel the shared call.
        return await asyncio.shield(self.as_future())

    def __await__(self) -> Generator[Any, None, Result[Any]]:
        return self.execute().__await__()

    async def _run(self, intent: QueryIntent) -> Result[Any]:
        params = intent.to_params()
        logger.debug("Query %s params=%s", intent.table, params)
        try:
            body = await self._api.get(intent.path, params=params)
        except ApiError as exc:
            error = StructuredError.from_exception(exc, QUERY_ERROR)
            logger.warning("Query on %s failed (code=%s)", intent.table, error.code)
            return Result(data=None, error=error, count=None)
        return _shape_response(body, intent.single)

    def __repr__(self) -> str:
        return f"QueryBuilder(table={self._intent.table!r}, params={self._intent.to_params()!r})"
