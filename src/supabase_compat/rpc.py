"""Remote procedure calls: ``POST /rpc/{name}`` with ``params`` as the body."""

from __future__ import annotations

import logging
from typing import Any, Generator, Mapping

from .errors import ApiError, StructuredError
from .http_client import ApiClient
from .result import Result, failure

logger = logging.getLogger(__name__)

RPC_ERROR = "RPC_ERROR"


class RpcCall:
    """One named call. ``single()`` and ``select(...).single()`` are equivalent."""

    def __init__(self, api: ApiClient, name: str, params: Mapping[str, Any] | None = None) -> None:
        if not name:
            raise ValueError("rpc name is required")
        self._api = api
        self._name = name
        self._params = dict(params) if params is not None else {}

    @property
    def path(self) -> str:
        return f"/rpc/{self._name}"

    @property
    def body(self) -> dict[str, Any]:
        return dict(self._params)

    def select(self, columns: str = "*") -> RpcCall:
        """Accepted for call-shape compatibility; the backend does no projection."""
        return self

    async def single(self) -> Result[Any]:
        try:
            data = await self._api.post(self.path, self.body)
        except ApiError as exc:
            error = StructuredError.from_exception(exc, RPC_ERROR)
            logger.warning("RPC %s failed (code=%s)", self._name, error.code)
            return failure(error)
        return Result(data=data)

    async def execute(self) -> Result[Any]:
        return await self.single()

    def __await__(self) -> Generator[Any, None, Result[Any]]:
        return self.single().__await__()
