"""Facade exposing the Supabase client shape over the REST backend."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from .auth_client import AuthClient
from .http_client import ApiClient
from .query_builder import QueryBuilder
from .realtime import RealtimeChannel, RealtimeClient
from .rpc import RpcCall
from .session import SessionStore
from .settings import CompatSettings
from .storage_client import StorageClient
from .token_storage import FileTokenStorage, MemoryTokenStorage, TokenStorage


class Client:
    """Aggregates auth, storage, rpc and the per-table query builder factory.

    Each Client owns its own SessionStore, so two instances never share cached
    session state. They share the durable token only if given the same
    TokenStorage.
    """

    def __init__(self, api: ApiClient, *, session_store: SessionStore | None = None) -> None:
        self._api = api
        self._session_store = session_store if session_store is not None else SessionStore()
        self.auth = AuthClient(api, api.token_storage, self._session_store)
        self.storage = StorageClient(api)
        self.realtime = RealtimeClient()

    @property
    def api(self) -> ApiClient:
        return self._api

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    def from_(self, table: str) -> QueryBuilder:
        """Start a query on ``table``. Always returns a fresh builder."""
        return QueryBuilder(self._api, table)

    def table(self, table: str) -> QueryBuilder:
        return self.from_(table)

    def rpc(self, name: str, params: Mapping[str, Any] | None = None) -> RpcCall:
        return RpcCall(self._api, name, params)

    def channel(self, name: str) -> RealtimeChannel:
        return self.realtime.channel(name)

    async def aclose(self) -> None:
        await self._api.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_client(
    settings: CompatSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    token_storage: TokenStorage | None = None,
) -> Client:
    """Build a Client from settings (defaults read from the environment).

    Raises ValueError listing every problem ``settings.validate()`` reports.
    """
    settings = settings or CompatSettings.from_env()
    errors = settings.validate()
    if errors:
        raise ValueError(
            "Compatibility client settings validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    if token_storage is None:
        token_storage = (
            FileTokenStorage(settings.token_path) if settings.token_path else MemoryTokenStorage()
        )

    api = ApiClient(
        base_url=settings.base_url,
        token_storage=token_storage,
        http_client=http_client,
        timeout_seconds=settings.timeout_seconds,
    )
    return Client(api)
