"""Async HTTP client for the REST backend.

This is the single point of HTTP interaction for the compatibility layer.
It issues method+path+body requests, attaches the stored bearer token, and
either returns the parsed body or raises an :class:`ApiError`.

No retries, no timeout unless configured: a hung request blocks its awaiter.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .errors import (
    ApiAuthError,
    ApiConflictError,
    ApiError,
    ApiNotFoundError,
)
from .token_storage import MemoryTokenStorage, TokenStorage

logger = logging.getLogger(__name__)


class ApiClient:
    """Minimal async REST client with bearer-token auth."""

    def __init__(
        self,
        *,
        base_url: str,
        token_storage: TokenStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")

        self._base_url = base_url.rstrip("/")
        self._token_storage = token_storage if token_storage is not None else MemoryTokenStorage()
        self._timeout = float(timeout_seconds) if timeout_seconds is not None else None
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token_storage(self) -> TokenStorage:
        return self._token_storage

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _auth_headers(self) -> dict[str, str]:
        # Never log these headers.
        token = self._token_storage.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _raise_for_error(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        message = f"HTTP {resp.status_code}"
        code = details = None

        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("message") or payload.get("error") or message
                code = payload.get("code")
                details = payload.get("errors") or payload.get("details")
        except ValueError:
            # Not JSON; keep a short excerpt for debugging.
            details = resp.text[:200] or None

        err_cls: type[ApiError]
        if resp.status_code in (401, 403):
            err_cls = ApiAuthError
        elif resp.status_code == 404:
            err_cls = ApiNotFoundError
        elif resp.status_code == 409:
            err_cls = ApiConflictError
        else:
            err_cls = ApiError

        raise err_cls(
            status_code=resp.status_code,
            message=str(message),
            code=str(code) if code else None,
            details=details,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        binary: bool = False,
    ) -> Any:
        """Send one request and return the decoded body.

        Returns raw bytes when ``binary`` is set, ``None`` for an empty body,
        and parsed JSON otherwise.
        """
        url = self.url_for(path)
        logger.debug("%s %s", method, path)
        try:
            resp = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=self._auth_headers(),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e.__class__.__name__)
            raise ApiError(status_code=0, message=str(e) or e.__class__.__name__) from e

        self._raise_for_error(resp)

        if binary:
            return resp.content
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(
                status_code=resp.status_code,
                message="Invalid JSON in response body",
                details=resp.text[:200] or None,
            ) from e

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None, binary: bool = False) -> Any:
        return await self.request("GET", path, params=params, binary=binary)

    async def post(
        self,
        path: str,
        json: Any | None = None,
        *,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self.request("POST", path, json=json, data=data, files=files)

    async def put(self, path: str, json: Any | None = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
