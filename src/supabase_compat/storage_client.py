"""Per-bucket file operations proxied to the backend storage endpoints.

Endpoints:
  - ``POST /storage/upload``                    multipart: file, bucket, path
  - ``GET  /storage/download/{bucket}/{path}``  binary body
  - ``GET  /storage/public/{bucket}/{path}``    URL template only
  - ``POST /storage/delete``                    ``{bucket, paths}``
  - ``GET  /storage/list/{bucket}?prefix=...``
"""

from __future__ import annotations

import json
import logging
from pathlib import PurePosixPath
from typing import Any, BinaryIO, Mapping, Sequence, Union
from urllib.parse import quote

from .errors import ApiError, StructuredError
from .http_client import ApiClient
from .result import Result, failure

logger = logging.getLogger(__name__)

UPLOAD_ERROR = "UPLOAD_ERROR"
DOWNLOAD_ERROR = "DOWNLOAD_ERROR"
DELETE_ERROR = "DELETE_ERROR"
LIST_ERROR = "LIST_ERROR"

FileContent = Union[bytes, BinaryIO, tuple]


def _file_field(path: str, file: FileContent) -> tuple:
    if isinstance(file, tuple):
        return file
    return (PurePosixPath(path).name or "file", file)


def _list_params(prefix: str, options: Mapping[str, Any] | None) -> dict[str, str]:
    params: dict[str, str] = {"prefix": prefix}
    for key, value in (options or {}).items():
        if value is None:
            continue
        if isinstance(value, (Mapping, list, tuple)):
            params[key] = json.dumps(value, separators=(",", ":"))
        elif isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


def _object_key(bucket: str, path: str) -> str:
    """Percent-encode ``bucket/path`` the same way for every object URL."""
    return f"{quote(bucket, safe='')}/{quote(path.lstrip('/'), safe='/')}"


def public_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/storage/public/{_object_key(bucket, path)}"


class BucketApi:
    """File operations bound to one bucket."""

    def __init__(self, api: ApiClient, bucket: str) -> None:
        if not bucket:
            raise ValueError("bucket is required")
        self._api = api
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def _object_path(self, prefix: str, path: str) -> str:
        return f"{prefix}/{_object_key(self._bucket, path)}"

    def _failure(self, exc: ApiError, code: str, op: str) -> Result[Any]:
        error = StructuredError.from_exception(exc, code)
        logger.warning("Storage %s on bucket %s failed (code=%s)", op, self._bucket, error.code)
        return failure(error)

    async def upload(self, path: str, file: FileContent) -> Result[dict[str, str]]:
        try:
            resp = await self._api.post(
                "/storage/upload",
                data={"bucket": self._bucket, "path": path},
                files={"file": _file_field(path, file)},
            )
        except ApiError as exc:
            return self._failure(exc, UPLOAD_ERROR, "upload")
        stored = resp.get("path", path) if isinstance(resp, Mapping) else path
        return Result(data={"path": stored})

    async def download(self, path: str) -> Result[bytes]:
        try:
            content = await self._api.get(self._object_path("/storage/download", path), binary=True)
        except ApiError as exc:
            return self._failure(exc, DOWNLOAD_ERROR, "download")
        return Result(data=content)

    def get_public_url(self, path: str) -> Result[dict[str, str]]:
        """Format the public URL for ``path``. Performs no I/O."""
        return Result(data={"publicUrl": public_url(self._api.base_url, self._bucket, path)})

    async def remove(self, paths: Sequence[str]) -> Result[list[dict[str, str]]]:
        paths = list(paths)
        try:
            await self._api.post("/storage/delete", {"bucket": self._bucket, "paths": paths})
        except ApiError as exc:
            return self._failure(exc, DELETE_ERROR, "remove")
        return Result(data=[{"name": p} for p in paths])

    async def list(
        self,
        prefix: str = "",
        options: Mapping[str, Any] | None = None,
    ) -> Result[list[dict[str, Any]]]:
        try:
            entries = await self._api.get(
                f"/storage/list/{quote(self._bucket, safe='')}",
                params=_list_params(prefix, options),
            )
        except ApiError as exc:
            return self._failure(exc, LIST_ERROR, "list")
        return Result(data=entries if entries is not None else [])


class StorageClient:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def from_(self, bucket: str) -> BucketApi:
        return BucketApi(self._api, bucket)
