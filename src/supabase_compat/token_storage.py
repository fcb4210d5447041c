"""Durable slot for the access token.

The auth client writes the token on sign-in and clears it on sign-out; the
HTTP client reads it on every request. Nothing else is persisted.

There is no locking: concurrent sign-in/sign-out calls race on the slot and
the last write wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "token"


class TokenStorage(Protocol):
    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...

    def remove_token(self) -> None: ...


class MemoryTokenStorage:
    """Process-local storage. Share one instance to share the slot."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def remove_token(self) -> None:
        self._token = None


class FileTokenStorage:
    """JSON file storage; survives process restarts.

    The file is re-read on every lookup so that a token written by another
    client instance (or process) is observed.
    """

    def __init__(self, path: Path | str, *, key: str = ACCESS_TOKEN_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Token file %s is unreadable; treating as empty", self._path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload), encoding="utf-8")
        tmp.replace(self._path)

    def get_token(self) -> str | None:
        token = self._read().get(self._key)
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        payload = self._read()
        payload[self._key] = token
        self._write(payload)

    def remove_token(self) -> None:
        payload = self._read()
        if payload.pop(self._key, None) is not None:
            self._write(payload)
