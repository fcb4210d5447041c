"""Compatibility client configuration.

CompatSettings is the single configuration object accepted by create_client().
It is a plain dataclass (not env-coupled) so tests can inject config without
touching os.environ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

DEFAULT_API_URL = "http://localhost:3001"


@dataclass(frozen=True, slots=True)
class CompatSettings:
    """Configuration for the compatibility client.

    All fields have defaults suitable for local development.
    """

    # ── Environment ────────────────────────────────────────────────
    environment: str = "local"
    """One of: local, dev, staging, production."""

    # ── Backend ────────────────────────────────────────────────────
    api_url: str = DEFAULT_API_URL
    """Base URL of the REST backend (no trailing slash needed)."""

    timeout_seconds: float | None = None
    """Per-request timeout. None disables timeouts entirely."""

    # ── Durable token storage ──────────────────────────────────────
    token_path: str = ""
    """JSON file holding the access token. Empty keeps it in memory."""

    @property
    def is_local(self) -> bool:
        return self.environment == "local"

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"api_url is not an absolute http(s) URL: {self.api_url!r}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            errors.append("timeout_seconds must be positive when set")
        if not self.is_local:
            if parsed.scheme != "https":
                errors.append(f"{self.environment}: api_url must use https")
            if not self.token_path:
                errors.append(f"{self.environment}: token_path is required")
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> CompatSettings:
        """Build settings from environment variables.

        Tests should construct CompatSettings directly.
        """
        if env is None:
            env = dict(os.environ)

        timeout_raw = env.get("API_TIMEOUT_SECONDS", "").strip()
        timeout = float(timeout_raw) if timeout_raw else None

        return cls(
            environment=env.get("ENVIRONMENT", "local"),
            api_url=env.get("API_URL", DEFAULT_API_URL),
            timeout_seconds=timeout,
            token_path=env.get("TOKEN_PATH", ""),
        )
