"""Session value and the per-client session cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Session:
    access_token: str
    user: dict[str, Any] | None = None
    refresh_token: str | None = None
    expires_at: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Session | None:
        """Parse a backend auth payload.

        Accepts ``{"session": {...}, "user": {...}}`` as well as a flat token
        response carrying ``access_token`` at the top level.
        """
        raw = payload.get("session")
        if not isinstance(raw, Mapping):
            raw = payload if "access_token" in payload else None
        if not raw or not raw.get("access_token"):
            return None
        user = raw.get("user") or payload.get("user")
        return cls(
            access_token=str(raw["access_token"]),
            user=dict(user) if isinstance(user, Mapping) else None,
            refresh_token=raw.get("refresh_token"),
            expires_at=raw.get("expires_at"),
        )

    def with_user(self, user: dict[str, Any] | None) -> Session:
        return Session(
            access_token=self.access_token,
            user=user,
            refresh_token=self.refresh_token,
            expires_at=self.expires_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user": self.user,
        }


@dataclass(slots=True)
class SessionStore:
    """In-memory session/user cache owned by one Client."""

    session: Session | None = None
    user: dict[str, Any] | None = field(default=None)

    def set(self, session: Session | None, user: dict[str, Any] | None) -> None:
        self.session = session
        self.user = user

    def clear(self) -> None:
        self.session = None
        self.user = None
