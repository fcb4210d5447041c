"""Session-oriented auth API over the backend's bearer-token endpoints.

State machine::

    UNAUTHENTICATED --sign_up / sign_in_with_password--> AUTHENTICATED
    AUTHENTICATED   --sign_out / failed get_session-----> UNAUTHENTICATED

There is no automatic refresh. The access token is the only value written
outside process memory (to the injected TokenStorage).
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .errors import ApiError, StructuredError
from .http_client import ApiClient
from .result import Result, failure
from .session import Session, SessionStore
from .token_storage import TokenStorage

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthStateCallback = Callable[[str, "Session | None"], Any]


@dataclass(slots=True)
class Subscription:
    """Handle returned by on_auth_state_change. Nothing is ever pushed to it."""

    active: bool = True

    def unsubscribe(self) -> None:
        self.active = False


def _user_from(body: Any) -> dict[str, Any] | None:
    if not isinstance(body, Mapping):
        return None
    user = body.get("user", body)
    return dict(user) if isinstance(user, Mapping) else None


class AuthClient:
    def __init__(
        self,
        api: ApiClient,
        token_storage: TokenStorage,
        session_store: SessionStore,
    ) -> None:
        self._api = api
        self._tokens = token_storage
        self._store = session_store

    @property
    def current_session(self) -> Session | None:
        return self._store.session

    @property
    def current_user(self) -> dict[str, Any] | None:
        return self._store.user

    def _auth_failure(self, exc: ApiError, code: str, *, session: bool = True) -> Result[Any]:
        error = StructuredError.from_exception(exc, code)
        logger.info("Auth call failed (code=%s)", error.code)
        data: dict[str, Any] = {"user": None}
        if session:
            data["session"] = None
        return failure(error, data)

    def _cache_auth_payload(self, body: Any) -> Session | None:
        payload = body if isinstance(body, Mapping) else {}
        session = Session.from_payload(payload)
        user = _user_from(payload) if "user" in payload else None
        if user is None and session is not None:
            user = session.user
        if session is not None and session.user is None:
            session = session.with_user(user)
        self._store.set(session, user)
        return session

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: Mapping[str, Any] | None = None,
    ) -> Result[dict[str, Any]]:
        """Register a user. ``data`` carries profile fields such as ``full_name``."""
        body = {"email": email, "password": password, **(data or {})}
        try:
            resp = await self._api.post("/auth/signup", body)
        except ApiError as exc:
            return self._auth_failure(exc, "SIGNUP_ERROR")
        session = self._cache_auth_payload(resp)
        return Result(data={"user": self._store.user, "session": session})

    async def sign_in_with_password(self, email: str, password: str) -> Result[dict[str, Any]]:
        try:
            resp = await self._api.post("/auth/login", {"email": email, "password": password})
        except ApiError as exc:
            return self._auth_failure(exc, "LOGIN_ERROR")
        session = self._cache_auth_payload(resp)
        if session is None:
            self._store.clear()
            return failure(
                StructuredError(message="Login response carried no session", code="LOGIN_ERROR"),
                {"user": None, "session": None},
            )
        self._tokens.set_token(session.access_token)
        logger.info("Signed in user_id=%s", (self._store.user or {}).get("id"))
        return Result(data={"user": self._store.user, "session": session})

    async def sign_out(self) -> Result[None]:
        """Log out on the server, then drop local state whatever the outcome.

        Local state is cleared even when the network call fails; the error is
        still reported so callers can tell the server may hold a live token.
        """
        error: StructuredError | None = None
        try:
            await self._api.post("/auth/logout")
        except ApiError as exc:
            error = StructuredError.from_exception(exc, "LOGOUT_ERROR")
            logger.warning("Logout call failed (code=%s); clearing local session anyway", error.code)
        self._store.clear()
        self._tokens.remove_token()
        return Result(data=None, error=error)

    async def get_session(self) -> Result[dict[str, Any]]:
        token = self._tokens.get_token()
        if not token:
            return Result(data={"session": None})

        try:
            resp = await self._api.get("/auth/me")
        except ApiError as exc:
            self._store.clear()
            return failure(StructuredError.from_exception(exc, "SESSION_ERROR"), {"session": None})

        user = _user_from(resp)
        cached = self._store.session
        if cached is not None and cached.access_token == token:
            session = cached.with_user(user)
        else:
            session = Session(access_token=token, user=user)
        self._store.set(session, user)
        return Result(data={"session": session})

    async def get_user(self) -> Result[dict[str, Any]]:
        try:
            resp = await self._api.get("/auth/me")
        except ApiError as exc:
            return self._auth_failure(exc, "USER_ERROR", session=False)
        self._store.user = _user_from(resp)
        return Result(data={"user": self._store.user})

    async def on_auth_state_change(self, callback: AuthStateCallback) -> Result[dict[str, Subscription]]:
        """Evaluate the session once and report it to ``callback``.

        This is a coroutine and must be awaited, unlike the synchronous
        ``onAuthStateChange`` of supabase-js and supabase-py: the session
        check is done before the subscription handle is returned. The
        callback itself may be sync or async.

        This is a one-shot check; later sign-ins or sign-outs are not pushed.
        """
        result = await self.get_session()
        session = (result.data or {}).get("session")
        outcome = callback(SIGNED_IN, session) if session else callback(SIGNED_OUT, None)
        if inspect.isawaitable(outcome):
            await outcome
        return Result(data={"subscription": Subscription()})

    async def reset_password_for_email(self, email: str) -> Result[dict[str, Any]]:
        try:
            await self._api.post("/auth/reset-password", {"email": email})
        except ApiError as exc:
            return failure(StructuredError.from_exception(exc, "RESET_ERROR"))
        return Result(data={})

    async def update_user(self, attributes: Mapping[str, Any]) -> Result[dict[str, Any]]:
        try:
            resp = await self._api.put("/auth/profile", dict(attributes))
        except ApiError as exc:
            return self._auth_failure(exc, "UPDATE_ERROR", session=False)
        user = _user_from(resp)
        self._store.user = user
        if self._store.session is not None:
            self._store.session = self._store.session.with_user(user)
        return Result(data={"user": user})
