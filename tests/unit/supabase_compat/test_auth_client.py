"""Unit tests for AuthClient session handling."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from supabase_compat.auth_client import SIGNED_IN, SIGNED_OUT
from supabase_compat.client import Client
from supabase_compat.http_client import ApiClient
from supabase_compat.session import Session
from supabase_compat.token_storage import FileTokenStorage, MemoryTokenStorage

USER = {"id": "u1", "email": "alice@example.com", "user_metadata": {"full_name": "Alice"}}
LOGIN_BODY = {
    "user": USER,
    "session": {"access_token": "tok-1", "refresh_token": "ref-1", "expires_at": 1700000000},
}


def _make_client(handler, token_storage=None) -> Client:
    transport = httpx.MockTransport(handler)
    api = ApiClient(
        base_url="https://api.test",
        token_storage=token_storage if token_storage is not None else MemoryTokenStorage(),
        http_client=httpx.AsyncClient(transport=transport),
    )
    return Client(api)


def _routes(table: dict[tuple[str, str], Any], seen: list[httpx.Request] | None = None):
    async def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        key = (request.method, request.url.path)
        if key not in table:
            return httpx.Response(404, json={"message": "no route", "code": "NOT_FOUND"})
        status, body = table[key]
        return httpx.Response(status, json=body)

    return handler


# ── get_session ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_session_without_token_is_empty_not_an_error():
    seen: list[httpx.Request] = []
    client = _make_client(_routes({}, seen))

    result = await client.auth.get_session()

    assert result.data == {"session": None}
    assert result.error is None
    assert seen == []


@pytest.mark.asyncio
async def test_get_session_with_invalid_token_returns_error():
    client = _make_client(
        _routes({("GET", "/auth/me"): (401, {"message": "invalid token", "code": "TOKEN_INVALID"})}),
        MemoryTokenStorage("stale"),
    )

    result = await client.auth.get_session()

    assert result.data == {"session": None}
    assert result.error.code == "TOKEN_INVALID"
    assert client.auth.current_session is None


@pytest.mark.asyncio
async def test_get_session_error_without_code_defaults_to_session_error():
    client = _make_client(
        _routes({("GET", "/auth/me"): (500, None)}),
        MemoryTokenStorage("tok"),
    )

    result = await client.auth.get_session()

    assert result.error.code == "SESSION_ERROR"


# ── sign in / sign up ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_sign_in_caches_session_and_persists_token(token_path):
    client = _make_client(
        _routes({("POST", "/auth/login"): (200, LOGIN_BODY)}),
        FileTokenStorage(token_path),
    )

    result = await client.auth.sign_in_with_password("alice@example.com", "pw")

    assert result.error is None
    session = result.data["session"]
    assert isinstance(session, Session)
    assert session.access_token == "tok-1"
    assert session.refresh_token == "ref-1"
    assert result.data["user"] == USER
    assert client.auth.current_user == USER
    assert json.loads(token_path.read_text()) == {"token": "tok-1"}


@pytest.mark.asyncio
async def test_new_client_observes_persisted_token(token_path):
    login = _make_client(
        _routes({("POST", "/auth/login"): (200, LOGIN_BODY)}),
        FileTokenStorage(token_path),
    )
    await login.auth.sign_in_with_password("alice@example.com", "pw")

    seen: list[httpx.Request] = []
    fresh = _make_client(
        _routes({("GET", "/auth/me"): (200, {"user": USER})}, seen),
        FileTokenStorage(token_path),
    )
    result = await fresh.auth.get_session()

    assert result.error is None
    assert result.data["session"].access_token == "tok-1"
    assert result.data["session"].user == USER
    assert seen[0].headers["authorization"] == "Bearer tok-1"


@pytest.mark.asyncio
async def test_sign_in_accepts_flat_token_response():
    storage = MemoryTokenStorage()
    body = {"access_token": "flat", "token_type": "bearer", "expires_at": 1, "user": USER}
    client = _make_client(_routes({("POST", "/auth/login"): (200, body)}), storage)

    result = await client.auth.sign_in_with_password("alice@example.com", "pw")

    assert result.data["session"].access_token == "flat"
    assert result.data["session"].user == USER
    assert storage.get_token() == "flat"


@pytest.mark.asyncio
async def test_sign_in_failure_keeps_backend_code_and_persists_nothing():
    storage = MemoryTokenStorage()
    client = _make_client(
        _routes({("POST", "/auth/login"): (401, {"message": "bad credentials", "code": "INVALID_CREDENTIALS"})}),
        storage,
    )

    result = await client.auth.sign_in_with_password("alice@example.com", "wrong")

    assert result.data == {"user": None, "session": None}
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "bad credentials"
    assert storage.get_token() is None


@pytest.mark.asyncio
async def test_sign_in_without_session_in_body_is_login_error():
    storage = MemoryTokenStorage()
    client = _make_client(_routes({("POST", "/auth/login"): (200, {"user": USER})}), storage)

    result = await client.auth.sign_in_with_password("alice@example.com", "pw")

    assert result.error.code == "LOGIN_ERROR"
    assert storage.get_token() is None


@pytest.mark.asyncio
async def test_sign_up_sends_profile_fields_and_caches_without_persisting():
    seen: list[httpx.Request] = []
    storage = MemoryTokenStorage()
    client = _make_client(_routes({("POST", "/auth/signup"): (201, LOGIN_BODY)}, seen), storage)

    result = await client.auth.sign_up("alice@example.com", "pw", data={"full_name": "Alice"})

    assert json.loads(seen[0].content) == {
        "email": "alice@example.com",
        "password": "pw",
        "full_name": "Alice",
    }
    assert result.data["user"] == USER
    assert client.auth.current_session.access_token == "tok-1"
    assert storage.get_token() is None


@pytest.mark.asyncio
async def test_sign_up_failure_defaults_to_signup_error():
    client = _make_client(_routes({("POST", "/auth/signup"): (500, None)}))

    result = await client.auth.sign_up("alice@example.com", "pw")

    assert result.error.code == "SIGNUP_ERROR"


# ── sign out ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_sign_out_clears_cache_and_token():
    storage = MemoryTokenStorage()
    client = _make_client(
        _routes({
            ("POST", "/auth/login"): (200, LOGIN_BODY),
            ("POST", "/auth/logout"): (200, {"message": "ok"}),
        }),
        storage,
    )
    await client.auth.sign_in_with_password("alice@example.com", "pw")

    result = await client.auth.sign_out()

    assert result.data is None
    assert result.error is None
    assert storage.get_token() is None
    assert client.auth.current_session is None
    assert client.auth.current_user is None


@pytest.mark.asyncio
async def test_sign_out_clears_local_state_even_when_network_fails():
    storage = MemoryTokenStorage()
    client = _make_client(
        _routes({
            ("POST", "/auth/login"): (200, LOGIN_BODY),
            ("POST", "/auth/logout"): (503, None),
        }),
        storage,
    )
    await client.auth.sign_in_with_password("alice@example.com", "pw")

    result = await client.auth.sign_out()

    assert result.error.code == "LOGOUT_ERROR"
    assert storage.get_token() is None
    assert client.auth.current_session is None
    assert (await client.auth.get_session()).data == {"session": None}


# ── user ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_user_always_refetches():
    seen: list[httpx.Request] = []
    client = _make_client(_routes({("GET", "/auth/me"): (200, {"user": USER})}, seen))

    first = await client.auth.get_user()
    second = await client.auth.get_user()

    assert first.data == second.data == {"user": USER}
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_get_user_failure_is_user_error():
    client = _make_client(_routes({("GET", "/auth/me"): (500, None)}))

    result = await client.auth.get_user()

    assert result.data == {"user": None}
    assert result.error.code == "USER_ERROR"


@pytest.mark.asyncio
async def test_update_user_puts_attributes_and_refreshes_cache():
    seen: list[httpx.Request] = []
    updated = {**USER, "user_metadata": {"full_name": "Alice B"}}
    client = _make_client(_routes({("PUT", "/auth/profile"): (200, {"user": updated})}, seen))

    result = await client.auth.update_user({"full_name": "Alice B"})

    assert json.loads(seen[0].content) == {"full_name": "Alice B"}
    assert result.data == {"user": updated}
    assert client.auth.current_user == updated


@pytest.mark.asyncio
async def test_reset_password_for_email():
    seen: list[httpx.Request] = []
    client = _make_client(_routes({("POST", "/auth/reset-password"): (200, {"message": "sent"})}, seen))

    result = await client.auth.reset_password_for_email("alice@example.com")

    assert result.data == {}
    assert result.error is None
    assert json.loads(seen[0].content) == {"email": "alice@example.com"}


@pytest.mark.asyncio
async def test_reset_password_failure_is_reset_error():
    client = _make_client(_routes({("POST", "/auth/reset-password"): (500, None)}))

    result = await client.auth.reset_password_for_email("alice@example.com")

    assert result.data is None
    assert result.error.code == "RESET_ERROR"


# ── on_auth_state_change ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_on_auth_state_change_reports_signed_out_once():
    events: list[tuple[str, Any]] = []
    client = _make_client(_routes({}))

    result = await client.auth.on_auth_state_change(lambda event, session: events.append((event, session)))

    assert events == [(SIGNED_OUT, None)]
    subscription = result.data["subscription"]
    subscription.unsubscribe()
    subscription.unsubscribe()
    assert subscription.active is False


@pytest.mark.asyncio
async def test_on_auth_state_change_reports_signed_in_to_async_callback():
    events: list[tuple[str, Any]] = []

    async def callback(event: str, session: Any) -> None:
        events.append((event, session))

    client = _make_client(
        _routes({("GET", "/auth/me"): (200, {"user": USER})}),
        MemoryTokenStorage("tok-9"),
    )

    await client.auth.on_auth_state_change(callback)

    assert len(events) == 1
    event, session = events[0]
    assert event == SIGNED_IN
    assert session.access_token == "tok-9"


# ── isolation ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_clients_do_not_share_session_cache():
    handler = _routes({("POST", "/auth/login"): (200, LOGIN_BODY)})
    first = _make_client(handler)
    second = _make_client(handler)

    await first.auth.sign_in_with_password("alice@example.com", "pw")

    assert first.auth.current_session is not None
    assert second.auth.current_session is None
