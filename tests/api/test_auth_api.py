"""Auth routes — registration, login, logout and token refresh over HTTP.

Invariants:
    - Errors use the {"error": {code, message, details, timestamp}} envelope
    - Browser clients get httpOnly cookies, automated clients get headers
    - Responses never carry the password hash
"""

import asyncpg

from bizdesk.db.repositories import user_repo
from bizdesk.services.token_service import create_access_token

REGISTER = "/api/v1/auth/register"
LOGIN = "/api/v1/auth/login"


def _payload(**overrides):
    body = {
        "firstName": "Nikos",
        "lastName": "Papadopoulos",
        "email": "nikos@example.com",
        "password": "secret123",
    }
    body.update(overrides)
    return body


async def test_register_creates_uncategorized_user(client):
    res = await client.post(REGISTER, json=_payload())

    assert res.status_code == 201
    data = res.json()
    assert data["email"] == "nikos@example.com"
    assert data["role"] == "uncategorized"
    assert data["company"] is None
    assert "password" not in data


async def test_register_duplicate_email_conflicts(client):
    await client.post(REGISTER, json=_payload())
    res = await client.post(REGISTER, json=_payload(email="NIKOS@example.com"))

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CONFLICT"


async def test_register_losing_unique_index_race_conflicts(client, monkeypatch):
    async def create_user(**kwargs):
        raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")

    monkeypatch.setattr(user_repo, "create_user", create_user)
    res = await client.post(REGISTER, json=_payload())

    assert res.status_code == 409
    assert res.json()["error"]["details"] == {"field": "email"}


async def test_register_invalid_payload_is_bad_request(client):
    res = await client.post(REGISTER, json=_payload(password="123"))

    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "BAD_REQUEST"
    assert "timestamp" in error
    assert any(f["field"] == "password" for f in error["details"]["fields"])


async def test_login_sets_session_cookies(client):
    await client.post(REGISTER, json=_payload())
    res = await client.post(LOGIN, json={"email": "nikos@example.com", "password": "secret123"})

    assert res.status_code == 200
    cookies = res.headers.get_list("set-cookie")
    assert any(c.startswith("token=") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("refreshToken=") for c in cookies)


async def test_login_for_automated_client_returns_headers(client):
    await client.post(REGISTER, json=_payload())
    res = await client.post(LOGIN, json={
        "email": "nikos@example.com", "password": "secret123", "postmanRequest": True,
    })

    assert res.status_code == 200
    assert res.headers["authorization"].startswith("Bearer ")
    assert res.headers["x-refresh-token"]
    assert not res.headers.get_list("set-cookie")


async def test_login_with_wrong_password_is_unauthorized(client):
    await client.post(REGISTER, json=_payload())
    res = await client.post(LOGIN, json={"email": "nikos@example.com", "password": "nope-nope"})

    assert res.status_code == 401
    assert res.json()["error"]["message"] == "Invalid email or password"


async def test_bearer_from_login_authenticates(client):
    await client.post(REGISTER, json=_payload())
    login = await client.post(LOGIN, json={
        "email": "nikos@example.com", "password": "secret123", "postmanRequest": True,
    })

    res = await client.get(
        "/api/v1/users/get-current-user",
        headers={"Authorization": login.headers["authorization"]},
    )
    assert res.status_code == 200
    assert res.json()["email"] == "nikos@example.com"


async def test_refresh_issues_new_tokens(client):
    await client.post(REGISTER, json=_payload())
    login = await client.post(LOGIN, json={
        "email": "nikos@example.com", "password": "secret123", "postmanRequest": True,
    })

    res = await client.post(
        "/api/v1/auth/token/refresh?postmanRequest=true",
        headers={"X-Refresh-Token": login.headers["x-refresh-token"]},
    )
    assert res.status_code == 200
    assert res.json()["access_token"]


async def test_access_token_cannot_refresh(client, make_user):
    user = await make_user()

    res = await client.post(
        "/api/v1/auth/token/refresh",
        headers={"X-Refresh-Token": create_access_token(user)},
    )
    assert res.status_code == 401


async def test_logout_overwrites_token_cookie(client):
    res = await client.post("/api/v1/auth/logout")

    assert res.status_code == 200
    assert any(c.startswith("token=logout") for c in res.headers.get_list("set-cookie"))


async def test_protected_route_without_token_is_unauthorized(client):
    res = await client.get("/api/v1/users/get-current-user")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"
