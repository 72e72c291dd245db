"""Tests for registration, login, session cookies and password reset."""
import pytest
from httpx import AsyncClient, ASGITransport

from planner.core.config import settings
from planner.core.security import TEMP_PASSWORD_CHARSET
from planner.main import create_app
from planner.services.user_service import authenticate_user
from tests.conftest import FakeMailer, auth_headers


@pytest.mark.asyncio
async def test_authenticate_returns_user_without_password(db_session, alice):
    user = await authenticate_user(db_session, "alice@example.com", "secret123")
    assert user is not None
    assert user.id == alice.id
    dumped = user.model_dump()
    assert "password" not in dumped
    assert "password_hash" not in dumped


@pytest.mark.asyncio
async def test_authenticate_wrong_password_returns_none(db_session, alice):
    assert await authenticate_user(db_session, "alice@example.com", "not-the-password") is None
    assert await authenticate_user(db_session, "nobody@example.com", "secret123") is None


@pytest.mark.asyncio
async def test_register_then_login(client):
    resp = await client.post("/api/v1/auth/register", json={
        "username": "dave",
        "email": "dave@example.com",
        "password": "secret123",
        "full_name": "Dave",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["email"] == "dave@example.com"
    assert "password_hash" not in body["data"]

    resp = await client.post("/api/v1/auth/login", json={
        "email": "dave@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 200
    token = resp.cookies.get(settings.SESSION_COOKIE_NAME)
    assert token

    set_cookie = resp.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    resp = await client.get(
        "/api/v1/auth/me",
        headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["username"] == "dave"


@pytest.mark.asyncio
async def test_register_duplicate_email(client, alice):
    resp = await client.post("/api/v1/auth/register", json={
        "username": "alice2",
        "email": "alice@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 409
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_register_validation_error_is_400(client):
    resp = await client.post("/api/v1/auth/register", json={
        "username": "ab",
        "email": "short@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "username" in body["message"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, alice):
    resp = await client.post("/api/v1/auth/login", json={
        "email": "alice@example.com",
        "password": "wrong-password",
    })
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid email or password", "data": None}


@pytest.mark.asyncio
async def test_me_requires_session(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401

    resp = await client.get("/api/v1/auth/me", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}=garbage"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookie(client, alice):
    resp = await client.post("/api/v1/auth/logout", headers=auth_headers(alice))
    assert resp.status_code == 200
    assert f"{settings.SESSION_COOKIE_NAME}=" in resp.headers["set-cookie"]


@pytest.mark.asyncio
async def test_reset_password_mails_a_working_temp_password(client, alice, mailer):
    resp = await client.post("/api/v1/auth/reset-password", json={"email": "alice@example.com"})
    assert resp.status_code == 200

    assert len(mailer.sent) == 1
    temp_password = mailer.sent[0]["temp_password"]
    assert len(temp_password) == settings.TEMP_PASSWORD_LENGTH
    assert set(temp_password) <= set(TEMP_PASSWORD_CHARSET)

    resp = await client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 401

    resp = await client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": temp_password})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_reset_password_unknown_email_sends_nothing(client, mailer):
    resp = await client.post("/api/v1/auth/reset-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_reset_password_delivery_failure(database, alice):
    app = create_app(database, mailer=FakeMailer(deliver=False))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.post("/api/v1/auth/reset-password", json={"email": "alice@example.com"})
    assert resp.status_code == 500
    assert resp.json()["success"] is False
