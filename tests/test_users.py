"""Tests for profile, user search and stats."""
import pytest

from planner.core.security import TEMP_PASSWORD_CHARSET, generate_temp_password, hash_password, verify_password
from planner.services.user_queries import search_users
from tests.conftest import auth_headers


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_rejects_missing_or_malformed_hash():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "")
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_temp_password_uses_unambiguous_charset():
    for ch in "0O1lIio":
        assert ch not in TEMP_PASSWORD_CHARSET

    pw = generate_temp_password()
    assert len(pw) == 10
    assert set(pw) <= set(TEMP_PASSWORD_CHARSET)
    assert len(generate_temp_password(16)) == 16


@pytest.mark.asyncio
async def test_search_users_is_case_insensitive(db_session, alice, bob, carol):
    found = await search_users(db_session, "BO")
    assert [u.username for u in found] == ["bob"]

    found = await search_users(db_session, "example.com", exclude_ids={alice.id})
    assert [u.username for u in found] == ["bob", "carol"]

    assert await search_users(db_session, "b") == []


@pytest.mark.asyncio
async def test_profile_get_and_update(client, alice):
    headers = auth_headers(alice)

    resp = await client.get("/api/v1/users/profile", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["full_name"] == "Alice Admin"

    resp = await client.put("/api/v1/users/profile", json={"full_name": "Alice A."}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["full_name"] == "Alice A."
    assert resp.json()["data"]["username"] == "alice"


@pytest.mark.asyncio
async def test_profile_password_change_requires_current_password(client, alice):
    headers = auth_headers(alice)

    resp = await client.put("/api/v1/users/profile", json={
        "current_password": "wrong",
        "new_password": "brand-new-pw",
    }, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Current password is incorrect"

    resp = await client.put("/api/v1/users/profile", json={
        "current_password": "secret123",
        "new_password": "brand-new-pw",
    }, headers=headers)
    assert resp.status_code == 200

    resp = await client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": "brand-new-pw"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_profile_username_taken(client, alice, bob):
    resp = await client.put("/api/v1/users/profile", json={"username": "bob"}, headers=auth_headers(alice))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_search_route_excludes_caller(client, alice, bob):
    resp = await client.get("/api/v1/users/search", params={"q": "example"}, headers=auth_headers(alice))
    assert resp.status_code == 200
    assert [u["username"] for u in resp.json()["data"]] == ["bob"]


@pytest.mark.asyncio
async def test_stats_for_new_user(client, alice):
    resp = await client.get("/api/v1/users/stats", headers=auth_headers(alice))
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "total_tasks": 0,
        "completed_tasks": 0,
        "in_progress_tasks": 0,
        "pending_tasks": 0,
        "groups": 0,
    }
