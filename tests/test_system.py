"""Tests for the health and metrics endpoints."""
import pytest

from planner.core.db_check import wait_for_db
from planner.db.session import Database


@pytest.mark.asyncio
async def test_root_and_health(client):
    resp = await client.get("/")
    assert resp.status_code == 200

    resp = await client.get("/api/v1/system/health")
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_db_health(client):
    resp = await client.get("/api/v1/system/health/db")
    assert resp.status_code == 200
    assert resp.json()["db"] is True


@pytest.mark.asyncio
async def test_metrics(client, group, bob):
    resp = await client.get("/api/v1/system/metrics")
    assert resp.json() == {"users": 2, "groups": 1, "tasks": 0}


@pytest.mark.asyncio
async def test_wait_for_db(database, tmp_path):
    await wait_for_db(database, retries=1, delay=0)

    unreachable = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nope.db'}")
    with pytest.raises(RuntimeError):
        await wait_for_db(unreachable, retries=2, delay=0)
    await unreachable.dispose()


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(client):
    resp = await client.get("/api/v1/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
