"""Tests for subgroups."""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from planner.schemas.task import TaskCreate
from planner.services import subgroup_services
from planner.services.group_services import add_member
from planner.services.subgroup_services import create_subgroup, delete_subgroup, get_subgroup_by_id
from planner.services.task_services import count_tasks_in_group, create_task, get_task_by_id, list_tasks_by_subgroup
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_deleting_subgroup_keeps_its_tasks(db_session, alice, group):
    kitchen = await create_subgroup(db_session, name="Kitchen", group_id=group.id, creator_id=alice.id)
    task_ids = []
    for title in ("Dishes", "Oven"):
        task = await create_task(
            db_session,
            TaskCreate(title=title, group_id=group.id, subgroup_id=kitchen.id, assigned_users=[alice.id]),
            created_by=alice.id,
        )
        task_ids.append(task.id)

    assert len(await list_tasks_by_subgroup(db_session, kitchen.id)) == 2
    before = await count_tasks_in_group(db_session, group.id)

    assert await delete_subgroup(db_session, kitchen.id)

    assert await get_subgroup_by_id(db_session, kitchen.id) is None
    assert await count_tasks_in_group(db_session, group.id) == before
    for task_id in task_ids:
        task = await get_task_by_id(db_session, task_id)
        assert task.subgroup_id is None
        assert task.subgroup_name is None


@pytest.mark.asyncio
async def test_delete_missing_subgroup(db_session):
    assert not await delete_subgroup(db_session, 424242)


@pytest.mark.asyncio
async def test_failed_subgroup_delete_keeps_tasks_attached(db_session, monkeypatch, alice, group):
    pantry = await create_subgroup(db_session, name="Pantry", group_id=group.id, creator_id=alice.id)
    task = await create_task(
        db_session,
        TaskCreate(title="Restock", group_id=group.id, subgroup_id=pantry.id, assigned_users=[alice.id]),
        created_by=alice.id,
    )
    pantry_id, task_id = pantry.id, task.id

    def failing_delete(entity):
        raise SQLAlchemyError("subgroup delete failed")

    # the task detach runs first, then the subgroup DELETE fails
    monkeypatch.setattr(subgroup_services, "delete", failing_delete)

    assert not await delete_subgroup(db_session, pantry_id)

    assert await get_subgroup_by_id(db_session, pantry_id) is not None
    assert (await get_task_by_id(db_session, task_id)).subgroup_id == pantry_id


# ----------------------------------- HTTP


@pytest.mark.asyncio
async def test_member_creates_and_manages_own_subgroup(client, db_session, group, alice, bob, carol):
    await add_member(db_session, group.id, bob.id)
    await add_member(db_session, group.id, carol.id)

    resp = await client.post(
        f"/api/v1/groups/{group.id}/subgroups",
        json={"name": "Garden", "description": "Outside jobs"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 201
    sub = resp.json()["data"]
    assert sub["group_name"] == "Household"
    assert sub["creator"]["username"] == "bob"

    resp = await client.put(f"/api/v1/subgroups/{sub['id']}", json={"name": "Yard"}, headers=auth_headers(carol))
    assert resp.status_code == 403

    resp = await client.put(f"/api/v1/subgroups/{sub['id']}", json={"name": "Yard"}, headers=auth_headers(bob))
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Yard"
    assert resp.json()["data"]["description"] == "Outside jobs"

    # group admins can manage any subgroup
    resp = await client.post(f"/api/v1/subgroups/{sub['id']}/archive", json={"archive": True}, headers=auth_headers(alice))
    assert resp.status_code == 200

    active = (await client.get(f"/api/v1/groups/{group.id}/subgroups", headers=auth_headers(bob))).json()["data"]
    archived = (await client.get(f"/api/v1/groups/{group.id}/subgroups/archived", headers=auth_headers(bob))).json()["data"]
    assert active == []
    assert [s["id"] for s in archived] == [sub["id"]]


@pytest.mark.asyncio
async def test_subgroup_routes_require_membership(client, db_session, group, alice, carol):
    sub = await create_subgroup(db_session, name="Attic", group_id=group.id, creator_id=alice.id)

    resp = await client.get(f"/api/v1/subgroups/{sub.id}", headers=auth_headers(carol))
    assert resp.status_code == 403

    resp = await client.post(f"/api/v1/groups/{group.id}/subgroups", json={"name": "Nope"}, headers=auth_headers(carol))
    assert resp.status_code == 403

    resp = await client.get("/api/v1/subgroups/99999", headers=auth_headers(alice))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_subgroup_route(client, db_session, group, alice):
    sub = await create_subgroup(db_session, name="Basement", group_id=group.id, creator_id=alice.id)
    task = await create_task(
        db_session,
        TaskCreate(title="Sort boxes", group_id=group.id, subgroup_id=sub.id, assigned_users=[alice.id]),
        created_by=alice.id,
    )
    headers = auth_headers(alice)

    resp = await client.get(f"/api/v1/subgroups/{sub.id}/tasks", headers=headers)
    assert [t["id"] for t in resp.json()["data"]] == [task.id]

    resp = await client.delete(f"/api/v1/subgroups/{sub.id}", headers=headers)
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/groups/{group.id}/tasks", headers=headers)
    tasks = resp.json()["data"]
    assert [t["id"] for t in tasks] == [task.id]
    assert tasks[0]["subgroup_id"] is None
