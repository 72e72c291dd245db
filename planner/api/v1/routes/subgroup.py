from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user
from planner.schemas.common import ok
from planner.schemas.group import ArchiveRequest
from planner.schemas.subgroup import SubgroupOut, SubgroupUpdate
from planner.schemas.task import TaskOut
from planner.services.permissions import is_group_member, is_group_admin
from planner.services.subgroup_services import (
    delete_subgroup,
    get_subgroup_by_id,
    set_subgroup_archived,
    update_subgroup,
)
from planner.services.task_services import list_tasks_by_subgroup

router = APIRouter()


async def _load_for_member(db: AsyncSession, subgroup_id: int, user_id: int):
    subgroup = await get_subgroup_by_id(db, subgroup_id)
    if not subgroup:
        raise HTTPException(404, "Subgroup not found")

    if not await is_group_member(db, subgroup.group_id, user_id):
        raise HTTPException(403, "You are not a member of this group")

    return subgroup


async def _load_for_manager(db: AsyncSession, subgroup_id: int, user_id: int):
    """Group admins and the subgroup's creator may change it."""
    subgroup = await _load_for_member(db, subgroup_id, user_id)

    if subgroup.creator_id != user_id and not await is_group_admin(db, subgroup.group_id, user_id):
        raise HTTPException(403, "Only a group admin or the subgroup's creator can do this")

    return subgroup


@router.get("/{subgroup_id}")
async def get_subgroup(subgroup_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    subgroup = await _load_for_member(db, subgroup_id, user.id)
    return ok(SubgroupOut.model_validate(subgroup))


@router.put("/{subgroup_id}")
async def edit_subgroup(
    subgroup_id: int,
    data: SubgroupUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    await _load_for_manager(db, subgroup_id, user.id)
    subgroup = await update_subgroup(db, subgroup_id, data)
    return ok(SubgroupOut.model_validate(subgroup), "Subgroup updated")


@router.delete("/{subgroup_id}")
async def remove_subgroup(subgroup_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    await _load_for_manager(db, subgroup_id, user.id)

    if not await delete_subgroup(db, subgroup_id):
        raise HTTPException(500, "The subgroup could not be deleted")

    return ok(message="Subgroup deleted; its tasks stay in the group")


@router.post("/{subgroup_id}/archive")
async def archive_subgroup(
    subgroup_id: int,
    data: ArchiveRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    await _load_for_manager(db, subgroup_id, user.id)
    subgroup = await set_subgroup_archived(db, subgroup_id, data.archive)

    message = "Subgroup archived" if data.archive else "Subgroup restored from archive"
    return ok(SubgroupOut.model_validate(subgroup), message)


@router.get("/{subgroup_id}/tasks")
async def subgroup_tasks(subgroup_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    await _load_for_member(db, subgroup_id, user.id)
    tasks = await list_tasks_by_subgroup(db, subgroup_id)
    return ok([TaskOut.model_validate(t) for t in tasks])
