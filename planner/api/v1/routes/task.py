from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user
from planner.schemas.common import ok
from planner.schemas.task import CommentCreate, CommentOut, TaskCreate, TaskOut, TaskUpdate
from planner.services.comment_services import add_task_comment, delete_task_comment, get_task_comments
from planner.services.group_services import get_group_by_id
from planner.services.permissions import can_create_tasks_in_group, is_group_admin, is_group_member
from planner.services.subgroup_services import get_subgroup_by_id
from planner.services.task_services import (
    create_task,
    delete_task,
    get_task_by_id,
    list_tasks,
    list_tasks_by_group,
    list_tasks_by_subgroup,
    list_tasks_by_user,
    update_task,
)

router = APIRouter()


async def _check_subgroup(db: AsyncSession, subgroup_id: Optional[int], group_id: int):
    if subgroup_id is None:
        return
    subgroup = await get_subgroup_by_id(db, subgroup_id)
    if not subgroup or subgroup.group_id != group_id:
        raise HTTPException(400, "The subgroup does not belong to this group")


async def _check_assignees(db: AsyncSession, user_ids, group_id: int):
    for uid in user_ids:
        if not await is_group_member(db, group_id, uid):
            raise HTTPException(400, f"User {uid} is not a member of this group")


async def _load_task_for_member(db: AsyncSession, task_id: int, user_id: int):
    task = await get_task_by_id(db, task_id)
    if not task:
        raise HTTPException(404, "Task not found")

    if not await is_group_member(db, task.group_id, user_id):
        raise HTTPException(403, "You do not have access to this task")

    return task


async def _load_task_for_editor(db: AsyncSession, task_id: int, user_id: int):
    task = await get_task_by_id(db, task_id)
    if not task:
        raise HTTPException(404, "Task not found")

    if task.created_by != user_id and not await is_group_admin(db, task.group_id, user_id):
        raise HTTPException(403, "Only a group admin or the task's creator can change this task")

    return task


@router.get("/")
async def tasks(
    group_id: Optional[int] = None,
    subgroup_id: Optional[int] = None,
    mine: bool = False,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    if group_id is not None:
        if not await get_group_by_id(db, group_id):
            raise HTTPException(404, "Group not found")
        if not await is_group_member(db, group_id, user.id):
            raise HTTPException(403, "You are not a member of this group")
        rows = await list_tasks_by_group(db, group_id)
    elif subgroup_id is not None:
        subgroup = await get_subgroup_by_id(db, subgroup_id)
        if not subgroup:
            raise HTTPException(404, "Subgroup not found")
        if not await is_group_member(db, subgroup.group_id, user.id):
            raise HTTPException(403, "You are not a member of this group")
        rows = await list_tasks_by_subgroup(db, subgroup_id)
    elif mine:
        rows = await list_tasks_by_user(db, user.id)
    else:
        rows = await list_tasks(db, member_id=user.id)

    return ok([TaskOut.model_validate(t) for t in rows])


@router.post("/", status_code=201)
async def new_task(data: TaskCreate, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    if not await get_group_by_id(db, data.group_id):
        raise HTTPException(404, "Group not found")

    if not await is_group_member(db, data.group_id, user.id):
        raise HTTPException(403, "You are not a member of this group")

    if not await can_create_tasks_in_group(db, data.group_id, user.id):
        raise HTTPException(403, "You are not allowed to create tasks in this group")

    await _check_subgroup(db, data.subgroup_id, data.group_id)
    await _check_assignees(db, data.assigned_users, data.group_id)

    task = await create_task(db, data, created_by=user.id)
    if not task:
        raise HTTPException(500, "The task could not be created")

    return ok(TaskOut.model_validate(task), "Task created")


@router.get("/{task_id}")
async def get_task(task_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    task = await _load_task_for_member(db, task_id, user.id)
    return ok(TaskOut.model_validate(task))


@router.put("/{task_id}")
async def edit_task(
    task_id: int,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    task = await _load_task_for_editor(db, task_id, user.id)

    await _check_subgroup(db, data.subgroup_id, task.group_id)
    if data.assigned_users is not None:
        if not data.assigned_users:
            raise HTTPException(400, "A task needs at least one assignee")
        await _check_assignees(db, data.assigned_users, task.group_id)

    updated = await update_task(db, task_id, data, updated_by=user.id)
    if not updated:
        raise HTTPException(500, "The task could not be updated")

    return ok(TaskOut.model_validate(updated), "Task updated")


@router.delete("/{task_id}")
async def remove_task(task_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    await _load_task_for_editor(db, task_id, user.id)

    if not await delete_task(db, task_id):
        raise HTTPException(404, "Task not found")

    return ok(message="Task deleted")


# ----------------------------------- comments


@router.get("/{task_id}/comments")
async def comments(task_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    await _load_task_for_member(db, task_id, user.id)
    rows = await get_task_comments(db, task_id)
    return ok([CommentOut.model_validate(c) for c in rows])


@router.post("/{task_id}/comments", status_code=201)
async def new_comment(
    task_id: int,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    text = data.comment.strip()
    if not text:
        raise HTTPException(400, "Comment text is required")

    await _load_task_for_member(db, task_id, user.id)
    comment = await add_task_comment(db, task_id, user, text)
    return ok(CommentOut.model_validate(comment), "Comment added")


@router.delete("/comments/{comment_id}")
async def remove_comment(comment_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    if not await delete_task_comment(db, comment_id, user.id):
        raise HTTPException(403, "You cannot delete this comment or it does not exist")

    return ok(message="Comment deleted")
