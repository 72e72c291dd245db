import logging
from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from planner.models.task import Task
from planner.models.task_assignment import TaskAssignment
from planner.models.group_member import GroupMember
from planner.core.utils import task_ordering
from planner.schemas.task import TaskCreate, TaskUpdate
from planner.services.events import TaskAssigned
from planner.services.notification_service import stage_notifications

logger = logging.getLogger(__name__)


def _task_query():
    return select(Task).options(
        selectinload(Task.group),
        selectinload(Task.subgroup),
        selectinload(Task.creator),
        selectinload(Task.assignees).selectinload(TaskAssignment.user),
        selectinload(Task.assignees).selectinload(TaskAssignment.assigner),
    ).execution_options(populate_existing=True)


async def list_tasks(db: AsyncSession, member_id: int | None = None, descending: bool = False):
    """All tasks, or only those in groups ``member_id`` belongs to."""
    q = _task_query()
    if member_id is not None:
        groups = select(GroupMember.group_id).where(GroupMember.user_id == member_id)
        q = q.where(Task.group_id.in_(groups))
    q = q.order_by(*task_ordering(descending))
    return (await db.scalars(q)).all()

async def list_tasks_by_group(db: AsyncSession, group_id: int, descending: bool = False):
    q = _task_query().where(Task.group_id == group_id).order_by(*task_ordering(descending))
    return (await db.scalars(q)).all()

async def list_tasks_by_subgroup(db: AsyncSession, subgroup_id: int, descending: bool = False):
    q = _task_query().where(Task.subgroup_id == subgroup_id).order_by(*task_ordering(descending))
    return (await db.scalars(q)).all()

async def list_tasks_by_user(db: AsyncSession, user_id: int, descending: bool = False):
    assigned = select(TaskAssignment.task_id).where(TaskAssignment.user_id == user_id)
    q = _task_query().where(Task.id.in_(assigned)).order_by(*task_ordering(descending))
    return (await db.scalars(q)).all()

async def count_tasks_in_group(db: AsyncSession, group_id: int) -> int:
    return (await db.scalar(select(func.count(Task.id)).where(Task.group_id == group_id))) or 0

async def get_task_by_id(db: AsyncSession, task_id: int):
    q = _task_query().where(Task.id == task_id)
    return (await db.execute(q)).scalar_one_or_none()

async def get_task_assignees(db: AsyncSession, task_id: int):
    q = (
        select(TaskAssignment)
        .options(selectinload(TaskAssignment.user), selectinload(TaskAssignment.assigner))
        .where(TaskAssignment.task_id == task_id)
        .order_by(TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc())
    )
    return (await db.scalars(q)).all()

async def get_user_assignments_in_group(db: AsyncSession, group_id: int, user_id: int):
    q = (
        select(TaskAssignment)
        .join(Task, Task.id == TaskAssignment.task_id)
        .where(Task.group_id == group_id, TaskAssignment.user_id == user_id)
    )
    return (await db.scalars(q)).all()

async def _stage_assignments(db: AsyncSession, task: Task, user_ids, assigned_by: int) -> list[int]:
    """Add assignment rows for users not yet assigned; returns the new assignee ids."""
    existing = set(
        (await db.scalars(
            select(TaskAssignment.user_id).where(TaskAssignment.task_id == task.id)
        )).all()
    )

    new_ids = []
    for uid in user_ids:
        if uid in existing or uid in new_ids:
            continue
        new_ids.append(uid)

    db.add_all(
        TaskAssignment(task_id=task.id, user_id=uid, assigned_by=assigned_by)
        for uid in new_ids
    )
    stage_notifications(
        db,
        TaskAssigned(
            task_id=task.id,
            task_title=task.title,
            assigned_by=assigned_by,
            assignee_ids=tuple(new_ids),
        ),
    )
    return new_ids

async def create_task(db: AsyncSession, data: TaskCreate, created_by: int):
    """Insert the task with its initial assignees; all or nothing."""
    try:
        task = Task(
            title=data.title,
            description=data.description or None,
            status=data.status,
            priority=data.priority,
            due_date=data.due_date,
            group_id=data.group_id,
            subgroup_id=data.subgroup_id,
            created_by=created_by,
        )
        db.add(task)
        await db.flush()  # generates task.id

        await _stage_assignments(db, task, data.assigned_users, created_by)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Task creation rolled back group_id=%s", data.group_id)
        return None

    logger.info("Task created id=%s group_id=%s", task.id, data.group_id)
    return await get_task_by_id(db, task.id)

async def update_task(db: AsyncSession, task_id: int, data: TaskUpdate, updated_by: int):
    """
    Apply the fields set on ``data``; everything else keeps its value.

    ``assigned_users``, when given, replaces the assignee set: users dropped from
    it lose their assignment, newcomers are assigned by ``updated_by``.
    """
    task = await get_task_by_id(db, task_id)
    if not task:
        return None

    patch = data.model_dump(exclude_none=True, exclude={"assigned_users"})

    try:
        for field, value in patch.items():
            setattr(task, field, value)

        if data.assigned_users is not None:
            await db.execute(
                delete(TaskAssignment).where(
                    TaskAssignment.task_id == task_id,
                    TaskAssignment.user_id.not_in(data.assigned_users),
                )
            )
            await _stage_assignments(db, task, data.assigned_users, updated_by)

        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Task update rolled back id=%s", task_id)
        return None

    return await get_task_by_id(db, task_id)

async def delete_task(db: AsyncSession, task_id: int) -> bool:
    # assignments and comments cascade
    res = await db.execute(delete(Task).where(Task.id == task_id))
    await db.commit()
    return res.rowcount > 0

async def assign_task_to_users(db: AsyncSession, task_id: int, user_ids, assigned_by: int) -> int:
    """Assign every user not already on the task. Returns how many were added."""
    task = await get_task_by_id(db, task_id)
    if not task:
        return 0

    try:
        new_ids = await _stage_assignments(db, task, user_ids, assigned_by)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Task assignment rolled back task_id=%s", task_id)
        return 0

    return len(new_ids)

async def remove_task_assignment(db: AsyncSession, task_id: int, user_id: int) -> bool:
    res = await db.execute(
        delete(TaskAssignment).where(
            TaskAssignment.task_id == task_id,
            TaskAssignment.user_id == user_id,
        )
    )
    await db.commit()
    return res.rowcount > 0
