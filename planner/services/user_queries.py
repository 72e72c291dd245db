from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from planner.models.user import User
from planner.models.task import Task
from planner.models.task_assignment import TaskAssignment
from planner.models.group_member import GroupMember
from planner.models.enums import TaskStatus

async def get_user_by_id(db: AsyncSession, user_id: int):
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()

async def get_user_by_email(db: AsyncSession, email: str):
    res = await db.execute(select(User).where(User.email == email))
    return res.scalar_one_or_none()

async def get_user_by_username(db: AsyncSession, username: str):
    res = await db.execute(select(User).where(User.username == username))
    return res.scalars().first()

async def search_users(db: AsyncSession, query: str, exclude_ids=(), limit: int = 10):
    query = (query or "").strip()
    if len(query) < 2:
        return []

    pattern = f"%{query.lower()}%"
    q = select(User).where(
        or_(
            func.lower(User.username).like(pattern),
            func.lower(User.email).like(pattern),
            func.lower(User.full_name).like(pattern),
        )
    )
    if exclude_ids:
        q = q.where(User.id.not_in(list(exclude_ids)))

    res = await db.execute(q.order_by(User.username.asc()).limit(limit))
    return res.scalars().all()

async def get_user_stats(db: AsyncSession, user_id: int) -> dict:
    status_q = (
        select(Task.status, func.count(TaskAssignment.id))
        .join(Task, Task.id == TaskAssignment.task_id)
        .where(TaskAssignment.user_id == user_id)
        .group_by(Task.status)
    )
    res = await db.execute(status_q)
    by_status = {status: count for status, count in res.all()}

    groups = await db.scalar(
        select(func.count(GroupMember.id)).where(GroupMember.user_id == user_id)
    )

    return {
        "total_tasks": sum(by_status.values()),
        "completed_tasks": by_status.get(TaskStatus.COMPLETED, 0),
        "in_progress_tasks": by_status.get(TaskStatus.IN_PROGRESS, 0),
        "pending_tasks": by_status.get(TaskStatus.PENDING, 0),
        "groups": groups or 0,
    }
