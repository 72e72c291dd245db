import logging
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from planner.models.task_comment import TaskComment
from planner.models.user import User
from planner.services.events import TaskCommented
from planner.services.notification_service import stage_notifications
from planner.services.task_services import get_task_by_id

logger = logging.getLogger(__name__)

async def get_task_comments(db: AsyncSession, task_id: int):
    q = (
        select(TaskComment)
        .options(selectinload(TaskComment.author))
        .where(TaskComment.task_id == task_id)
        .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
    )
    return (await db.scalars(q)).all()

async def get_comment_by_id(db: AsyncSession, comment_id: int):
    q = (
        select(TaskComment)
        .options(selectinload(TaskComment.author))
        .where(TaskComment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalar_one_or_none()

async def add_task_comment(db: AsyncSession, task_id: int, author: User, text: str):
    """
    Store the comment and notify the task's assignees and creator, except the
    author, in the same transaction.
    """
    task = await get_task_by_id(db, task_id)
    if not task:
        return None

    comment = TaskComment(task_id=task_id, user_id=author.id, comment=text)
    db.add(comment)
    stage_notifications(
        db,
        TaskCommented(
            task_id=task.id,
            task_title=task.title,
            commenter_id=author.id,
            commenter_name=author.full_name or author.username,
            task_creator_id=task.created_by,
            assignee_ids=tuple(a.user_id for a in task.assignees),
        ),
    )
    await db.commit()
    logger.debug("Comment added task_id=%s user_id=%s", task_id, author.id)
    return await get_comment_by_id(db, comment.id)

async def delete_task_comment(db: AsyncSession, comment_id: int, user_id: int) -> bool:
    """Only the author may delete; anything else (or a missing comment) is False."""
    res = await db.execute(
        delete(TaskComment).where(
            TaskComment.id == comment_id,
            TaskComment.user_id == user_id,
        )
    )
    await db.commit()
    return res.rowcount > 0
