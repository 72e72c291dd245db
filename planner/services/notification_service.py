import logging
from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from planner.models.notification import Notification
from planner.models.enums import NotificationType
from planner.services.events import build_notifications

logger = logging.getLogger(__name__)


def stage_notifications(db: AsyncSession, event) -> list[Notification]:
    """Add the rows for ``event`` to the session; the caller commits."""
    rows = [
        Notification(
            user_id=draft.user_id,
            type=draft.type.value,
            title=draft.title,
            message=draft.message,
            related_id=draft.related_id,
        )
        for draft in build_notifications(event)
    ]
    db.add_all(rows)
    return rows

async def emit(db: AsyncSession, event) -> list[Notification]:
    rows = stage_notifications(db, event)
    if rows:
        await db.commit()
        logger.debug("Emitted %s notification(s) for %s", len(rows), type(event).__name__)
    return rows

async def create_notification(
    db: AsyncSession,
    user_id: int,
    type: NotificationType | str,
    title: str,
    message: str,
    related_id: int | None = None,
):
    notification = Notification(
        user_id=user_id,
        type=type.value if isinstance(type, NotificationType) else type,
        title=title,
        message=message,
        related_id=related_id,
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    return notification

async def list_notifications(db: AsyncSession, user_id: int, limit: int = 50):
    q = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    res = await db.execute(q)
    return res.scalars().all()

async def count_unread(db: AsyncSession, user_id: int) -> int:
    q = select(func.count(Notification.id)).where(
        Notification.user_id == user_id,
        Notification.is_read == False,
    )
    return (await db.scalar(q)) or 0

async def mark_notification_read(db: AsyncSession, notification_id: int, user_id: int) -> bool:
    q = (
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(is_read=True)
    )
    res = await db.execute(q)
    await db.commit()
    return res.rowcount > 0

async def mark_all_notifications_read(db: AsyncSession, user_id: int) -> int:
    q = (
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)
        .values(is_read=True)
    )
    res = await db.execute(q)
    await db.commit()
    return res.rowcount

async def delete_notification(db: AsyncSession, notification_id: int, user_id: int) -> bool:
    q = (
        delete(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
    )
    res = await db.execute(q)
    await db.commit()
    return res.rowcount > 0
