from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user
from planner.schemas.common import ok
from planner.schemas.notification import NotificationList, NotificationOut
from planner.services.notification_service import (
    count_unread,
    delete_notification,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

router = APIRouter()


@router.get("/")
async def notifications(limit: int = 50, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    rows = await list_notifications(db, user.id, limit=limit)
    unread = await count_unread(db, user.id)

    return ok(NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in rows],
        unread_count=unread,
    ))


@router.post("/mark-all-read")
async def mark_all_read(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    updated = await mark_all_notifications_read(db, user.id)
    return ok({"updated": updated}, "All notifications marked as read")


@router.post("/{notification_id}/read")
async def mark_read(notification_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    if not await mark_notification_read(db, notification_id, user.id):
        raise HTTPException(404, "Notification not found")

    return ok(message="Notification marked as read")


@router.delete("/{notification_id}")
async def remove_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    if not await delete_notification(db, notification_id, user.id):
        raise HTTPException(404, "Notification not found")

    return ok(message="Notification deleted")
