from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

class NotificationOut(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    related_id: Optional[int] = None
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NotificationList(BaseModel):
    notifications: List[NotificationOut]
    unread_count: int
