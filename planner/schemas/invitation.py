from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional
from planner.models.enums import InvitationStatus
from planner.schemas.user import UserPublic

class InvitationResponse(BaseModel):
    response: Literal["accepted", "rejected"]

class InvitationGroup(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class InvitationOut(BaseModel):
    id: int
    group_id: int
    user_id: int
    invited_by: int
    status: InvitationStatus
    created_at: Optional[datetime] = None
    group: InvitationGroup
    inviter: UserPublic

    class Config:
        from_attributes = True
