from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from planner.models.enums import GroupRole
from planner.schemas.user import UserPublic

class GroupCreate(BaseModel):
    name: str = Field(min_length=3)
    description: Optional[str] = None
    members_can_create_tasks: bool = False

class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    members_can_create_tasks: Optional[bool] = None

class ArchiveRequest(BaseModel):
    archive: bool

class GroupOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    creator_id: int
    members_can_create_tasks: bool
    is_archived: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        
class GroupMemberOut(BaseModel):
    id: int
    user_id: int
    group_id: int
    role: GroupRole
    joined_at: Optional[datetime] = None
    user: UserPublic

    class Config:
        from_attributes = True

class RoleUpdate(BaseModel):
    role: GroupRole

class InviteRequest(BaseModel):
    email: str = Field(min_length=3)
