from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from planner.schemas.user import UserPublic

class SubgroupCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None

class SubgroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

class SubgroupOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    group_id: int
    group_name: str
    creator_id: int
    creator: UserPublic
    is_archived: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
