from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional
from planner.models.enums import TaskStatus, TaskPriority
from planner.schemas.user import UserPublic

class TaskCreate(BaseModel):
    title: str = Field(min_length=3)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    group_id: int
    subgroup_id: Optional[int] = None
    assigned_users: List[int] = Field(min_length=1)

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    subgroup_id: Optional[int] = None
    assigned_users: Optional[List[int]] = None

class TaskAssigneeOut(BaseModel):
    id: int
    task_id: int
    user_id: int
    assigned_by: int
    assigned_at: Optional[datetime] = None
    user: UserPublic
    assigner: UserPublic

    class Config:
        from_attributes = True

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    group_id: int
    group_name: str
    subgroup_id: Optional[int] = None
    subgroup_name: Optional[str] = None
    created_by: int
    creator: UserPublic
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assignees: List[TaskAssigneeOut] = []

    class Config:
        from_attributes = True

class CommentCreate(BaseModel):
    comment: str

class CommentOut(BaseModel):
    id: int
    task_id: int
    user_id: int
    comment: str
    created_at: Optional[datetime] = None
    author: UserPublic

    class Config:
        from_attributes = True
