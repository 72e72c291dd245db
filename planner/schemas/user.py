from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

class UserBase(BaseModel):
    username: str = Field(min_length=3)
    email: EmailStr

class UserCreate(UserBase):
    password: str = Field(min_length=6)
    full_name: Optional[str] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class PasswordResetRequest(BaseModel):
    email: EmailStr

class UserPublic(BaseModel):
    id: int
    username: str
    email: EmailStr
    full_name: Optional[str] = None

    class Config:
        from_attributes = True

class UserOut(UserPublic):
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None

class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3)
    full_name: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None

class UserStats(BaseModel):
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    groups: int
