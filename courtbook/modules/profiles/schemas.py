from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=200)
    avatar_url: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_approved: bool = False
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SafeProfileResponse(BaseModel):
    """Profile as seen by other users: email only for the caller's own row."""
    id: str
    user_id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_approved: bool = False
    email: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileWithRolesResponse(ProfileResponse):
    roles: List[str] = []


class ApprovalResponse(BaseModel):
    user_id: str
    is_approved: bool
    success: bool = True
