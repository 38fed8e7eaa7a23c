from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    session_id: Optional[str] = None
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    session_title: Optional[str] = None
    message: str
    is_read: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
