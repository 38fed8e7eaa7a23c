from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class BookingResponse(BaseModel):
    id: str
    session_id: str
    user_id: str
    reminder_sent: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class BookingWithProfileResponse(BookingResponse):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
