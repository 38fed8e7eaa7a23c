from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime, time


class SessionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    sport_type: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=200)
    session_date: date
    start_time: time
    end_time: time
    max_participants: int = Field(default=10, ge=1)
    recurrence_type: Literal["none", "daily", "weekly", "custom"] = "none"
    recurrence_days: Optional[List[int]] = None  # 0=Sunday..6=Saturday, custom only
    recurrence_end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_times_and_rule(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.recurrence_type != "none" and self.recurrence_end_date is None:
            raise ValueError("recurrence_end_date is required for recurring sessions")
        return self


class SessionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    sport_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    session_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    max_participants: Optional[int] = Field(default=None, ge=1)


class SessionResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    sport_type: str
    location: str
    session_date: date
    start_time: time
    end_time: time
    max_participants: int
    created_by: Optional[str] = None
    is_cancelled: bool = False
    recurrence_type: Optional[str] = "none"
    recurrence_days: Optional[List[int]] = None
    recurrence_end_date: Optional[date] = None
    parent_session_id: Optional[str] = None
    is_recurring_instance: bool = False
    booking_count: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecurrenceGenerateRequest(BaseModel):
    recurrence_type: Literal["daily", "weekly", "custom"]
    recurrence_days: Optional[List[int]] = None
    end_date: date


class RecurrenceGenerateResponse(BaseModel):
    parent_id: str
    instances_created: int
    capped: bool = False


class RecurrenceDeleteResponse(BaseModel):
    parent_id: str
    deleted: int
