from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class InviteCreate(BaseModel):
    email: EmailStr


class InviteResponse(BaseModel):
    id: str
    email: str
    invite_code: str
    invited_by: Optional[str] = None
    used: bool = False
    created_at: datetime
    existing: bool = False  # True when an earlier invite for this email was returned

    class Config:
        from_attributes = True


class InviteValidateRequest(BaseModel):
    invite_code: str
    email: EmailStr


class InviteValidateResponse(BaseModel):
    valid: bool
