from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from courtbook.modules.invites.schemas import InviteResponse


class AdminUserAction(BaseModel):
    """Body of POST /admin-users; the action selects the operation."""
    action: str = "list"
    userId: Optional[str] = None
    email: Optional[str] = None
    roles: Optional[List[str]] = None


class AdminEmailUpdate(BaseModel):
    email: EmailStr


class AdminRolesUpdate(BaseModel):
    roles: List[str] = Field(default_factory=list)


class AdminSuccessResponse(BaseModel):
    success: bool = True


class AdminInviteResponse(BaseModel):
    success: bool = True
    recovery_sent: bool = False
    invite: Optional[InviteResponse] = None
