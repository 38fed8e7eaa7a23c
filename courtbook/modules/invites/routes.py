from fastapi import APIRouter, Depends, Response, status
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.invites.schemas import (
    InviteCreate, InviteResponse, InviteValidateRequest, InviteValidateResponse
)
from courtbook.modules.invites.service import InviteService
from courtbook.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/invites", tags=["invites"])


def get_invite_service(supabase: Client = Depends(get_service_supabase)) -> InviteService:
    return InviteService(supabase)


@router.post("", response_model=InviteResponse, status_code=201)
async def create_invite(
    invite_data: InviteCreate,
    response: Response,
    user_data: Dict = Depends(require_admin),
    service: InviteService = Depends(get_invite_service)
):
    """Invite an email address. Re-inviting returns the pending invite's code."""
    invite = service.create_invite(invite_data.email, user_data["id"])
    if invite.existing:
        response.status_code = status.HTTP_200_OK
    return invite


@router.get("", response_model=List[InviteResponse])
async def list_invites(
    include_used: bool = True,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_admin),
    service: InviteService = Depends(get_invite_service)
):
    return service.list_invites(include_used=include_used, limit=limit, offset=offset)


@router.post("/validate", response_model=InviteValidateResponse)
async def validate_invite(
    request: InviteValidateRequest,
    service: InviteService = Depends(get_invite_service)
):
    """Public: check an invite code before signing up"""
    return InviteValidateResponse(valid=service.validate_invite_code(request.invite_code, request.email))
