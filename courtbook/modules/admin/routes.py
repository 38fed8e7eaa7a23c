from fastapi import APIRouter, Depends, HTTPException
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.admin.schemas import (
    AdminUserAction, AdminEmailUpdate, AdminRolesUpdate,
    AdminSuccessResponse
)
from courtbook.modules.admin.service import AdminService
from courtbook.modules.profiles.schemas import ProfileWithRolesResponse
from courtbook.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/admin-users", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.post("")
async def admin_users_action(
    body: Optional[AdminUserAction] = None,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Action-routed user management: list, delete, updateEmail, updateRoles, invite."""
    body = body or AdminUserAction()
    actor_id = user_data["id"]
    if body.action == "list":
        return service.list_users()
    if body.action == "delete":
        return AdminSuccessResponse(success=service.delete_user(body.userId, actor_id))
    if body.action == "updateEmail":
        return AdminSuccessResponse(success=service.update_email(body.userId, body.email, actor_id))
    if body.action == "updateRoles":
        return AdminSuccessResponse(success=service.update_roles(body.userId, body.roles, actor_id))
    if body.action == "invite":
        return service.invite_or_recover(body.email, actor_id)
    raise HTTPException(status_code=405, detail="Unsupported action")


@router.get("", response_model=List[ProfileWithRolesResponse])
async def list_users(
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_users()


@router.delete("/{user_id}", response_model=AdminSuccessResponse)
async def delete_user(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return AdminSuccessResponse(success=service.delete_user(user_id, user_data["id"]))


@router.patch("/{user_id}", response_model=AdminSuccessResponse)
async def update_email(
    user_id: str,
    email_data: AdminEmailUpdate,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return AdminSuccessResponse(success=service.update_email(user_id, email_data.email, user_data["id"]))


@router.post("/{user_id}/roles", response_model=AdminSuccessResponse)
async def update_roles(
    user_id: str,
    roles_data: AdminRolesUpdate,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return AdminSuccessResponse(success=service.update_roles(user_id, roles_data.roles, user_data["id"]))
