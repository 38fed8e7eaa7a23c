from fastapi import APIRouter, Depends
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, MeResponse
)
from courtbook.modules.auth.service import AuthService
from courtbook.modules.profiles.service import ProfileService
from courtbook.core.dependencies import get_auth_service, get_bearer_token, get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user with an invite code"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"success": True}


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase),
):
    """Current user with roles and approval state (for frontend gating)."""
    profiles = ProfileService(supabase)
    me = MeResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        roles=profiles.get_roles(current_user["id"]),
    )
    profile = profiles.find_profile(current_user["id"])
    if profile:
        me.full_name = profile.get("full_name")
        me.avatar_url = profile.get("avatar_url")
        me.is_approved = bool(profile.get("is_approved"))
    return me
