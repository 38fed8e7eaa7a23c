from fastapi import APIRouter, Depends
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, SafeProfileResponse, ApprovalResponse
)
from courtbook.modules.profiles.service import ProfileService
from courtbook.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_service_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=List[SafeProfileResponse])
async def list_profiles(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Directory of members; only your own email is visible"""
    return service.list_safe_profiles(user_data["id"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(user_data["id"])


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Update your display name or avatar URL"""
    return service.update_own_profile(user_data["id"], profile_data)


@router.post("/{user_id}/approve", response_model=ApprovalResponse)
async def approve_user(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Approve a pending account (admin role re-checked by the service)"""
    profile = service.approve_user(user_id, user_data["id"])
    return ApprovalResponse(user_id=profile.user_id, is_approved=profile.is_approved)


@router.post("/{user_id}/reject", response_model=ApprovalResponse)
async def reject_user(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Reject an account (admin role re-checked by the service)"""
    profile = service.reject_user(user_id, user_data["id"])
    return ApprovalResponse(user_id=profile.user_id, is_approved=profile.is_approved)
