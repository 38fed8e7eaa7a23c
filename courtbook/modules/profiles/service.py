from supabase import Client
from courtbook.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, SafeProfileResponse, ProfileWithRolesResponse
)
from courtbook.modules.notifications.service import NotificationService
from courtbook.core.authorization import ensure_admin, MEMBER_ROLE
from courtbook.utils.datetime_utils import utcnow
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by auth user ID"""
        try:
            row = self.find_profile(user_id)
        except Exception as e:
            logger.error(f"Error fetching profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load profile")
        if not row:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**row)

    def get_roles(self, user_id: str) -> List[str]:
        result = self.supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        return sorted({r["role"] for r in (result.data or [])})

    def create_profile(self, user_id: str, email: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Signup hook: unapproved profile plus the default member role.
        Admins are told a new account is waiting for approval.
        """
        result = self.supabase.table("profiles").insert({
            "user_id": user_id,
            "email": email,
            "full_name": full_name,
            "is_approved": False,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create profile")
        profile = result.data[0]

        self.supabase.table("user_roles").insert({
            "user_id": user_id,
            "role": MEMBER_ROLE,
        }).execute()

        NotificationService(self.supabase).on_profile_pending(profile)
        return profile

    def update_own_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Self-service fields only: name and avatar"""
        update_data = {}
        if profile_data.full_name is not None:
            update_data["full_name"] = profile_data.full_name.strip() or None
        if profile_data.avatar_url is not None:
            update_data["avatar_url"] = profile_data.avatar_url or None
        if not update_data:
            return self.get_profile(user_id)
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile")
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**result.data[0])

    def list_safe_profiles(self, viewer_id: str) -> List[SafeProfileResponse]:
        """Directory of users with other people's email addresses redacted."""
        try:
            result = self.supabase.table("profiles")\
                .select("id, user_id, full_name, avatar_url, is_approved, email, created_at")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing profiles: {e}")
            raise HTTPException(status_code=500, detail="Failed to load profiles")
        profiles = []
        for row in result.data or []:
            if row["user_id"] != viewer_id:
                row = {**row, "email": None}
            profiles.append(SafeProfileResponse(**row))
        return profiles

    def list_profiles_with_roles(self) -> List[ProfileWithRolesResponse]:
        """All profiles, newest first, each with its derived role set."""
        profiles = self.supabase.table("profiles")\
            .select("*")\
            .order("created_at", desc=True)\
            .execute()
        roles = self.supabase.table("user_roles")\
            .select("user_id, role")\
            .execute()
        roles_by_user: Dict[str, List[str]] = {}
        for r in roles.data or []:
            roles_by_user.setdefault(r["user_id"], []).append(r["role"])
        return [
            ProfileWithRolesResponse(**p, roles=sorted(roles_by_user.get(p["user_id"], [])))
            for p in (profiles.data or [])
        ]

    def approve_user(self, target_user_id: str, actor_id: str) -> ProfileResponse:
        ensure_admin(self.supabase, actor_id, "Only admins can approve users")
        return self._set_approval(target_user_id, {
            "is_approved": True,
            "approved_at": utcnow().isoformat(),
            "approved_by": actor_id,
            "rejected_at": None,
            "rejected_by": None,
        })

    def reject_user(self, target_user_id: str, actor_id: str) -> ProfileResponse:
        ensure_admin(self.supabase, actor_id, "Only admins can reject users")
        return self._set_approval(target_user_id, {
            "is_approved": False,
            "rejected_at": utcnow().isoformat(),
            "rejected_by": actor_id,
            "approved_at": None,
            "approved_by": None,
        })

    def _set_approval(self, target_user_id: str, update_data: Dict[str, Any]) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", target_user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating approval for {target_user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update approval state")
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        logger.info(f"User {target_user_id} approval set to {update_data['is_approved']}")
        return ProfileResponse(**result.data[0])
