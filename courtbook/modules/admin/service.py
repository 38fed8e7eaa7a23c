from supabase import Client
from courtbook.modules.admin.schemas import AdminInviteResponse
from courtbook.modules.invites.service import InviteService
from courtbook.modules.profiles.schemas import ProfileWithRolesResponse
from courtbook.modules.profiles.service import ProfileService
from courtbook.core.authorization import ADMIN_ROLE, APP_ROLES
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class AdminService:
    """
    Account management on behalf of an admin. The caller's role is checked by
    the route dependency; the guards here protect the caller from locking
    themselves out.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)

    def list_users(self) -> List[ProfileWithRolesResponse]:
        try:
            return self.profiles.list_profiles_with_roles()
        except Exception as e:
            logger.error(f"Error fetching profiles: {e}")
            raise HTTPException(status_code=500, detail="Failed to load users")

    def delete_user(self, target_user_id: Optional[str], actor_id: str) -> bool:
        """Delete the identity; profile, roles and bookings go with it by cascade."""
        if not target_user_id:
            raise HTTPException(status_code=400, detail="userId is required")
        if target_user_id == actor_id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")
        try:
            self.supabase.auth.admin.delete_user(target_user_id)
        except Exception as e:
            logger.error(f"Error deleting user {target_user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user")
        logger.info(f"User {target_user_id} deleted by admin {actor_id}")
        return True

    def update_email(self, target_user_id: Optional[str], email: Optional[str], actor_id: str) -> bool:
        """
        Change the login email, then the profile copy of it. The two writes are
        separate: a profile failure leaves the identity already updated.
        """
        if not target_user_id or not email:
            raise HTTPException(status_code=400, detail="userId and email are required")
        email = email.strip().lower()
        try:
            self.supabase.auth.admin.update_user_by_id(target_user_id, {"email": email})
        except Exception as e:
            logger.error(f"Error updating user email in auth for {target_user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update email")
        try:
            self.supabase.table("profiles")\
                .update({"email": email})\
                .eq("user_id", target_user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating profile email for {target_user_id} (identity already updated): {e}")
            raise HTTPException(status_code=500, detail="Failed to update email")
        logger.info(f"User {target_user_id} email updated to {email} by admin {actor_id}")
        return True

    def update_roles(self, target_user_id: Optional[str], roles: Optional[List[str]], actor_id: str) -> bool:
        """Replace the role set of a user. Not atomic: roles are deleted, then re-inserted."""
        if not target_user_id or roles is None:
            raise HTTPException(status_code=400, detail="userId and roles are required")
        unknown = [r for r in roles if r not in APP_ROLES]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown role(s): {', '.join(unknown)}")
        if target_user_id == actor_id and ADMIN_ROLE not in roles:
            raise HTTPException(status_code=400, detail="You cannot remove your own admin role")

        roles = list(dict.fromkeys(roles))
        try:
            self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", target_user_id)\
                .execute()
            if roles:
                self.supabase.table("user_roles")\
                    .insert([{"user_id": target_user_id, "role": role} for role in roles])\
                    .execute()
        except Exception as e:
            logger.error(f"Error replacing roles of {target_user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update roles")
        logger.info(f"User {target_user_id} roles updated to [{', '.join(roles)}] by admin {actor_id}")
        return True

    def invite_or_recover(self, email: Optional[str], actor_id: str) -> AdminInviteResponse:
        """Existing accounts get a password-recovery email; unknown addresses get an invite."""
        if not email:
            raise HTTPException(status_code=400, detail="email is required")
        email = email.strip().lower()
        existing = self.supabase.table("profiles")\
            .select("user_id")\
            .eq("email", email)\
            .limit(1)\
            .execute()
        if existing.data:
            try:
                self.supabase.auth.reset_password_for_email(email)
            except Exception as e:
                logger.error(f"Error sending recovery email to {email}: {e}")
                raise HTTPException(status_code=500, detail="Failed to send recovery email")
            logger.info(f"Recovery email sent to {email} by admin {actor_id}")
            return AdminInviteResponse(recovery_sent=True)
        invite = InviteService(self.supabase).create_invite(email, actor_id)
        return AdminInviteResponse(invite=invite)
