import secrets
from supabase import Client
from postgrest.exceptions import APIError
from courtbook.modules.invites.models import UNIQUE_VIOLATION
from courtbook.modules.invites.schemas import InviteResponse
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def generate_invite_code() -> str:
    return secrets.token_hex(16)


class InviteService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_invite_by_email(self, email: str) -> Optional[InviteResponse]:
        result = self.supabase.table("invites")\
            .select("*")\
            .eq("email", email.lower())\
            .limit(1)\
            .execute()
        return InviteResponse(**result.data[0]) if result.data else None

    def create_invite(self, email: str, invited_by: Optional[str]) -> InviteResponse:
        """
        Create an invite for email. If the email was already invited the unique
        constraint fires and the existing invite (and its code) is returned.
        """
        email = email.lower()
        try:
            result = self.supabase.table("invites").insert({
                "email": email,
                "invite_code": generate_invite_code(),
                "invited_by": invited_by,
            }).execute()
        except APIError as e:
            if e.code != UNIQUE_VIOLATION:
                logger.error(f"Error creating invite for {email}: {e}")
                raise HTTPException(status_code=500, detail="Failed to create invite")
            existing = self.get_invite_by_email(email)
            if existing is None:
                logger.error(f"Invite for {email} violated uniqueness but could not be fetched")
                raise HTTPException(status_code=500, detail="Failed to create invite")
            logger.info(f"Returning existing invite for {email}")
            return existing.model_copy(update={"existing": True})
        except Exception as e:
            logger.error(f"Error creating invite for {email}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create invite")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create invite")
        logger.info(f"Invite created for {email} by {invited_by}")
        return InviteResponse(**result.data[0])

    def validate_invite_code(self, invite_code: str, email: str) -> bool:
        """True if an unused invite matches both code and email (case-insensitive)."""
        result = self.supabase.table("invites")\
            .select("id")\
            .eq("invite_code", invite_code)\
            .eq("email", email.lower())\
            .eq("used", False)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def consume_invite(self, email: str) -> None:
        self.supabase.table("invites")\
            .update({"used": True})\
            .eq("email", email.lower())\
            .execute()

    def list_invites(self, include_used: bool = True, limit: int = 100, offset: int = 0) -> List[InviteResponse]:
        try:
            query = self.supabase.table("invites").select("*")
            if not include_used:
                query = query.eq("used", False)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [InviteResponse(**invite) for invite in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing invites: {e}")
            raise HTTPException(status_code=500, detail="Failed to load invites")
