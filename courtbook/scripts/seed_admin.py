"""
Seed Admin Script
Grants the admin role to an existing account and approves its profile.
The first admin of a fresh deployment has to be created this way.

Usage: python -m courtbook.scripts.seed_admin someone@example.com
"""

import sys
from courtbook.core.authorization import ADMIN_ROLE
from courtbook.database.supabase_client import get_service_supabase
from courtbook.utils.datetime_utils import utcnow
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant_admin(supabase: Client, email: str) -> bool:
    """Returns False when no profile exists for email."""
    email = email.strip().lower()
    profile_result = supabase.table("profiles")\
        .select("user_id, is_approved")\
        .eq("email", email)\
        .limit(1)\
        .execute()
    if not profile_result.data:
        logger.error(f"No profile found for {email}; the account must sign up first")
        return False
    profile = profile_result.data[0]
    user_id = profile["user_id"]

    existing = supabase.table("user_roles")\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", ADMIN_ROLE)\
        .execute()
    if existing.data:
        logger.info(f"{email} already has the {ADMIN_ROLE} role")
    else:
        supabase.table("user_roles").insert({"user_id": user_id, "role": ADMIN_ROLE}).execute()
        logger.info(f"Granted {ADMIN_ROLE} role to {email}")

    if not profile.get("is_approved"):
        supabase.table("profiles")\
            .update({"is_approved": True, "approved_at": utcnow().isoformat()})\
            .eq("user_id", user_id)\
            .execute()
        logger.info(f"Approved profile of {email}")
    return True


def main():
    if len(sys.argv) != 2:
        logger.error("Usage: python -m courtbook.scripts.seed_admin <email>")
        sys.exit(2)
    try:
        if not grant_admin(get_service_supabase(), sys.argv[1]):
            sys.exit(1)
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
