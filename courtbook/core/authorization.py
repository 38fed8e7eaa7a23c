"""
Role predicate and row-level policy checks.

These replace the database's row-level-security policies: every service calls
them explicitly before it mutates anything. They only read, and they run on
the service-role client so that checking a role never requires holding one.
"""

from fastapi import HTTPException, status
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
MEMBER_ROLE = "member"
APP_ROLES = (ADMIN_ROLE, MEMBER_ROLE)


def has_role(supabase: Client, user_id: str, role: str, cache: Optional[Dict[str, Any]] = None) -> bool:
    """True if user_id holds role. Memoised in the request-scoped cache when provided."""
    key = f"role:{user_id}:{role}"
    if cache is not None and key in cache:
        return cache[key]
    result = supabase.table("user_roles")\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", role)\
        .limit(1)\
        .execute()
    held = bool(result.data)
    if cache is not None:
        cache[key] = held
    return held


def is_admin(supabase: Client, user_id: str, cache: Optional[Dict[str, Any]] = None) -> bool:
    return has_role(supabase, user_id, ADMIN_ROLE, cache)


def ensure_admin(supabase: Client, user_id: str, detail: str = "Admin role required") -> None:
    if not is_admin(supabase, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def check_session_manager(supabase: Client, session: Dict[str, Any], user_id: str) -> None:
    """Session creator or admin."""
    if session.get("created_by") == user_id:
        return
    if is_admin(supabase, user_id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the session organizer or an admin can modify this session"
    )


def check_comment_author(comment: Dict[str, Any], user_id: str) -> None:
    if comment.get("user_id") != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own comments"
        )


def check_comment_deleter(supabase: Client, comment: Dict[str, Any], user_id: str) -> None:
    """Comment author, the session's organizer, or an admin."""
    if comment.get("user_id") == user_id:
        return
    session_result = supabase.table("sessions")\
        .select("created_by")\
        .eq("id", comment["session_id"])\
        .limit(1)\
        .execute()
    if session_result.data and session_result.data[0].get("created_by") == user_id:
        return
    if is_admin(supabase, user_id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the author, the session organizer or an admin can delete this comment"
    )


def check_notification_owner(notification: Dict[str, Any], user_id: str) -> None:
    if notification.get("user_id") != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
