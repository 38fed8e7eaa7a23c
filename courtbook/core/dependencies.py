"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from courtbook.database.supabase_client import get_supabase, get_service_supabase
from courtbook.modules.auth.service import AuthService
from courtbook.core.authorization import has_role, ADMIN_ROLE
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401, not HTTPBearer's default 403
security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (roles, approval state)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_access_cache(request: Request) -> Dict[str, Any]:
    return _get_request_cache(request)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, service_supabase)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token"
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user claims from the bearer token"""
    return auth_service.get_current_user(token)


def require_role(required_role: str):
    """Factory function to create a role check dependency"""
    def check_role(
        request: Request,
        user_data: dict = Depends(get_current_user),
        supabase: Client = Depends(get_service_supabase)
    ) -> dict:
        cache = _get_request_cache(request)
        if not has_role(supabase, user_data["id"], required_role, cache):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied - {required_role} role required"
            )
        return user_data
    return check_role


require_admin = require_role(ADMIN_ROLE)


def require_approved_user(
    request: Request,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> dict:
    """Allow admins and users whose profile has been approved."""
    cache = _get_request_cache(request)
    if has_role(supabase, user_data["id"], ADMIN_ROLE, cache):
        return user_data
    if "is_approved" not in cache:
        result = supabase.table("profiles")\
            .select("is_approved")\
            .eq("user_id", user_data["id"])\
            .limit(1)\
            .execute()
        cache["is_approved"] = bool(result.data and result.data[0].get("is_approved"))
    if not cache["is_approved"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is awaiting approval"
        )
    return user_data
