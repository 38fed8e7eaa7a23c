import hashlib
import time
from supabase import Client
from courtbook.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from courtbook.modules.invites.service import InviteService
from courtbook.modules.profiles.service import ProfileService
from fastapi import HTTPException
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, service_supabase: Client):
        # supabase: anon client for identity calls; service_supabase: data access
        self.supabase = supabase
        self.service_supabase = service_supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Invite-only registration using Supabase Auth"""
        email = register_data.email.lower()
        invite_service = InviteService(self.service_supabase)
        if not invite_service.validate_invite_code(register_data.invite_code, email):
            raise HTTPException(status_code=400, detail="Invalid or already used invite code")

        try:
            user_metadata = {}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Sign-up failed for {email}: {error_message}")
            raise HTTPException(status_code=500, detail="Registration failed")

        user_id = auth_response.user.id
        try:
            profile = ProfileService(self.service_supabase).create_profile(
                user_id, email, register_data.full_name
            )
            invite_service.consume_invite(email)
        except HTTPException:
            raise
        except Exception as e:
            # identity exists without profile; an admin has to clean this up
            logger.error(f"Signup hook failed for user {user_id} ({email}): {e}")
            raise HTTPException(status_code=500, detail="Registration failed")

        logger.info(f"User {user_id} registered with invite for {email}")
        return RegisterResponse(
            user_id=user_id,
            email=auth_response.user.email or email,
            is_approved=profile.get("is_approved", False),
            message="Registration received, your account is awaiting approval"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed: {error_message}")
            raise HTTPException(status_code=500, detail="Login failed")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user claims from a Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Tokens are stateless JWTs; they expire on their own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False
