import hashlib
import random
import time
import logging
from supabase import Client
from app.modules.auth.schemas import (
    LoginRequest, SignupRequest, SignupResponse, TokenResponse, AuthProfileResponse
)
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def default_username(email: str) -> str:
    """Local part of the email plus three random digits"""
    return f"{email.split('@')[0]}{random.randint(0, 999):03d}"


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, db: Optional[Client] = None):
        # supabase carries the anon key and user sessions; db writes the profile row
        self.supabase = supabase
        self.db = db or supabase

    def signup(self, signup_data: SignupRequest) -> SignupResponse:
        """Register with Supabase Auth, then create the matching profile row"""
        try:
            user_metadata = {}
            if signup_data.full_name:
                user_metadata["full_name"] = signup_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": signup_data.email,
                "password": signup_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            user = auth_response.user
            username = signup_data.username or default_username(signup_data.email)
            try:
                self.db.table("profiles").upsert({
                    "id": user.id,
                    "full_name": signup_data.full_name,
                    "username": username,
                }).execute()
            except Exception as e:
                logger.error(f"Profile creation failed for {user.id}: {e}")

            session = getattr(auth_response, "session", None)
            return SignupResponse(
                user_id=user.id,
                email=user.email or signup_data.email,
                username=username,
                message="Check your email for a verification link",
                access_token=session.access_token if session else None
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=400, detail=f"Registration failed: {error_message}")

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
            if "not confirmed" in error_message.lower():
                raise HTTPException(status_code=401, detail="Please verify your email before logging in")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
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
                "created_at": user.created_at,
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

    def get_profile(self, user_data: Dict[str, Any]) -> AuthProfileResponse:
        """The authenticated user together with their profile row, if any"""
        try:
            result = self.db.table("profiles")\
                .select("*")\
                .eq("id", user_data["id"])\
                .maybe_single()\
                .execute()
            profile = result.data if result and result.data else None
            return AuthProfileResponse(
                id=user_data["id"],
                email=user_data.get("email"),
                user_metadata=user_data.get("user_metadata") or {},
                profile=profile
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def logout(self, token: str) -> bool:
        """Revoke the token's refresh session and drop our cached lookup. The JWT itself lives until it expires."""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            self.db.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def resend_verification(self, email: str) -> None:
        try:
            self.supabase.auth.resend({"type": "signup", "email": email})
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
