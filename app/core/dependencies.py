"""
Core dependencies for route protection and access checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the Supabase user behind the bearer token"""
    return auth_service.get_current_user(token)


def check_self(user_data: Dict[str, Any], user_id: Optional[str]) -> Dict[str, Any]:
    """Allow only when the id named in the request is the authenticated user"""
    if not user_id or user_data["id"] != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only act on your own account"
        )
    return user_data


def check_room_participant(room_id: str, user_data: Dict[str, Any], supabase: Client) -> Dict[str, Any]:
    """Allow only members of the room"""
    member_result = supabase.table("room_participants")\
        .select("id")\
        .eq("room_id", room_id)\
        .eq("user_id", user_data["id"])\
        .limit(1)\
        .execute()
    if not member_result.data:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a participant of this room"
        )
    return user_data
