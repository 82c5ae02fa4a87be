from fastapi import APIRouter, Depends, Query
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import (
    ProfileUpsert, ProfileUpdate, ProfileResponse, NearbyProfileResponse
)
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_user, check_self
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.post("", response_model=ProfileResponse)
async def upsert_profile(
    profile_data: ProfileUpsert,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Create or update the caller's profile and location"""
    check_self(user_data, profile_data.id)
    return service.upsert_profile(profile_data)


@router.get("", response_model=List[ProfileResponse])
async def list_profiles(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.list_profiles(limit=limit, offset=offset)


@router.get("/nearby", response_model=List[NearbyProfileResponse])
async def list_nearby_profiles(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius: float = Query(default=settings.nearby_users_radius_m, gt=0),
    userId: Optional[str] = None,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """People around a point. userId is excluded from the results."""
    return service.list_nearby_profiles(lat, lng, radius, exclude_user_id=userId)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile_by_id(user_id)


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_profile(
    user_id: str,
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the caller's profile"""
    check_self(user_data, user_id)
    return service.update_profile(user_id, profile_data)
