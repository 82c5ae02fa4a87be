from supabase import Client
from app.modules.profiles.schemas import (
    ProfileUpsert, ProfileUpdate, ProfileResponse, NearbyProfileResponse
)
from app.core.geo import bounding_box, distance_to, is_within_radius
from app.core.clock import utc_now_iso
from typing import List, Optional, Dict, Any, Iterable
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = "id, username, full_name, avatar_url"


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upsert_profile(self, profile_data: ProfileUpsert) -> ProfileResponse:
        """Create or update a profile, stamping last_seen"""
        try:
            row = profile_data.model_dump(exclude_none=True)
            row["last_seen"] = utc_now_iso()
            result = self.supabase.table("profiles").upsert(row).execute()

            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to save profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def get_profile_by_id(self, user_id: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def profile_exists(self, user_id: str) -> bool:
        result = self.supabase.table("profiles")\
            .select("id")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def get_profile_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Map of id -> {id, username, full_name, avatar_url} for embedding in other payloads"""
        ids = list({uid for uid in user_ids if uid})
        if not ids:
            return {}
        result = self.supabase.table("profiles")\
            .select(SUMMARY_COLUMNS)\
            .in_("id", ids)\
            .execute()
        return {p["id"]: p for p in (result.data or [])}

    def list_profiles(self, limit: int = 20, offset: int = 0) -> List[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ProfileResponse(**p) for p in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        try:
            update_data = profile_data.model_dump(exclude_none=True)
            if not update_data:
                return self.get_profile_by_id(user_id)

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_location(self, user_id: str, latitude: float, longitude: float) -> None:
        self.supabase.table("profiles")\
            .update({"latitude": latitude, "longitude": longitude, "last_seen": utc_now_iso()})\
            .eq("id", user_id)\
            .execute()

    def list_nearby_profiles(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        exclude_user_id: Optional[str] = None
    ) -> List[NearbyProfileResponse]:
        """Profiles within radius metres, nearest first"""
        try:
            min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius)
            query = self.supabase.table("profiles")\
                .select("*")\
                .gte("latitude", min_lat)\
                .lte("latitude", max_lat)\
                .gte("longitude", min_lng)\
                .lte("longitude", max_lng)
            if exclude_user_id:
                query = query.neq("id", exclude_user_id)
            result = query.execute()

            nearby = []
            for profile in result.data or []:
                distance = distance_to(profile, latitude, longitude)
                if is_within_radius(distance, radius):
                    nearby.append(NearbyProfileResponse(**profile, distance_m=round(distance, 1)))
            nearby.sort(key=lambda p: p.distance_m)
            return nearby
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
