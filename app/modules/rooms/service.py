from supabase import Client
from app.config import settings
from app.modules.rooms.schemas import (
    RoomResponse, NearbyRoomResponse, UserRoomResponse, RoomSyncResponse,
    RoomCreate, RoomCreateResponse, RoomJoinResponse, RoomLeaveResponse,
    ROOM_TYPE_AUTO, ROOM_TYPE_PUBLIC, ROOM_TYPE_PRIVATE, PUBLIC_ROOM_TYPES
)
from app.modules.profiles.schemas import ProfileSummary
from app.modules.profiles.service import ProfileService
from app.core.geo import bounding_box, distance_to, is_within_radius
from app.core.clock import is_past, hours_from_now_iso
from typing import List, Optional, Dict, Any, Tuple
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def private_room_name(user_a: str, user_b: str) -> str:
    """Name shared by both directions of a 1:1 room"""
    low, high = sorted([user_a, user_b])
    return f"private_{low}_{high}"


def auto_room_name(latitude: float, longitude: float) -> str:
    return f"New Spot @ {latitude:.2f}, {longitude:.2f}"


def is_room_expired(room: Dict[str, Any]) -> bool:
    return is_past(room.get("expires_at"))


def to_room_response(room: Dict[str, Any]) -> RoomResponse:
    return RoomResponse(**room, is_expired=is_room_expired(room))


class RoomService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def fetch_room(self, room_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("chat_rooms")\
            .select("*")\
            .eq("id", room_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data

    def get_room(self, room_id: str) -> RoomResponse:
        try:
            room = self.fetch_room(room_id)
            if not room:
                raise HTTPException(status_code=404, detail="Room not found")
            return to_room_response(room)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cleanup_expired_rooms(self) -> bool:
        """Ask the database to purge expired rooms. Best effort."""
        try:
            self.supabase.rpc(settings.room_cleanup_rpc, {}).execute()
            return True
        except Exception as e:
            logger.warning(f"Expired room cleanup failed: {e}")
            return False

    def _active_public_rooms_near(self, latitude: float, longitude: float, search_radius: float) -> List[Tuple[Dict[str, Any], float]]:
        """Unexpired public/auto rooms in the search box, paired with their distance, nearest first"""
        min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, search_radius)
        result = self.supabase.table("chat_rooms")\
            .select("*")\
            .in_("type", PUBLIC_ROOM_TYPES)\
            .gte("latitude", min_lat)\
            .lte("latitude", max_lat)\
            .gte("longitude", min_lng)\
            .lte("longitude", max_lng)\
            .execute()

        rooms = []
        for room in result.data or []:
            if is_room_expired(room):
                continue
            distance = distance_to(room, latitude, longitude)
            if distance is None:
                continue
            rooms.append((room, distance))
        rooms.sort(key=lambda pair: pair[1])
        return rooms

    def _insert_participants(self, room_id_user_pairs: List[Tuple[str, str]]) -> None:
        if not room_id_user_pairs:
            return
        self.supabase.table("room_participants")\
            .insert([{"room_id": room_id, "user_id": user_id} for room_id, user_id in room_id_user_pairs])\
            .execute()

    def _public_room_ids_for_user(self, user_id: str) -> List[str]:
        participations = self.supabase.table("room_participants")\
            .select("room_id")\
            .eq("user_id", user_id)\
            .execute()
        room_ids = list({p["room_id"] for p in (participations.data or [])})
        if not room_ids:
            return []
        rooms = self.supabase.table("chat_rooms")\
            .select("id")\
            .in_("id", room_ids)\
            .in_("type", PUBLIC_ROOM_TYPES)\
            .execute()
        return [r["id"] for r in (rooms.data or [])]

    def _create_auto_room(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("chat_rooms").insert({
            "name": auto_room_name(latitude, longitude),
            "type": ROOM_TYPE_AUTO,
            "latitude": latitude,
            "longitude": longitude,
            "radius": settings.default_room_radius_m,
            "expires_at": hours_from_now_iso(settings.auto_room_ttl_hours),
        }).execute()
        if not result.data:
            logger.error(f"Failed to auto-generate room at {latitude}, {longitude}")
            return None
        room = result.data[0]
        logger.info(f"Auto-generated room {room['id']} at {latitude:.4f}, {longitude:.4f}")
        return room

    def sync_rooms(self, user_id: str, latitude: float, longitude: float) -> RoomSyncResponse:
        """
        Reconcile a user's public room memberships with their position.
        Joins every active public room whose geofence contains the user, leaves the
        ones that no longer do, and spawns an auto-generated room in empty areas.
        """
        try:
            ProfileService(self.supabase).update_location(user_id, latitude, longitude)
            self.cleanup_expired_rooms()

            candidates = self._active_public_rooms_near(latitude, longitude, settings.room_search_radius_m)
            nearby_room_ids = [
                room["id"] for room, distance in candidates
                if is_within_radius(distance, room.get("radius") or settings.default_room_radius_m)
            ]

            if not nearby_room_ids:
                # Only spawn when the area is genuinely empty, not merely outside a neighbour's fence
                crowded = any(distance <= settings.auto_room_spacing_m for _, distance in candidates)
                if not crowded:
                    new_room = self._create_auto_room(latitude, longitude)
                    if new_room:
                        nearby_room_ids.append(new_room["id"])

            current_room_ids = self._public_room_ids_for_user(user_id)

            rooms_to_join = [rid for rid in nearby_room_ids if rid not in current_room_ids]
            self._insert_participants([(rid, user_id) for rid in rooms_to_join])

            rooms_to_leave = [rid for rid in current_room_ids if rid not in nearby_room_ids]
            if rooms_to_leave:
                self.supabase.table("room_participants")\
                    .delete()\
                    .eq("user_id", user_id)\
                    .in_("room_id", rooms_to_leave)\
                    .execute()

            return RoomSyncResponse(active_rooms=nearby_room_ids, joined=rooms_to_join, left=rooms_to_leave)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_nearby_rooms(self, latitude: float, longitude: float, radius: float) -> List[NearbyRoomResponse]:
        """Active public rooms whose geofence (or radius, when the room has none) covers the point"""
        try:
            nearby = []
            for room, distance in self._active_public_rooms_near(latitude, longitude, max(radius, settings.room_search_radius_m)):
                if is_within_radius(distance, room.get("radius") or radius):
                    nearby.append(NearbyRoomResponse(**room, distance_m=round(distance, 1)))
            return nearby
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def create_or_join_room(self, room_data: RoomCreate) -> RoomCreateResponse:
        """Create a public room unless an active one already sits on the same spot, in which case join it"""
        try:
            for room, distance in self._active_public_rooms_near(
                room_data.latitude, room_data.longitude, settings.room_dedup_distance_m
            ):
                if distance <= settings.room_dedup_distance_m:
                    self.join_room(room["id"], room_data.userId)
                    return RoomCreateResponse(room=to_room_response(room), created=False)

            result = self.supabase.table("chat_rooms").insert({
                "name": room_data.name.strip(),
                "type": ROOM_TYPE_PUBLIC,
                "latitude": room_data.latitude,
                "longitude": room_data.longitude,
                "radius": room_data.radius or settings.default_room_radius_m,
                "expires_at": hours_from_now_iso(settings.public_room_ttl_hours),
            }).execute()

            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to create room")

            room = result.data[0]
            self._insert_participants([(room["id"], room_data.userId)])
            return RoomCreateResponse(room=to_room_response(room), created=True)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def _find_private_room(self, user1_id: str, user2_id: str) -> Optional[str]:
        named = self.supabase.table("chat_rooms")\
            .select("id")\
            .eq("type", ROOM_TYPE_PRIVATE)\
            .eq("name", private_room_name(user1_id, user2_id))\
            .limit(1)\
            .execute()
        if named.data:
            return named.data[0]["id"]

        # Rooms created before names encoded their members
        mine = self.supabase.table("room_participants")\
            .select("room_id")\
            .eq("user_id", user1_id)\
            .execute()
        my_room_ids = [p["room_id"] for p in (mine.data or [])]
        if not my_room_ids:
            return None
        private_rooms = self.supabase.table("chat_rooms")\
            .select("id")\
            .in_("id", my_room_ids)\
            .eq("type", ROOM_TYPE_PRIVATE)\
            .execute()
        private_ids = [r["id"] for r in (private_rooms.data or [])]
        if not private_ids:
            return None
        shared = self.supabase.table("room_participants")\
            .select("room_id")\
            .in_("room_id", private_ids)\
            .eq("user_id", user2_id)\
            .limit(1)\
            .execute()
        if shared.data:
            return shared.data[0]["room_id"]
        return None

    def get_or_create_private_room(self, user1_id: str, user2_id: str) -> str:
        """Return the 1:1 room for two users, creating it on first use"""
        try:
            existing = self._find_private_room(user1_id, user2_id)
            if existing:
                return existing

            result = self.supabase.table("chat_rooms").insert({
                "name": private_room_name(user1_id, user2_id),
                "type": ROOM_TYPE_PRIVATE,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to create private room")

            room_id = result.data[0]["id"]
            self._insert_participants([(room_id, user1_id), (room_id, user2_id)])
            return room_id
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def is_participant(self, room_id: str, user_id: str) -> bool:
        result = self.supabase.table("room_participants")\
            .select("id")\
            .eq("room_id", room_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def join_room(self, room_id: str, user_id: str) -> RoomJoinResponse:
        """Idempotent join of a public room"""
        try:
            room = self.fetch_room(room_id)
            if not room:
                raise HTTPException(status_code=404, detail="Room not found")
            if room.get("type") == ROOM_TYPE_PRIVATE:
                raise HTTPException(status_code=403, detail="Private rooms cannot be joined")
            if is_room_expired(room):
                raise HTTPException(status_code=410, detail="This room is no longer active")

            if self.is_participant(room_id, user_id):
                return RoomJoinResponse(room_id=room_id, joined=False)

            self._insert_participants([(room_id, user_id)])
            return RoomJoinResponse(room_id=room_id, joined=True)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def leave_room(self, room_id: str, user_id: str) -> RoomLeaveResponse:
        try:
            result = self.supabase.table("room_participants")\
                .delete()\
                .eq("room_id", room_id)\
                .eq("user_id", user_id)\
                .execute()
            return RoomLeaveResponse(room_id=room_id, left=len(result.data or []) > 0)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_participants(self, room_id: str) -> List[ProfileSummary]:
        try:
            result = self.supabase.table("room_participants")\
                .select("user_id")\
                .eq("room_id", room_id)\
                .execute()
            user_ids = [p["user_id"] for p in (result.data or [])]
            profiles = ProfileService(self.supabase).get_profile_summaries(user_ids)
            return [ProfileSummary(**profiles[uid]) for uid in user_ids if uid in profiles]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_rooms(self, user_id: str) -> List[UserRoomResponse]:
        """Every room the user belongs to, newest first. Private rooms are named after the other member."""
        try:
            participations = self.supabase.table("room_participants")\
                .select("room_id")\
                .eq("user_id", user_id)\
                .execute()
            room_ids = list({p["room_id"] for p in (participations.data or [])})
            if not room_ids:
                return []

            rooms_result = self.supabase.table("chat_rooms")\
                .select("*")\
                .in_("id", room_ids)\
                .execute()
            rooms = rooms_result.data or []

            private_ids = [r["id"] for r in rooms if r.get("type") == ROOM_TYPE_PRIVATE]
            other_by_room: Dict[str, str] = {}
            if private_ids:
                members = self.supabase.table("room_participants")\
                    .select("room_id, user_id")\
                    .in_("room_id", private_ids)\
                    .neq("user_id", user_id)\
                    .execute()
                for m in members.data or []:
                    other_by_room.setdefault(m["room_id"], m["user_id"])
            profiles = ProfileService(self.supabase).get_profile_summaries(other_by_room.values())

            response = []
            for room in rooms:
                item = {**room, "is_expired": is_room_expired(room)}
                other_id = other_by_room.get(room["id"])
                if other_id:
                    profile = profiles.get(other_id) or {}
                    username = profile.get("username")
                    item["name"] = profile.get("full_name") or (f"@{username}" if username else "Private Chat")
                    item["other_user_id"] = other_id
                    item["other_user_avatar"] = profile.get("avatar_url")
                elif room.get("type") == ROOM_TYPE_PRIVATE:
                    item["name"] = "Private Chat"
                response.append(UserRoomResponse(**item))
            response.sort(key=lambda r: r.created_at.timestamp() if r.created_at else 0, reverse=True)
            return response
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
