from fastapi import APIRouter, Depends, Query
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.rooms.schemas import (
    RoomResponse, NearbyRoomResponse, UserRoomResponse,
    RoomSyncRequest, RoomSyncResponse, RoomCreate, RoomCreateResponse,
    PrivateRoomRequest, PrivateRoomResponse,
    RoomMembershipRequest, RoomJoinResponse, RoomLeaveResponse,
    ROOM_TYPE_PRIVATE
)
from app.modules.rooms.service import RoomService
from app.modules.profiles.schemas import ProfileSummary
from app.core.dependencies import get_current_user, check_self, check_room_participant
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/rooms", tags=["rooms"])


def get_room_service(supabase: Client = Depends(get_supabase)) -> RoomService:
    return RoomService(supabase)


@router.post("/sync", response_model=RoomSyncResponse)
async def sync_rooms(
    sync_data: RoomSyncRequest,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    """Update the caller's location and reconcile their public room memberships"""
    check_self(user_data, sync_data.userId)
    return service.sync_rooms(sync_data.userId, sync_data.latitude, sync_data.longitude)


@router.get("/nearby", response_model=List[NearbyRoomResponse])
async def list_nearby_rooms(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius: float = Query(default=settings.nearby_rooms_radius_m, gt=0),
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    """Active public rooms around a point, nearest first"""
    return service.list_nearby_rooms(lat, lng, radius)


@router.post("/create", response_model=RoomCreateResponse, status_code=201)
async def create_room(
    room_data: RoomCreate,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    """Create a public room, or join the one already occupying the spot"""
    check_self(user_data, room_data.userId)
    return service.create_or_join_room(room_data)


@router.post("/private", response_model=PrivateRoomResponse)
async def get_or_create_private_room(
    request: PrivateRoomRequest,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    """Resolve the 1:1 room between the caller and another user"""
    check_self(user_data, request.user1_id)
    return PrivateRoomResponse(room_id=service.get_or_create_private_room(request.user1_id, request.user2_id))


@router.get("", response_model=List[UserRoomResponse])
async def list_my_rooms(
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    return service.list_user_rooms(user_data["id"])


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: str,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
    supabase: Client = Depends(get_supabase)
):
    room = service.get_room(room_id)
    if room.type == ROOM_TYPE_PRIVATE:
        check_room_participant(room_id, user_data, supabase)
    return room


@router.get("/{room_id}/participants", response_model=List[ProfileSummary])
async def list_room_participants(
    room_id: str,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
    supabase: Client = Depends(get_supabase)
):
    room = service.get_room(room_id)
    if room.type == ROOM_TYPE_PRIVATE:
        check_room_participant(room_id, user_data, supabase)
    return service.list_participants(room_id)


@router.post("/{room_id}/join", response_model=RoomJoinResponse)
async def join_room(
    room_id: str,
    membership: RoomMembershipRequest,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    """Keep a public room in the caller's chat list"""
    check_self(user_data, membership.userId)
    return service.join_room(room_id, membership.userId)


@router.post("/{room_id}/leave", response_model=RoomLeaveResponse)
async def leave_room(
    room_id: str,
    membership: RoomMembershipRequest,
    user_data: Dict = Depends(get_current_user),
    service: RoomService = Depends(get_room_service)
):
    check_self(user_data, membership.userId)
    service.get_room(room_id)
    return service.leave_room(room_id, membership.userId)
