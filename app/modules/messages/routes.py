from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from app.database.supabase_client import get_supabase
from app.modules.messages.schemas import MessageCreate, MessageResponse
from app.modules.messages.service import MessageService
from app.modules.notifications.push import schedule_pushes
from app.modules.rooms.schemas import ROOM_TYPE_PRIVATE
from app.modules.rooms.service import RoomService
from app.core.dependencies import get_current_user, check_self, check_room_participant
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/messages", tags=["messages"])
room_messages_router = APIRouter(prefix="/rooms", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_supabase)) -> MessageService:
    return MessageService(supabase)


def _deliver(
    room_id: str,
    message_data: MessageCreate,
    user_data: Dict,
    background_tasks: BackgroundTasks,
    service: MessageService,
    supabase: Client
) -> MessageResponse:
    check_self(user_data, message_data.sender_id)
    message = service.send_message(room_id, message_data)
    schedule_pushes(background_tasks, supabase, service.pushes)
    return message


@router.get("/{room_id}", response_model=List[MessageResponse])
async def list_messages(
    room_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    before: Optional[str] = None,
    user_data: Dict = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_supabase)
):
    """Room history, newest first"""
    room = RoomService(supabase).get_room(room_id)
    if room.type == ROOM_TYPE_PRIVATE:
        check_room_participant(room_id, user_data, supabase)
    return service.list_messages(room_id, limit=limit, before=before)


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    message_data: MessageCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_supabase)
):
    """Post a message; public rooms require the sender to be inside the room's geofence"""
    if not message_data.room_id:
        raise HTTPException(status_code=400, detail="room_id is required")
    return _deliver(message_data.room_id, message_data, user_data, background_tasks, service, supabase)


@room_messages_router.post("/{room_id}/messages", response_model=MessageResponse, status_code=201)
async def send_room_message(
    room_id: str,
    message_data: MessageCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_supabase)
):
    return _deliver(room_id, message_data, user_data, background_tasks, service, supabase)


@room_messages_router.get("/{room_id}/messages", response_model=List[MessageResponse])
async def list_room_messages(
    room_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    before: Optional[str] = None,
    user_data: Dict = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_supabase)
):
    return await list_messages(room_id, limit, before, user_data, service, supabase)
