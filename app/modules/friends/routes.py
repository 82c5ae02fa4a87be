from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.friends.schemas import (
    FriendRequestCreate, FriendRequestAction, FriendRequestRespond,
    FriendRequestResponse, FriendshipResponse, FriendshipStatusResponse
)
from app.modules.friends.service import FriendService
from app.modules.notifications.push import schedule_pushes
from app.modules.profiles.schemas import ProfileResponse
from app.core.dependencies import get_current_user, check_self
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/friends", tags=["friends"])
friend_requests_router = APIRouter(prefix="/friend-requests", tags=["friends"])


def get_friend_service(supabase: Client = Depends(get_supabase)) -> FriendService:
    return FriendService(supabase)


def _send_request(request_data, background_tasks, user_data, service, supabase) -> FriendRequestResponse:
    check_self(user_data, request_data.sender_id)
    request = service.send_request(request_data)
    schedule_pushes(background_tasks, supabase, service.pushes)
    return request


@router.post("/request", response_model=FriendRequestResponse, status_code=201)
async def send_friend_request(
    request_data: FriendRequestCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service),
    supabase: Client = Depends(get_supabase)
):
    return _send_request(request_data, background_tasks, user_data, service, supabase)


@router.get("/requests/{user_id}", response_model=List[FriendRequestResponse])
async def list_friend_requests(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    """Pending requests addressed to the caller"""
    check_self(user_data, user_id)
    return service.list_pending_requests(user_id)


@router.post("/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    action: FriendRequestAction,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service),
    supabase: Client = Depends(get_supabase)
):
    _, friendship = service.respond_to_request(action.request_id, "accepted", user_data["id"])
    schedule_pushes(background_tasks, supabase, service.pushes)
    return friendship


@router.post("/reject", response_model=FriendRequestResponse)
async def reject_friend_request(
    action: FriendRequestAction,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    request, _ = service.respond_to_request(action.request_id, "rejected", user_data["id"])
    return request


@router.get("/status/{user_id}/{other_id}", response_model=FriendshipStatusResponse)
async def get_friendship_status(
    user_id: str,
    other_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    check_self(user_data, user_id)
    return service.get_status(user_id, other_id)


@router.get("/{user_id}", response_model=List[ProfileResponse])
async def list_friends(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.list_friends(user_id)


@router.delete("/{user_id}/{friend_id}", status_code=204)
async def remove_friend(
    user_id: str,
    friend_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    check_self(user_data, user_id)
    if not service.remove_friend(user_id, friend_id):
        raise HTTPException(status_code=404, detail="Friendship not found")
    return None


@friend_requests_router.post("", response_model=FriendRequestResponse, status_code=201)
async def create_friend_request(
    request_data: FriendRequestCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service),
    supabase: Client = Depends(get_supabase)
):
    return _send_request(request_data, background_tasks, user_data, service, supabase)


@friend_requests_router.get("/{user_id}", response_model=List[FriendRequestResponse])
async def list_incoming_requests(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    check_self(user_data, user_id)
    return service.list_pending_requests(user_id)


@friend_requests_router.post("/{request_id}/respond", response_model=FriendRequestResponse)
async def respond_to_friend_request(
    request_id: str,
    body: FriendRequestRespond,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service),
    supabase: Client = Depends(get_supabase)
):
    """Accept or reject an incoming request"""
    request, _ = service.respond_to_request(request_id, body.status, user_data["id"])
    schedule_pushes(background_tasks, supabase, service.pushes)
    return request
