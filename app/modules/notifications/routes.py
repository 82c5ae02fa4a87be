from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.notifications.schemas import (
    NotificationResponse, MarkReadRequest, MarkReadResponse,
    PushTokenRegister, PushTokenResponse
)
from app.modules.notifications.service import NotificationService
from app.core.dependencies import get_current_user, check_self
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])
push_tokens_router = APIRouter(prefix="/push-tokens", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.post("/read", response_model=MarkReadResponse)
async def mark_notifications_read(
    body: MarkReadRequest,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark the caller's notifications as read"""
    return MarkReadResponse(updated=service.mark_read(user_data["id"], body.notificationIds))


@router.get("/{user_id}", response_model=List[NotificationResponse])
async def list_notifications(
    user_id: str,
    limit: int = Query(default=50, ge=1, le=100),
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    check_self(user_data, user_id)
    return service.list_notifications(user_id, limit=limit)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete_notification(notification_id, user_data["id"])
    return None


@push_tokens_router.post("", response_model=PushTokenResponse, status_code=201)
async def register_push_token(
    token_data: PushTokenRegister,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Register the device's Expo push token for the caller"""
    check_self(user_data, token_data.user_id)
    return service.register_push_token(token_data)
