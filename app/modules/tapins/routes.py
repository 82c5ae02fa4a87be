from fastapi import APIRouter, BackgroundTasks, Depends
from app.database.supabase_client import get_supabase
from app.modules.notifications.push import schedule_pushes
from app.modules.tapins.schemas import TapinCreate, TapinResponse
from app.modules.tapins.service import TapinService
from app.core.dependencies import get_current_user, check_self
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/tapins", tags=["tapins"])


def get_tapin_service(supabase: Client = Depends(get_supabase)) -> TapinService:
    return TapinService(supabase)


@router.post("", response_model=TapinResponse, status_code=201)
async def send_tapin(
    tapin_data: TapinCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: TapinService = Depends(get_tapin_service),
    supabase: Client = Depends(get_supabase)
):
    check_self(user_data, tapin_data.sender_id)
    tapin = service.send_tapin(tapin_data)
    schedule_pushes(background_tasks, supabase, service.pushes)
    return tapin


@router.get("/{user_id}", response_model=List[TapinResponse])
async def list_tapins(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TapinService = Depends(get_tapin_service)
):
    """Tapins received by the caller that have not expired"""
    check_self(user_data, user_id)
    return service.list_received(user_id)


@router.post("/{tapin_id}/view", response_model=TapinResponse)
async def view_tapin(
    tapin_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TapinService = Depends(get_tapin_service)
):
    return service.mark_viewed(tapin_id, user_data["id"])
