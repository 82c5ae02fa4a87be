from supabase import Client
from app.config import settings
from app.core.clock import hours_from_now_iso, is_past, utc_now_iso
from app.modules.friends.service import FriendService, display_name
from app.modules.notifications.service import NotificationService
from app.modules.profiles.service import ProfileService
from app.modules.tapins.schemas import TapinCreate, TapinResponse
from typing import List, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class TapinService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.friends = FriendService(supabase)
        self.notifications = NotificationService(supabase)
        self.pushes: List[Dict[str, Any]] = []

    def send_tapin(self, tapin_data: TapinCreate) -> TapinResponse:
        """Send a photo to a friend. Expires tapin_ttl_hours after creation."""
        try:
            if not self.profiles.profile_exists(tapin_data.receiver_id):
                raise HTTPException(status_code=404, detail="User not found")
            if not self.friends.are_friends(tapin_data.sender_id, tapin_data.receiver_id):
                raise HTTPException(status_code=403, detail="You can only send tapins to friends")

            insert_data = tapin_data.model_dump(exclude_none=True)
            insert_data["expires_at"] = hours_from_now_iso(settings.tapin_ttl_hours)
            result = self.supabase.table("tapins").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to send tapin")
            tapin = result.data[0]

            sender = self.profiles.get_profile_summaries([tapin_data.sender_id]).get(tapin_data.sender_id)
            self.pushes.append(self.notifications.notify(
                tapin_data.receiver_id,
                "tapin",
                "New tapin",
                f"{display_name(sender)} sent you a tapin",
                {"tapin_id": tapin["id"], "sender_id": tapin_data.sender_id},
            ))
            return TapinResponse(**tapin, sender=sender)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_received(self, user_id: str) -> List[TapinResponse]:
        """Unexpired tapins sent to user_id, newest first"""
        try:
            result = self.supabase.table("tapins")\
                .select("*")\
                .eq("receiver_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            rows = [t for t in (result.data or []) if not is_past(t.get("expires_at"))]
            senders = self.profiles.get_profile_summaries(t["sender_id"] for t in rows)
            return [TapinResponse(**t, sender=senders.get(t["sender_id"])) for t in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_viewed(self, tapin_id: str, user_id: str) -> TapinResponse:
        try:
            existing = self.supabase.table("tapins")\
                .select("*")\
                .eq("id", tapin_id)\
                .maybe_single()\
                .execute()
            if not existing or not existing.data:
                raise HTTPException(status_code=404, detail="Tapin not found")
            if existing.data["receiver_id"] != user_id:
                raise HTTPException(status_code=403, detail="Only the receiver can view this tapin")
            if existing.data.get("viewed_at"):
                return TapinResponse(**existing.data)

            result = self.supabase.table("tapins")\
                .update({"viewed_at": utc_now_iso()})\
                .eq("id", tapin_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Tapin not found")
            return TapinResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
