from supabase import Client
from app.modules.notifications.schemas import (
    NotificationResponse, PushTokenRegister, PushTokenResponse
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from app.core.clock import utc_now_iso
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        content: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Optional[NotificationResponse]:
        """Insert an in-app notification. Side effect of another action, so failures are only logged."""
        try:
            result = self.supabase.table("notifications").insert({
                "user_id": user_id,
                "type": type,
                "title": title,
                "content": content,
                "data": data or {},
                "is_read": False,
            }).execute()
            if not result.data:
                return None
            return NotificationResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Failed to create {type} notification for {user_id}: {e}")
            return None

    def list_notifications(self, user_id: str, limit: int = 50) -> List[NotificationResponse]:
        """Notifications for a user, newest first"""
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [NotificationResponse(**n) for n in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_read(self, user_id: str, notification_ids: List[str]) -> int:
        """Mark the given notifications read; rows owned by other users are left alone"""
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .in_("id", notification_ids)\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_notification(self, notification_id: str, user_id: str) -> bool:
        try:
            existing = self.supabase.table("notifications")\
                .select("id, user_id")\
                .eq("id", notification_id)\
                .maybe_single()\
                .execute()
            if not existing or not existing.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            if existing.data["user_id"] != user_id:
                raise HTTPException(status_code=403, detail="You can only delete your own notifications")

            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .execute()
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def register_push_token(self, token_data: PushTokenRegister) -> PushTokenResponse:
        """Store an Expo push token. A token moves to whichever user registered it last."""
        try:
            result = self.supabase.table("push_tokens").upsert({
                "user_id": token_data.user_id,
                "token": token_data.token,
                "platform": token_data.platform,
                "updated_at": utc_now_iso(),
            }, on_conflict="token").execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save push token")

            return PushTokenResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_push_tokens(self, user_id: str) -> List[str]:
        try:
            result = self.supabase.table("push_tokens")\
                .select("token")\
                .eq("user_id", user_id)\
                .execute()
            return [t["token"] for t in (result.data or []) if t.get("token")]
        except Exception as e:
            logger.error(f"Error getting push tokens for {user_id}: {e}")
            return []

    def notify(
        self,
        user_id: str,
        type: str,
        title: str,
        content: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Create the in-app notification and return the matching push payload"""
        self.create_notification(user_id, type, title, content, data)
        return {"user_id": user_id, "title": title, "body": content, "data": data or {}}
