from supabase import Client
from app.config import settings
from app.core.geo import distance_to, is_within_radius
from app.core.rate_limit import message_limiter
from app.modules.messages.schemas import MessageCreate, MessageResponse
from app.modules.notifications.service import NotificationService
from app.modules.profiles.service import ProfileService
from app.modules.rooms.schemas import ROOM_TYPE_PRIVATE
from app.modules.rooms.service import RoomService, is_room_expired
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


def message_preview(message: MessageResponse) -> str:
    if message.type == "image":
        return "Sent a photo"
    if message.type == "gif":
        return "Sent a GIF"
    if len(message.content) > PREVIEW_LENGTH:
        return message.content[:PREVIEW_LENGTH - 1] + "…"
    return message.content


class MessageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.rooms = RoomService(supabase)
        self.profiles = ProfileService(supabase)
        self.pushes: List[Dict[str, Any]] = []

    def _with_senders(self, rows: List[Dict[str, Any]]) -> List[MessageResponse]:
        senders = self.profiles.get_profile_summaries(r.get("sender_id") for r in rows)
        return [MessageResponse(**row, sender=senders.get(row.get("sender_id"))) for row in rows]

    def list_messages(self, room_id: str, limit: Optional[int] = None, before: Optional[str] = None) -> List[MessageResponse]:
        """Messages of a room, newest first. `before` pages back from a created_at cursor."""
        try:
            query = self.supabase.table("messages")\
                .select("*")\
                .eq("room_id", room_id)
            if before:
                query = query.lt("created_at", before)
            result = query.order("created_at", desc=True)\
                .limit(limit or settings.message_page_size)\
                .execute()
            return self._with_senders(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def check_proximity(self, room: Dict[str, Any], latitude: Optional[float], longitude: Optional[float]) -> None:
        """Reject senders standing outside a public room's geofence"""
        if latitude is None or longitude is None:
            raise HTTPException(status_code=400, detail="Your location is required to post in this room")
        radius = room.get("radius") or settings.chat_radius_m
        # A room without a centre has no inside
        if not is_within_radius(distance_to(room, latitude, longitude), radius):
            raise HTTPException(
                status_code=403,
                detail=f"Out of range: you need to be within {radius:g}m of the room to send messages"
            )

    def _find_by_client_id(self, room_id: str, client_msg_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("messages")\
            .select("*")\
            .eq("room_id", room_id)\
            .eq("client_msg_id", client_msg_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def send_message(self, room_id: str, message_data: MessageCreate) -> MessageResponse:
        """Validate room state, membership, position and rate before storing a message"""
        try:
            room = self.rooms.fetch_room(room_id)
            if not room:
                raise HTTPException(status_code=404, detail="Room not found")
            if is_room_expired(room):
                raise HTTPException(status_code=403, detail="This room is no longer active")

            if room.get("type") == ROOM_TYPE_PRIVATE:
                if not self.rooms.is_participant(room_id, message_data.sender_id):
                    raise HTTPException(status_code=403, detail="You must be a participant of this room")
            else:
                self.check_proximity(room, message_data.latitude, message_data.longitude)

            if message_data.client_msg_id:
                existing = self._find_by_client_id(room_id, message_data.client_msg_id)
                if existing:
                    return self._with_senders([existing])[0]

            message_limiter.check(message_data.sender_id, detail="You are sending messages too quickly")

            insert_data = {
                "room_id": room_id,
                "sender_id": message_data.sender_id,
                "content": message_data.content,
                "type": message_data.type,
            }
            if message_data.client_msg_id:
                insert_data["client_msg_id"] = message_data.client_msg_id

            result = self.supabase.table("messages").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to send message")

            message = self._with_senders(result.data)[0]
            try:
                self.pushes.extend(self.notify_recipients(message))
            except Exception as e:
                logger.error(f"Failed to notify recipients of message {message.id}: {e}")
            return message
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def notify_recipients(self, message: MessageResponse) -> List[Dict[str, Any]]:
        """
        Create in-app notifications for the other members of a private room.
        Returns push payloads for the caller to deliver in the background.
        """
        room = self.rooms.fetch_room(message.room_id)
        if not room or room.get("type") != ROOM_TYPE_PRIVATE:
            return []

        members = self.supabase.table("room_participants")\
            .select("user_id")\
            .eq("room_id", message.room_id)\
            .neq("user_id", message.sender_id)\
            .execute()

        sender = message.sender
        title = (sender.full_name or sender.username) if sender else None
        title = title or "New message"
        body = message_preview(message)
        data = {"room_id": message.room_id, "message_id": message.id}

        notifications = NotificationService(self.supabase)
        return [
            notifications.notify(member["user_id"], "message", title, body, data)
            for member in members.data or []
        ]
