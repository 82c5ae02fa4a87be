from supabase import Client
from app.modules.friends.schemas import (
    FriendRequestCreate, FriendRequestResponse, FriendshipResponse, FriendshipStatusResponse
)
from app.modules.notifications.service import NotificationService
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from typing import List, Optional, Dict, Any, Tuple
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def ordered_pair(user_a: str, user_b: str) -> Tuple[str, str]:
    """Friend rows always store the lower id in user_id_1"""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def display_name(profile: Optional[Dict[str, Any]]) -> str:
    if not profile:
        return "Someone"
    return profile.get("full_name") or profile.get("username") or "Someone"


class FriendService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.notifications = NotificationService(supabase)
        self.pushes: List[Dict[str, Any]] = []

    def get_friendship(self, user_a: str, user_b: str) -> Optional[Dict[str, Any]]:
        user_id_1, user_id_2 = ordered_pair(user_a, user_b)
        result = self.supabase.table("friends")\
            .select("*")\
            .eq("user_id_1", user_id_1)\
            .eq("user_id_2", user_id_2)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def are_friends(self, user_a: str, user_b: str) -> bool:
        return self.get_friendship(user_a, user_b) is not None

    def get_pending_between(self, user_a: str, user_b: str) -> Optional[Dict[str, Any]]:
        """Pending request in either direction"""
        result = self.supabase.table("friend_requests")\
            .select("*")\
            .eq("status", "pending")\
            .or_(f"and(sender_id.eq.{user_a},receiver_id.eq.{user_b}),and(sender_id.eq.{user_b},receiver_id.eq.{user_a})")\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_request(self, request_id: str) -> Dict[str, Any]:
        result = self.supabase.table("friend_requests")\
            .select("*")\
            .eq("id", request_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Request not found")
        return result.data

    def send_request(self, request_data: FriendRequestCreate) -> FriendRequestResponse:
        """Create a pending request and notify the receiver"""
        try:
            sender_id, receiver_id = request_data.sender_id, request_data.receiver_id
            if not self.profiles.profile_exists(receiver_id):
                raise HTTPException(status_code=404, detail="User not found")
            if self.are_friends(sender_id, receiver_id):
                raise HTTPException(status_code=400, detail="You are already friends")
            if self.get_pending_between(sender_id, receiver_id):
                raise HTTPException(status_code=400, detail="A friend request is already pending")

            result = self.supabase.table("friend_requests").insert({
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "status": "pending",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to send friend request")
            request = result.data[0]

            sender = self.profiles.get_profile_summaries([sender_id]).get(sender_id)
            self.pushes.append(self.notifications.notify(
                receiver_id,
                "friend_request",
                "New friend request",
                f"{display_name(sender)} wants to be friends",
                {"request_id": request["id"], "sender_id": sender_id},
            ))
            return FriendRequestResponse(**request, sender=sender)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_pending_requests(self, user_id: str) -> List[FriendRequestResponse]:
        """Incoming pending requests with the sender's profile"""
        try:
            result = self.supabase.table("friend_requests")\
                .select("*")\
                .eq("receiver_id", user_id)\
                .eq("status", "pending")\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            senders = self.profiles.get_profile_summaries(r["sender_id"] for r in rows)
            return [FriendRequestResponse(**r, sender=senders.get(r["sender_id"])) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def add_friendship(self, user_a: str, user_b: str) -> FriendshipResponse:
        existing = self.get_friendship(user_a, user_b)
        if existing:
            return FriendshipResponse(**existing)
        user_id_1, user_id_2 = ordered_pair(user_a, user_b)
        result = self.supabase.table("friends").insert({
            "user_id_1": user_id_1,
            "user_id_2": user_id_2,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=400, detail="Failed to add friend")
        return FriendshipResponse(**result.data[0])

    def respond_to_request(self, request_id: str, status: str, acting_user_id: str) -> Tuple[FriendRequestResponse, Optional[FriendshipResponse]]:
        """Accept or reject a pending request. Only the receiver may answer."""
        try:
            request = self.get_request(request_id)
            if request["receiver_id"] != acting_user_id:
                raise HTTPException(status_code=403, detail="Only the receiver can respond to this request")
            if request.get("status") != "pending":
                raise HTTPException(status_code=400, detail=f"Request already {request.get('status')}")

            # The request stays pending until the friendship row exists
            friendship = None
            if status == "accepted":
                friendship = self.add_friendship(request["sender_id"], request["receiver_id"])

            result = self.supabase.table("friend_requests")\
                .update({"status": status})\
                .eq("id", request_id)\
                .execute()
            updated = result.data[0] if result.data else {**request, "status": status}

            if friendship:
                receiver = self.profiles.get_profile_summaries([acting_user_id]).get(acting_user_id)
                self.pushes.append(self.notifications.notify(
                    request["sender_id"],
                    "friend_accepted",
                    "Friend request accepted",
                    f"{display_name(receiver)} accepted your friend request",
                    {"user_id": acting_user_id},
                ))
            return FriendRequestResponse(**updated), friendship
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_friends(self, user_id: str) -> List[ProfileResponse]:
        """Profiles of everyone paired with user_id"""
        try:
            result = self.supabase.table("friends")\
                .select("*")\
                .or_(f"user_id_1.eq.{user_id},user_id_2.eq.{user_id}")\
                .execute()
            friend_ids = [
                f["user_id_2"] if f["user_id_1"] == user_id else f["user_id_1"]
                for f in (result.data or [])
            ]
            if not friend_ids:
                return []
            profiles = self.supabase.table("profiles")\
                .select("*")\
                .in_("id", friend_ids)\
                .execute()
            return [ProfileResponse(**p) for p in (profiles.data or [])]
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def get_status(self, user_id: str, other_id: str) -> FriendshipStatusResponse:
        try:
            if self.are_friends(user_id, other_id):
                return FriendshipStatusResponse(status="friends")
            pending = self.get_pending_between(user_id, other_id)
            if not pending:
                return FriendshipStatusResponse(status="none")
            status = "pending_sent" if pending["sender_id"] == user_id else "pending_received"
            return FriendshipStatusResponse(status=status, request_id=pending["id"])
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def remove_friend(self, user_id: str, friend_id: str) -> bool:
        try:
            user_id_1, user_id_2 = ordered_pair(user_id, friend_id)
            result = self.supabase.table("friends")\
                .delete()\
                .eq("user_id_1", user_id_1)\
                .eq("user_id_2", user_id_2)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
