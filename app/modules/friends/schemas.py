from pydantic import AliasChoices, BaseModel, Field, model_validator
from typing import Optional, Literal
from datetime import datetime
from app.modules.profiles.schemas import ProfileSummary


class FriendRequestCreate(BaseModel):
    """Accepts both snake_case and the camelCase used by /friend-requests"""
    sender_id: str = Field(validation_alias=AliasChoices("sender_id", "senderId"))
    receiver_id: str = Field(validation_alias=AliasChoices("receiver_id", "receiverId"))

    @model_validator(mode="after")
    def not_self(self):
        if self.sender_id == self.receiver_id:
            raise ValueError("You cannot send a friend request to yourself")
        return self


class FriendRequestAction(BaseModel):
    request_id: str


class FriendRequestRespond(BaseModel):
    status: Literal["accepted", "rejected"]


class FriendRequestResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    status: str
    created_at: Optional[datetime] = None
    sender: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True


class FriendshipResponse(BaseModel):
    id: str
    user_id_1: str
    user_id_2: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FriendshipStatusResponse(BaseModel):
    status: Literal["friends", "pending_sent", "pending_received", "none"]
    request_id: Optional[str] = None
