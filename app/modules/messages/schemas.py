from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from app.config import settings
from app.modules.profiles.schemas import ProfileSummary


class MessageCreate(BaseModel):
    room_id: Optional[str] = None  # taken from the path on /rooms/{room_id}/messages
    sender_id: str
    content: str
    type: Literal["text", "image", "gif"] = "text"
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    client_msg_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message content cannot be empty")
        if len(value) > settings.max_message_length:
            raise ValueError(f"Message content exceeds {settings.max_message_length} characters")
        return value


class MessageResponse(BaseModel):
    id: str
    room_id: str
    sender_id: str
    content: str
    type: Optional[str] = "text"
    client_msg_id: Optional[str] = None
    created_at: Optional[datetime] = None
    sender: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True
