from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    content: str
    data: Optional[Dict[str, Any]] = None
    is_read: Optional[bool] = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MarkReadRequest(BaseModel):
    notificationIds: List[str] = Field(min_length=1)


class MarkReadResponse(BaseModel):
    updated: int


class PushTokenRegister(BaseModel):
    user_id: str
    token: str = Field(min_length=1)
    platform: Optional[str] = None


class PushTokenResponse(BaseModel):
    id: str
    user_id: str
    token: str
    platform: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
