from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime
from app.modules.profiles.schemas import ProfileSummary


class TapinCreate(BaseModel):
    sender_id: str
    receiver_id: str
    image_url: str = Field(..., min_length=1)
    caption: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def not_self(self):
        if self.sender_id == self.receiver_id:
            raise ValueError("You cannot send a tapin to yourself")
        return self


class TapinResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    image_url: str
    caption: Optional[str] = None
    viewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    sender: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True
