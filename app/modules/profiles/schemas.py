from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ProfileFields(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    bio: Optional[str] = None
    website: Optional[str] = None
    location_name: Optional[str] = None
    occupation: Optional[str] = None


class ProfileUpsert(ProfileFields):
    id: str


class ProfileUpdate(ProfileFields):
    pass


class ProfileResponse(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    last_seen: Optional[datetime] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    location_name: Optional[str] = None
    occupation: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyProfileResponse(ProfileResponse):
    distance_m: float


class ProfileSummary(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
