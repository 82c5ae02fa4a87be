from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime

ROOM_TYPE_PUBLIC = "public"
ROOM_TYPE_AUTO = "auto_generated"
ROOM_TYPE_PRIVATE = "private"
PUBLIC_ROOM_TYPES = [ROOM_TYPE_PUBLIC, ROOM_TYPE_AUTO]


class RoomResponse(BaseModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius: Optional[float] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_expired: bool = False

    class Config:
        from_attributes = True


class NearbyRoomResponse(RoomResponse):
    distance_m: float


class UserRoomResponse(RoomResponse):
    other_user_id: Optional[str] = None
    other_user_avatar: Optional[str] = None


class RoomSyncRequest(BaseModel):
    userId: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class RoomSyncResponse(BaseModel):
    active_rooms: List[str]
    joined: List[str]
    left: List[str]


class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius: Optional[float] = Field(default=None, gt=0, le=5000)
    userId: str


class RoomCreateResponse(BaseModel):
    room: RoomResponse
    created: bool


class PrivateRoomRequest(BaseModel):
    user1_id: str
    user2_id: str

    @model_validator(mode="after")
    def require_two_users(self):
        if self.user1_id == self.user2_id:
            raise ValueError("A private room needs two different users")
        return self


class PrivateRoomResponse(BaseModel):
    room_id: str


class RoomMembershipRequest(BaseModel):
    userId: str


class RoomJoinResponse(BaseModel):
    room_id: str
    joined: bool


class RoomLeaveResponse(BaseModel):
    room_id: str
    left: bool
