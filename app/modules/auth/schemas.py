from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None
    username: Optional[str] = None


class SignupResponse(BaseModel):
    user_id: str
    email: str
    username: str
    message: str
    access_token: Optional[str] = None


class WelcomeRequest(BaseModel):
    id: Optional[str] = None
    email: EmailStr
    full_name: Optional[str] = None


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class AuthProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    profile: Optional[Dict[str, Any]] = None
