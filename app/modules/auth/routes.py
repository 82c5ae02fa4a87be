from fastapi import APIRouter, BackgroundTasks, Depends, Request
from app.config import settings
from app.core.dependencies import get_auth_service, get_current_token, get_current_user
from app.core.rate_limit import limiter
from app.database.supabase_client import get_supabase, get_auth_client
from app.modules.auth.email import send_welcome_email
from app.modules.auth.schemas import (
    LoginRequest, SignupRequest, SignupResponse, TokenResponse,
    WelcomeRequest, ResendVerificationRequest, AuthProfileResponse
)
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_flow_service(
    auth_client: Client = Depends(get_auth_client),
    supabase: Client = Depends(get_supabase)
) -> AuthService:
    """Sign up, sign in and resend keep a session on the client, so each call gets a fresh one"""
    return AuthService(auth_client, db=supabase)


@router.post("/signup", response_model=SignupResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def signup(
    request: Request,
    signup_data: SignupRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_flow_service)
):
    """Register a new user and queue the welcome email"""
    response = service.signup(signup_data)
    background_tasks.add_task(send_welcome_email, response.email, signup_data.full_name)
    return response


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_flow_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=AuthProfileResponse)
async def get_profile(
    user_data: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    return service.get_profile(user_data)


@router.post("/welcome", status_code=202)
@limiter.limit(settings.auth_rate_limit)
async def welcome(
    request: Request,
    welcome_data: WelcomeRequest,
    background_tasks: BackgroundTasks
):
    background_tasks.add_task(send_welcome_email, welcome_data.email, welcome_data.full_name)
    return {"message": "Welcome email queued"}


@router.post("/resend-verification")
@limiter.limit(settings.auth_rate_limit)
async def resend_verification(
    request: Request,
    body: ResendVerificationRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_flow_service)
):
    """Send the Supabase verification link again, along with a fresh welcome email"""
    service.resend_verification(body.email)
    background_tasks.add_task(send_welcome_email, body.email)
    return {"message": "Verification email sent"}
