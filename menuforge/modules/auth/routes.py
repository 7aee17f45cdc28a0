from fastapi import APIRouter, Depends, HTTPException
from menuforge.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
)
from menuforge.modules.auth.service import AuthService
from menuforge.modules.profiles.schemas import ProfileResponse
from menuforge.modules.profiles.service import ProfileService
from menuforge.core.dependencies import (
    get_auth_service, get_current_token, get_current_user, get_profile_service
)
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=ProfileResponse)
async def get_current_profile(
    current_user: Dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Get the authenticated user's profile, creating it on first access."""
    profile = profiles.ensure_profile(current_user)
    if not profile:
        raise HTTPException(status_code=500, detail="Failed to fetch user")
    return profile
