"""
Core dependencies for route protection and credit/activation gating
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from menuforge.database.supabase_client import get_supabase, get_supabase_admin
from menuforge.modules.auth.service import AuthService
from menuforge.modules.profiles.service import ProfileService, NOT_ACTIVATED_GENERATE, NO_CREDITS
from supabase import Client
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_profile_service(supabase: Client = Depends(get_supabase_admin)) -> ProfileService:
    return ProfileService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization token provided"
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the Supabase user behind the bearer token"""
    return auth_service.get_current_user(token)


def require_generation_access(
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
) -> Dict[str, Any]:
    """Refuse with 403 unless the caller is activated and has credits (or payments are off)"""
    decision = profiles.check_can_generate(user_data["id"])
    if not decision.allowed:
        logger.info(f"Generation refused for user {user_data['id']}: {decision.reason}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": decision.reason or "Cannot generate menu",
                "needs_activation": decision.reason == NOT_ACTIVATED_GENERATE,
                "needs_credits": decision.reason == NO_CREDITS,
            }
        )
    return user_data


def require_download_access(
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
) -> Dict[str, Any]:
    """Refuse with 403 unless the caller has paid the activation (or payments are off)"""
    decision = profiles.check_can_download(user_data["id"])
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": decision.reason or "Activation required to download designs",
                "needs_activation": True,
            }
        )
    return user_data
