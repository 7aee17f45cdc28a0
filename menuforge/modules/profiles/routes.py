from fastapi import APIRouter, Depends
from menuforge.config import settings
from menuforge.modules.profiles.schemas import CreditsStatusResponse
from menuforge.modules.profiles.service import ProfileService
from menuforge.core.dependencies import get_current_user, get_profile_service
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["credits"])


@router.get("/credits", response_model=CreditsStatusResponse)
async def get_credits(
    current_user: Dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Credit balance and activation state. A missing profile is created; if that fails, zeroed defaults are returned."""
    profile = profiles.ensure_profile(current_user)
    if not profile:
        logger.error(f"Failed to create profile for user {current_user['id']}, returning defaults")
        return CreditsStatusResponse(payment_required=settings.payment_required)
    return CreditsStatusResponse(
        has_activated=profile.has_activated,
        menu_credits=profile.menu_credits,
        total_generated=profile.total_generated,
        payment_required=settings.payment_required,
    )
