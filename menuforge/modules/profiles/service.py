from datetime import datetime, timezone
from supabase import Client
from menuforge.config import settings
from menuforge.modules.profiles.schemas import ProfileCreate, ProfileResponse, CreditsStatus
from typing import Any, Dict, NamedTuple, Optional
import logging

logger = logging.getLogger(__name__)

NOT_ACTIVATED_GENERATE = "Account not activated. Please purchase an activation to start generating menus."
NOT_ACTIVATED_DOWNLOAD = "Account not activated. Activation required for downloads."
NO_CREDITS = "No credits remaining. Please purchase more credits."
PROFILE_NOT_FOUND = "Profile not found"


class AccessDecision(NamedTuple):
    allowed: bool
    profile: Optional[ProfileResponse]
    reason: Optional[str] = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    """
    Reads and writes the `profiles` table.

    Storage helpers never raise on Supabase errors: lookups return None and
    updates return False, with the error logged. Callers decide which HTTP
    status a missing profile maps to.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_one(self, column: str, value: str) -> Optional[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq(column, value)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error fetching profile by {column}: {e}")
            return None

    def _update(self, column: str, value: str, update_data: Dict[str, Any]) -> bool:
        update_data["updated_at"] = _now()
        try:
            self.supabase.table("profiles")\
                .update(update_data)\
                .eq(column, value)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Error updating profile {column}={value}: {e}")
            return False

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        return self._get_one("id", user_id)

    def get_profile_by_email(self, email: str) -> Optional[ProfileResponse]:
        return self._get_one("email", email)

    def get_profile_by_stripe_customer(self, stripe_customer_id: str) -> Optional[ProfileResponse]:
        return self._get_one("stripe_customer_id", stripe_customer_id)

    def create_profile(self, profile: ProfileCreate) -> Optional[ProfileResponse]:
        """Insert a fresh profile: not activated, zero credits."""
        try:
            result = self.supabase.table("profiles").insert({
                "id": profile.id,
                "email": profile.email or None,
                "name": profile.name or None,
                "avatar_url": profile.avatar_url or None,
                "has_activated": False,
                "menu_credits": 0,
                "total_generated": 0,
            }).execute()
            if not result.data:
                logger.error(f"Profile insert for {profile.id} returned no rows")
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error creating profile for {profile.id}: {e}")
            return None

    def ensure_profile(self, user_data: Dict[str, Any]) -> Optional[ProfileResponse]:
        """Return the caller's profile, creating it from auth user metadata on first access."""
        profile = self.get_profile(user_data["id"])
        if profile:
            return profile
        metadata = user_data.get("user_metadata") or {}
        logger.info(f"No profile found for user {user_data['id']} ({user_data.get('email')}), creating one")
        return self.create_profile(ProfileCreate(
            id=user_data["id"],
            email=user_data.get("email"),
            name=metadata.get("full_name") or metadata.get("name"),
            avatar_url=metadata.get("avatar_url"),
        ))

    def update_stripe_info(
        self,
        email: str,
        stripe_customer_id: str,
        stripe_subscription_id: str,
        subscription_status: str
    ) -> bool:
        updated = self._update("email", email, {
            "stripe_customer_id": stripe_customer_id,
            "stripe_subscription_id": stripe_subscription_id,
            "subscription_status": subscription_status,
        })
        if updated:
            logger.info(f"Updated profile for {email} with subscription status: {subscription_status}")
        return updated

    def update_stripe_info_by_id(
        self,
        user_id: str,
        stripe_customer_id: str,
        stripe_subscription_id: Optional[str],
        subscription_status: Optional[str]
    ) -> bool:
        updated = self._update("id", user_id, {
            "stripe_customer_id": stripe_customer_id,
            "stripe_subscription_id": stripe_subscription_id,
            "subscription_status": subscription_status,
        })
        if updated:
            logger.info(f"Updated profile {user_id} with subscription status: {subscription_status}")
        return updated

    def set_stripe_customer(self, user_id: str, stripe_customer_id: str) -> bool:
        return self._update("id", user_id, {"stripe_customer_id": stripe_customer_id})

    def activate_user(self, user_id: str, stripe_customer_id: Optional[str]) -> bool:
        """Mark the activation as paid and grant the initial credits."""
        update_data: Dict[str, Any] = {
            "has_activated": True,
            "menu_credits": settings.activation_credits,
        }
        if stripe_customer_id:
            update_data["stripe_customer_id"] = stripe_customer_id
        activated = self._update("id", user_id, update_data)
        if activated:
            logger.info(f"Activated user {user_id} with {settings.activation_credits} credits")
        return activated

    def add_credits(self, user_id: str, credits: int) -> bool:
        profile = self.get_profile(user_id)
        if not profile:
            logger.error(f"Profile {user_id} not found for adding credits")
            return False
        added = self._update("id", user_id, {"menu_credits": profile.menu_credits + credits})
        if added:
            logger.info(f"Added {credits} credits to user {user_id}")
        return added

    def use_credit(self, user_id: str) -> bool:
        """Consume one credit and count the generation. False when no credit is available."""
        profile = self.get_profile(user_id)
        if not profile:
            logger.error(f"Profile {user_id} not found for using credit")
            return False
        if profile.menu_credits <= 0:
            logger.warning(f"User {user_id} has no credits available")
            return False
        used = self._update("id", user_id, {
            "menu_credits": profile.menu_credits - 1,
            "total_generated": profile.total_generated + 1,
        })
        if used:
            logger.info(f"Used 1 credit for user {user_id}, remaining: {profile.menu_credits - 1}")
        return used

    def increment_total_generated(self, user_id: str) -> bool:
        profile = self.get_profile(user_id)
        if not profile:
            logger.error(f"Profile {user_id} not found for incrementing total generated")
            return False
        return self._update("id", user_id, {"total_generated": profile.total_generated + 1})

    def get_credits_status(self, user_id: str) -> Optional[CreditsStatus]:
        profile = self.get_profile(user_id)
        if not profile:
            return None
        return CreditsStatus(
            has_activated=profile.has_activated,
            menu_credits=profile.menu_credits,
            total_generated=profile.total_generated,
        )

    def check_can_generate(self, user_id: str) -> AccessDecision:
        profile = self.get_profile(user_id)
        if not settings.payment_required:
            return AccessDecision(True, profile)
        if not profile:
            return AccessDecision(False, None, PROFILE_NOT_FOUND)
        if not profile.has_activated:
            return AccessDecision(False, profile, NOT_ACTIVATED_GENERATE)
        if profile.menu_credits <= 0:
            return AccessDecision(False, profile, NO_CREDITS)
        return AccessDecision(True, profile)

    def check_can_download(self, user_id: str) -> AccessDecision:
        profile = self.get_profile(user_id)
        if not settings.payment_required:
            return AccessDecision(True, profile)
        if not profile:
            return AccessDecision(False, None, PROFILE_NOT_FOUND)
        if not profile.has_activated:
            return AccessDecision(False, profile, NOT_ACTIVATED_DOWNLOAD)
        return AccessDecision(True, profile)
