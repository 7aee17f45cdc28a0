"""
Grant Credits Script
Activates an account and/or adds generation credits by email, e.g. when a
Stripe webhook was missed. Uses the service-role client.

    python -m menuforge.scripts.grant_credits owner@example.com --credits 10
    python -m menuforge.scripts.grant_credits owner@example.com --activate
"""

import sys
import argparse
import logging

from menuforge.database.supabase_client import get_supabase_admin
from menuforge.modules.profiles.service import ProfileService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant(profiles: ProfileService, email: str, credits: int, activate: bool) -> bool:
    profile = profiles.get_profile_by_email(email)
    if not profile:
        logger.error(f"No profile found for {email}")
        return False

    if activate and not profile.has_activated:
        if not profiles.activate_user(profile.id, profile.stripe_customer_id):
            return False
    elif activate:
        logger.info(f"{email} is already activated")

    if credits > 0 and not profiles.add_credits(profile.id, credits):
        return False

    status = profiles.get_credits_status(profile.id)
    if status:
        logger.info(
            f"{email}: activated={status.has_activated} credits={status.menu_credits} "
            f"generated={status.total_generated}"
        )
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Activate an account or add menu credits")
    parser.add_argument("email")
    parser.add_argument("--credits", type=int, default=0)
    parser.add_argument("--activate", action="store_true")
    args = parser.parse_args(argv)

    if args.credits <= 0 and not args.activate:
        parser.error("nothing to do: pass --credits N and/or --activate")

    try:
        profiles = ProfileService(get_supabase_admin())
        if not grant(profiles, args.email, args.credits, args.activate):
            sys.exit(1)
    except Exception as e:
        logger.error(f"Error granting credits: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
