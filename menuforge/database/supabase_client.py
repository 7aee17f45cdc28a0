import logging
from typing import Optional

from supabase import create_client, Client
from menuforge.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Process-wide Supabase clients.

    The anon client carries end-user auth calls. Profile, credit and generation
    writes go through the service-role client because RLS only grants owners
    read access to their own rows.
    """
    _anon: Optional[Client] = None
    _admin: Optional[Client] = None
    _warned_no_service_role = False

    @classmethod
    def anon(cls) -> Client:
        if cls._anon is None:
            cls._anon = create_client(settings.supabase_url, settings.supabase_key)
        return cls._anon

    @classmethod
    def admin(cls) -> Client:
        if cls._admin is not None:
            return cls._admin
        if settings.supabase_service_role_key:
            cls._admin = create_client(settings.supabase_url, settings.supabase_service_role_key)
            return cls._admin
        if not cls._warned_no_service_role:
            logger.warning("No service role key; profile and credit writes will be subject to RLS")
            cls._warned_no_service_role = True
        return cls.anon()


def get_supabase() -> Client:
    return SupabaseClient.anon()


def get_supabase_admin() -> Client:
    return SupabaseClient.admin()
