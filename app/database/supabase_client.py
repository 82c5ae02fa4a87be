import logging
from typing import Optional
from supabase import create_client, Client
from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _service_client: Optional[Client] = None

    @classmethod
    def create_anon_client(cls) -> Client:
        """A fresh anon-key client. Sign-in stores the session on the client, so these are never shared."""
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def get_service_client(cls) -> Client:
        """Process-wide client with the service_role key; bypasses RLS."""
        if cls._service_client is None:
            key = settings.supabase_service_role_key
            if not key:
                logger.warning("SUPABASE_SERVICE_ROLE_KEY not set, table access falls back to the anon key")
                key = settings.supabase_key
            cls._service_client = create_client(settings.supabase_url, key)
        return cls._service_client


def get_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_auth_client() -> Client:
    """Client for end-user auth flows (sign up, sign in, resend)."""
    return SupabaseClient.create_anon_client()
