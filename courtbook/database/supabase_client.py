from supabase import create_client, Client
from courtbook.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Process-wide clients.

    anon: identity calls (sign up, sign in, token lookup) made for an end user.
    service: every table read/write plus auth.admin calls. Row access rules are
    enforced by courtbook.core.authorization, not by RLS.
    """
    _anon_client: Client = None
    _service_client: Client = None

    @classmethod
    def get_anon_client(cls) -> Client:
        if cls._anon_client is None:
            cls._anon_client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._anon_client

    @classmethod
    def get_service_client(cls) -> Client:
        if cls._service_client is None:
            if not settings.supabase_service_role_key:
                raise RuntimeError(
                    "SUPABASE_SERVICE_ROLE_KEY is not set; admin, reminder and policy-checked "
                    "data access need the service-role client"
                )
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
            logger.info("Service-role Supabase client initialised")
        return cls._service_client

    @classmethod
    def reset_clients(cls):
        cls._anon_client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_anon_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def ping(client: Client) -> bool:
    """Cheap round trip used by the readiness probe."""
    try:
        client.table("profiles").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.warning(f"Supabase readiness check failed: {e}")
        return False
