"""
Supabase Client

Builds the shared async Supabase client used by every service.
"""
import logging
from typing import Optional
from postgrest.exceptions import APIError
from supabase import acreate_client, AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# Global client instance
_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """
    Get or create the global async Supabase client.

    The anon key is preferred so row level security applies to the viewer;
    the service key is only used when no anon key is configured.

    Raises:
        ConfigurationError: If SUPABASE_URL or a key is missing
    """
    global _client
    if _client is None:
        if not settings.is_supabase_configured:
            raise ConfigurationError("Supabase not configured. Set SUPABASE_URL and SUPABASE_KEY.")

        if settings.SUPABASE_KEY:
            supabase_key = settings.SUPABASE_KEY
            logger.info("Using Supabase anon key (RLS enforced)")
        else:
            supabase_key = settings.SUPABASE_SERVICE_KEY
            logger.warning("Using Supabase service role key - RLS bypassed")

        _client = await acreate_client(settings.SUPABASE_URL, supabase_key)
    return _client


def is_unique_violation(error: Exception) -> bool:
    """True when a postgrest error is a Postgres unique constraint violation"""
    return isinstance(error, APIError) and error.code == UNIQUE_VIOLATION
