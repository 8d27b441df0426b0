"""Supabase client configuration."""
from typing import Optional
import logging

from minhavez.config.settings import settings

# Global client instances
_supabase_client: Optional[object] = None
_supabase_service_client: Optional[object] = None
_supabase_async_client: Optional[object] = None

logger = logging.getLogger(__name__)


def get_supabase_client():
    """
    Get Supabase client for user-authenticated requests.
    This client uses the anon key; row-level security applies.
    """
    global _supabase_client

    if _supabase_client is None:
        try:
            from supabase import create_client

            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise ValueError("Supabase credentials missing in .env file")

            _supabase_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
            logger.info("Supabase client (anon) initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise

    return _supabase_client


def get_supabase_service_client():
    """
    Get Supabase client with service role for system operations.
    This bypasses RLS; public queue endpoints use it after their own checks.
    Falls back to the anon client when no service key is configured.
    """
    global _supabase_service_client

    if _supabase_service_client is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            logger.warning("Service role key not available - using anon client")
            return get_supabase_client()
        try:
            from supabase import create_client

            _supabase_service_client = create_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY
            )
            logger.info("Supabase service client initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Supabase service client: {e}")
            raise

    return _supabase_service_client


async def get_async_supabase_client():
    """
    Get the async Supabase client used for Realtime channels.
    Realtime subscriptions need the async client; queries stay on the sync one.
    """
    global _supabase_async_client

    if _supabase_async_client is None:
        try:
            from supabase import acreate_client

            key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_KEY
            if not settings.SUPABASE_URL or not key:
                raise ValueError("Supabase credentials missing in .env file")

            _supabase_async_client = await acreate_client(settings.SUPABASE_URL, key)
            logger.info("Supabase async client initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize async Supabase client: {e}")
            raise

    return _supabase_async_client


def test_supabase_connection() -> bool:
    """
    Test Supabase connection.
    Returns True if connection is successful, False otherwise.
    """
    try:
        client = get_supabase_client()
        client.table("businesses").select("id").limit(1).execute()
        logger.info("Supabase connection test successful")
        return True

    except Exception as e:
        logger.error(f"Supabase connection test failed: {e}")
        return False
