"""
Database connections: Supabase clients and a reachability probe.
"""

import logging
from functools import lru_cache

from supabase import Client, create_client

from notesapp.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase_client() -> Client:
    """Client for request handling (anon key, row access is owner-scoped by the services)."""
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


@lru_cache
def get_supabase_admin_client() -> Client:
    """Service-role client for jobs that cross owners, i.e. the trash purge.

    Without SUPABASE_SERVICE_KEY the purge runs with the standard client.
    """
    settings = get_settings()
    if not settings.SUPABASE_SERVICE_KEY:
        logger.warning("SUPABASE_SERVICE_KEY not set, trash purge uses the anon client")
        return get_supabase_client()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


def store_is_reachable(db: Client) -> bool:
    """Cheapest round trip to the store, for the health endpoint."""
    try:
        db.table("users").select("id").limit(1).execute()
    except Exception as e:
        logger.warning(f"Store health probe failed: {e}")
        return False
    return True
