"""
Larder - Supabase Client.

Low-level database access for the Supabase-backed store.
"""

from supabase import Client, create_client

from larder.config import settings
from larder.errors import LarderError

# Singleton client instance
_client: Client | None = None


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        if not settings.has_supabase:
            raise LarderError("Supabase is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY)")
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client
