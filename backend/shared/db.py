from supabase import create_client, Client

from shared.config import get_settings


def get_supabase_client() -> Client:
    """Get initialized Supabase client."""
    settings = get_settings()
    url: str | None = settings.supabase_url
    key: str | None = settings.supabase_service_key

    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

    return create_client(url, key)
