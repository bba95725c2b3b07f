from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from .config import get_settings

PLACEHOLDER_HOST = "your-project.supabase.co"


@lru_cache()
def get_supabase() -> Client:
    """Shared Supabase client for the products table and its price-recording function."""
    settings = get_settings()
    url = str(settings.supabase_url)

    if PLACEHOLDER_HOST in url:
        raise RuntimeError(
            f"SUPABASE_URL still points at the {PLACEHOLDER_HOST} placeholder from .env.example; "
            "set the real project URL and service key."
        )
    options = ClientOptions(schema="public", postgrest_client_timeout=settings.db_timeout_s)
    return create_client(url, settings.supabase_key, options=options)
