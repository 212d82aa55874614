"""Supabase admin client for worship role metadata.

Worship role assignments live in app_metadata, which the anon key cannot
write. Every call here therefore uses the service role key, so the client
must stay on the server.
"""

from supabase import Client, create_client

from worship.config.settings import settings


class SupabaseAdminNotConfiguredError(ValueError):
    """Raised when the service role credentials are missing."""

    pass


def get_supabase_admin_client() -> Client:
    """Create a service-role client for reading and writing role metadata."""
    if not settings.supabase_admin_enabled:
        raise SupabaseAdminNotConfiguredError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must both be set "
            "to read or change worship roles."
        )

    return create_client(settings.supabase_url, settings.supabase_service_role_key)
