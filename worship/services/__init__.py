# Services package

from worship.services.identity import (
    IdentityStoreError,
    IdentityUser,
    SupabaseIdentityStore,
    identity_store,
)
from worship.services.supabase import (
    SupabaseAdminNotConfiguredError,
    get_supabase_admin_client,
)

__all__ = [
    # Identity provider
    "IdentityStoreError",
    "IdentityUser",
    "SupabaseIdentityStore",
    "identity_store",
    # Admin client
    "SupabaseAdminNotConfiguredError",
    "get_supabase_admin_client",
]
