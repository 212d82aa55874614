"""Identity-provider user store - reads and writes worship role metadata.

Role metadata lives in the Supabase user's app_metadata, which only the
service role can write. The Supabase SDK is synchronous, so calls run in a
worker thread to keep the event loop free.
"""

import asyncio
import logging
from dataclasses import dataclass

from worship.core.role_metadata import WorshipUserMetadata
from worship.services.supabase import get_supabase_admin_client

logger = logging.getLogger(__name__)


class IdentityStoreError(Exception):
    """Raised when user metadata cannot be read from or written to the provider."""

    pass


@dataclass(frozen=True)
class IdentityUser:
    """Profile fields needed to list worship users."""

    id: str
    email: str
    full_name: str | None
    avatar_url: str | None
    metadata: WorshipUserMetadata


class SupabaseIdentityStore:
    """Worship metadata access through the Supabase admin API."""

    async def get_user(self, user_id: str) -> IdentityUser:
        """Fetch a user's profile and worship metadata."""
        try:
            supabase = get_supabase_admin_client()
            response = await asyncio.to_thread(supabase.auth.admin.get_user_by_id, user_id)
        except Exception as e:
            logger.error(f"Failed to fetch user {user_id} from identity provider: {e}")
            raise IdentityStoreError(f"Could not load user {user_id}") from e

        user = response.user
        user_metadata = user.user_metadata or {}
        return IdentityUser(
            id=user.id,
            email=user.email or "",
            full_name=user_metadata.get("full_name"),
            avatar_url=user_metadata.get("avatar_url"),
            metadata=WorshipUserMetadata.from_raw(user.app_metadata),
        )

    async def get_metadata(self, user_id: str) -> WorshipUserMetadata:
        """Fetch only the worship metadata for a user."""
        user = await self.get_user(user_id)
        return user.metadata

    async def update_metadata(self, user_id: str, metadata: WorshipUserMetadata) -> None:
        """Persist a user's worship metadata."""
        try:
            supabase = get_supabase_admin_client()
            await asyncio.to_thread(
                supabase.auth.admin.update_user_by_id,
                user_id,
                {"app_metadata": metadata.to_raw()},
            )
        except Exception as e:
            logger.error(f"Failed to update metadata for user {user_id}: {e}")
            raise IdentityStoreError(f"Could not update user {user_id}") from e


identity_store = SupabaseIdentityStore()
