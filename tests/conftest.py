"""Root conftest - test infrastructure for all backend tests.

Provides:
- Autouse guard so no test ever reaches the real Supabase admin API
- A mocked AsyncSession
- JWKS cache reset between tests
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_supabase_admin(request):
    """SAFETY: Always mock the Supabase admin client.

    Role metadata writes go to real user accounts, so unit and API tests
    must never reach the identity provider.
    """
    with patch("worship.services.identity.get_supabase_admin_client") as mock_factory:
        client = MagicMock()
        mock_factory.return_value = client
        yield client


@pytest.fixture(autouse=True)
def reset_jwks_cache():
    """Each test starts with an empty JWKS cache."""
    from worship.api.deps import auth

    auth._jwks_cache.clear()
    auth._jwks_cache_timestamp = 0.0
    yield
    auth._jwks_cache.clear()
    auth._jwks_cache_timestamp = 0.0


@pytest.fixture
def mock_db() -> AsyncMock:
    """An AsyncSession stand-in. execute() results are set per test."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()

    nested = MagicMock()
    nested.__aenter__ = AsyncMock(return_value=None)
    nested.__aexit__ = AsyncMock(return_value=False)
    db.begin_nested = MagicMock(return_value=nested)
    return db
