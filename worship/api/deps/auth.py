"""JWT validation against Supabase JWKS.

Token problems (missing, malformed, expired, unknown key) mean the caller is
not authenticated. Failing to reach the JWKS endpoint is different: the
identity provider is unavailable, and AuthProviderError is raised so the
gate can report it as such.
"""

import logging
import time
import uuid as uuid_pkg
from dataclasses import dataclass, field
from typing import Any

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from jose.backends import ECKey

from worship.config import settings
from worship.core.authorization import AuthProviderError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cache for JWKS with TTL to handle key rotation
_jwks_cache: dict[str, Any] = {}
_jwks_cache_timestamp: float = 0.0
_JWKS_CACHE_TTL_SECONDS: float = 3600.0  # 1 hour


@dataclass(frozen=True)
class AuthenticatedUser:
    """The verified subject of a bearer token."""

    id: uuid_pkg.UUID
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


async def _fetch_jwks() -> dict[str, Any]:
    """Fetch JWKS from Supabase and update the cache."""
    global _jwks_cache_timestamp
    async with httpx.AsyncClient() as client:
        response = await client.get(settings.supabase_jwks_url)
        response.raise_for_status()
        jwks = response.json()
        _jwks_cache.clear()
        _jwks_cache.update(jwks)
        _jwks_cache_timestamp = time.monotonic()
        return jwks


async def get_jwks(force_refresh: bool = False) -> dict[str, Any]:
    """
    Fetch and cache JWKS from Supabase with a 1-hour TTL.

    Raises AuthProviderError if the JWKS endpoint cannot be reached.
    """
    cache_age = time.monotonic() - _jwks_cache_timestamp
    if _jwks_cache and not force_refresh and cache_age < _JWKS_CACHE_TTL_SECONDS:
        return _jwks_cache

    try:
        return await _fetch_jwks()
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS from {settings.supabase_jwks_url}: {e}")
        raise AuthProviderError("Identity provider unavailable") from e


def get_signing_key(jwks: dict[str, Any], token: str) -> ECKey:
    """Get the signing key from JWKS that matches the token's kid."""
    unverified_header = jwt.get_unverified_header(token)
    kid = unverified_header.get("kid")

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return ECKey(key, algorithm="ES256")

    raise ValueError("Unable to find matching key in JWKS")


def _decode(jwks: dict[str, Any], token: str) -> AuthenticatedUser:
    signing_key = get_signing_key(jwks, token)
    payload = jwt.decode(token, signing_key, algorithms=["ES256"], audience="authenticated")
    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise ValueError("Token has no subject")
    return AuthenticatedUser(
        id=uuid_pkg.UUID(user_id_str),
        email=payload.get("email"),
        claims=payload,
    )


async def verify_token(token: str) -> AuthenticatedUser | None:
    """
    Verify a Supabase access token.

    Returns None for any invalid token. Raises AuthProviderError if the
    JWKS cannot be fetched.
    """
    jwks = await get_jwks()
    try:
        return _decode(jwks, token)
    except (JWTError, ValueError):
        pass

    # Key rotation may have occurred, force a JWKS refresh and retry once
    logger.info("JWT validation failed with cached JWKS, forcing refresh")
    jwks = await get_jwks(force_refresh=True)
    try:
        return _decode(jwks, token)
    except (JWTError, ValueError) as e:
        logger.info(f"Rejected bearer token: {e}")
        return None


async def authenticate(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser | None:
    """The authenticated user for a request, or None if there is no valid token."""
    if not credentials:
        return None
    return await verify_token(credentials.credentials)

