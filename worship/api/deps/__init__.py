"""API dependencies - re-exports from submodules."""

from .auth import (
    AuthenticatedUser,
    authenticate,
    get_jwks,
    get_signing_key,
    security,
    verify_token,
)
from .subscription_limits import (
    SubscriptionContext,
    check_context_limit,
    enforce_limit,
    get_subscription_context,
    load_subscription_context,
)
from .worship_auth import (
    WorshipAuth,
    WorshipAuthContext,
    raise_for_decision,
    require_role_assigner,
    require_worship_member,
)

__all__ = [
    # Auth
    "security",
    "get_jwks",
    "get_signing_key",
    "verify_token",
    "authenticate",
    "AuthenticatedUser",
    # Worship authorization
    "WorshipAuth",
    "WorshipAuthContext",
    "raise_for_decision",
    "require_worship_member",
    "require_role_assigner",
    # Subscription limits
    "SubscriptionContext",
    "get_subscription_context",
    "load_subscription_context",
    "check_context_limit",
    "enforce_limit",
]
