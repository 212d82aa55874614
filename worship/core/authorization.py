"""Authorization gate - decides whether a request may proceed.

Per request the gate moves through:

    authenticated? -> organization resolved? -> role resolved -> requirement checked

and ends in exactly one allow or deny decision. Denials are returned as
values carrying a machine-readable reason; callers translate the reason into
a protocol-specific response.

Failure handling:
- An identity-provider failure (AuthProviderError) is reported as its own
  deny reason, never downgraded to "unauthenticated".
- A failure while loading the role is logged and the user is treated as
  'member'. Member holds the fewest permissions, so this can only deny more.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from worship.core.permissions import (
    Permission,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from worship.core.roles import WorshipRole, has_minimum_role

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """Raised when the identity provider cannot verify the session."""

    pass


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NO_ORGANIZATION = "no_organization"
    INSUFFICIENT_PERMISSION = "insufficient_permission"
    INSUFFICIENT_ROLE = "insufficient_role"
    AUTH_PROVIDER_ERROR = "auth_provider_error"


@dataclass(frozen=True)
class Identity:
    """Who is calling, and in which organization."""

    user_id: str
    organization_id: str | None = None
    native_org_role: str | None = None  # e.g. "org:admin", from the identity provider


@dataclass(frozen=True)
class AccessRequirement:
    """
    What an endpoint requires.

    All declared checks must pass. Within the permission list,
    require_all=False accepts any single permission instead of all of them.
    """

    permissions: tuple[Permission, ...] = ()
    require_all: bool = True
    minimum_role: WorshipRole | None = None


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    reason: DenyReason | None = None
    user_id: str | None = None
    organization_id: str | None = None
    role: WorshipRole | None = None

    def has_permission(self, permission: Permission | str) -> bool:
        return self.role is not None and has_permission(permission, self.role)

    def has_minimum_role(self, role: WorshipRole | str) -> bool:
        return self.role is not None and has_minimum_role(self.role, role)


IdentityLoader = Callable[[], Awaitable[Identity | None]]
RoleLoader = Callable[[Identity], Awaitable[WorshipRole]]


def evaluate_requirement(role: WorshipRole, requirement: AccessRequirement) -> DenyReason | None:
    """Check a resolved role against a requirement. Returns the deny reason, if any."""
    if requirement.permissions:
        if requirement.require_all:
            permitted = has_all_permissions(requirement.permissions, role)
        else:
            permitted = has_any_permission(requirement.permissions, role)
        if not permitted:
            return DenyReason.INSUFFICIENT_PERMISSION

    if requirement.minimum_role is not None and not has_minimum_role(
        role, requirement.minimum_role
    ):
        return DenyReason.INSUFFICIENT_ROLE

    return None


async def authorize(
    load_identity: IdentityLoader,
    load_role: RoleLoader,
    requirement: AccessRequirement | None = None,
) -> AuthorizationDecision:
    """Run the gate for one request."""
    requirement = requirement or AccessRequirement()

    try:
        identity = await load_identity()
    except AuthProviderError as e:
        logger.error(f"Identity provider error during authorization: {e}")
        return AuthorizationDecision(allowed=False, reason=DenyReason.AUTH_PROVIDER_ERROR)

    if identity is None:
        return AuthorizationDecision(allowed=False, reason=DenyReason.UNAUTHENTICATED)

    if not identity.organization_id:
        return AuthorizationDecision(
            allowed=False,
            reason=DenyReason.NO_ORGANIZATION,
            user_id=identity.user_id,
        )

    try:
        role = await load_role(identity)
    except Exception as e:
        logger.warning(
            f"Failed to resolve worship role for user {identity.user_id} in "
            f"org {identity.organization_id}, defaulting to member: {e}"
        )
        role = WorshipRole.MEMBER

    reason = evaluate_requirement(role, requirement)
    return AuthorizationDecision(
        allowed=reason is None,
        reason=reason,
        user_id=identity.user_id,
        organization_id=identity.organization_id,
        role=role,
    )
