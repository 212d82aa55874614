"""Worship role authorization dependencies.

Usage:
    @router.post("/ministries")
    async def create_ministry(
        auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_CREATE_MINISTRY)),
        ...
    ):
        ...

The organization is taken from the org_id query parameter (the caller must
be a member), or else the caller's first organization.
"""

import logging
import uuid as uuid_pkg
from dataclasses import dataclass

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from worship.config import settings
from worship.core.authorization import (
    AccessRequirement,
    AuthorizationDecision,
    DenyReason,
    Identity,
    authorize,
)
from worship.core.database import get_db
from worship.core.exceptions import AccessDeniedError, AuthProviderUnavailableError
from worship.core.permissions import Permission, has_permission
from worship.core.roles import WorshipRole, has_minimum_role
from worship.domain.org_member_operations import org_member_ops
from worship.domain.role_assignment_operations import role_assignment_ops

from .auth import authenticate, security

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorshipAuthContext:
    """An allowed request: who is calling, where, and with which role."""

    user_id: uuid_pkg.UUID
    organization_id: uuid_pkg.UUID
    role: WorshipRole

    def has_permission(self, permission: Permission | str) -> bool:
        return has_permission(permission, self.role)

    def has_minimum_role(self, role: WorshipRole | str) -> bool:
        return has_minimum_role(self.role, role)


def raise_for_decision(
    decision: AuthorizationDecision,
    requirement: AccessRequirement | None = None,
) -> None:
    """Translate a deny decision into an HTTP error. Allowed decisions pass through."""
    if decision.allowed:
        return

    reason = decision.reason
    if reason is DenyReason.AUTH_PROVIDER_ERROR:
        raise AuthProviderUnavailableError()

    if reason is DenyReason.UNAUTHENTICATED:
        raise AccessDeniedError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHENTICATED",
            message="Not authenticated",
            redirect=settings.sign_in_path,
            headers={"WWW-Authenticate": "Bearer"},
        )

    if reason is DenyReason.NO_ORGANIZATION:
        raise AccessDeniedError(
            status_code=status.HTTP_403_FORBIDDEN,
            code="NO_ORGANIZATION",
            message="No organization found for user",
            redirect=settings.onboarding_path,
        )

    if reason is DenyReason.INSUFFICIENT_ROLE:
        minimum = requirement.minimum_role if requirement else None
        message = (
            f"Requires the '{minimum.value}' role or higher"
            if minimum is not None
            else "Insufficient role"
        )
        raise AccessDeniedError(
            status_code=status.HTTP_403_FORBIDDEN,
            code="INSUFFICIENT_ROLE",
            message=message,
            redirect=settings.insufficient_role_path,
        )

    # Insufficient permission
    names = [p.value for p in requirement.permissions] if requirement else []
    message = f"Missing required permission: {', '.join(names)}" if names else "Forbidden"
    raise AccessDeniedError(
        status_code=status.HTTP_403_FORBIDDEN,
        code="INSUFFICIENT_PERMISSION",
        message=message,
        redirect=settings.insufficient_permissions_path,
    )


class WorshipAuth:
    """
    Dependency class gating an endpoint on worship permissions and/or a minimum role.

    WorshipAuth() with no arguments only requires an authenticated caller
    with an organization.
    """

    def __init__(
        self,
        *permissions: Permission,
        require_all: bool = True,
        minimum_role: WorshipRole | None = None,
    ):
        self.requirement = AccessRequirement(
            permissions=tuple(permissions),
            require_all=require_all,
            minimum_role=minimum_role,
        )

    async def __call__(
        self,
        org_id: uuid_pkg.UUID | None = None,
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
        db: AsyncSession = Depends(get_db),
    ) -> WorshipAuthContext:
        async def load_identity() -> Identity | None:
            user = await authenticate(credentials)
            if user is None:
                return None

            membership = await org_member_ops.resolve_membership(db, user.id, org_id)
            return Identity(
                user_id=str(user.id),
                organization_id=str(membership.organization_id) if membership else None,
                native_org_role=org_member_ops.native_role(membership),
            )

        decision = await authorize(
            load_identity,
            role_assignment_ops.load_effective_role,
            self.requirement,
        )
        if not decision.allowed:
            logger.info(
                f"Denied request for user {decision.user_id} in org "
                f"{decision.organization_id}: {decision.reason.value}"
            )
        raise_for_decision(decision, self.requirement)

        return WorshipAuthContext(
            user_id=uuid_pkg.UUID(decision.user_id),
            organization_id=uuid_pkg.UUID(decision.organization_id),
            role=decision.role,
        )


# Common gates
require_worship_member = WorshipAuth()
require_role_assigner = WorshipAuth(Permission.CAN_ASSIGN_ROLES)
