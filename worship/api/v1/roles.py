import logging
import uuid as uuid_pkg

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from worship.api.deps import WorshipAuth, WorshipAuthContext, enforce_limit, require_worship_member
from worship.config.plans import Resource
from worship.core.database import get_db
from worship.core.exceptions import (
    AuthProviderUnavailableError,
    ForbiddenError,
    NotFoundError,
)
from worship.core.permissions import Permission, permissions_for_role
from worship.core.roles import (
    ROLE_DISPLAY_NAMES,
    WorshipRole,
    can_assign_role,
    get_available_worship_roles,
    get_role_level,
)
from worship.domain.church_operations import church_ops
from worship.domain.org_member_operations import org_member_ops
from worship.domain.role_assignment_operations import role_assignment_ops
from worship.models.worship_role import (
    BulkRoleAssignRequest,
    ChurchAssignmentUpdate,
    RoleAssignRequest,
)
from worship.services.identity import IdentityStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/worship", tags=["worship-roles"])


class RoleOption(BaseModel):
    """An assignable role as shown in role pickers."""

    value: str
    label: str
    level: int


class RoleAssignmentRead(BaseModel):
    """A user's assignment after a write."""

    user_id: str
    organization_id: str
    role: str
    church_id: int | None
    assigned_by: str
    assigned_at: str
    is_active: bool


def role_options(roles: list[WorshipRole]) -> list[dict]:
    return [
        {"value": role.value, "label": ROLE_DISPLAY_NAMES[role], "level": get_role_level(role)}
        for role in roles
    ]


async def _require_member(
    db: AsyncSession,
    organization_id: uuid_pkg.UUID,
    user_id: uuid_pkg.UUID,
) -> None:
    membership = await org_member_ops.get_by_org_and_user(db, organization_id, user_id)
    if not membership:
        raise NotFoundError("Member")


async def _require_church(
    db: AsyncSession,
    organization_id: uuid_pkg.UUID,
    church_id: int | None,
) -> None:
    if church_id is None:
        return
    church = await church_ops.get_church(db, organization_id, church_id)
    if not church:
        raise NotFoundError("Church")


@router.get("/me")
async def get_my_worship_role(
    auth: WorshipAuthContext = Depends(require_worship_member),
):
    """The caller's effective worship role and what it allows."""
    return {
        "user_id": str(auth.user_id),
        "organization_id": str(auth.organization_id),
        "role": auth.role.value,
        "role_display_name": ROLE_DISPLAY_NAMES[auth.role],
        "level": get_role_level(auth.role),
        "permissions": [p.value for p in permissions_for_role(auth.role)],
        "assignable_roles": role_options(get_available_worship_roles(auth.role)),
    }


@router.get("/roles/available", response_model=list[RoleOption])
async def list_available_roles(
    auth: WorshipAuthContext = Depends(require_worship_member),
):
    """Roles the caller may grant to others."""
    return role_options(get_available_worship_roles(auth.role))


@router.get("/users")
async def list_worship_users(
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_INVITE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """List organization members with their worship roles."""
    users = await role_assignment_ops.get_organization_worship_users(db, auth.organization_id)
    return [user.to_dict() for user in users]


@router.get("/users/{user_id}/role")
async def get_user_role(
    user_id: uuid_pkg.UUID,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_INVITE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """A member's effective worship role, as the gate would resolve it."""
    try:
        role = await role_assignment_ops.get_effective_role(db, auth.organization_id, user_id)
    except IdentityStoreError as e:
        raise AuthProviderUnavailableError(str(e)) from e

    if role is None:
        raise NotFoundError("Member")

    return {
        "user_id": str(user_id),
        "organization_id": str(auth.organization_id),
        "role": role.value,
        "role_display_name": ROLE_DISPLAY_NAMES[role],
        "level": get_role_level(role),
    }


@router.get("/roles/statistics")
async def get_role_statistics(
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_VIEW_USAGE_STATS)),
    db: AsyncSession = Depends(get_db),
):
    """Role distribution and recent assignment activity for the organization."""
    return await role_assignment_ops.get_worship_role_statistics(db, auth.organization_id)


@router.put("/users/{user_id}/role", response_model=RoleAssignmentRead)
async def assign_user_role(
    user_id: uuid_pkg.UUID,
    data: RoleAssignRequest,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_ASSIGN_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    """
    Assign a worship role to a member of the organization.

    The caller may only grant roles at or below their own. Giving a role to
    someone who has none takes a collaborator seat, which counts against
    the plan.
    """
    if not can_assign_role(auth.role, data.role):
        raise ForbiddenError(f"You cannot assign the '{data.role.value}' role")

    await _require_member(db, auth.organization_id, user_id)
    await _require_church(db, auth.organization_id, data.church_id)

    if not await role_assignment_ops.has_active_assignment(db, auth.organization_id, user_id):
        await enforce_limit(db, auth.organization_id, Resource.COLLABORATORS)

    try:
        assignment = await role_assignment_ops.assign_worship_role(
            db,
            auth.organization_id,
            user_id,
            data.role,
            assigned_by=str(auth.user_id),
            church_id=data.church_id,
        )
    except IdentityStoreError as e:
        raise AuthProviderUnavailableError(str(e)) from e

    return {
        "user_id": str(user_id),
        "organization_id": str(auth.organization_id),
        "role": assignment.role.value,
        "church_id": assignment.church_id,
        "assigned_by": assignment.assigned_by,
        "assigned_at": assignment.assigned_at.isoformat(),
        "is_active": assignment.is_active,
    }


@router.patch("/users/{user_id}/church", response_model=RoleAssignmentRead)
async def update_user_church(
    user_id: uuid_pkg.UUID,
    data: ChurchAssignmentUpdate,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_ASSIGN_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    """Move a user's role to another church."""
    await _require_church(db, auth.organization_id, data.church_id)

    try:
        assignment = await role_assignment_ops.update_church_assignment(
            db, auth.organization_id, user_id, data.church_id
        )
    except IdentityStoreError as e:
        raise AuthProviderUnavailableError(str(e)) from e

    if assignment is None:
        raise NotFoundError("Role assignment")

    return {
        "user_id": str(user_id),
        "organization_id": str(auth.organization_id),
        "role": assignment.role.value,
        "church_id": assignment.church_id,
        "assigned_by": assignment.assigned_by,
        "assigned_at": assignment.assigned_at.isoformat(),
        "is_active": assignment.is_active,
    }


@router.delete("/users/{user_id}/role", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_user_role(
    user_id: uuid_pkg.UUID,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_REMOVE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Revoke a user's worship role. The user falls back to 'member'."""
    try:
        revoked = await role_assignment_ops.revoke_worship_role(db, auth.organization_id, user_id)
    except IdentityStoreError as e:
        raise AuthProviderUnavailableError(str(e)) from e

    if not revoked:
        raise NotFoundError("Role assignment")


@router.post("/roles/bulk")
async def bulk_assign_roles(
    data: BulkRoleAssignRequest,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_ASSIGN_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    """
    Assign roles to several members at once.

    The whole request is rejected if any requested role is above the
    caller's own. Identity-provider failures are reported per user.
    """
    too_high = sorted(
        {item.role.value for item in data.assignments if not can_assign_role(auth.role, item.role)}
    )
    if too_high:
        raise ForbiddenError(f"You cannot assign: {', '.join(too_high)}")

    new_seats: set[uuid_pkg.UUID] = set()
    for item in data.assignments:
        await _require_member(db, auth.organization_id, item.user_id)
        await _require_church(db, auth.organization_id, item.church_id)
        if not await role_assignment_ops.has_active_assignment(
            db, auth.organization_id, item.user_id
        ):
            new_seats.add(item.user_id)

    if new_seats:
        await enforce_limit(db, auth.organization_id, Resource.COLLABORATORS, len(new_seats))

    result = await role_assignment_ops.bulk_assign_worship_roles(
        db,
        auth.organization_id,
        data.assignments,
        assigned_by=str(auth.user_id),
    )
    return result.to_dict()
