"""Worship role management - assign, revoke and inspect per-organization roles.

The identity provider's user metadata is authoritative for role resolution.
Every write also updates the worship_role_assignments table so the database
can count collaborators. The table row is flushed first and the metadata
written second: a provider failure raises, and the session rollback in
get_db discards the row.
"""

import logging
import uuid as uuid_pkg
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worship.core.authorization import Identity
from worship.core.role_metadata import (
    RoleAssignment,
    create_assignment,
    get_worship_role_from_metadata,
    merge_assignment,
    resolve_effective_role,
    revoke_assignment,
    update_church_assignment,
)
from worship.core.roles import ROLE_DISPLAY_NAMES, WorshipRole, parse_role
from worship.domain.org_member_operations import org_member_ops
from worship.models.worship_role import BulkRoleAssignment, WorshipRoleAssignment
from worship.services.identity import IdentityStoreError, identity_store

logger = logging.getLogger(__name__)

RECENT_ASSIGNMENT_WINDOW = timedelta(days=30)


@dataclass(frozen=True)
class WorshipUser:
    """A member of an organization with their resolved worship role."""

    user_id: str
    email: str
    full_name: str | None
    avatar_url: str | None
    role: WorshipRole
    church_id: int | None = None
    assigned_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "role": self.role.value,
            "role_display_name": ROLE_DISPLAY_NAMES[self.role],
            "church_id": self.church_id,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
        }


@dataclass
class BulkAssignResult:
    """Per-user outcome of a bulk assignment."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": list(self.succeeded),
            "failed": list(self.failed),
            "total": len(self.succeeded) + len(self.failed),
        }


def _as_uuid(value: uuid_pkg.UUID | str) -> uuid_pkg.UUID:
    return value if isinstance(value, uuid_pkg.UUID) else uuid_pkg.UUID(str(value))


class RoleAssignmentOperations:
    """Role management over the identity store and the tracking table."""

    # ---- Resolution ----

    async def load_effective_role(self, identity: Identity) -> WorshipRole:
        """
        Resolve the effective role for an authenticated identity.

        Raises IdentityStoreError when metadata cannot be read; the
        authorization gate treats that as 'member'.
        """
        metadata = await identity_store.get_metadata(identity.user_id)
        return resolve_effective_role(
            identity.native_org_role,
            metadata,
            str(identity.organization_id),
        )

    async def get_effective_role(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
    ) -> WorshipRole | None:
        """
        Resolve a user's role from their membership's native role plus metadata.

        Returns None if the user is not a member of the organization.
        """
        membership = await org_member_ops.get_by_org_and_user(
            db, organization_id, _as_uuid(user_id)
        )
        if membership is None:
            return None
        identity = Identity(
            user_id=str(user_id),
            organization_id=str(organization_id),
            native_org_role=org_member_ops.native_role(membership),
        )
        return await self.load_effective_role(identity)

    async def get_user_worship_role(
        self,
        organization_id: uuid_pkg.UUID | str,
        user_id: uuid_pkg.UUID | str,
    ) -> WorshipRole:
        """
        Get the role recorded in a user's metadata for one organization.

        Lookup failures are logged and reported as 'member'.
        """
        try:
            metadata = await identity_store.get_metadata(str(user_id))
        except IdentityStoreError as e:
            logger.warning(f"Could not read worship role for user {user_id}: {e}")
            return WorshipRole.MEMBER

        return get_worship_role_from_metadata(metadata, str(organization_id))

    # ---- Tracking table ----

    async def get_tracking_row(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
    ) -> WorshipRoleAssignment | None:
        statement = select(WorshipRoleAssignment).where(
            WorshipRoleAssignment.organization_id == organization_id,
            WorshipRoleAssignment.user_id == _as_uuid(user_id),
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def has_active_assignment(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
    ) -> bool:
        """True if the user already occupies a collaborator seat."""
        row = await self.get_tracking_row(db, organization_id, user_id)
        return row is not None and row.is_active

    async def _upsert_tracking_row(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
        assignment: RoleAssignment,
    ) -> None:
        row = await self.get_tracking_row(db, organization_id, user_id)
        if row is None:
            row = WorshipRoleAssignment(
                organization_id=organization_id,
                user_id=_as_uuid(user_id),
                role=assignment.role.value,
                assigned_by=assignment.assigned_by,
            )
        row.role = assignment.role.value
        row.church_id = assignment.church_id
        row.assigned_by = assignment.assigned_by
        row.assigned_at = assignment.assigned_at
        row.is_active = True
        row.revoked_at = None
        db.add(row)
        await db.flush()

    # ---- Lifecycle ----

    async def assign_worship_role(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
        role: WorshipRole | str,
        assigned_by: str,
        church_id: int | None = None,
    ) -> RoleAssignment:
        """Assign (or replace) a user's worship role in an organization."""
        org_key = str(organization_id)
        entry = create_assignment(org_key, parse_role(role), assigned_by, church_id)
        assignment = entry[org_key]

        await self._upsert_tracking_row(db, organization_id, user_id, assignment)

        metadata = await identity_store.get_metadata(str(user_id))
        await identity_store.update_metadata(str(user_id), merge_assignment(metadata, entry))

        logger.info(
            f"Assigned worship role '{assignment.role.value}' to user {user_id} "
            f"in org {organization_id} (by {assigned_by})"
        )
        return assignment

    async def revoke_worship_role(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
    ) -> bool:
        """
        Revoke a user's worship role, keeping the assignment record.

        Returns False if the user had no assignment in the organization.
        Revoking an already revoked role succeeds and changes nothing.
        """
        org_key = str(organization_id)
        metadata = await identity_store.get_metadata(str(user_id))
        if metadata.get_assignment(org_key) is None:
            return False

        row = await self.get_tracking_row(db, organization_id, user_id)
        if row is not None and row.is_active:
            row.is_active = False
            row.revoked_at = datetime.now(UTC)
            db.add(row)
            await db.flush()

        await identity_store.update_metadata(str(user_id), revoke_assignment(metadata, org_key))
        logger.info(f"Revoked worship role for user {user_id} in org {organization_id}")
        return True

    async def update_church_assignment(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID | str,
        church_id: int | None,
    ) -> RoleAssignment | None:
        """Move a user's existing assignment to another church. None if unassigned."""
        org_key = str(organization_id)
        metadata = await identity_store.get_metadata(str(user_id))
        if metadata.get_assignment(org_key) is None:
            return None

        updated = update_church_assignment(metadata, org_key, church_id)

        row = await self.get_tracking_row(db, organization_id, user_id)
        if row is not None:
            row.church_id = church_id
            db.add(row)
            await db.flush()

        await identity_store.update_metadata(str(user_id), updated)
        return updated.get_assignment(org_key)

    async def bulk_assign_worship_roles(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        assignments: list[BulkRoleAssignment],
        assigned_by: str,
    ) -> BulkAssignResult:
        """
        Assign roles to several users.

        Each user is processed independently; one identity-provider failure
        does not stop the rest.
        """
        result = BulkAssignResult()
        for item in assignments:
            try:
                async with db.begin_nested():
                    await self.assign_worship_role(
                        db,
                        organization_id,
                        item.user_id,
                        item.role,
                        assigned_by,
                        item.church_id,
                    )
                result.succeeded.append(str(item.user_id))
            except IdentityStoreError as e:
                logger.warning(f"Bulk assignment failed for user {item.user_id}: {e}")
                result.failed.append({"user_id": str(item.user_id), "error": str(e)})

        logger.info(
            f"Bulk role assignment in org {organization_id}: "
            f"{len(result.succeeded)} succeeded, {len(result.failed)} failed"
        )
        return result

    # ---- Listing ----

    async def get_organization_worship_users(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
    ) -> list[WorshipUser]:
        """
        List organization members with their effective worship roles.

        Members whose profile cannot be loaded are skipped.
        """
        org_key = str(organization_id)
        members = await org_member_ops.get_by_org(db, organization_id)

        users: list[WorshipUser] = []
        for member in members:
            try:
                profile = await identity_store.get_user(str(member.user_id))
            except IdentityStoreError as e:
                logger.warning(f"Skipping member {member.user_id} in org {organization_id}: {e}")
                continue

            assignment = profile.metadata.get_assignment(org_key)
            active = assignment is not None and assignment.is_active
            users.append(
                WorshipUser(
                    user_id=profile.id,
                    email=profile.email,
                    full_name=profile.full_name,
                    avatar_url=profile.avatar_url,
                    role=resolve_effective_role(
                        org_member_ops.native_role(member), profile.metadata, org_key
                    ),
                    church_id=assignment.church_id if active else None,
                    assigned_at=assignment.assigned_at if active else None,
                )
            )

        return users

    async def get_worship_role_statistics(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
    ) -> dict[str, Any]:
        """
        Role distribution for an organization.

        Members without an active assignment are counted as 'member'.
        """
        statement = select(WorshipRoleAssignment).where(
            WorshipRoleAssignment.organization_id == organization_id
        )
        result = await db.execute(statement)
        rows = list(result.scalars().all())
        members = await org_member_ops.get_by_org(db, organization_id)

        active_rows = [row for row in rows if row.is_active]
        distribution = {role.value: 0 for role in WorshipRole}
        for row in active_rows:
            distribution[parse_role(row.role).value] += 1
        distribution[WorshipRole.MEMBER.value] += max(len(members) - len(active_rows), 0)

        cutoff = datetime.now(UTC) - RECENT_ASSIGNMENT_WINDOW
        recent = sum(1 for row in rows if row.assigned_at and row.assigned_at >= cutoff)

        return {
            "total_members": len(members),
            "active_assignments": len(active_rows),
            "revoked_assignments": len(rows) - len(active_rows),
            "recent_assignments": recent,
            "role_distribution": distribution,
        }


role_assignment_ops = RoleAssignmentOperations()
