"""Domain operations for OrganizationMember model."""

import uuid as uuid_pkg

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worship.models.organization import NativeOrgRole, OrganizationMember


class OrgMemberOperations:
    """Read operations for organization memberships."""

    async def get_by_org_and_user(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID,
    ) -> OrganizationMember | None:
        """Get a specific membership by org and user."""
        statement = select(OrganizationMember).where(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id,
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_default_for_user(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
    ) -> OrganizationMember | None:
        """Get the user's earliest membership, used when no org is specified."""
        statement = (
            select(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.joined_at.asc())
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_org(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
    ) -> list[OrganizationMember]:
        """Get all members of an organization."""
        statement = (
            select(OrganizationMember)
            .where(OrganizationMember.organization_id == organization_id)
            .order_by(OrganizationMember.joined_at.desc())
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def resolve_membership(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
        organization_id: uuid_pkg.UUID | None = None,
    ) -> OrganizationMember | None:
        """
        Resolve the organization context for a request.

        Resolution order:
        1. If organization_id is given, the user's membership in that org
           (None if they are not a member)
        2. Otherwise, the user's first organization
        """
        if organization_id:
            return await self.get_by_org_and_user(db, organization_id, user_id)
        return await self.get_default_for_user(db, user_id)

    @staticmethod
    def native_role(membership: OrganizationMember | None) -> str | None:
        """The identity-provider org role string for a membership."""
        if membership is None:
            return None
        return membership.role or NativeOrgRole.MEMBER.value


org_member_ops = OrgMemberOperations()
