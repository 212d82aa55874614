"""Usage counting - current resource counts for subscription limit checks."""

import uuid as uuid_pkg

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worship.core.limits import UsageStats
from worship.models.church import Church, Ministry, Service
from worship.models.worship_role import WorshipRoleAssignment


class UsageOperations:
    """Count active resources for an organization.

    Counts are a point-in-time snapshot. Two concurrent creations may both
    pass a limit check before either commits.
    """

    async def count_churches(self, db: AsyncSession, organization_id: uuid_pkg.UUID) -> int:
        """Active, non-deleted churches."""
        statement = select(func.count(Church.id)).where(
            Church.organization_id == organization_id,
            Church.is_active.is_(True),
            Church.deleted_at.is_(None),
        )
        result = await db.execute(statement)
        return result.scalar() or 0

    async def count_ministries(self, db: AsyncSession, organization_id: uuid_pkg.UUID) -> int:
        """Active ministries across the organization's active churches."""
        statement = (
            select(func.count(Ministry.id))
            .join(Church, Ministry.church_id == Church.id)
            .where(
                Church.organization_id == organization_id,
                Church.is_active.is_(True),
                Church.deleted_at.is_(None),
                Ministry.is_active.is_(True),
            )
        )
        result = await db.execute(statement)
        return result.scalar() or 0

    async def count_collaborators(self, db: AsyncSession, organization_id: uuid_pkg.UUID) -> int:
        """Users holding an active worship role in the organization."""
        statement = select(func.count(WorshipRoleAssignment.id)).where(
            WorshipRoleAssignment.organization_id == organization_id,
            WorshipRoleAssignment.is_active.is_(True),
            WorshipRoleAssignment.revoked_at.is_(None),
        )
        result = await db.execute(statement)
        return result.scalar() or 0

    async def count_services(self, db: AsyncSession, organization_id: uuid_pkg.UUID) -> int:
        """Active services of active ministries in active churches."""
        statement = (
            select(func.count(Service.id))
            .join(Ministry, Service.ministry_id == Ministry.id)
            .join(Church, Ministry.church_id == Church.id)
            .where(
                Church.organization_id == organization_id,
                Church.is_active.is_(True),
                Church.deleted_at.is_(None),
                Ministry.is_active.is_(True),
                Service.is_active.is_(True),
            )
        )
        result = await db.execute(statement)
        return result.scalar() or 0

    async def get_usage(self, db: AsyncSession, organization_id: uuid_pkg.UUID) -> UsageStats:
        """All four counters for an organization."""
        return UsageStats(
            churches=await self.count_churches(db, organization_id),
            ministries=await self.count_ministries(db, organization_id),
            collaborators=await self.count_collaborators(db, organization_id),
            services=await self.count_services(db, organization_id),
        )


usage_ops = UsageOperations()
