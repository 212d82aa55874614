"""Domain operations for Church and Ministry models."""

import uuid as uuid_pkg

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worship.models.church import Church, ChurchCreate, Ministry, MinistryCreate


class ChurchOperations:
    """Create and look up churches and ministries."""

    async def get_church(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        church_id: int,
    ) -> Church | None:
        """Get an active church, scoped to an organization."""
        statement = select(Church).where(
            Church.id == church_id,
            Church.organization_id == organization_id,
            Church.is_active.is_(True),
            Church.deleted_at.is_(None),
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def create_church(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
        data: ChurchCreate,
    ) -> Church:
        church = Church(organization_id=organization_id, **data.model_dump())
        db.add(church)
        await db.flush()
        await db.refresh(church)
        return church

    async def create_ministry(self, db: AsyncSession, data: MinistryCreate) -> Ministry:
        """Create a ministry. The caller must have checked the church belongs to the org."""
        ministry = Ministry(**data.model_dump())
        db.add(ministry)
        await db.flush()
        await db.refresh(ministry)
        return ministry


church_ops = ChurchOperations()
