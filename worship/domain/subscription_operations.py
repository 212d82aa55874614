"""Domain operations for Subscription model."""

import logging
import uuid as uuid_pkg

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worship.config.plans import PlanTier, parse_tier
from worship.config.settings import settings
from worship.models.subscription import Subscription

logger = logging.getLogger(__name__)


class SubscriptionOperations:
    """Read operations for Subscription model."""

    async def get_by_org(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
    ) -> Subscription | None:
        """Get subscription for an organization."""
        statement = select(Subscription).where(Subscription.organization_id == organization_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_tier(
        self,
        db: AsyncSession,
        organization_id: uuid_pkg.UUID,
    ) -> PlanTier:
        """
        Get the plan tier for an organization.

        Organizations without a subscription row get the configured default tier.
        """
        subscription = await self.get_by_org(db, organization_id)
        if not subscription:
            logger.info(
                f"No subscription for org {organization_id}, "
                f"using default tier '{settings.default_subscription_tier}'"
            )
            return parse_tier(settings.default_subscription_tier)

        return parse_tier(subscription.plan_tier)


subscription_ops = SubscriptionOperations()
