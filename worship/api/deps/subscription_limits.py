"""Subscription-limit dependencies.

A creating endpoint must pass the permission gate first and the limit check
second, both before it writes anything:

    @router.post("/churches")
    async def create_church(
        data: ChurchCreate,
        auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_CREATE_CHURCH)),
        db: AsyncSession = Depends(get_db),
    ):
        await enforce_limit(db, auth.organization_id, Resource.CHURCHES)
        ...
"""

import logging
import uuid as uuid_pkg
from dataclasses import dataclass, replace

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from worship.config.plans import PlanConfig, PlanTier, Resource, get_plan
from worship.core.database import get_db
from worship.core.exceptions import LimitExceededError
from worship.core.limits import LimitCheckResult, UsageStats, check_limit, get_upgrade_info
from worship.domain.subscription_operations import subscription_ops
from worship.domain.usage_operations import usage_ops

from .worship_auth import WorshipAuthContext, require_worship_member

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionContext:
    """Plan and current usage for the caller's organization."""

    organization_id: uuid_pkg.UUID
    tier: PlanTier
    plan: PlanConfig
    usage: UsageStats


async def load_subscription_context(
    db: AsyncSession,
    organization_id: uuid_pkg.UUID,
) -> SubscriptionContext:
    """Read tier and usage for an organization. Database errors propagate."""
    tier = await subscription_ops.get_tier(db, organization_id)
    usage = await usage_ops.get_usage(db, organization_id)
    return SubscriptionContext(
        organization_id=organization_id,
        tier=tier,
        plan=get_plan(tier),
        usage=usage,
    )


async def get_subscription_context(
    auth: WorshipAuthContext = Depends(require_worship_member),
    db: AsyncSession = Depends(get_db),
) -> SubscriptionContext:
    """Subscription context for the authorized caller's organization."""
    return await load_subscription_context(db, auth.organization_id)


def check_context_limit(ctx: SubscriptionContext, resource: Resource | str) -> LimitCheckResult:
    """Raise 402 if one more resource would exceed the plan. Returns the passing result."""
    result = check_limit(ctx.tier, ctx.usage, resource)
    if not result.allowed:
        logger.info(
            f"Limit reached for org {ctx.organization_id}: "
            f"{Resource(resource).value} {result.current}/{result.limit} on {ctx.tier.value}"
        )
        raise LimitExceededError(result, get_upgrade_info(ctx.tier, resource))
    return result


async def enforce_limit(
    db: AsyncSession,
    organization_id: uuid_pkg.UUID,
    resource: Resource | str,
    amount: int = 1,
) -> LimitCheckResult:
    """
    Check that the organization may create `amount` more of a resource.

    Counts are read fresh. A failure to read them propagates, so the
    request fails rather than creating past the limit.
    """
    ctx = await load_subscription_context(db, organization_id)
    if amount > 1:
        # The last of the batch must still fit
        resource = Resource(resource)
        projected = ctx.usage.count(resource) + amount - 1
        ctx = replace(ctx, usage=replace(ctx.usage, **{resource.value: projected}))
    return check_context_limit(ctx, resource)
