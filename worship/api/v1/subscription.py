from fastapi import APIRouter, Depends

from worship.api.deps import SubscriptionContext, get_subscription_context
from worship.config.plans import Resource
from worship.core.limits import (
    GATED_RESOURCES,
    check_limit,
    get_recommended_tier,
    get_tier_description,
    get_upgrade_info,
    get_usage_percentage,
    get_usage_warning_level,
    is_at_any_limit,
)

router = APIRouter(prefix="/worship/subscription", tags=["worship-subscription"])


@router.get("/usage")
async def get_subscription_usage(
    ctx: SubscriptionContext = Depends(get_subscription_context),
):
    """
    Current plan usage for the caller's organization.

    Per resource: whether one more may be created, the percentage of quota
    used and the matching warning level.
    """
    resources = {}
    for resource in Resource:
        percentage = get_usage_percentage(ctx.tier, ctx.usage, resource)
        resources[resource.value] = {
            **check_limit(ctx.tier, ctx.usage, resource).to_dict(),
            "percentage": percentage,
            "warning_level": get_usage_warning_level(percentage).value,
        }

    return {
        "tier": ctx.tier.value,
        "plan_name": ctx.plan.display_name,
        "tier_description": get_tier_description(ctx.tier),
        "usage": ctx.usage.to_dict(),
        "limits": ctx.plan.limits,
        "resources": resources,
        "at_limit": is_at_any_limit(ctx.tier, ctx.usage),
        "gated_resources": [resource.value for resource in GATED_RESOURCES],
        "recommended_tier": get_recommended_tier(ctx.usage).value,
    }


@router.get("/upgrade/{resource}")
async def get_upgrade_suggestion(
    resource: Resource,
    ctx: SubscriptionContext = Depends(get_subscription_context),
):
    """Upgrade suggestion for a resource on the current plan."""
    return {
        "current_tier": ctx.tier.value,
        "resource": resource.value,
        **get_upgrade_info(ctx.tier, resource).to_dict(),
    }
