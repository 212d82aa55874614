"""Subscription limit checks - gate resource creation against plan quotas.

Two distinct questions are answered here and must not be merged:
- check_limit / would_tier_solve_limit: would creating ONE MORE resource fit?
- get_recommended_tier: does the CURRENT usage fit a tier as-is?
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from worship.config.plans import (
    PLANS,
    TIER_ORDER,
    UNLIMITED,
    PlanTier,
    Resource,
    get_plan,
    parse_tier,
)

WARNING_THRESHOLD = 80
DANGER_THRESHOLD = 100

# Resources shown in the "at any limit" banner; services are unlimited everywhere
GATED_RESOURCES: tuple[Resource, ...] = (
    Resource.CHURCHES,
    Resource.MINISTRIES,
    Resource.COLLABORATORS,
)


class WarningLevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class UsageStats:
    """Current (not post-creation) resource counts for one organization."""

    churches: int = 0
    ministries: int = 0
    collaborators: int = 0
    services: int = 0

    def count(self, resource: Resource | str) -> int:
        return getattr(self, Resource(resource).value)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class LimitCheckResult:
    """Result of checking whether one more resource fits the plan."""

    allowed: bool
    current: int
    limit: int
    tier: PlanTier
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "current": self.current,
            "limit": self.limit,
            "tier": self.tier.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class UpgradeInfo:
    """Upgrade suggestion shown when a limit is reached."""

    suggested_tier: PlanTier
    feature: str
    benefits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggested_tier": self.suggested_tier.value,
            "feature": self.feature,
            "benefits": list(self.benefits),
        }


def check_limit(
    tier: PlanTier | str,
    usage: UsageStats,
    resource: Resource | str,
) -> LimitCheckResult:
    """Check whether adding one more resource would stay within the tier's quota."""
    plan = get_plan(tier)
    resource = Resource(resource)
    limit = plan.quota(resource)
    current = usage.count(resource)

    if limit == UNLIMITED:
        return LimitCheckResult(allowed=True, current=current, limit=UNLIMITED, tier=plan.tier)

    allowed = current + 1 <= limit
    message = None
    if not allowed:
        message = (
            f"You've reached the {resource.value} limit for your {plan.tier.value} plan "
            f"({current}/{limit})"
        )

    return LimitCheckResult(
        allowed=allowed,
        current=current,
        limit=limit,
        tier=plan.tier,
        message=message,
    )


def check_multiple_limits(
    tier: PlanTier | str,
    usage: UsageStats,
    resources: list[Resource | str],
) -> dict[Resource, LimitCheckResult]:
    """Check several resources independently."""
    return {Resource(resource): check_limit(tier, usage, resource) for resource in resources}


def is_at_any_limit(tier: PlanTier | str, usage: UsageStats) -> bool:
    """True if any gated resource could not be created right now."""
    results = check_multiple_limits(tier, usage, list(GATED_RESOURCES))
    return any(not result.allowed for result in results.values())


def get_usage_percentage(
    tier: PlanTier | str,
    usage: UsageStats,
    resource: Resource | str,
) -> float:
    """Usage as a percentage of quota, clamped to 100. Unlimited resources report 0."""
    limit = get_plan(tier).quota(resource)
    if limit == UNLIMITED:
        return 0

    return min(usage.count(resource) / limit * 100, 100)


def get_usage_warning_level(percentage: float) -> WarningLevel:
    if percentage >= DANGER_THRESHOLD:
        return WarningLevel.DANGER
    if percentage >= WARNING_THRESHOLD:
        return WarningLevel.WARNING
    return WarningLevel.SAFE


def would_tier_solve_limit(
    target_tier: PlanTier | str,
    usage: UsageStats,
    resource: Resource | str,
) -> bool:
    """Check if moving to target_tier would allow one more of the resource."""
    target_limit = get_plan(target_tier).quota(resource)
    if target_limit == UNLIMITED:
        return True

    return usage.count(resource) + 1 <= target_limit


def _tier_fits_usage(tier: PlanTier, usage: UsageStats) -> bool:
    """Check if current usage fits within a tier without adding anything."""
    plan = PLANS[tier]
    for resource in Resource:
        limit = plan.quota(resource)
        if limit != UNLIMITED and usage.count(resource) > limit:
            return False
    return True


def get_recommended_tier(usage: UsageStats) -> PlanTier:
    """Get the cheapest tier that accommodates the current usage."""
    for tier in TIER_ORDER[:-1]:
        if _tier_fits_usage(tier, usage):
            return tier
    return TIER_ORDER[-1]


def get_tier_description(tier: PlanTier | str) -> str:
    """
    Describe a tier's quotas, e.g. "1 church, 5 ministries, 5 collaborators".

    Only church and ministry are singularized, and only at exactly 1.
    """
    plan = get_plan(tier)

    def format_limit(limit: int) -> str:
        return "Unlimited" if limit == UNLIMITED else str(limit)

    church_word = "church" if plan.churches == 1 else "churches"
    ministry_word = "ministry" if plan.ministries == 1 else "ministries"

    return (
        f"{format_limit(plan.churches)} {church_word}, "
        f"{format_limit(plan.ministries)} {ministry_word}, "
        f"{format_limit(plan.collaborators)} collaborators"
    )


_RESOURCE_NOUNS: dict[Resource, str] = {
    Resource.CHURCHES: "church",
    Resource.MINISTRIES: "ministry",
    Resource.COLLABORATORS: "collaborator",
    Resource.SERVICES: "service",
}

_PRO_BENEFITS = [
    "Unlimited churches",
    "Unlimited ministries",
    "Unlimited collaborators",
    "Advanced analytics",
    "Priority support",
]


def get_upgrade_info(current_tier: PlanTier | str, resource: Resource | str) -> UpgradeInfo:
    """Get the upgrade suggestion for a tier/resource pair."""
    tier = parse_tier(current_tier)
    resource = Resource(resource)
    noun = _RESOURCE_NOUNS[resource]

    if tier is PlanTier.FREE:
        if resource is Resource.CHURCHES:
            return UpgradeInfo(
                suggested_tier=PlanTier.PRO,
                feature=f"multiple {noun}s",
                benefits=list(_PRO_BENEFITS),
            )
        if resource is Resource.MINISTRIES:
            return UpgradeInfo(
                suggested_tier=PlanTier.TEAM,
                feature=f"more {noun}s",
                benefits=[
                    "Up to 25 ministries",
                    "Unlimited collaborators",
                    "Advanced scheduling",
                    "Email notifications",
                ],
            )
        if resource is Resource.COLLABORATORS:
            return UpgradeInfo(
                suggested_tier=PlanTier.TEAM,
                feature=f"more {noun}s",
                benefits=[
                    "Unlimited collaborators",
                    "Up to 25 ministries",
                    "Advanced scheduling",
                    "Email notifications",
                ],
            )

    if tier is PlanTier.TEAM:
        return UpgradeInfo(
            suggested_tier=PlanTier.PRO,
            feature=f"unlimited {noun}s",
            benefits=[*_PRO_BENEFITS, "Custom integrations"],
        )

    # Pro (or free services, which are never limited)
    return UpgradeInfo(
        suggested_tier=PlanTier.PRO,
        feature=noun,
        benefits=["You already have the highest tier!"],
    )
