"""Plan configuration - defines resource quotas for each subscription tier."""

from dataclasses import dataclass
from enum import Enum

UNLIMITED = -1


class PlanTier(str, Enum):
    """Available subscription plan tiers, cheapest first."""

    FREE = "free"
    TEAM = "team"
    PRO = "pro"


class Resource(str, Enum):
    """Resource kinds counted against a plan's quotas."""

    CHURCHES = "churches"
    MINISTRIES = "ministries"
    COLLABORATORS = "collaborators"
    SERVICES = "services"


@dataclass(frozen=True)
class PlanConfig:
    """Configuration for a subscription plan tier.

    A quota of -1 means unlimited.
    """

    tier: PlanTier
    display_name: str
    churches: int
    ministries: int
    collaborators: int
    services: int  # Unlimited on every tier today

    def quota(self, resource: Resource | str) -> int:
        """Return the quota for a resource kind."""
        return getattr(self, Resource(resource).value)

    @property
    def limits(self) -> dict[str, int]:
        """Return quotas as a dictionary for API responses."""
        return {resource.value: self.quota(resource) for resource in Resource}


PLANS: dict[PlanTier, PlanConfig] = {
    PlanTier.FREE: PlanConfig(
        tier=PlanTier.FREE,
        display_name="Free",
        churches=1,
        ministries=5,
        collaborators=5,
        services=UNLIMITED,
    ),
    PlanTier.TEAM: PlanConfig(
        tier=PlanTier.TEAM,
        display_name="Team",
        churches=1,
        ministries=25,
        collaborators=UNLIMITED,
        services=UNLIMITED,
    ),
    PlanTier.PRO: PlanConfig(
        tier=PlanTier.PRO,
        display_name="Pro",
        churches=UNLIMITED,
        ministries=UNLIMITED,
        collaborators=UNLIMITED,
        services=UNLIMITED,
    ),
}

# Order in which tiers are considered when recommending an upgrade
TIER_ORDER: tuple[PlanTier, ...] = (PlanTier.FREE, PlanTier.TEAM, PlanTier.PRO)


def parse_tier(tier: str | None) -> PlanTier:
    """
    Translate a stored tier string into a PlanTier.

    Unknown or missing tiers fall back to 'free', the most restrictive plan.
    """
    try:
        return PlanTier(tier)
    except ValueError:
        return PlanTier.FREE


def get_plan(tier: PlanTier | str) -> PlanConfig:
    """Get plan configuration by tier name."""
    return PLANS[parse_tier(tier)]
