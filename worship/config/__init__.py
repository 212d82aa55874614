"""Configuration package."""

from worship.config.plans import PLANS, PlanConfig, PlanTier, Resource, get_plan
from worship.config.settings import Settings, settings

__all__ = [
    "PlanConfig",
    "PlanTier",
    "PLANS",
    "Resource",
    "get_plan",
    "Settings",
    "settings",
]
