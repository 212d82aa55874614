"""Subscription usage API tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from worship.config.plans import PlanTier
from worship.core.limits import UsageStats


class TestUsage:
    """GET /worship/subscription/usage"""

    @pytest.mark.asyncio
    async def test_free_plan_usage(self, api_client: AsyncClient, caller):
        caller.usage = UsageStats(churches=1, ministries=4, collaborators=2, services=12)

        resp = await api_client.get("/api/v1/worship/subscription/usage")

        assert resp.status_code == 200
        data = resp.json()
        assert data["tier"] == "free"
        assert data["plan_name"] == "Free"
        assert data["tier_description"] == "1 church, 5 ministries, 5 collaborators"
        assert data["usage"] == {"churches": 1, "ministries": 4, "collaborators": 2, "services": 12}
        assert data["at_limit"] is True
        assert data["recommended_tier"] == "free"

        churches = data["resources"]["churches"]
        assert churches["allowed"] is False
        assert churches["percentage"] == 100
        assert churches["warning_level"] == "danger"

        ministries = data["resources"]["ministries"]
        assert ministries["allowed"] is True
        assert ministries["percentage"] == pytest.approx(80)
        assert ministries["warning_level"] == "warning"

        services = data["resources"]["services"]
        assert services["allowed"] is True
        assert services["limit"] == -1
        assert services["warning_level"] == "safe"

    @pytest.mark.asyncio
    async def test_any_member_may_read_usage(self, api_client: AsyncClient, caller):
        caller.tier = PlanTier.PRO

        resp = await api_client.get("/api/v1/worship/subscription/usage")

        assert resp.status_code == 200
        assert resp.json()["at_limit"] is False

    @pytest.mark.asyncio
    async def test_anonymous_is_401(self, api_client: AsyncClient, caller):
        caller.user = None

        resp = await api_client.get("/api/v1/worship/subscription/usage")

        assert resp.status_code == 401


class TestUpgradeSuggestion:
    """GET /worship/subscription/upgrade/{resource}"""

    @pytest.mark.asyncio
    async def test_team_suggests_pro(self, api_client: AsyncClient, caller):
        caller.tier = PlanTier.TEAM

        resp = await api_client.get("/api/v1/worship/subscription/upgrade/ministries")

        assert resp.status_code == 200
        data = resp.json()
        assert data["current_tier"] == "team"
        assert data["suggested_tier"] == "pro"
        assert data["feature"] == "unlimited ministrys"
        assert "Custom integrations" in data["benefits"]

    @pytest.mark.asyncio
    async def test_unknown_resource_is_422(self, api_client: AsyncClient):
        resp = await api_client.get("/api/v1/worship/subscription/upgrade/hymns")

        assert resp.status_code == 422
