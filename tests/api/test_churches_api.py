"""Church and ministry creation API tests - permission first, then plan limit."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from worship.config.plans import PlanTier
from worship.core.limits import UsageStats
from worship.core.roles import WorshipRole
from worship.domain.church_operations import church_ops
from worship.models.church import Church, Ministry

CREATED_AT = datetime(2026, 4, 12, 10, 0, tzinfo=UTC)


class TestCreateChurch:
    """POST /worship/churches"""

    @pytest.mark.asyncio
    async def test_pastor_creates_church(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.PASTOR
        caller.tier = PlanTier.PRO
        caller.usage = UsageStats(churches=3)
        church = Church(
            id=7,
            organization_id=caller.org_id,
            name="St. Cecilia",
            is_active=True,
            created_at=CREATED_AT,
        )

        with patch.object(
            church_ops, "create_church", new_callable=AsyncMock, return_value=church
        ) as mock_create:
            resp = await api_client.post("/api/v1/worship/churches", json={"name": "St. Cecilia"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] == 7
        assert data["name"] == "St. Cecilia"
        assert data["organization_id"] == str(caller.org_id)
        assert mock_create.call_args.args[1] == caller.org_id

    @pytest.mark.asyncio
    async def test_free_plan_second_church_is_402(self, api_client: AsyncClient, caller):
        """Permission passes, the plan limit does not."""
        caller.role = WorshipRole.ADMIN
        caller.usage = UsageStats(churches=1)

        with patch.object(church_ops, "create_church") as mock_create:
            resp = await api_client.post("/api/v1/worship/churches", json={"name": "Second"})

        assert resp.status_code == 402
        detail = resp.json()["detail"]
        assert detail["code"] == "LIMIT_REACHED"
        assert detail["message"] == "You've reached the churches limit for your free plan (1/1)"
        assert detail["upgrade"] == {
            "suggested_tier": "pro",
            "feature": "multiple churchs",
            "benefits": [
                "Unlimited churches",
                "Unlimited ministries",
                "Unlimited collaborators",
                "Advanced analytics",
                "Priority support",
            ],
        }
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_permission_is_checked_before_limit(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.WORSHIP_LEADER
        caller.usage = UsageStats(churches=1)

        resp = await api_client.post("/api/v1/worship/churches", json={"name": "Second"})

        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "INSUFFICIENT_PERMISSION"

    @pytest.mark.asyncio
    async def test_usage_read_failure_does_not_create(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.ADMIN

        with (
            patch(
                "worship.api.deps.subscription_limits.usage_ops.get_usage",
                new_callable=AsyncMock,
                side_effect=RuntimeError("db down"),
            ),
            patch.object(church_ops, "create_church") as mock_create,
            pytest.raises(RuntimeError),
        ):
            await api_client.post("/api/v1/worship/churches", json={"name": "Second"})

        mock_create.assert_not_called()


class TestCreateMinistry:
    """POST /worship/ministries"""

    @pytest.mark.asyncio
    async def test_worship_leader_creates_ministry(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.WORSHIP_LEADER
        caller.usage = UsageStats(churches=1, ministries=2)
        ministry = Ministry(id=11, church_id=7, name="Youth Band", is_active=True, created_at=CREATED_AT)

        with (
            patch.object(
                church_ops,
                "get_church",
                new_callable=AsyncMock,
                return_value=Church(id=7, organization_id=caller.org_id, name="Main"),
            ),
            patch.object(church_ops, "create_ministry", new_callable=AsyncMock, return_value=ministry),
        ):
            resp = await api_client.post(
                "/api/v1/worship/ministries", json={"church_id": 7, "name": "Youth Band"}
            )

        assert resp.status_code == 201
        assert resp.json()["id"] == 11
        assert resp.json()["church_id"] == 7

    @pytest.mark.asyncio
    async def test_church_outside_org_is_404(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.ADMIN

        with patch.object(church_ops, "get_church", new_callable=AsyncMock, return_value=None):
            resp = await api_client.post(
                "/api/v1/worship/ministries", json={"church_id": 99, "name": "Choir"}
            )

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_team_plan_ministry_limit(self, api_client: AsyncClient, caller):
        caller.role = WorshipRole.ADMIN
        caller.tier = PlanTier.TEAM
        caller.usage = UsageStats(churches=1, ministries=25)

        with patch.object(
            church_ops,
            "get_church",
            new_callable=AsyncMock,
            return_value=Church(id=7, organization_id=caller.org_id, name="Main"),
        ):
            resp = await api_client.post(
                "/api/v1/worship/ministries", json={"church_id": 7, "name": "Choir"}
            )

        assert resp.status_code == 402
        detail = resp.json()["detail"]
        assert detail["tier"] == "team"
        assert detail["upgrade"]["suggested_tier"] == "pro"
        assert detail["upgrade"]["feature"] == "unlimited ministrys"
