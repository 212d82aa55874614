"""Unit tests for SubscriptionOperations - tier lookup with default fallback."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from worship.config.plans import PlanTier
from worship.domain.subscription_operations import SubscriptionOperations

from tests.helpers.mock_factories import make_mock_subscription, mock_scalar_result


class TestGetTier:
    """Tests for resolving an organization's plan tier."""

    def setup_method(self):
        self.ops = SubscriptionOperations()
        self.db = AsyncMock()

    @pytest.mark.asyncio
    async def test_returns_subscription_tier(self):
        self.db.execute.return_value = mock_scalar_result(make_mock_subscription("team"))
        assert await self.ops.get_tier(self.db, uuid.uuid4()) is PlanTier.TEAM

    @pytest.mark.asyncio
    async def test_missing_subscription_uses_default_tier(self):
        self.db.execute.return_value = mock_scalar_result(None)
        assert await self.ops.get_tier(self.db, uuid.uuid4()) is PlanTier.FREE

    @pytest.mark.asyncio
    async def test_default_tier_is_configurable(self):
        self.db.execute.return_value = mock_scalar_result(None)
        with patch(
            "worship.domain.subscription_operations.settings.default_subscription_tier", "pro"
        ):
            assert await self.ops.get_tier(self.db, uuid.uuid4()) is PlanTier.PRO

    @pytest.mark.asyncio
    async def test_unknown_stored_tier_is_free(self):
        self.db.execute.return_value = mock_scalar_result(make_mock_subscription("legacy"))
        assert await self.ops.get_tier(self.db, uuid.uuid4()) is PlanTier.FREE

    @pytest.mark.asyncio
    async def test_database_errors_propagate(self):
        self.db.execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(RuntimeError):
            await self.ops.get_tier(self.db, uuid.uuid4())
