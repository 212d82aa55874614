"""Unit tests for UsageOperations - resource counts for limit checks."""

import uuid
from unittest.mock import AsyncMock

import pytest

from worship.core.limits import UsageStats
from worship.domain.usage_operations import UsageOperations

from tests.helpers.mock_factories import mock_scalar_result


class TestGetUsage:
    """Tests for assembling UsageStats from the four counters."""

    def setup_method(self):
        self.ops = UsageOperations()
        self.db = AsyncMock()

    @pytest.mark.asyncio
    async def test_collects_all_counters_in_order(self):
        self.db.execute.side_effect = [
            mock_scalar_result(1),
            mock_scalar_result(4),
            mock_scalar_result(3),
            mock_scalar_result(12),
        ]

        usage = await self.ops.get_usage(self.db, uuid.uuid4())

        assert usage == UsageStats(churches=1, ministries=4, collaborators=3, services=12)
        assert self.db.execute.await_count == 4

    @pytest.mark.asyncio
    async def test_null_count_is_zero(self):
        self.db.execute.return_value = mock_scalar_result(None)
        assert await self.ops.count_churches(self.db, uuid.uuid4()) == 0

    @pytest.mark.asyncio
    async def test_collaborators_count_only_active_rows(self):
        self.db.execute.return_value = mock_scalar_result(2)

        assert await self.ops.count_collaborators(self.db, uuid.uuid4()) == 2

        statement = str(self.db.execute.call_args.args[0])
        assert "worship_role_assignments.is_active" in statement
        assert "worship_role_assignments.revoked_at IS NULL" in statement

    @pytest.mark.asyncio
    async def test_ministries_scoped_through_active_churches(self):
        self.db.execute.return_value = mock_scalar_result(0)

        await self.ops.count_ministries(self.db, uuid.uuid4())

        statement = str(self.db.execute.call_args.args[0])
        assert "JOIN churches" in statement
        assert "churches.deleted_at IS NULL" in statement

    @pytest.mark.asyncio
    async def test_database_errors_propagate(self):
        self.db.execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(RuntimeError):
            await self.ops.get_usage(self.db, uuid.uuid4())
