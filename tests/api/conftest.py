"""API test fixtures - an HTTP client over the app with auth and storage mocked.

The caller fixture controls who the gate sees: set `caller.user` to None for
an anonymous request, `caller.membership` to None for a user without an
organization, and `caller.role` for the effective worship role.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from worship.api.deps.auth import AuthenticatedUser
from worship.config.plans import PlanTier
from worship.core.limits import UsageStats
from worship.core.roles import WorshipRole
from worship.domain.org_member_operations import org_member_ops
from worship.domain.role_assignment_operations import role_assignment_ops

from tests.helpers.mock_factories import make_mock_org_member


@dataclass
class Caller:
    user: AuthenticatedUser | None
    membership: object | None
    role: WorshipRole = WorshipRole.MEMBER
    tier: PlanTier = PlanTier.FREE
    usage: UsageStats = field(default_factory=UsageStats)

    @property
    def org_id(self) -> uuid.UUID:
        return self.membership.organization_id


@pytest.fixture
def caller() -> Caller:
    user = AuthenticatedUser(id=uuid.uuid4(), email="caller@example.com")
    membership = make_mock_org_member(user_id=user.id, role="org:member")
    return Caller(user=user, membership=membership)


@pytest.fixture
def gate(caller: Caller):
    """Patch token verification, membership lookup and role resolution from `caller`."""

    async def authenticate(_credentials):
        return caller.user

    async def resolve_membership(_db, _user_id, _org_id=None):
        return caller.membership

    async def load_effective_role(_identity):
        return caller.role

    with (
        patch("worship.api.deps.worship_auth.authenticate", side_effect=authenticate),
        patch.object(org_member_ops, "resolve_membership", side_effect=resolve_membership),
        patch.object(role_assignment_ops, "load_effective_role", side_effect=load_effective_role),
    ):
        yield caller


@pytest.fixture
def plan_state(caller: Caller):
    """Patch tier and usage reads from `caller`."""

    async def get_tier(_db, _org_id):
        return caller.tier

    async def get_usage(_db, _org_id):
        return caller.usage

    with (
        patch("worship.api.deps.subscription_limits.subscription_ops.get_tier", side_effect=get_tier),
        patch("worship.api.deps.subscription_limits.usage_ops.get_usage", side_effect=get_usage),
    ):
        yield caller


@pytest.fixture
async def api_client(mock_db, gate, plan_state):
    """HTTP client with the database session replaced by mock_db."""
    from worship.core.database import get_db
    from worship.main import app

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": "Bearer test-token"},
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def member_exists():
    """Every target user is a member of the caller's organization."""
    with patch.object(
        org_member_ops,
        "get_by_org_and_user",
        new_callable=AsyncMock,
        return_value=make_mock_org_member(),
    ) as mock_get:
        yield mock_get
