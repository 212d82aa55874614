"""Unit tests for the worship permission matrix."""

import pytest

from worship.core.permissions import (
    PERMISSION_MATRIX,
    Permission,
    has_all_permissions,
    has_any_permission,
    has_permission,
    permissions_for_role,
)
from worship.core.roles import WorshipRole, has_minimum_role

EVERYONE = {"admin", "pastor", "worship_leader", "collaborator", "member"}
CONTRIBUTORS = {"admin", "pastor", "worship_leader", "collaborator"}
LEADERS = {"admin", "pastor", "worship_leader"}
PASTORS = {"admin", "pastor"}
ADMINS = {"admin"}

EXPECTED = {
    "canViewChurches": EVERYONE,
    "canViewMinistries": EVERYONE,
    "canManageChurches": PASTORS,
    "canCreateChurch": PASTORS,
    "canManageChurch": PASTORS,
    "canDeleteChurch": ADMINS,
    "canManageMinistries": LEADERS,
    "canCreateMinistry": LEADERS,
    "canManageMinistry": LEADERS,
    "canDeleteMinistry": PASTORS,
    "canCreateHymn": CONTRIBUTORS,
    "canEditHymn": CONTRIBUTORS,
    "canCreateProgram": CONTRIBUTORS,
    "canEditProgram": CONTRIBUTORS,
    "canCreateEvent": CONTRIBUTORS,
    "canEditEvent": CONTRIBUTORS,
    "canApproveHymn": LEADERS,
    "canDeleteHymn": LEADERS,
    "canApproveProgram": LEADERS,
    "canDeleteProgram": LEADERS,
    "canDeleteEvent": LEADERS,
    "canInviteUsers": LEADERS,
    "canViewAllFeedback": LEADERS,
    "canResolveFeedback": LEADERS,
    "canAssignRoles": PASTORS,
    "canRemoveUsers": PASTORS,
    "canViewUsageStats": PASTORS,
    "canManageSubscription": ADMINS,
}


class TestPermissionMatrix:
    """The full permission x role table."""

    def test_every_permission_is_covered(self):
        assert {p.value for p in Permission} == set(EXPECTED)
        assert set(PERMISSION_MATRIX) == set(Permission)

    @pytest.mark.parametrize("permission", sorted(EXPECTED))
    @pytest.mark.parametrize("role", sorted(EVERYONE))
    def test_matrix_cell(self, permission, role):
        assert has_permission(permission, role) == (role in EXPECTED[permission])

    @pytest.mark.parametrize("permission", list(Permission))
    def test_admitted_sets_are_upward_closed(self, permission):
        admitted = PERMISSION_MATRIX[permission]
        for role in admitted:
            for other in WorshipRole:
                if has_minimum_role(other, role):
                    assert other in admitted

    def test_wire_values_are_camel_case(self):
        assert Permission.CAN_CREATE_MINISTRY.value == "canCreateMinistry"
        assert Permission("canManageSubscription") is Permission.CAN_MANAGE_SUBSCRIPTION


class TestHasPermission:
    def test_unknown_permission_raises(self):
        with pytest.raises(ValueError):
            has_permission("canFlyPlanes", "admin")

    def test_unknown_role_treated_as_member(self):
        assert has_permission("canViewChurches", "guest")
        assert not has_permission("canCreateHymn", "guest")

    def test_any_permission(self):
        perms = [Permission.CAN_DELETE_CHURCH, Permission.CAN_CREATE_HYMN]
        assert has_any_permission(perms, "collaborator")
        assert not has_any_permission(perms, "member")

    def test_all_permissions(self):
        perms = [Permission.CAN_CREATE_MINISTRY, Permission.CAN_ASSIGN_ROLES]
        assert has_all_permissions(perms, "pastor")
        assert not has_all_permissions(perms, "worship_leader")


class TestPermissionsForRole:
    def test_member_can_only_view(self):
        assert permissions_for_role("member") == [
            Permission.CAN_VIEW_CHURCHES,
            Permission.CAN_VIEW_MINISTRIES,
        ]

    def test_admin_has_everything(self):
        assert permissions_for_role(WorshipRole.ADMIN) == list(Permission)

    def test_pastor_lacks_admin_only_permissions(self):
        perms = permissions_for_role("pastor")
        assert Permission.CAN_DELETE_CHURCH not in perms
        assert Permission.CAN_MANAGE_SUBSCRIPTION not in perms
        assert Permission.CAN_ASSIGN_ROLES in perms
