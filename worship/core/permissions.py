"""Permission matrix for worship roles.

Each permission admits an explicit set of roles. The sets are listed literally
rather than derived from hierarchy thresholds: ministry creation admits
worship leaders while ministry deletion needs a pastor, for example.
"""

from collections.abc import Iterable
from enum import Enum

from worship.core.roles import WorshipRole, parse_role


class Permission(str, Enum):
    """Named capabilities checked by the authorization gate."""

    # Church management
    CAN_VIEW_CHURCHES = "canViewChurches"
    CAN_MANAGE_CHURCHES = "canManageChurches"
    CAN_CREATE_CHURCH = "canCreateChurch"
    CAN_MANAGE_CHURCH = "canManageChurch"
    CAN_DELETE_CHURCH = "canDeleteChurch"

    # Ministry management
    CAN_VIEW_MINISTRIES = "canViewMinistries"
    CAN_MANAGE_MINISTRIES = "canManageMinistries"
    CAN_CREATE_MINISTRY = "canCreateMinistry"
    CAN_MANAGE_MINISTRY = "canManageMinistry"
    CAN_DELETE_MINISTRY = "canDeleteMinistry"

    # Hymns
    CAN_CREATE_HYMN = "canCreateHymn"
    CAN_EDIT_HYMN = "canEditHymn"
    CAN_APPROVE_HYMN = "canApproveHymn"
    CAN_DELETE_HYMN = "canDeleteHymn"

    # Programs
    CAN_CREATE_PROGRAM = "canCreateProgram"
    CAN_EDIT_PROGRAM = "canEditProgram"
    CAN_APPROVE_PROGRAM = "canApproveProgram"
    CAN_DELETE_PROGRAM = "canDeleteProgram"

    # Events
    CAN_CREATE_EVENT = "canCreateEvent"
    CAN_EDIT_EVENT = "canEditEvent"
    CAN_DELETE_EVENT = "canDeleteEvent"

    # User management
    CAN_INVITE_USERS = "canInviteUsers"
    CAN_ASSIGN_ROLES = "canAssignRoles"
    CAN_REMOVE_USERS = "canRemoveUsers"

    # Feedback
    CAN_VIEW_ALL_FEEDBACK = "canViewAllFeedback"
    CAN_RESOLVE_FEEDBACK = "canResolveFeedback"

    # Subscription
    CAN_MANAGE_SUBSCRIPTION = "canManageSubscription"
    CAN_VIEW_USAGE_STATS = "canViewUsageStats"


_EVERYONE = frozenset(WorshipRole)
_CONTRIBUTORS = frozenset(
    {
        WorshipRole.ADMIN,
        WorshipRole.PASTOR,
        WorshipRole.WORSHIP_LEADER,
        WorshipRole.COLLABORATOR,
    }
)
_LEADERS = frozenset({WorshipRole.ADMIN, WorshipRole.PASTOR, WorshipRole.WORSHIP_LEADER})
_PASTORS = frozenset({WorshipRole.ADMIN, WorshipRole.PASTOR})
_ADMINS = frozenset({WorshipRole.ADMIN})

PERMISSION_MATRIX: dict[Permission, frozenset[WorshipRole]] = {
    Permission.CAN_VIEW_CHURCHES: _EVERYONE,
    Permission.CAN_MANAGE_CHURCHES: _PASTORS,
    Permission.CAN_CREATE_CHURCH: _PASTORS,
    Permission.CAN_MANAGE_CHURCH: _PASTORS,
    Permission.CAN_DELETE_CHURCH: _ADMINS,
    Permission.CAN_VIEW_MINISTRIES: _EVERYONE,
    Permission.CAN_MANAGE_MINISTRIES: _LEADERS,
    Permission.CAN_CREATE_MINISTRY: _LEADERS,
    Permission.CAN_MANAGE_MINISTRY: _LEADERS,
    Permission.CAN_DELETE_MINISTRY: _PASTORS,
    Permission.CAN_CREATE_HYMN: _CONTRIBUTORS,
    Permission.CAN_EDIT_HYMN: _CONTRIBUTORS,
    Permission.CAN_APPROVE_HYMN: _LEADERS,
    Permission.CAN_DELETE_HYMN: _LEADERS,
    Permission.CAN_CREATE_PROGRAM: _CONTRIBUTORS,
    Permission.CAN_EDIT_PROGRAM: _CONTRIBUTORS,
    Permission.CAN_APPROVE_PROGRAM: _LEADERS,
    Permission.CAN_DELETE_PROGRAM: _LEADERS,
    Permission.CAN_CREATE_EVENT: _CONTRIBUTORS,
    Permission.CAN_EDIT_EVENT: _CONTRIBUTORS,
    Permission.CAN_DELETE_EVENT: _LEADERS,
    Permission.CAN_INVITE_USERS: _LEADERS,
    Permission.CAN_ASSIGN_ROLES: _PASTORS,
    Permission.CAN_REMOVE_USERS: _PASTORS,
    Permission.CAN_VIEW_ALL_FEEDBACK: _LEADERS,
    Permission.CAN_RESOLVE_FEEDBACK: _LEADERS,
    Permission.CAN_MANAGE_SUBSCRIPTION: _ADMINS,
    Permission.CAN_VIEW_USAGE_STATS: _PASTORS,
}


def has_permission(permission: Permission | str, role: WorshipRole | str) -> bool:
    """Check whether a role is admitted by a permission.

    Raises ValueError for an unknown permission name.
    """
    return parse_role(role) in PERMISSION_MATRIX[Permission(permission)]


def has_any_permission(permissions: Iterable[Permission | str], role: WorshipRole | str) -> bool:
    """True if at least one of the permissions admits the role."""
    return any(has_permission(permission, role) for permission in permissions)


def has_all_permissions(permissions: Iterable[Permission | str], role: WorshipRole | str) -> bool:
    """True if every one of the permissions admits the role."""
    return all(has_permission(permission, role) for permission in permissions)


def permissions_for_role(role: WorshipRole | str) -> list[Permission]:
    """List every permission a role holds, in declaration order."""
    resolved = parse_role(role)
    return [permission for permission in Permission if resolved in PERMISSION_MATRIX[permission]]
