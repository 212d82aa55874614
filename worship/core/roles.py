"""Role hierarchy constants and utilities for worship roles."""

from enum import Enum


class WorshipRole(str, Enum):
    """Worship roles within an organization, highest privilege first."""

    ADMIN = "admin"
    PASTOR = "pastor"
    WORSHIP_LEADER = "worship_leader"
    COLLABORATOR = "collaborator"
    MEMBER = "member"  # Implicit floor role, never explicitly assigned


# Hierarchy levels for worship roles (higher = more privileges)
ROLE_HIERARCHY: dict[WorshipRole, int] = {
    WorshipRole.ADMIN: 100,
    WorshipRole.PASTOR: 80,
    WorshipRole.WORSHIP_LEADER: 60,
    WorshipRole.COLLABORATOR: 40,
    WorshipRole.MEMBER: 20,
}

ROLE_DISPLAY_NAMES: dict[WorshipRole, str] = {
    WorshipRole.ADMIN: "Admin",
    WorshipRole.PASTOR: "Pastor",
    WorshipRole.WORSHIP_LEADER: "Worship Leader",
    WorshipRole.COLLABORATOR: "Collaborator",
    WorshipRole.MEMBER: "Member",
}

ASSIGNABLE_ROLES: tuple[WorshipRole, ...] = tuple(
    role for role in WorshipRole if role is not WorshipRole.MEMBER
)

# Identity-provider organization roles mapped onto worship roles
NATIVE_ROLE_MAP: dict[str, WorshipRole] = {
    "org:admin": WorshipRole.ADMIN,
    "org:pastor": WorshipRole.PASTOR,
    "org:worship_leader": WorshipRole.WORSHIP_LEADER,
    "org:collaborator": WorshipRole.COLLABORATOR,
}


def parse_role(role: WorshipRole | str | None) -> WorshipRole:
    """
    Translate a role string into a WorshipRole.

    Unrecognized or missing values become 'member', the lowest role.
    """
    if isinstance(role, WorshipRole):
        return role
    try:
        return WorshipRole(role)
    except ValueError:
        return WorshipRole.MEMBER


def map_native_role(native_role: str | None) -> WorshipRole:
    """Map an identity-provider org role (e.g. 'org:admin') to a worship role."""
    if native_role is None:
        return WorshipRole.MEMBER
    return NATIVE_ROLE_MAP.get(native_role, WorshipRole.MEMBER)


def get_role_level(role: WorshipRole | str | None) -> int:
    """Get the hierarchy level for a role."""
    return ROLE_HIERARCHY[parse_role(role)]


def has_minimum_role(user_role: WorshipRole | str, required_role: WorshipRole | str) -> bool:
    """Check if a user's role meets or exceeds the required role level."""
    return get_role_level(user_role) >= get_role_level(required_role)


def can_assign_role(assigner_role: WorshipRole | str, target_role: WorshipRole | str) -> bool:
    """An assigner may only grant roles at or below their own level."""
    return get_role_level(assigner_role) >= get_role_level(target_role)


def get_available_worship_roles(assigner_role: WorshipRole | str) -> list[WorshipRole]:
    """Get the roles an assigner may grant, highest first. 'member' is never included."""
    assigner_level = get_role_level(assigner_role)
    return [role for role in ASSIGNABLE_ROLES if ROLE_HIERARCHY[role] <= assigner_level]
