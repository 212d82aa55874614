"""Per-organization worship role metadata: effective-role resolution and assignment lifecycle.

Role assignments live in the identity provider's per-user metadata blob,
keyed by organization id:

    {
        "worship_roles": {
            "<org_id>": {
                "role": "pastor",
                "church_id": 12,
                "assigned_by": "<user_id>",
                "assigned_at": "2026-10-18T09:30:00Z",
                "is_active": true
            }
        },
        "default_role": "member"
    }

Blobs written by the web client use camelCase keys (worshipRoles,
assignedBy, ...). Both spellings are read; writes always use snake_case.

Every function here is pure: it returns a new metadata value and never
mutates its input. Missing data is never an error; absent metadata behaves
like empty metadata, and a malformed organization entry is dropped as if
it were absent.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from worship.core.roles import WorshipRole, map_native_role, parse_role

logger = logging.getLogger(__name__)

# Stale spellings left in the blob next to the snake_case keys
CAMEL_CASE_KEYS = ("worshipRoles", "defaultRole")


class RoleAssignment(BaseModel):
    """A worship role granted to a user within one organization."""

    model_config = ConfigDict(frozen=True)

    role: WorshipRole
    church_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("church_id", "churchId"),
    )
    assigned_by: str = Field(validation_alias=AliasChoices("assigned_by", "assignedBy"))
    assigned_at: datetime = Field(validation_alias=AliasChoices("assigned_at", "assignedAt"))
    is_active: bool = Field(
        default=True,
        validation_alias=AliasChoices("is_active", "isActive"),
    )

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, value: Any) -> WorshipRole:
        return parse_role(value)


class WorshipUserMetadata(BaseModel):
    """Worship-specific slice of a user's identity-provider metadata.

    Unrelated keys in the blob are kept as extra fields so that writing the
    metadata back never drops them.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    worship_roles: dict[str, RoleAssignment] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("worship_roles", "worshipRoles"),
    )
    default_role: WorshipRole | None = Field(
        default=None,
        validation_alias=AliasChoices("default_role", "defaultRole"),
    )

    @field_validator("worship_roles", mode="before")
    @classmethod
    def drop_malformed_assignments(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            logger.warning(f"Ignoring worship role map of type {type(value).__name__}")
            return {}

        entries: dict[str, Any] = {}
        for organization_id, entry in value.items():
            if isinstance(entry, RoleAssignment):
                entries[str(organization_id)] = entry
                continue
            try:
                entries[str(organization_id)] = RoleAssignment.model_validate(entry)
            except ValidationError as e:
                logger.warning(
                    f"Ignoring malformed worship role entry for org {organization_id}: "
                    f"{e.error_count()} validation error(s)"
                )
        return entries

    @field_validator("default_role", mode="before")
    @classmethod
    def coerce_default_role(cls, value: Any) -> WorshipRole | None:
        if value is None:
            return None
        return parse_role(value)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> "WorshipUserMetadata":
        """Build from a raw metadata dict as returned by the identity provider."""
        if not isinstance(raw, Mapping):
            return cls()
        return cls.model_validate(dict(raw))

    def to_raw(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for the identity provider."""
        raw = self.model_dump(mode="json", exclude_none=True)
        for key in CAMEL_CASE_KEYS:
            raw.pop(key, None)
        return raw

    def get_assignment(self, organization_id: str) -> RoleAssignment | None:
        return self.worship_roles.get(organization_id)


def get_worship_role_from_metadata(
    metadata: WorshipUserMetadata | None,
    organization_id: str,
) -> WorshipRole:
    """
    Get the worship role recorded in metadata for one organization.

    Does not consult the identity provider's native org role:
    - no entry: the metadata's default role, or 'member'
    - inactive entry: 'member'
    - active entry: the assigned role
    """
    if metadata is None:
        return WorshipRole.MEMBER

    assignment = metadata.get_assignment(organization_id)
    if assignment is None:
        return metadata.default_role or WorshipRole.MEMBER

    if not assignment.is_active:
        return WorshipRole.MEMBER

    return assignment.role


def resolve_effective_role(
    native_org_role: str | None,
    metadata: WorshipUserMetadata | None,
    organization_id: str,
) -> WorshipRole:
    """
    Resolve a user's effective worship role for an organization.

    Precedence:
    1. An active custom assignment wins.
    2. A revoked (inactive) assignment forces 'member', even when the
       identity provider still reports an elevated native role.
    3. With no assignment, an elevated native role ('org:admin', ...) applies.
    4. Otherwise the metadata's default role, and finally 'member'.
    """
    assignment = metadata.get_assignment(organization_id) if metadata is not None else None

    if assignment is not None:
        return assignment.role if assignment.is_active else WorshipRole.MEMBER

    native_role = map_native_role(native_org_role)
    if native_role is not WorshipRole.MEMBER:
        return native_role

    if metadata is not None and metadata.default_role is not None:
        return metadata.default_role

    return WorshipRole.MEMBER


def create_assignment(
    organization_id: str,
    role: WorshipRole | str,
    assigned_by: str,
    church_id: int | None = None,
) -> dict[str, RoleAssignment]:
    """
    Create a single-organization assignment entry, active as of now.

    assigned_at is truncated to whole seconds so its ISO-8601 form parses
    back to an identical value.
    """
    return {
        organization_id: RoleAssignment(
            role=parse_role(role),
            church_id=church_id,
            assigned_by=assigned_by,
            assigned_at=datetime.now(UTC).replace(microsecond=0),
            is_active=True,
        )
    }


def merge_assignment(
    existing: WorshipUserMetadata | None,
    new_entry: Mapping[str, RoleAssignment],
) -> WorshipUserMetadata:
    """Merge a new assignment entry over existing metadata.

    The entry for the new organization is replaced wholesale; entries for
    other organizations are left as they are.
    """
    base = existing if existing is not None else WorshipUserMetadata()
    return base.model_copy(update={"worship_roles": {**base.worship_roles, **new_entry}})


def revoke_assignment(
    existing: WorshipUserMetadata | None,
    organization_id: str,
) -> WorshipUserMetadata:
    """Mark an organization's assignment inactive, keeping the record.

    Revoking a missing entry returns the metadata unchanged; revoking twice
    is the same as revoking once.
    """
    if existing is None:
        return WorshipUserMetadata()

    assignment = existing.get_assignment(organization_id)
    if assignment is None:
        return existing

    revoked = assignment.model_copy(update={"is_active": False})
    return existing.model_copy(
        update={"worship_roles": {**existing.worship_roles, organization_id: revoked}}
    )


def update_church_assignment(
    existing: WorshipUserMetadata | None,
    organization_id: str,
    church_id: int | None,
) -> WorshipUserMetadata:
    """Move an existing assignment to another church (or clear the church)."""
    if existing is None:
        return WorshipUserMetadata()

    assignment = existing.get_assignment(organization_id)
    if assignment is None:
        return existing

    moved = assignment.model_copy(update={"church_id": church_id})
    return existing.model_copy(
        update={"worship_roles": {**existing.worship_roles, organization_id: moved}}
    )
