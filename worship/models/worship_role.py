"""Worship role assignment tracking.

The identity provider's user metadata is the source of truth for role
resolution. This table mirrors each assignment so that the database can
count collaborators and list assignment history without calling the
provider once per user.
"""

import uuid as uuid_pkg
from datetime import UTC, datetime

from pydantic import field_validator
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlmodel import Field, SQLModel

from worship.core.roles import ASSIGNABLE_ROLES, WorshipRole


class WorshipRoleAssignment(SQLModel, table=True):
    """One row per (organization, user); reassignment overwrites the row."""

    __tablename__ = "worship_role_assignments"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_worship_role_org_user"),
    )

    id: uuid_pkg.UUID = Field(
        default_factory=uuid_pkg.uuid4,
        primary_key=True,
        nullable=False,
        sa_column_kwargs={"server_default": text("gen_random_uuid()")},
    )
    organization_id: uuid_pkg.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    user_id: uuid_pkg.UUID = Field(
        sa_column=Column(PG_UUID(as_uuid=True), nullable=False, index=True),
    )
    role: str = Field(sa_column=Column(String(32), nullable=False))
    church_id: int | None = Field(default=None)
    assigned_by: str = Field(max_length=64, nullable=False)
    assigned_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    is_active: bool = Field(default=True, nullable=False)
    revoked_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )


# Request schemas
class RoleAssignRequest(SQLModel):
    """Schema for assigning a worship role to a user."""

    role: WorshipRole
    church_id: int | None = None

    @field_validator("role")
    @classmethod
    def role_must_be_assignable(cls, value: WorshipRole) -> WorshipRole:
        if value not in ASSIGNABLE_ROLES:
            raise ValueError("'member' is implicit and cannot be assigned")
        return value


class BulkRoleAssignment(RoleAssignRequest):
    """One entry of a bulk assignment request."""

    user_id: uuid_pkg.UUID


class BulkRoleAssignRequest(SQLModel):
    """Schema for assigning worship roles to several users at once."""

    assignments: list[BulkRoleAssignment] = Field(min_length=1, max_length=100)


class ChurchAssignmentUpdate(SQLModel):
    """Schema for moving a user's role to another church."""

    church_id: int | None = None
