"""Organization model - tenant, billing and team unit."""

import uuid as uuid_pkg
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from worship.models.church import Church
    from worship.models.subscription import Subscription


class Organization(SQLModel, table=True):
    """
    Organization model - the tenant.

    Organizations own churches and have a subscription. Users belong to
    organizations through OrganizationMember rows.
    """

    __tablename__ = "organizations"

    id: uuid_pkg.UUID = Field(
        default_factory=uuid_pkg.uuid4,
        primary_key=True,
        nullable=False,
        sa_column_kwargs={"server_default": text("gen_random_uuid()")},
    )
    name: str = Field(max_length=100, nullable=False)
    slug: str = Field(max_length=100, unique=True, index=True, nullable=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={"server_default": text("now()")},
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column_kwargs={"onupdate": text("now()")},
    )

    # Relationships
    members: list["OrganizationMember"] = Relationship(
        back_populates="organization",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    churches: list["Church"] = Relationship(back_populates="organization")
    subscription: Optional["Subscription"] = Relationship(
        back_populates="organization",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )


class NativeOrgRole(str, Enum):
    """Coarse organization roles as reported by the identity provider."""

    ADMIN = "org:admin"
    PASTOR = "org:pastor"
    WORSHIP_LEADER = "org:worship_leader"
    COLLABORATOR = "org:collaborator"
    MEMBER = "org:member"


class OrganizationMember(SQLModel, table=True):
    """
    Organization membership - which users belong to which organizations.

    The role column holds the identity provider's native org role string;
    finer-grained worship roles live in the user's metadata.
    """

    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_org_member"),
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
    # Identity-provider user id (Supabase auth.users.id)
    user_id: uuid_pkg.UUID = Field(
        sa_column=Column(PG_UUID(as_uuid=True), nullable=False, index=True),
    )
    role: str = Field(
        default=NativeOrgRole.MEMBER.value,
        sa_column=Column(String(32), nullable=False, server_default=NativeOrgRole.MEMBER.value),
    )
    joined_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={"server_default": text("now()")},
    )

    organization: Optional["Organization"] = Relationship(back_populates="members")
