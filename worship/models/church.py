"""Church, ministry and service models - the resources counted against plan quotas."""

import uuid as uuid_pkg
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlmodel import Field, Relationship, SQLModel

from worship.models.base import TimestampMixin

if TYPE_CHECKING:
    from worship.models.organization import Organization


class Church(TimestampMixin, table=True):
    """A church belonging to an organization."""

    __tablename__ = "churches"

    id: int | None = Field(default=None, primary_key=True)
    organization_id: uuid_pkg.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    name: str = Field(max_length=200, nullable=False)
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    deleted_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )

    organization: Optional["Organization"] = Relationship(back_populates="churches")
    ministries: list["Ministry"] = Relationship(back_populates="church")


class Ministry(TimestampMixin, table=True):
    """A ministry (choir, youth band, ...) within a church."""

    __tablename__ = "ministries"

    id: int | None = Field(default=None, primary_key=True)
    church_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("churches.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    name: str = Field(max_length=200, nullable=False)
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)

    church: Optional["Church"] = Relationship(back_populates="ministries")
    services: list["Service"] = Relationship(back_populates="ministry")


class Service(TimestampMixin, table=True):
    """A recurring or one-off worship service run by a ministry."""

    __tablename__ = "services"

    id: int | None = Field(default=None, primary_key=True)
    ministry_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("ministries.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    name: str = Field(max_length=200, nullable=False)
    is_active: bool = Field(default=True, nullable=False)

    ministry: Optional["Ministry"] = Relationship(back_populates="services")


# Request schemas
class ChurchCreate(SQLModel):
    """Schema for creating a church."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None


class MinistryCreate(SQLModel):
    """Schema for creating a ministry."""

    church_id: int
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None


# Response schemas
class ChurchRead(SQLModel):
    id: int
    organization_id: uuid_pkg.UUID
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime


class MinistryRead(SQLModel):
    id: int
    church_id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
