"""User model: belongs to exactly one tenant."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from notesaas.models.base import TimestampMixin, new_uuid


class Role(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    role: Role = Field(default=Role.MEMBER)
    is_active: bool = Field(default=True)
    last_login: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class UserRead(SQLModel):
    """Public view of a user. The password digest never leaves the model."""
    id: uuid.UUID
    tenant_id: uuid.UUID
    email: str
    role: Role
    is_active: bool
    last_login: datetime | None
    created_at: datetime
