"""Tenant model: top-level isolation boundary."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from notesaas.models.base import TimestampMixin, new_uuid

# Quota sentinel for plans without a note limit.
UNLIMITED = -1


class Plan(StrEnum):
    FREE = "free"
    PRO = "pro"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Never reassigned once created.
    slug: str = Field(max_length=50, unique=True, nullable=False, index=True)
    name: str = Field(max_length=100, nullable=False)
    plan: Plan = Field(default=Plan.FREE, index=True)
    note_limit: int = Field(default=3, ge=UNLIMITED)
    is_active: bool = Field(default=True, index=True)

    @property
    def is_pro(self) -> bool:
        return self.plan == Plan.PRO

    @property
    def effective_limit(self) -> int:
        return UNLIMITED if self.is_pro else self.note_limit

    def upgrade_to_pro(self) -> None:
        self.plan = Plan.PRO
        self.note_limit = UNLIMITED


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    slug: str
    name: str
    plan: Plan
    note_limit: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
