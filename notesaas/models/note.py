"""Note model: owned by a tenant and by the user who created it."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import field_validator
from sqlalchemy import JSON, Column, Index
from sqlmodel import Field, SQLModel

from notesaas.models.base import TimestampMixin, new_uuid

TITLE_MAX = 255
CONTENT_MAX = 10_000
TAG_MAX = 50


class NoteStatus(StrEnum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class Note(TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_tenant_user", "tenant_id", "user_id"),
        Index("ix_notes_tenant_created", "tenant_id", "created_at"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Both stamped at creation and never changed afterwards.
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    title: str = Field(max_length=TITLE_MAX, nullable=False)
    content: str = Field(max_length=CONTENT_MAX, nullable=False)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    is_archived: bool = Field(default=False, index=True)
    is_deleted: bool = Field(default=False, index=True)

    @property
    def status(self) -> NoteStatus:
        if self.is_deleted:
            return NoteStatus.DELETED
        if self.is_archived:
            return NoteStatus.ARCHIVED
        return NoteStatus.ACTIVE


def normalize_tags(tags: list[Any] | None) -> list[str]:
    """Trim, lower-case and de-duplicate tags, keeping first-seen order."""
    if tags is None:
        return []
    seen: dict[str, None] = {}
    for raw in tags:
        if not isinstance(raw, str):
            raise ValueError("Tags must be strings")
        tag = raw.strip().lower()
        if not tag:
            continue
        if len(tag) > TAG_MAX:
            raise ValueError(f"Each tag must not exceed {TAG_MAX} characters")
        seen.setdefault(tag, None)
    return list(seen)


# ── Pydantic schemas ─────────────────────────────────────────

class _NoteFields(SQLModel):
    @field_validator("title", "content", mode="before", check_fields=False)
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before", check_fields=False)
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        if v is None:
            return v
        if not isinstance(v, list):
            raise ValueError("Tags must be an array")
        return normalize_tags(v)


class NoteCreate(_NoteFields):
    """Create payload. Ownership fields are not accepted from clients."""
    title: str = Field(min_length=1, max_length=TITLE_MAX)
    content: str = Field(min_length=1, max_length=CONTENT_MAX)
    tags: list[str] = Field(default_factory=list)


class NoteUpdate(_NoteFields):
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX)
    content: str | None = Field(default=None, min_length=1, max_length=CONTENT_MAX)
    tags: list[str] | None = None
    is_archived: bool | None = None


class NoteRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    tags: list[str]
    is_archived: bool
    status: NoteStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note) -> "NoteRead":
        return cls(
            id=note.id,
            tenant_id=note.tenant_id,
            user_id=note.user_id,
            title=note.title,
            content=note.content,
            tags=list(note.tags or []),
            is_archived=note.is_archived,
            status=note.status,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
