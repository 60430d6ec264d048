"""Id and timestamp helpers shared by the tenants, users and notes tables."""

import uuid
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    # Naive UTC: the columns are TIMESTAMP WITHOUT TIME ZONE
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class TimestampMixin(SQLModel):
    # Indexed: note listings and user directories sort on it
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def touch(self) -> None:
        """Mark the row as modified now."""
        self.updated_at = utcnow()
