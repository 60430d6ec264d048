"""Tenant-scoped note storage.

Every function takes ``tenant_id`` explicitly and filters on it. ``owner_id``
narrows a query to one creator (member access); ``None`` means tenant-wide
(admin access). A note outside that scope, or soft-deleted, is reported as
``NotFoundError``; there is no separate "forbidden" outcome.
"""

import logging
import math
import uuid
from dataclasses import dataclass

from sqlalchemy import case, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.core.config import get_settings
from notesaas.core.errors import NotFoundError
from notesaas.models.note import Note, NoteCreate, NoteUpdate
from notesaas.models.tenant import UNLIMITED, Plan
from notesaas.services.limiter import check_can_create, quota_status

logger = logging.getLogger(__name__)

settings = get_settings()

SEARCH_MAX = 100


@dataclass(slots=True)
class NoteFilters:
    owner_id: uuid.UUID | None = None
    search: str | None = None
    archived: bool = False
    page: int = 1
    page_size: int = settings.default_page_size

    def normalized(self) -> "NoteFilters":
        search = (self.search or "").strip()[:SEARCH_MAX] or None
        return NoteFilters(
            owner_id=self.owner_id,
            search=search,
            archived=self.archived,
            page=max(1, self.page),
            page_size=min(max(1, self.page_size), settings.max_page_size),
        )


@dataclass(frozen=True, slots=True)
class PageInfo:
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True, slots=True)
class NoteStats:
    total: int
    active: int
    archived: int
    limit: int
    remaining: int
    plan: Plan


# ── Scoping ───────────────────────────────────────────────────

def _visible(tenant_id: uuid.UUID, owner_id: uuid.UUID | None = None) -> list:
    """The single place that defines which notes a query may see."""
    clauses = [
        Note.tenant_id == tenant_id,
        Note.is_deleted.is_(False),  # type: ignore[attr-defined]
    ]
    if owner_id is not None:
        clauses.append(Note.user_id == owner_id)
    return clauses


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _tag_matches(dialect: str, pattern: str):
    """EXISTS over the individual elements of the JSON ``tags`` array."""
    if dialect == "postgresql":
        tags = func.json_array_elements_text(Note.tags).table_valued("value").render_derived()
    else:
        tags = func.json_each(Note.tags).table_valued("value")
    return select(tags.c.value).where(tags.c.value.ilike(pattern, escape="\\")).exists()


async def _get_scoped(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    note_id: uuid.UUID,
    owner_id: uuid.UUID | None,
) -> Note:
    stmt = select(Note).where(Note.id == note_id, *_visible(tenant_id, owner_id))
    note = (await session.execute(stmt)).scalar_one_or_none()
    if note is None:
        raise NotFoundError("Note")
    return note


# ── Operations ────────────────────────────────────────────────

async def create_note(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    user_id: uuid.UUID,
    data: NoteCreate,
) -> Note:
    await check_can_create(session, tenant_id)

    note = Note(
        tenant_id=tenant_id,
        user_id=user_id,
        title=data.title,
        content=data.content,
        tags=list(data.tags),
    )
    session.add(note)
    await session.commit()
    await session.refresh(note)
    return note


async def list_notes(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    filters: NoteFilters | None = None,
) -> tuple[list[Note], PageInfo]:
    f = (filters or NoteFilters()).normalized()

    where = [
        *_visible(tenant_id, f.owner_id),
        Note.is_archived.is_(f.archived),  # type: ignore[attr-defined]
    ]
    if f.search:
        pattern = f"%{_escape_like(f.search)}%"
        where.append(
            or_(
                Note.title.ilike(pattern, escape="\\"),  # type: ignore[attr-defined]
                Note.content.ilike(pattern, escape="\\"),  # type: ignore[attr-defined]
                _tag_matches(session.bind.dialect.name, pattern),
            )
        )

    total = (
        await session.execute(select(func.count()).select_from(Note).where(*where))
    ).scalar_one()

    stmt = (
        select(Note)
        .where(*where)
        .order_by(Note.created_at.desc(), Note.id.desc())  # type: ignore[attr-defined]
        .offset((f.page - 1) * f.page_size)
        .limit(f.page_size)
    )
    notes = list((await session.execute(stmt)).scalars().all())

    total_pages = math.ceil(total / f.page_size) if total else 0
    page_info = PageInfo(
        page=f.page,
        page_size=f.page_size,
        total_count=total,
        total_pages=total_pages,
        has_next=f.page < total_pages,
        has_prev=f.page > 1,
    )
    return notes, page_info


async def get_note(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    note_id: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> Note:
    return await _get_scoped(session, tenant_id, note_id, owner_id)


async def update_note(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    note_id: uuid.UUID,
    patch: NoteUpdate,
    owner_id: uuid.UUID | None = None,
) -> Note:
    note = await _get_scoped(session, tenant_id, note_id, owner_id)

    changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    for field, value in changes.items():
        setattr(note, field, value)

    note.touch()
    session.add(note)
    await session.commit()
    await session.refresh(note)
    return note


async def soft_delete_note(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    note_id: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> None:
    note = await _get_scoped(session, tenant_id, note_id, owner_id)
    note.is_deleted = True
    note.touch()
    session.add(note)
    await session.commit()
    logger.info("Note %s soft-deleted in tenant %s", note_id, tenant_id)


async def get_stats(session: AsyncSession, tenant_id: uuid.UUID) -> NoteStats:
    archived_expr = case((Note.is_archived.is_(True), 1), else_=0)  # type: ignore[attr-defined]
    total, archived = (
        await session.execute(
            select(func.count(), func.coalesce(func.sum(archived_expr), 0))
            .select_from(Note)
            .where(*_visible(tenant_id))
        )
    ).one()

    quota = await quota_status(session, tenant_id)
    return NoteStats(
        total=total,
        active=total - archived,
        archived=archived,
        limit=quota.limit,
        remaining=UNLIMITED if quota.limit == UNLIMITED else max(0, quota.limit - total),
        plan=quota.plan,
    )
