"""Notes CRUD: tenant-scoped, owner-scoped for members."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from notesaas.api.deps import Auth, Session
from notesaas.auth.policy import Action, enforce, note_action, owner_scope
from notesaas.core.config import get_settings
from notesaas.models.note import NoteCreate, NoteRead, NoteUpdate
from notesaas.models.tenant import Plan
from notesaas.services import notes as notes_service
from notesaas.services.notes import NoteFilters, SEARCH_MAX

router = APIRouter(prefix="/notes", tags=["notes"])

settings = get_settings()


# ── Schemas ──────────────────────────────────────────────────

class Pagination(BaseModel):
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


class NoteList(BaseModel):
    notes: list[NoteRead]
    pagination: Pagination


class NoteStatsRead(BaseModel):
    total: int
    active: int
    archived: int
    limit: int
    remaining: int
    plan: Plan


# ── Routes ───────────────────────────────────────────────────

@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(body: NoteCreate, auth: Auth, session: Session) -> NoteRead:
    enforce(auth, Action.CREATE)
    note = await notes_service.create_note(session, auth.tenant_id, auth.user_id, body)
    return NoteRead.from_note(note)


@router.get("", response_model=NoteList)
async def list_notes(
    auth: Auth,
    session: Session,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(description="Page size, clamped to 1-100")] = settings.default_page_size,
    search: Annotated[str | None, Query(max_length=SEARCH_MAX)] = None,
    archived: bool = False,
) -> NoteList:
    """Members see their own notes; admins see every note in the tenant."""
    enforce(auth, note_action(auth, Action.READ))
    if auth.is_admin:
        enforce(auth, Action.LIST_ALL)

    notes, info = await notes_service.list_notes(
        session,
        auth.tenant_id,
        NoteFilters(
            owner_id=owner_scope(auth),
            search=search,
            archived=archived,
            page=page,
            page_size=limit,
        ),
    )
    return NoteList(
        notes=[NoteRead.from_note(n) for n in notes],
        pagination=Pagination(
            page=info.page,
            page_size=info.page_size,
            total_count=info.total_count,
            total_pages=info.total_pages,
            has_next=info.has_next,
            has_prev=info.has_prev,
        ),
    )


@router.get("/stats", response_model=NoteStatsRead)
async def get_stats(auth: Auth, session: Session) -> NoteStatsRead:
    enforce(auth, Action.MANAGE_TENANT)
    stats = await notes_service.get_stats(session, auth.tenant_id)
    return NoteStatsRead(
        total=stats.total,
        active=stats.active,
        archived=stats.archived,
        limit=stats.limit,
        remaining=stats.remaining,
        plan=stats.plan,
    )


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(note_id: uuid.UUID, auth: Auth, session: Session) -> NoteRead:
    note = await notes_service.get_note(session, auth.tenant_id, note_id, owner_scope(auth))
    enforce(
        auth,
        note_action(auth, Action.READ),
        owner_id=note.user_id,
        tenant_id=note.tenant_id,
        resource="Note",
    )
    return NoteRead.from_note(note)


async def _update(note_id: uuid.UUID, body: NoteUpdate, auth: Auth, session: Session) -> NoteRead:
    enforce(auth, note_action(auth, Action.UPDATE))
    note = await notes_service.update_note(
        session, auth.tenant_id, note_id, body, owner_scope(auth)
    )
    return NoteRead.from_note(note)


@router.put("/{note_id}", response_model=NoteRead)
async def replace_note(
    note_id: uuid.UUID, body: NoteUpdate, auth: Auth, session: Session
) -> NoteRead:
    return await _update(note_id, body, auth, session)


@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: uuid.UUID, body: NoteUpdate, auth: Auth, session: Session
) -> NoteRead:
    return await _update(note_id, body, auth, session)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: uuid.UUID, auth: Auth, session: Session) -> None:
    """Soft delete. A second delete of the same note is a 404."""
    enforce(auth, note_action(auth, Action.DELETE))
    await notes_service.soft_delete_note(session, auth.tenant_id, note_id, owner_scope(auth))
