"""Import all models so SQLModel.metadata picks them up."""

from notesaas.models.note import Note, NoteCreate, NoteRead, NoteStatus, NoteUpdate
from notesaas.models.tenant import UNLIMITED, Plan, Tenant, TenantRead
from notesaas.models.user import Role, User, UserRead

__all__ = [
    "Note",
    "NoteCreate",
    "NoteRead",
    "NoteStatus",
    "NoteUpdate",
    "Plan",
    "Role",
    "Tenant",
    "TenantRead",
    "UNLIMITED",
    "User",
    "UserRead",
]
