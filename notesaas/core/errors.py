"""Typed error taxonomy and its HTTP status mapping.

Services and the access policy raise these; a single handler registered in
``notesaas.main`` turns them into JSON responses. The status for each error is
looked up by type in ``STATUS_BY_ERROR``, never derived from message text.

Response body::

    {"detail": "<safe message>", "error": "<code>", ...declared fields}
"""

from enum import StrEnum
from typing import Any

from fastapi import status


class NotesError(Exception):
    """Root of all application errors. ``message`` is safe to show to clients."""

    code = "error"

    def __init__(self, message: str = "Request failed") -> None:
        super().__init__(message)
        self.message = message

    def fields(self) -> dict[str, Any]:
        """Extra structured fields exposed in the response body."""
        return {}

    def to_body(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.code, **self.fields()}


# ── Authentication ───────────────────────────────────────────

class AuthErrorKind(StrEnum):
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    REVOKED = "revoked"
    TENANT_INACTIVE = "tenant_inactive"


_AUTH_MESSAGES = {
    AuthErrorKind.MISSING_TOKEN: "Access token is required",
    AuthErrorKind.INVALID_TOKEN: "Invalid or expired token",
    AuthErrorKind.REVOKED: "Account is disabled or no longer exists",
    AuthErrorKind.TENANT_INACTIVE: "Tenant is disabled",
}


class AuthError(NotesError):
    def __init__(self, kind: AuthErrorKind) -> None:
        super().__init__(_AUTH_MESSAGES[kind])
        self.kind = kind

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.kind.value


class InvalidCredentialsError(NotesError):
    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


# ── Authorization ────────────────────────────────────────────

class PolicyReason(StrEnum):
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"


class PolicyError(NotesError):
    def __init__(self, reason: PolicyReason) -> None:
        message = (
            "Insufficient permissions for this action"
            if reason is PolicyReason.INSUFFICIENT_PERMISSIONS
            else "Access denied"
        )
        super().__init__(message)
        self.reason = reason

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.reason.value


# ── Resources ────────────────────────────────────────────────

class NotFoundError(NotesError):
    """Raised for missing resources *and* resources outside the caller's scope."""

    code = "not_found"

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(NotesError):
    code = "conflict"


class ValidationError(NotesError):
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def fields(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


# ── Subscription ─────────────────────────────────────────────

class LimitExceededError(NotesError):
    code = "limit_exceeded"

    def __init__(self, used: int, limit: int) -> None:
        super().__init__("Note limit exceeded. Upgrade to Pro plan for unlimited notes")
        self.used = used
        self.limit = limit

    def fields(self) -> dict[str, Any]:
        return {"used": self.used, "limit": self.limit, "upgrade_required": True}


STATUS_BY_ERROR: dict[type[NotesError], int] = {
    AuthError: status.HTTP_401_UNAUTHORIZED,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    PolicyError: status.HTTP_403_FORBIDDEN,
    LimitExceededError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_for(exc: NotesError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST
