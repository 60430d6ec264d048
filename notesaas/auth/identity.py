"""Bearer token → verified, tenant-scoped identity."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.core.errors import AuthError, AuthErrorKind
from notesaas.core.security import TokenInvalid, decode_jwt
from notesaas.models.tenant import Plan, Tenant
from notesaas.models.user import Role, User

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True, slots=True)
class Identity:
    """The only trusted principal for the rest of a request."""

    user_id: uuid.UUID
    email: str
    role: Role
    tenant_id: uuid.UUID
    tenant_slug: str
    tenant_plan: Plan

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise AuthError(AuthErrorKind.MISSING_TOKEN)
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        raise AuthError(AuthErrorKind.MISSING_TOKEN)
    return token


def _claims_to_ids(claims: dict) -> tuple[uuid.UUID, uuid.UUID]:
    try:
        return uuid.UUID(str(claims["sub"])), uuid.UUID(str(claims["tid"]))
    except (KeyError, ValueError) as exc:
        raise AuthError(AuthErrorKind.INVALID_TOKEN) from exc


async def resolve_identity(authorization: str | None, session: AsyncSession) -> Identity:
    """Resolve an ``Authorization`` header value to an ``Identity``.

    Read-only. Raises ``AuthError`` with the kind describing the first check
    that failed.
    """
    token = extract_bearer_token(authorization)

    try:
        claims = decode_jwt(token)
    except TokenInvalid as exc:
        logger.debug("Rejected token: %s", exc)
        raise AuthError(AuthErrorKind.INVALID_TOKEN) from exc

    user_id, tenant_id = _claims_to_ids(claims)

    result = await session.execute(
        select(User).where(
            User.id == user_id,
            User.tenant_id == tenant_id,
            User.is_active.is_(True),  # type: ignore[attr-defined]
        )
    )
    user = result.scalar_one_or_none()
    if user is None:
        logger.debug("Token for unknown or inactive user %s", user_id)
        raise AuthError(AuthErrorKind.REVOKED)

    tenant = await session.get(Tenant, tenant_id)
    if tenant is None or not tenant.is_active:
        raise AuthError(AuthErrorKind.TENANT_INACTIVE)

    return Identity(
        user_id=user.id,
        email=user.email,
        role=user.role,
        tenant_id=tenant.id,
        tenant_slug=tenant.slug,
        tenant_plan=tenant.plan,
    )


async def resolve_optional_identity(
    authorization: str | None, session: AsyncSession
) -> Identity | None:
    """Like ``resolve_identity`` but yields ``None`` instead of rejecting."""
    if not authorization:
        return None
    try:
        return await resolve_identity(authorization, session)
    except AuthError as exc:
        logger.debug("Optional auth fell back to anonymous: %s", exc.kind)
        return None
