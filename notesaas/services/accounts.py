"""Password login and tenant/user provisioning."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.core.config import get_settings
from notesaas.core.errors import (
    AuthError,
    AuthErrorKind,
    ConflictError,
    InvalidCredentialsError,
    ValidationError,
)
from notesaas.core.security import create_jwt, hash_password, verify_password
from notesaas.models.base import utcnow
from notesaas.models.tenant import UNLIMITED, Plan, Tenant
from notesaas.models.user import Role, User

logger = logging.getLogger(__name__)

settings = get_settings()

DEMO_PASSWORD = "password"
DEMO_TENANTS = {
    "acme": "Acme Corporation",
    "globex": "Globex Corporation",
}


# ── Login ─────────────────────────────────────────────────────

async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, Tenant]:
    """Check credentials, stamp ``last_login`` and return the user + tenant.

    Emails are unique per tenant, so the same address may exist in several
    tenants; the oldest active account whose password matches wins.
    """
    stmt = (
        select(User)
        .where(
            User.email == email.strip().lower(),
            User.is_active.is_(True),  # type: ignore[attr-defined]
        )
        .order_by(User.created_at.asc())  # type: ignore[attr-defined]
    )
    candidates = (await session.execute(stmt)).scalars().all()
    user = next((u for u in candidates if verify_password(password, u.password_hash)), None)
    if user is None:
        logger.info("Failed login for %s", email)
        raise InvalidCredentialsError()

    tenant = await session.get(Tenant, user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise AuthError(AuthErrorKind.TENANT_INACTIVE)

    user.last_login = utcnow()
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("User %s logged in to tenant %s", user.id, tenant.slug)
    return user, tenant


def issue_access_token(user: User, tenant: Tenant) -> str:
    return create_jwt({
        "sub": str(user.id),
        "tid": str(tenant.id),
        "email": user.email,
        "role": str(user.role),
        "tenant_slug": tenant.slug,
    })


# ── Provisioning ──────────────────────────────────────────────

async def provision_tenant(
    session: AsyncSession,
    slug: str,
    name: str,
    plan: Plan = Plan.FREE,
    note_limit: int | None = None,
) -> Tenant:
    slug = slug.strip().lower()
    if slug not in settings.tenant_slugs:
        raise ValidationError(
            f"Tenant slug must be one of: {', '.join(sorted(settings.tenant_slugs))}",
            field="slug",
        )
    existing = await session.execute(select(Tenant).where(Tenant.slug == slug))
    if existing.scalar_one_or_none():
        raise ConflictError(f"Slug '{slug}' is already taken")

    if plan == Plan.PRO:
        limit = UNLIMITED
    else:
        limit = settings.default_note_limit if note_limit is None else note_limit
        if limit < 0:
            raise ValidationError("Note limit cannot be negative", field="note_limit")

    tenant = Tenant(slug=slug, name=name, plan=plan, note_limit=limit)
    session.add(tenant)
    await session.commit()
    await session.refresh(tenant)
    logger.info("Provisioned tenant %s (%s)", slug, plan)
    return tenant


async def provision_user(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    email: str,
    password: str,
    role: Role = Role.MEMBER,
) -> User:
    email = email.strip().lower()
    existing = await session.execute(
        select(User).where(User.tenant_id == tenant_id, User.email == email)
    )
    if existing.scalar_one_or_none():
        raise ConflictError("A user with this email already exists in this tenant")

    user = User(
        tenant_id=tenant_id,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def seed_demo_data(session: AsyncSession) -> list[Tenant]:
    """Create the demo tenants and their admin/member accounts if missing.

    Safe to run repeatedly: existing tenants and users are left untouched.
    """
    tenants: list[Tenant] = []
    for slug, name in DEMO_TENANTS.items():
        if slug not in settings.tenant_slugs:
            continue
        tenant = (
            await session.execute(select(Tenant).where(Tenant.slug == slug))
        ).scalar_one_or_none()
        if tenant is None:
            tenant = await provision_tenant(session, slug, name)

        for local, role in (("admin", Role.ADMIN), ("user", Role.MEMBER)):
            email = f"{local}@{slug}.com"
            exists = (
                await session.execute(
                    select(User).where(User.tenant_id == tenant.id, User.email == email)
                )
            ).scalar_one_or_none()
            if exists is None:
                await provision_user(session, tenant.id, email, DEMO_PASSWORD, role)
        tenants.append(tenant)

    logger.info("Demo data ready for %d tenants", len(tenants))
    return tenants
