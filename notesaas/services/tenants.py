"""Tenant-level reads: profile, statistics and the user directory."""

import uuid
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.core.errors import NotFoundError
from notesaas.models.tenant import Tenant
from notesaas.models.user import User
from notesaas.services.limiter import QuotaStatus, quota_status


@dataclass(frozen=True, slots=True)
class TenantInfo:
    tenant: Tenant
    total_users: int
    quota: QuotaStatus


async def get_tenant(session: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


async def get_tenant_info(session: AsyncSession, tenant_id: uuid.UUID) -> TenantInfo:
    tenant = await get_tenant(session, tenant_id)
    total_users = (
        await session.execute(
            select(func.count()).select_from(User).where(
                User.tenant_id == tenant_id,
                User.is_active.is_(True),  # type: ignore[attr-defined]
            )
        )
    ).scalar_one()
    return TenantInfo(
        tenant=tenant,
        total_users=total_users,
        quota=await quota_status(session, tenant_id),
    )


async def list_tenant_users(session: AsyncSession, tenant_id: uuid.UUID) -> list[User]:
    stmt = (
        select(User)
        .where(
            User.tenant_id == tenant_id,
            User.is_active.is_(True),  # type: ignore[attr-defined]
        )
        .order_by(User.created_at.desc(), User.email.asc())  # type: ignore[attr-defined]
    )
    return list((await session.execute(stmt)).scalars().all())
