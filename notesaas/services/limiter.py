"""Per-tenant note quotas and plan upgrades.

The count-then-insert sequence in ``create_note`` is not serialised: two
concurrent creations from one tenant can both pass ``check_can_create`` and
overshoot a free plan's limit by the number of racing requests. This is a
known, accepted relaxation.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.auth.identity import Identity
from notesaas.auth.policy import Action, enforce
from notesaas.core.errors import LimitExceededError, NotFoundError
from notesaas.models.note import Note
from notesaas.models.tenant import UNLIMITED, Plan, Tenant

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    plan: Plan
    used: int
    limit: int
    remaining: int

    @property
    def can_create(self) -> bool:
        return self.limit == UNLIMITED or self.remaining > 0


async def count_live_notes(session: AsyncSession, tenant_id: uuid.UUID) -> int:
    stmt = select(func.count()).select_from(Note).where(
        Note.tenant_id == tenant_id,
        Note.is_deleted.is_(False),  # type: ignore[attr-defined]
    )
    return (await session.execute(stmt)).scalar_one()


async def _load_tenant(session: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


def _quota(tenant: Tenant, used: int) -> QuotaStatus:
    limit = tenant.effective_limit
    remaining = UNLIMITED if limit == UNLIMITED else max(0, limit - used)
    return QuotaStatus(plan=tenant.plan, used=used, limit=limit, remaining=remaining)


async def quota_status(session: AsyncSession, tenant_id: uuid.UUID) -> QuotaStatus:
    tenant = await _load_tenant(session, tenant_id)
    return _quota(tenant, await count_live_notes(session, tenant_id))


async def check_can_create(session: AsyncSession, tenant_id: uuid.UUID) -> QuotaStatus:
    """Return the current quota or raise ``LimitExceededError``."""
    status = await quota_status(session, tenant_id)
    if not status.can_create:
        logger.info(
            "Note limit reached for tenant %s (%d/%d)", tenant_id, status.used, status.limit
        )
        raise LimitExceededError(used=status.used, limit=status.limit)
    return status


async def upgrade_plan(session: AsyncSession, identity: Identity, slug: str) -> Tenant:
    """Move the caller's tenant to the pro plan. Idempotent, admin only.

    A slug naming any tenant other than the caller's own is reported as
    not found.
    """
    enforce(identity, Action.UPGRADE_PLAN)
    if slug.strip().lower() != identity.tenant_slug:
        raise NotFoundError("Tenant")

    tenant = await _load_tenant(session, identity.tenant_id)
    if tenant.is_pro:
        return tenant

    tenant.upgrade_to_pro()
    tenant.touch()
    session.add(tenant)
    await session.commit()
    await session.refresh(tenant)
    logger.info("Tenant %s upgraded to %s by %s", tenant.slug, tenant.plan, identity.user_id)
    return tenant
