"""Tenant endpoints: info, subscription, upgrade, user directory.

The tenant is always the caller's own; the only path parameter (the slug on
upgrade) is checked against the verified identity.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from notesaas.api.deps import Auth, Session
from notesaas.auth.policy import Action, enforce
from notesaas.models.tenant import Plan, TenantRead
from notesaas.models.user import UserRead
from notesaas.services.limiter import QuotaStatus, quota_status, upgrade_plan
from notesaas.services.tenants import get_tenant_info, list_tenant_users

router = APIRouter(prefix="/tenants", tags=["tenants"])


# ── Schemas ──────────────────────────────────────────────────

class SubscriptionRead(BaseModel):
    plan: Plan
    note_limit: int
    notes_used: int
    remaining_notes: int
    can_create_notes: bool
    is_pro: bool
    upgrade_available: bool

    @classmethod
    def from_quota(cls, quota: QuotaStatus) -> "SubscriptionRead":
        is_pro = quota.plan == Plan.PRO
        return cls(
            plan=quota.plan,
            note_limit=quota.limit,
            notes_used=quota.used,
            remaining_notes=quota.remaining,
            can_create_notes=quota.can_create,
            is_pro=is_pro,
            upgrade_available=not is_pro,
        )


class TenantStatistics(BaseModel):
    total_users: int
    total_notes: int
    remaining_notes: int


class TenantInfoRead(BaseModel):
    tenant: TenantRead
    statistics: TenantStatistics


class UserList(BaseModel):
    users: list[UserRead]
    total_count: int


# ── Routes ───────────────────────────────────────────────────

@router.get("/info", response_model=TenantInfoRead)
async def tenant_info(auth: Auth, session: Session) -> TenantInfoRead:
    info = await get_tenant_info(session, auth.tenant_id)
    return TenantInfoRead(
        tenant=TenantRead.model_validate(info.tenant),
        statistics=TenantStatistics(
            total_users=info.total_users,
            total_notes=info.quota.used,
            remaining_notes=info.quota.remaining,
        ),
    )


@router.get("/subscription", response_model=SubscriptionRead)
async def subscription_status(auth: Auth, session: Session) -> SubscriptionRead:
    return SubscriptionRead.from_quota(await quota_status(session, auth.tenant_id))


@router.post("/{slug}/upgrade", response_model=TenantRead)
async def upgrade_tenant(slug: str, auth: Auth, session: Session) -> TenantRead:
    """Upgrade to pro. Repeating the call on a pro tenant is a no-op."""
    tenant = await upgrade_plan(session, auth, slug)
    return TenantRead.model_validate(tenant)


@router.get("/users", response_model=UserList)
async def tenant_users(auth: Auth, session: Session) -> UserList:
    enforce(auth, Action.MANAGE_TENANT)
    users = await list_tenant_users(session, auth.tenant_id)
    return UserList(
        users=[UserRead.model_validate(u) for u in users],
        total_count=len(users),
    )
