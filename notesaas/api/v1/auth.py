"""Authentication endpoints: login, profile, token checks."""

import uuid

from fastapi import APIRouter
from pydantic import BaseModel, EmailStr, Field

from notesaas.api.deps import Auth, OptionalAuth, Session
from notesaas.core.config import get_settings
from notesaas.core.errors import NotFoundError
from notesaas.models.tenant import Plan, TenantRead
from notesaas.models.user import Role, User, UserRead
from notesaas.services.accounts import authenticate_user, issue_access_token
from notesaas.services.tenants import get_tenant

router = APIRouter(prefix="/auth", tags=["auth"])

settings = get_settings()


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserRead
    tenant: TenantRead


class MeResponse(BaseModel):
    user: UserRead
    tenant: TenantRead


class IdentitySummary(BaseModel):
    authenticated: bool = True
    user_id: uuid.UUID | None = None
    email: str | None = None
    role: Role | None = None
    tenant_slug: str | None = None
    tenant_plan: Plan | None = None


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a JWT."""
    user, tenant = await authenticate_user(session, body.email, body.password)
    return LoginResponse(
        access_token=issue_access_token(user, tenant),
        expires_in=settings.jwt_expire_minutes * 60,
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(auth: Auth, session: Session) -> MeResponse:
    """Return the current authenticated user and their tenant."""
    user = await session.get(User, auth.user_id)
    if user is None or user.tenant_id != auth.tenant_id:
        raise NotFoundError("User")
    tenant = await get_tenant(session, auth.tenant_id)
    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


@router.get("/verify", response_model=IdentitySummary)
async def verify_token(auth: Auth) -> IdentitySummary:
    return IdentitySummary(
        user_id=auth.user_id,
        email=auth.email,
        role=auth.role,
        tenant_slug=auth.tenant_slug,
        tenant_plan=auth.tenant_plan,
    )


@router.get("/whoami", response_model=IdentitySummary)
async def whoami(auth: OptionalAuth) -> IdentitySummary:
    """Like /verify, but anonymous callers get ``authenticated: false``."""
    if auth is None:
        return IdentitySummary(authenticated=False)
    return await verify_token(auth)


@router.post("/logout")
async def logout(auth: Auth) -> dict:
    # Tokens are stateless; the client discards its copy.
    return {"detail": "Logout successful. Please remove the token from client storage."}
