"""Test helpers shared across modules."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notesaas.auth.identity import Identity
from notesaas.models.tenant import Tenant
from notesaas.models.user import User
from notesaas.services.accounts import issue_access_token


def identity_for(user: User, tenant: Tenant) -> Identity:
    return Identity(
        user_id=user.id,
        email=user.email,
        role=user.role,
        tenant_id=tenant.id,
        tenant_slug=tenant.slug,
        tenant_plan=tenant.plan,
    )


def bearer(user: User, tenant: Tenant) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_access_token(user, tenant)}"}


async def get_user(session: AsyncSession, email: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one()


async def login(client: AsyncClient, email: str, password: str = "password") -> dict[str, str]:
    resp = await client.post("/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def create_note(client: AsyncClient, headers: dict, title: str = "Note", **extra):
    body = {"title": title, "content": extra.pop("content", f"{title} body"), **extra}
    return await client.post("/v1/notes", json=body, headers=headers)
