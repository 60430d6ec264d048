"""Shared test fixtures: async SQLite in-memory DB + test client."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models so metadata is populated
import notesaas.models  # noqa: F401
from notesaas.core.database import get_session
from notesaas.main import app
from notesaas.models.tenant import Tenant
from notesaas.models.user import User
from notesaas.services.accounts import seed_demo_data

from helpers import bearer, get_user


@pytest.fixture
async def engine():
    # One in-memory database per test; StaticPool keeps it on a single connection.
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@dataclass
class World:
    """Seeded demo data: two free tenants, each with an admin and a member."""
    acme: Tenant
    globex: Tenant
    acme_admin: User
    acme_user: User
    globex_admin: User
    globex_user: User

    def headers(self, who: str) -> dict[str, str]:
        user: User = getattr(self, who)
        tenant = self.acme if who.startswith("acme") else self.globex
        return bearer(user, tenant)


@pytest.fixture
async def world(session) -> World:
    tenants = {t.slug: t for t in await seed_demo_data(session)}
    return World(
        acme=tenants["acme"],
        globex=tenants["globex"],
        acme_admin=await get_user(session, "admin@acme.com"),
        acme_user=await get_user(session, "user@acme.com"),
        globex_admin=await get_user(session, "admin@globex.com"),
        globex_user=await get_user(session, "user@globex.com"),
    )
