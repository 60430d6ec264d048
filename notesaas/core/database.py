"""Async engine, session factory and schema bootstrap."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from notesaas.core.config import get_settings

settings = get_settings()

# pre_ping drops connections Postgres closed while idle
engine = create_async_engine(settings.database_url, echo=False, pool_pre_ping=True)

# Loaded rows stay readable after commit; handlers serialise them afterwards.
async_session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create missing tables. Alembic owns the schema in deployed databases."""
    import notesaas.models  # noqa: F401  populate SQLModel.metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
