"""FastAPI dependencies for authentication and sessions."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.auth.identity import Identity, resolve_identity, resolve_optional_identity
from notesaas.core.database import get_session


async def get_identity(
    session: Annotated[AsyncSession, Depends(get_session)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Resolve the bearer token on the request. Raises ``AuthError``."""
    return await resolve_identity(authorization, session)


async def get_optional_identity(
    session: Annotated[AsyncSession, Depends(get_session)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity | None:
    return await resolve_optional_identity(authorization, session)


# Typed shorthand for use in route signatures
Auth = Annotated[Identity, Depends(get_identity)]
OptionalAuth = Annotated[Identity | None, Depends(get_optional_identity)]
Session = Annotated[AsyncSession, Depends(get_session)]
