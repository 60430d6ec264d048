"""Credential helpers: password digests and signed access tokens.

Nothing outside this module touches passlib or jose directly.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from notesaas.core.config import get_settings

settings = get_settings()

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Unrecognised or corrupt digest.
        return False


# ── JWT ───────────────────────────────────────────────────────

class TokenInvalid(Exception):
    """Signature, issuer, audience or structure check failed."""


class TokenExpired(TokenInvalid):
    """Token was valid but its ``exp`` is in the past."""


def create_jwt(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        **claims,
        "iat": now,
        "exp": expire,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict[str, Any]:
    """Decode and verify a JWT.

    Raises ``TokenExpired`` or ``TokenInvalid``; jose exceptions never escape.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError as exc:
        raise TokenExpired(str(exc)) from exc
    except JWTError as exc:
        raise TokenInvalid(str(exc)) from exc
