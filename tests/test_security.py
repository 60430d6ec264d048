"""Password digests and JWT round-trips."""

from datetime import timedelta

import pytest
from jose import jwt

from notesaas.core.config import get_settings
from notesaas.core.security import (
    TokenExpired,
    TokenInvalid,
    create_jwt,
    decode_jwt,
    hash_password,
    verify_password,
)


def test_password_hash_verifies():
    digest = hash_password("s3cret-pass")
    assert digest != "s3cret-pass"
    assert verify_password("s3cret-pass", digest)
    assert not verify_password("wrong", digest)


def test_verify_against_garbage_digest_is_false():
    assert not verify_password("anything", "not-a-real-hash")


def test_jwt_carries_claims():
    token = create_jwt({"sub": "u1", "tid": "t1"})
    claims = decode_jwt(token)
    assert claims["sub"] == "u1"
    assert claims["tid"] == "t1"
    assert claims["iss"] == get_settings().jwt_issuer


def test_expired_jwt():
    token = create_jwt({"sub": "u1"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenExpired):
        decode_jwt(token)


def test_tampered_and_foreign_tokens():
    with pytest.raises(TokenInvalid):
        decode_jwt("not.a.jwt")

    settings = get_settings()
    forged = jwt.encode(
        {"sub": "u1", "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
        "some-other-secret",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalid):
        decode_jwt(forged)

    wrong_audience = jwt.encode(
        {"sub": "u1", "iss": settings.jwt_issuer, "aud": "someone-else"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenInvalid):
        decode_jwt(wrong_audience)
