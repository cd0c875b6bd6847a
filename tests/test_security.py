"""Unit tests for password hashing and JWT helpers."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from bookrecommender.api.middleware.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from bookrecommender.config import settings
from bookrecommender.domain.models import User


def test_hash_and_verify_password():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert hashed.startswith("$2")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_hashes_are_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_against_malformed_hash():
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_token_round_trip():
    user = User(id=7, email="reader@example.com")
    token, expires = create_access_token(user)

    claims = decode_access_token(token)
    assert claims["sub"] == "7"
    assert claims["email"] == "reader@example.com"
    assert claims["iss"] == settings.jwt_issuer
    assert claims["aud"] == settings.jwt_audience
    assert claims["exp"] == int(expires.timestamp())

    lifetime = expires - datetime.now(timezone.utc)
    assert timedelta(hours=settings.jwt_expire_hours - 1) < lifetime
    assert lifetime <= timedelta(hours=settings.jwt_expire_hours)


def _forge(**overrides) -> str:
    now = int(datetime.now(timezone.utc).timestamp())
    claims = {
        "sub": "1",
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    secret = claims.pop("secret", settings.jwt_secret_key)
    return jwt.encode(claims, secret, algorithm=settings.jwt_algorithm)


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "SomeOtherApp"},
        {"iss": "SomeOtherIssuer"},
        {"exp": int(datetime.now(timezone.utc).timestamp()) - 10},
        {"secret": "a-completely-different-signing-secret"},
    ],
)
def test_rejects_tokens_that_fail_validation(overrides):
    with pytest.raises(JWTError):
        decode_access_token(_forge(**overrides))
