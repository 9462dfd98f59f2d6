"""Tests for opaque and session tokens."""
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from crowdfund.config import AuthSettings
from crowdfund.core.exceptions import InvalidTokenError, TokenExpiredError
from crowdfund.core.tokens import TokenCodec


@pytest.fixture
def codec():
    return TokenCodec(AuthSettings(secret_key="codec-secret"))


def test_opaque_tokens_are_long_and_unique(codec):
    tokens = {codec.generate_opaque_token() for _ in range(100)}

    assert len(tokens) == 100
    # 32 random bytes, URL-safe base64 without padding
    assert all(len(token) == 43 for token in tokens)


def test_fingerprint_is_stable_sha256(codec):
    token = codec.generate_opaque_token()

    assert codec.fingerprint(token) == codec.fingerprint(token)
    assert len(codec.fingerprint(token)) == 64
    assert codec.fingerprint(token) != token


def test_session_token_carries_identity(codec):
    user_id = uuid.uuid4()

    claims = codec.verify(codec.issue_session_token(user_id, "a@example.com"))

    assert claims.user_id == user_id
    assert claims.email == "a@example.com"


def test_default_ttl_is_one_hour():
    codec = TokenCodec(AuthSettings(secret_key="codec-secret"))

    assert codec.access_token_ttl == timedelta(hours=1)


def test_expired_session_token(codec):
    token = codec.sign(
        {"sub": str(uuid.uuid4()), "email": "a@example.com"},
        ttl=timedelta(seconds=-5),
    )

    with pytest.raises(TokenExpiredError):
        codec.verify(token)


def test_tampered_session_token(codec):
    token = codec.issue_session_token(uuid.uuid4(), "a@example.com")
    header, payload, signature = token.split(".")
    forged = jwt.encode(
        {"sub": str(uuid.uuid4()), "email": "evil@example.com", "type": "access"},
        "another-secret",
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(InvalidTokenError):
        codec.verify(f"{header}.{forged}.{signature}")


def test_token_signed_with_other_secret(codec):
    other = TokenCodec(AuthSettings(secret_key="other-secret"))
    token = other.issue_session_token(uuid.uuid4(), "a@example.com")

    with pytest.raises(InvalidTokenError):
        codec.verify(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_session_token(codec, token):
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_claims_must_include_email(codec):
    token = codec.sign({"sub": str(uuid.uuid4())})

    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_claims_must_include_user_id(codec):
    token = codec.sign({"sub": "not-a-uuid", "email": "a@example.com"})

    with pytest.raises(InvalidTokenError):
        codec.verify(token)
