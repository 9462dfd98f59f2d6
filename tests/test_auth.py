"""Tests for authentication endpoints."""
import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import jwt
from sqlalchemy import delete

from conftest import (
    TEST_PASSWORD,
    expire_reset,
    expire_verification,
    load_user,
    register_verified,
)
from crowdfund.models.base import utcnow
from crowdfund.models.user import User

EMAIL = "alice@example.com"


async def register(client: AsyncClient, email: str = EMAIL, password: str = TEST_PASSWORD, **extra):
    return await client.post(
        "/api/register", json={"email": email, "password": password, **extra}
    )


async def login(client: AsyncClient, email: str = EMAIL, password: str = TEST_PASSWORD):
    return await client.post("/api/login", json={"email": email, "password": password})


async def test_end_to_end_flow(client: AsyncClient, app, mailer):
    """Register, verify, login and reach the protected profile."""
    response = await register(client, name="Alice")
    assert response.status_code == 201
    assert response.json() == {
        "status": "success",
        "message": "User registered. Please verify your email.",
    }

    response = await login(client)
    assert response.status_code == 403
    assert response.json()["error_code"] == "EMAIL_NOT_VERIFIED"

    token = mailer.last_token(EMAIL, "verify")
    response = await client.get(f"/api/verify/{token}")
    assert response.status_code == 200

    response = await login(client)
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == 3600

    response = await client.get(
        "/api/profile", headers={"Authorization": f"Bearer {data['token']}"}
    )
    assert response.status_code == 200
    profile = response.json()
    assert profile["message"] == "Protected route accessed"
    assert profile["user"]["email"] == EMAIL

    user = await load_user(app, EMAIL)
    assert profile["user"]["id"] == str(user.id)
    assert user.name == "Alice"

    response = await client.get("/api/profile")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_register_duplicate_email(client: AsyncClient, mailer):
    await register(client)

    response = await register(client, password="another1")

    assert response.status_code == 400
    assert response.json()["error_code"] == "DUPLICATE_EMAIL"
    assert len(mailer.sent_to(EMAIL)) == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": TEST_PASSWORD},
        {"email": EMAIL, "password": "short"},
        {"email": EMAIL, "password": "p" * 100},
        {"email": EMAIL, "password": "\u00e9" * 37},
        {"email": EMAIL},
        {"password": TEST_PASSWORD},
    ],
)
async def test_register_validation(client: AsyncClient, mailer, payload):
    response = await client.post("/api/register", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"]
    assert mailer.messages == []


async def test_register_mail_failure(client: AsyncClient, app, mailer):
    """The account is kept even when the verification email fails."""
    mailer.fail = True

    response = await register(client)

    assert response.status_code == 500
    assert response.json()["error_code"] == "MAIL_DELIVERY_ERROR"
    assert await load_user(app, EMAIL) is not None

    mailer.fail = False
    response = await client.post("/api/resend-verification", json={"email": EMAIL})
    assert response.status_code == 200
    assert mailer.last_token(EMAIL, "verify")


async def test_verify_twice(client: AsyncClient, mailer):
    await register(client)
    token = mailer.last_token(EMAIL, "verify")

    assert (await client.get(f"/api/verify/{token}")).status_code == 200
    response = await client.get(f"/api/verify/{token}")

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"


async def test_verify_unknown_token(client: AsyncClient):
    response = await client.get("/api/verify/not-a-real-token")

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"


async def test_verify_expired_token(client: AsyncClient, app, mailer):
    await register(client)
    token = mailer.last_token(EMAIL, "verify")
    await expire_verification(app, EMAIL)

    response = await client.get(f"/api/verify/{token}")

    assert response.status_code == 400
    assert response.json()["error_code"] == "TOKEN_EXPIRED"
    assert (await login(client)).status_code == 403


async def test_resend_invalidates_previous_link(client: AsyncClient, mailer):
    await register(client)
    old_token = mailer.last_token(EMAIL, "verify")

    response = await client.post("/api/resend-verification", json={"email": EMAIL})
    assert response.status_code == 200
    assert response.json()["message"] == "Verification email sent."
    new_token = mailer.last_token(EMAIL, "verify")

    assert (await client.get(f"/api/verify/{old_token}")).status_code == 400
    assert (await client.get(f"/api/verify/{new_token}")).status_code == 200


async def test_resend_when_already_verified(client: AsyncClient, mailer):
    await register_verified(client, mailer, EMAIL)
    sent = len(mailer.messages)

    response = await client.post("/api/resend-verification", json={"email": EMAIL})

    assert response.status_code == 200
    assert response.json()["message"] == "Email is already verified."
    assert len(mailer.messages) == sent


async def test_resend_unknown_email(client: AsyncClient):
    response = await client.post(
        "/api/resend-verification", json={"email": "ghost@example.com"}
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"


async def test_login_unverified_with_wrong_password(client: AsyncClient):
    await register(client)

    response = await login(client, password="wrong-password")

    assert response.status_code == 403
    assert response.json()["error_code"] == "EMAIL_NOT_VERIFIED"


async def test_login_failures_are_indistinguishable(client: AsyncClient, mailer):
    await register_verified(client, mailer, EMAIL)

    wrong_password = await login(client, password="wrong-password")
    unknown_email = await login(client, email="ghost@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json()["error"] == unknown_email.json()["error"]
    assert wrong_password.json()["error_code"] == "INVALID_CREDENTIALS"


async def test_profile_rejects_bad_tokens(client: AsyncClient, settings):
    now = utcnow()
    expired = jwt.encode(
        {
            "sub": "00000000-0000-0000-0000-000000000000",
            "email": EMAIL,
            "type": "access",
            "iat": now - timedelta(hours=2),
            "exp": now - timedelta(hours=1),
        },
        settings.auth.secret_key,
        algorithm=settings.auth.algorithm,
    )

    cases = {
        "Bearer not-a-jwt": "Invalid token",
        f"Bearer {expired}": "Token has expired",
        "Basic dXNlcjpwYXNz": "No token provided",
    }
    for header, message in cases.items():
        response = await client.get("/api/profile", headers={"Authorization": header})
        assert response.status_code == 401, header
        assert response.json()["error"] == message


async def test_forgot_password_unknown_email(client: AsyncClient, mailer):
    response = await client.post("/api/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"
    assert mailer.messages == []


async def test_forgot_password_concealed(client: AsyncClient, app, mailer):
    app.state.auth_service.conceal_unknown_emails = True
    await register(client)

    unknown = await client.post("/api/forgot-password", json={"email": "ghost@example.com"})
    known = await client.post("/api/forgot-password", json={"email": EMAIL})

    assert unknown.status_code == known.status_code == 200
    assert unknown.json() == known.json()
    assert mailer.sent_to("ghost@example.com") == []


async def test_password_reset_flow(client: AsyncClient, mailer):
    await register_verified(client, mailer, EMAIL)

    response = await client.post("/api/forgot-password", json={"email": EMAIL})
    assert response.status_code == 200
    token = mailer.last_token(EMAIL, "reset-password")

    response = await client.get(f"/api/reset-password/{token}")
    assert response.status_code == 200
    assert response.json()["message"] == "Reset link is valid."

    response = await client.post(
        f"/api/reset-password/{token}", json={"password": "brand-new-secret"}
    )
    assert response.status_code == 200

    assert (await login(client)).status_code == 400
    assert (await login(client, password="brand-new-secret")).status_code == 200

    response = await client.post(
        f"/api/reset-password/{token}", json={"password": "another-secret"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"


async def test_reset_link_expired(client: AsyncClient, app, mailer):
    await register_verified(client, mailer, EMAIL)
    await client.post("/api/forgot-password", json={"email": EMAIL})
    token = mailer.last_token(EMAIL, "reset-password")
    await expire_reset(app, EMAIL)

    check = await client.get(f"/api/reset-password/{token}")
    reset = await client.post(f"/api/reset-password/{token}", json={"password": "new-secret"})

    for response in (check, reset):
        assert response.status_code == 400
        assert response.json()["error_code"] == "TOKEN_EXPIRED"
    assert (await login(client)).status_code == 200


async def test_reset_link_unknown(client: AsyncClient):
    response = await client.get("/api/reset-password/not-a-real-token")

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TOKEN"


@pytest.mark.parametrize("password", ["123", "p" * 100, "\u00e9" * 37])
async def test_reset_requires_valid_password(client: AsyncClient, mailer, password):
    await register_verified(client, mailer, EMAIL)
    await client.post("/api/forgot-password", json={"email": EMAIL})
    token = mailer.last_token(EMAIL, "reset-password")

    response = await client.post(f"/api/reset-password/{token}", json={"password": password})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"
    # The link is still usable
    assert (await client.get(f"/api/reset-password/{token}")).status_code == 200


async def test_forgot_password_mail_failure(client: AsyncClient, mailer):
    await register_verified(client, mailer, EMAIL)
    mailer.fail = True

    response = await client.post("/api/forgot-password", json={"email": EMAIL})

    assert response.status_code == 500
    assert response.json()["error_code"] == "MAIL_DELIVERY_ERROR"


async def test_health_and_root(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"
    assert "X-Request-ID" in response.headers


async def test_token_for_missing_account_is_rejected(client: AsyncClient, app, mailer):
    headers = await register_verified(client, mailer, EMAIL)
    async with app.state.database.session() as session:
        await session.execute(delete(User).where(User.email == EMAIL))
        await session.commit()

    profile = await client.get("/api/profile", headers=headers)
    campaign = await client.post(
        "/api/campaigns", json={"title": "Orphan", "goal_amount": 10}, headers=headers
    )

    for response in (profile, campaign):
        assert response.status_code == 401
        assert response.json()["error"] == "User no longer exists"


async def test_token_for_unknown_user_id_is_rejected(client: AsyncClient, app):
    token = app.state.token_codec.issue_session_token(uuid.uuid4(), "ghost@example.com")

    response = await client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["details"] == {"reason": "unknown_user"}
