"""Test configuration and fixtures."""
import re
from datetime import timedelta
from typing import List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from crowdfund.config import (
    APISettings,
    AuthSettings,
    DatabaseSettings,
    MailSettings,
    RedisSettings,
    Settings,
)
from crowdfund.core.exceptions import MailDeliveryError
from crowdfund.main import create_app
from crowdfund.models.base import utcnow
from crowdfund.models.user import User
from crowdfund.services.users import UserRepository

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "secret123"


class RecordingMailer:
    """Keeps outgoing messages in memory."""

    def __init__(self):
        self.messages: List[Tuple[str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise MailDeliveryError()
        self.messages.append((to, subject, body))

    def sent_to(self, email: str) -> List[Tuple[str, str, str]]:
        return [message for message in self.messages if message[0] == email]

    def last_token(self, email: str, route: str) -> str:
        """Token from the newest ``/{route}/<token>`` link sent to ``email``."""
        for _, _, body in reversed(self.sent_to(email)):
            match = re.search(rf"/{route}/([A-Za-z0-9_-]+)", body)
            if match:
                return match.group(1)
        raise AssertionError(f"no {route} link sent to {email}")


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        debug=True,
        database=DatabaseSettings(url=TEST_DATABASE_URL),
        redis=RedisSettings(enabled=False),
        auth=AuthSettings(secret_key="test-secret-key", bcrypt_rounds=4),
        mail=MailSettings(backend="log"),
        api=APISettings(rate_limit_enabled=False, public_base_url="http://testserver"),
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest_asyncio.fixture
async def app(settings, mailer):
    """Application on a fresh in-memory database."""
    application = create_app(settings, mailer=mailer)
    await application.state.database.init()
    yield application
    await application.state.database.close()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def auth_service(app):
    return app.state.auth_service


@pytest_asyncio.fixture
async def users(app):
    """Repository on its own session, for service-level tests."""
    async with app.state.database.session() as session:
        yield UserRepository(session)


async def load_user(app, email: str) -> User:
    async with app.state.database.session() as session:
        return await UserRepository(session).find_by_email(email)


async def set_user_fields(app, email: str, **values) -> None:
    async with app.state.database.session() as session:
        await session.execute(update(User).where(User.email == email).values(**values))
        await session.commit()


async def expire_verification(app, email: str) -> None:
    await set_user_fields(app, email, verification_expires=utcnow() - timedelta(minutes=1))


async def expire_reset(app, email: str) -> None:
    await set_user_fields(app, email, reset_expires=utcnow() - timedelta(minutes=1))


async def register_verified(client, mailer, email: str, password: str = TEST_PASSWORD) -> dict:
    """Register, verify and log in; returns bearer headers."""
    response = await client.post("/api/register", json={"email": email, "password": password})
    assert response.status_code == 201
    token = mailer.last_token(email, "verify")
    assert (await client.get(f"/api/verify/{token}")).status_code == 200

    response = await client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def auth_headers(client, mailer):
    """Bearer headers for a verified user."""
    return await register_verified(client, mailer, "owner@example.com")


@pytest_asyncio.fixture
async def other_headers(client, mailer):
    """Bearer headers for a second verified user."""
    return await register_verified(client, mailer, "other@example.com")
