"""Tests for rate limiting, request timeouts and response headers."""
import asyncio
from contextlib import asynccontextmanager

from httpx import ASGITransport, AsyncClient

from crowdfund.api.middleware import RateLimitingMiddleware
from crowdfund.config import APISettings
from crowdfund.main import create_app


class SlowMailer:
    async def send(self, to: str, subject: str, body: str) -> None:
        await asyncio.sleep(5)


@asynccontextmanager
async def client_for(settings, mailer):
    application = create_app(settings, mailer=mailer)
    await application.state.database.init()
    transport = ASGITransport(app=application)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        await application.state.database.close()


async def test_rate_limit(settings, mailer):
    settings.api = APISettings(
        rate_limit_enabled=True,
        rate_limit_requests=2,
        public_base_url="http://testserver",
    )

    async with client_for(settings, mailer) as client:
        responses = [await client.get("/health") for _ in range(3)]

    assert [r.status_code for r in responses] == [200, 200, 429]
    assert responses[-1].json()["error_code"] == "RATE_LIMIT_EXCEEDED"


async def test_request_timeout(settings):
    settings.api = APISettings(
        rate_limit_enabled=False,
        request_timeout_seconds=0.2,
        public_base_url="http://testserver",
    )

    async with client_for(settings, SlowMailer()) as client:
        response = await client.post(
            "/api/register", json={"email": "slow@example.com", "password": "secret123"}
        )

    assert response.status_code == 504
    assert response.json()["error_code"] == "REQUEST_TIMEOUT"


def test_idle_clients_are_forgotten():
    limiter = RateLimitingMiddleware(app=None, requests_per_window=5, window_seconds=60)
    limiter.request_times = {
        "10.0.0.1": [100.0, 110.0],
        "10.0.0.2": [150.0, 200.0],
        "10.0.0.3": [],
    }

    limiter.sweep(current_time=190.0)

    assert list(limiter.request_times) == ["10.0.0.2"]
    assert limiter.last_sweep == 190.0


async def test_security_headers(client: AsyncClient):
    response = await client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"]
