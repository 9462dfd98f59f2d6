"""Main FastAPI application."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.middleware import (
    ErrorHandlingMiddleware,
    RateLimitingMiddleware,
    RequestLoggingMiddleware,
    RequestTimeoutMiddleware,
    SecurityHeadersMiddleware,
    api_exception_handler,
    validation_exception_handler,
)
from .api.routes import auth, campaigns, dashboard, donations, engagement
from .config import Settings
from .core.auth import AuthService
from .core.exceptions import BaseAPIException
from .core.logging import configure_logging
from .core.passwords import PasswordHasher
from .core.tokens import TokenCodec
from .database import Database
from .schemas.common import HealthResponse
from .services import (
    CampaignCache,
    CampaignService,
    DashboardService,
    DonationService,
    EngagementService,
    Mailer,
    build_mailer,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging(app.state.settings)
    await app.state.database.init()
    yield
    # Shutdown
    await app.state.campaign_cache.close()
    await app.state.database.close()


def create_app(
    settings: Optional[Settings] = None,
    mailer: Optional[Mailer] = None,
    cache: Optional[CampaignCache] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Every component is built here from ``settings`` and kept on
    ``app.state``; route dependencies read them from there.
    """
    settings = settings or Settings()

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )

    mailer = mailer or build_mailer(settings.mail)
    cache = cache or CampaignCache.from_settings(settings.redis)
    token_codec = TokenCodec(settings.auth)

    app.state.settings = settings
    app.state.database = Database(settings.database)
    app.state.token_codec = token_codec
    app.state.campaign_cache = cache
    app.state.auth_service = AuthService(
        settings,
        hasher=PasswordHasher(rounds=settings.auth.bcrypt_rounds),
        codec=token_codec,
        mailer=mailer,
    )
    app.state.campaign_service = CampaignService(cache)
    app.state.donation_service = DonationService(cache, mailer)
    app.state.engagement_service = EngagementService()
    app.state.dashboard_service = DashboardService()

    # Exception handlers
    app.add_exception_handler(BaseAPIException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add middleware
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestTimeoutMiddleware,
        timeout_seconds=settings.api.request_timeout_seconds,
    )
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitingMiddleware,
        requests_per_window=settings.api.rate_limit_requests,
        window_seconds=settings.api.rate_limit_window,
        enabled=settings.api.rate_limit_enabled,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    prefix = settings.api.prefix
    app.include_router(auth.router, prefix=prefix)
    app.include_router(campaigns.router, prefix=prefix)
    app.include_router(donations.router, prefix=prefix)
    app.include_router(donations.payments_router, prefix=prefix)
    app.include_router(engagement.likes_router, prefix=prefix)
    app.include_router(engagement.comments_router, prefix=prefix)
    app.include_router(dashboard.router, prefix=prefix)

    @app.get("/")
    async def root():
        return {
            "status": "OK",
            "message": "Crowdfunding backend running",
            "version": settings.api.version,
        }

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", version=settings.api.version)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = Settings()
    uvicorn.run(
        "crowdfund.main:create_app",
        factory=True,
        host=_settings.api.host,
        port=_settings.api.port,
        reload=_settings.api.reload,
        workers=_settings.api.workers if not _settings.api.reload else 1,
    )
