"""Database engine and session management."""
import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..config import DatabaseSettings
from ..models.base import Base

logger = logging.getLogger(__name__)


def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the async engine for the configured URL."""
    if settings.url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return create_async_engine(
            settings.url,
            echo=settings.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        settings.url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
        pool_recycle=3600,  # 1 hour
    )


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, settings: DatabaseSettings):
        self.engine = create_engine(settings)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created")

    def session(self) -> AsyncSession:
        """Open a new session."""
        return self.session_factory()

    async def init(self) -> None:
        """Create the database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created")

    async def close(self) -> None:
        """Close the database connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")
