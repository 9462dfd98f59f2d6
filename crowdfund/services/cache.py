"""Read-through cache for public campaign listings."""
import json
from typing import Any, Optional

import structlog
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ..config import RedisSettings

logger = structlog.get_logger(__name__)

CAMPAIGNS_ALL_KEY = "campaigns:all"


class CampaignCache:
    """JSON values in redis.

    The store stays the source of truth: a cache failure is logged and the
    caller falls back to the database.
    """

    def __init__(self, client: Optional[aioredis.Redis], ttl_seconds: int = 60):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: RedisSettings) -> "CampaignCache":
        if not settings.enabled:
            return cls(None, settings.campaign_ttl_seconds)
        client = aioredis.from_url(
            settings.url,
            decode_responses=True,
            socket_timeout=settings.socket_timeout,
        )
        return cls(client, settings.campaign_ttl_seconds)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            cached = await self.client.get(key)
        except RedisError as e:
            logger.warning("Cache read failed", key=key, error=str(e))
            return None
        if cached is None:
            return None
        logger.debug("Serving from cache", key=key)
        return json.loads(cached)

    async def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        try:
            await self.client.setex(key, self.ttl_seconds, json.dumps(value))
        except RedisError as e:
            logger.warning("Cache write failed", key=key, error=str(e))

    async def invalidate(self, key: str = CAMPAIGNS_ALL_KEY) -> None:
        if not self.enabled:
            return
        try:
            await self.client.delete(key)
        except RedisError as e:
            logger.warning("Cache invalidation failed", key=key, error=str(e))

    async def close(self) -> None:
        if self.enabled:
            await self.client.aclose()
