"""
Redis client and cache helpers.

Purpose:
- Provide async Redis connection and JSON caching utilities
- Back the weather (10 min) and geocoding (24 h) caches

Every helper degrades to a cache miss when Redis is unreachable, so the bot
keeps working (just slower) without it.
"""
import json
import logging
from config.settings import settings
from typing import Any, Optional
import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self.redis: Optional[redis.Redis] = None

    async def connect(self):
        """Initialize async Redis connection; leaves the client unset on failure."""
        try:
            client = redis.from_url(self.url, encoding="utf8", decode_responses=True)
            await client.ping()
            self.redis = client
            logger.info("Connected to Redis")
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.redis = None

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Disconnected from Redis")

    async def ping(self) -> bool:
        if not self.redis:
            return False
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.error(f"Redis PING error: {e}")
            return False

    async def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        if not self.redis:
            return None
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Redis GET error: {e}")
            return None

    async def set(self, key: str, value: str, ttl: int = 300) -> bool:
        """Set key-value with TTL (seconds)."""
        if not self.redis:
            return False
        try:
            await self.redis.setex(key, ttl, value)
            return True
        except RedisError as e:
            logger.error(f"Redis SET error: {e}")
            return False

    async def get_json(self, key: str) -> Optional[Any]:
        """Retrieve a cached JSON value, or None if missing or unreadable."""
        value = await self.get(key)
        if value:
            try:
                return json.loads(value)
            except ValueError:
                logger.warning("Discarding unreadable cache entry %s", key)
                return None
        return None

    async def set_json(self, key: str, data: Any, ttl: int = 300) -> bool:
        return await self.set(key, json.dumps(data), ttl=ttl)


# Global Redis client instance
redis_client = RedisClient()
