"""
Redis connection management for caching and rate limiting.
"""

import json
import uuid
from typing import Optional, Any
import redis.asyncio as redis
from redis.exceptions import RedisError

from bulletin.core.config import settings
from bulletin.core.observability import get_logger

logger = get_logger(__name__)


class RedisManager:
    """
    Manages Redis connections and operations.

    Redis is an optimization here: every operation degrades gracefully
    (cache miss, rate limit fails open) when Redis is down or was never
    initialized.
    """

    def __init__(self):
        """Initialize Redis manager."""
        self.redis_client: Optional[redis.Redis] = None

    async def init_redis(self):
        """Initialize Redis connection pool."""
        self.redis_client = redis.Redis.from_url(
            str(settings.redis_url),
            decode_responses=True,
            max_connections=settings.redis_pool_size,
            socket_connect_timeout=settings.redis_pool_timeout,
            socket_keepalive=True,
        )

        try:
            await self.redis_client.ping()
            logger.info("Redis connection initialized successfully")
        except (RedisError, OSError) as e:
            # Keep the client; later calls retry the connection
            logger.warning("Redis unavailable at startup", error=str(e))

    async def close(self):
        """Close Redis connections."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis connections closed")

    # Cache Operations
    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if self.redis_client is None:
            return None
        try:
            value = await self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except (RedisError, OSError, json.JSONDecodeError) as e:
            logger.error("Error getting cache key", key=key, error=str(e))
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None
    ) -> bool:
        """
        Set cache value.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        if self.redis_client is None:
            return False
        try:
            serialized = json.dumps(value)
            if ttl:
                await self.redis_client.setex(key, ttl, serialized)
            else:
                await self.redis_client.set(key, serialized)
            return True
        except (RedisError, OSError, TypeError) as e:
            logger.error("Error setting cache key", key=key, error=str(e))
            return False

    async def delete_prefix(self, prefix: str) -> int:
        """
        Delete every key starting with prefix.

        Returns:
            Number of keys deleted
        """
        if self.redis_client is None:
            return 0
        deleted = 0
        try:
            async for key in self.redis_client.scan_iter(match=f"{prefix}*", count=500):
                deleted += await self.redis_client.delete(key)
            return deleted
        except (RedisError, OSError) as e:
            logger.error("Error deleting cache prefix", prefix=prefix, error=str(e))
            return deleted

    # Rate Limiting
    async def check_rate_limit(
        self,
        key: str,
        limit: int,
        window: int
    ) -> tuple[bool, int]:
        """
        Check rate limit using sliding window.

        Args:
            key: Rate limit key
            limit: Maximum requests
            window: Time window in seconds

        Returns:
            Tuple of (allowed, remaining)
        """
        if self.redis_client is None:
            return True, limit
        try:
            pipe = self.redis_client.pipeline()
            now = await self.redis_client.time()
            now_ms = now[0] * 1000 + now[1] // 1000
            window_ms = window * 1000

            pipe.zremrangebyscore(key, 0, now_ms - window_ms)
            # Unique member so requests in the same millisecond all count
            pipe.zadd(key, {f"{now_ms}:{uuid.uuid4()}": now_ms})
            pipe.zcard(key)
            pipe.expire(key, window + 1)

            results = await pipe.execute()
            count = results[2]

            allowed = count <= limit
            remaining = max(0, limit - count)

            return allowed, remaining

        except (RedisError, OSError) as e:
            logger.error("Error checking rate limit", key=key, error=str(e))
            # Fail open - allow request if Redis is down
            return True, limit

    async def health_check(self) -> bool:
        """
        Check Redis health.

        Returns:
            True if Redis is healthy
        """
        if self.redis_client is None:
            return False
        try:
            await self.redis_client.ping()
            return True
        except (RedisError, OSError) as e:
            logger.error("Redis health check failed", error=str(e))
            return False


# Global Redis manager instance
redis_manager = RedisManager()


async def init_redis():
    """Initialize Redis on application startup."""
    await redis_manager.init_redis()


async def close_redis():
    """Close Redis connections on application shutdown."""
    await redis_manager.close()
