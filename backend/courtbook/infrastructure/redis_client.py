"""
Redis client shared by caching and the shared rate-limit backend.
Separated from business logic for clean architecture.
"""

import time
from typing import Optional

import redis.asyncio as redis

from courtbook.core.config import get_settings
from courtbook.core.logging import get_logger
from courtbook.core.metrics import redis_connection_errors

logger = get_logger(__name__)


def _now() -> float:
    return time.monotonic()


class RedisClient:
    """Lazily connected singleton. ``None`` means Redis is disabled or down.

    After a failed ping, callers get ``None`` without a new connection attempt
    until REDIS_RECONNECT_BACKOFF_SECONDS have passed.
    """

    _instance: Optional[redis.Redis] = None
    _retry_at: float = 0.0

    @classmethod
    async def get_client(cls) -> Optional[redis.Redis]:
        settings = get_settings()
        if not settings.REDIS_ENABLED:
            return None

        if cls._instance is None:
            if _now() < cls._retry_at:
                return None

            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except Exception as e:
                redis_connection_errors.inc()
                cls._retry_at = _now() + settings.REDIS_RECONNECT_BACKOFF_SECONDS
                logger.error(
                    "redis_connection_failed",
                    error=str(e),
                    retry_in_seconds=settings.REDIS_RECONNECT_BACKOFF_SECONDS,
                )
                await client.aclose()
                return None
            logger.info("redis_connected", url=settings.REDIS_URL)
            cls._instance = client
            cls._retry_at = 0.0
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None
        cls._retry_at = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Get the Redis client, or None when unavailable."""
    return await RedisClient.get_client()


async def close_redis() -> None:
    await RedisClient.close()
