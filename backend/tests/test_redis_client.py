"""
Tests for the shared Redis connection.
"""

from types import SimpleNamespace

import pytest

from courtbook.infrastructure import redis_client
from courtbook.infrastructure.redis_client import RedisClient


class UnreachableRedis:
    async def ping(self):
        raise ConnectionError("Connection refused")

    async def aclose(self):
        pass


@pytest.fixture
def redis_down(monkeypatch):
    """Redis enabled in settings but refusing connections; returns the connect log."""
    attempts = []

    def from_url(url, **kwargs):
        attempts.append(url)
        return UnreachableRedis()

    settings = SimpleNamespace(
        REDIS_ENABLED=True,
        REDIS_URL="redis://redis.invalid:6379/0",
        REDIS_RECONNECT_BACKOFF_SECONDS=30,
    )
    monkeypatch.setattr(redis_client, "get_settings", lambda: settings)
    monkeypatch.setattr(redis_client.redis, "from_url", from_url)
    monkeypatch.setattr(RedisClient, "_instance", None)
    monkeypatch.setattr(RedisClient, "_retry_at", 0.0)
    return attempts


@pytest.mark.asyncio
async def test_failed_connect_is_not_retried_during_backoff(redis_down, monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(redis_client, "_now", lambda: now[0])

    assert await redis_client.get_redis() is None
    assert await redis_client.get_redis() is None
    now[0] += 29
    assert await redis_client.get_redis() is None
    assert len(redis_down) == 1

    now[0] += 2
    assert await redis_client.get_redis() is None
    assert len(redis_down) == 2


@pytest.mark.asyncio
async def test_close_clears_backoff(redis_down, monkeypatch):
    monkeypatch.setattr(redis_client, "_now", lambda: 1000.0)

    assert await redis_client.get_redis() is None
    await redis_client.close_redis()
    assert await redis_client.get_redis() is None
    assert len(redis_down) == 2
