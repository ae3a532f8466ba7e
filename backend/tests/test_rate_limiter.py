"""
Tests for the booking rate limiter backends.
"""

import pytest

from courtbook.services.interfaces.memory_rate_limiter import InMemoryRateLimiter
from courtbook.services import rate_limit_service
from courtbook.services.rate_limit_service import RedisRateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.mark.asyncio
async def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=5, window_seconds=900, clock=clock)

    for expected_remaining in (4, 3, 2, 1, 0):
        decision = await limiter.hit("1.2.3.4")
        assert decision.allowed
        assert decision.remaining == expected_remaining

    blocked = await limiter.hit("1.2.3.4")
    assert not blocked.allowed
    assert blocked.retry_after_s == 900


@pytest.mark.asyncio
async def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    await limiter.hit("a")
    await limiter.hit("a")
    assert not (await limiter.hit("a")).allowed

    clock.advance(30)
    blocked = await limiter.hit("a")
    assert not blocked.allowed
    assert blocked.retry_after_s == 30

    clock.advance(30)
    assert (await limiter.hit("a")).allowed


@pytest.mark.asyncio
async def test_identities_are_independent():
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert (await limiter.hit("a")).allowed
    assert not (await limiter.hit("a")).allowed
    assert (await limiter.hit("b")).allowed


@pytest.mark.asyncio
async def test_reset_forgets_identity():
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    await limiter.hit("a")
    await limiter.reset("a")
    assert (await limiter.hit("a")).allowed


@pytest.mark.asyncio
async def test_expired_windows_are_swept():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=5, window_seconds=60, clock=clock)
    for i in range(10):
        await limiter.hit(f"client-{i}")
    assert len(limiter) == 10

    clock.advance(301)
    await limiter.hit("late")
    assert len(limiter) == 1


def test_rejects_non_positive_configuration():
    with pytest.raises(ValueError):
        InMemoryRateLimiter(max_requests=0, window_seconds=60)
    with pytest.raises(ValueError):
        InMemoryRateLimiter(max_requests=5, window_seconds=0)


class _FakeRedis:
    def __init__(self, replies=None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def eval(self, script, numkeys, *args):
        self.calls.append(args)
        if self.error:
            raise self.error
        return self.replies.pop(0)


@pytest.mark.asyncio
async def test_redis_limiter_counts_in_shared_store(monkeypatch):
    fake = _FakeRedis(replies=[[1, 900000], [6, 450000]])

    async def fake_get_redis():
        return fake

    monkeypatch.setattr(rate_limit_service, "get_redis", fake_get_redis)
    limiter = RedisRateLimiter(max_requests=5, window_seconds=900)

    first = await limiter.hit("1.2.3.4")
    assert first.allowed and first.remaining == 4
    assert fake.calls[0] == ("ratelimit:booking:1.2.3.4", 900000)

    sixth = await limiter.hit("1.2.3.4")
    assert not sixth.allowed
    assert sixth.retry_after_s == 450


@pytest.mark.asyncio
async def test_redis_limiter_fails_open(monkeypatch):
    fake = _FakeRedis(error=ConnectionError("redis down"))

    async def fake_get_redis():
        return fake

    monkeypatch.setattr(rate_limit_service, "get_redis", fake_get_redis)
    limiter = RedisRateLimiter(max_requests=5, window_seconds=900)

    decision = await limiter.hit("1.2.3.4")
    assert decision.allowed


@pytest.mark.asyncio
async def test_redis_limiter_without_redis_admits(monkeypatch):
    async def no_redis():
        return None

    monkeypatch.setattr(rate_limit_service, "get_redis", no_redis)
    decision = await RedisRateLimiter(max_requests=1, window_seconds=60).hit("x")
    assert decision.allowed
