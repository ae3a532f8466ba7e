"""
Redis-backed rate limiter for multi-worker deployments.
Implements the RateLimiter interface with shared counters.

Circuit Breaker Pattern:
  On Redis failure, the limiter "fails open" (admits the request).
  Rate limiting protects against abuse; it is not what keeps bookings
  consistent, so a Redis outage should not block all bookings.
  Slot uniqueness is still enforced by the database.
"""

import math

from courtbook.core.logging import get_logger
from courtbook.core.metrics import redis_connection_errors
from courtbook.infrastructure.redis_client import get_redis
from courtbook.services.interfaces.rate_limiter import RateLimiter, RateLimitDecision

logger = get_logger(__name__)

# KEYS[1] = counter key
# ARGV[1] = window length in milliseconds
# Returns: {count, ttl_ms}
FIXED_WINDOW_LUA = r"""
local count = redis.call('INCR', KEYS[1])
if count == 1 then
  redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl < 0 then
  redis.call('PEXPIRE', KEYS[1], ARGV[1])
  ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""


class RedisRateLimiter(RateLimiter):
    """
    Fixed window per identity stored as one Redis counter with a TTL.
    INCR and the expiry run in a single Lua script, so concurrent workers
    never lose the window's expiry.
    """

    name = "redis"

    def __init__(self, max_requests: int, window_seconds: int, namespace: str = "ratelimit:booking"):
        super().__init__(max_requests, window_seconds)
        self.namespace = namespace

    def _key(self, identity: str) -> str:
        return f"{self.namespace}:{identity}"

    def _fail_open(self) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests,
            retry_after_s=0.0,
            reset_in_s=float(self.window_seconds),
        )

    async def hit(self, identity: str) -> RateLimitDecision:
        client = await get_redis()
        if client is None:
            return self._fail_open()

        try:
            count, ttl_ms = await client.eval(
                FIXED_WINDOW_LUA, 1, self._key(identity), self.window_seconds * 1000
            )
        except Exception as e:
            redis_connection_errors.inc()
            logger.warning("rate_limit_redis_error", error=str(e))
            return self._fail_open()

        count = int(count)
        reset_in = max(0.0, int(ttl_ms) / 1000.0)
        if count > self.max_requests:
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                retry_after_s=math.ceil(reset_in),
                reset_in_s=reset_in,
            )
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - count,
            retry_after_s=0.0,
            reset_in_s=reset_in,
        )

    async def reset(self, identity: str) -> None:
        client = await get_redis()
        if client is None:
            return
        try:
            await client.delete(self._key(identity))
        except Exception as e:
            redis_connection_errors.inc()
            logger.warning("rate_limit_redis_error", error=str(e))
