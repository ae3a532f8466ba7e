"""
Rate limiter factory.
Configures which rate limiter backend guards booking creation.
"""

from typing import Optional

from courtbook.core.config import get_settings
from courtbook.services.interfaces.rate_limiter import RateLimiter
from courtbook.services.interfaces.memory_rate_limiter import InMemoryRateLimiter
from courtbook.services.rate_limit_service import RedisRateLimiter


def build_rate_limiter() -> RateLimiter:
    """
    Build the configured rate limiter.

    - memory: single process deployments and development
    - redis: several workers or nodes sharing one quota per client

    Selected via the RATE_LIMIT_BACKEND env var.
    """
    settings = get_settings()
    max_requests = settings.BOOKING_RATE_LIMIT_MAX_REQUESTS
    window = settings.BOOKING_RATE_LIMIT_WINDOW_SECONDS

    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisRateLimiter(max_requests, window)
    return InMemoryRateLimiter(max_requests, window)


# Singleton instance
_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency returning the rate limiter singleton."""
    global _limiter
    if _limiter is None:
        _limiter = build_rate_limiter()
    return _limiter
