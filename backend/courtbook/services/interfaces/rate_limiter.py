"""
Rate limiter strategy interface.
Allows swapping between process-local and shared-store counters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_s: float  # 0 when allowed; seconds until the window resets otherwise
    reset_in_s: float


class RateLimiter(ABC):
    """
    Interface for booking-creation rate limiting.

    Implementations:
    - InMemoryRateLimiter: per-process counters, single node only
    - RedisRateLimiter: shared counters in Redis, correct across nodes
    """

    name: str = "abstract"

    def __init__(self, max_requests: int, window_seconds: int):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @abstractmethod
    async def hit(self, identity: str) -> RateLimitDecision:
        """
        Count one request for ``identity`` and decide whether it may proceed.

        The window starts at an identity's first request and resets once
        ``window_seconds`` have elapsed.
        """

    @abstractmethod
    async def reset(self, identity: str) -> None:
        """Forget all counted requests for ``identity``."""
