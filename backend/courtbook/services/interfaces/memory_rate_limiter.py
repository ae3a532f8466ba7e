"""
In-process rate limiter.
Counters live in this process only; run a shared backend when more than one
worker serves bookings.
"""

import math
import time
from typing import Callable

from courtbook.services.interfaces.rate_limiter import RateLimiter, RateLimitDecision

SWEEP_INTERVAL_SECONDS = 300


class _Window:
    __slots__ = ("count", "reset_at")

    def __init__(self, reset_at: float):
        self.count = 0
        self.reset_at = reset_at


class InMemoryRateLimiter(RateLimiter):
    """
    Fixed window per identity, opened by the identity's first request.

    Expired windows are swept lazily on access instead of by a background
    timer, so the limiter owns no tasks.
    """

    name = "memory"

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(max_requests, window_seconds)
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._last_sweep = clock()

    async def hit(self, identity: str) -> RateLimitDecision:
        # No awaits below: check and increment run atomically on the event loop.
        now = self._clock()
        self._sweep(now)

        window = self._windows.get(identity)
        if window is None or now >= window.reset_at:
            window = _Window(reset_at=now + self.window_seconds)
            self._windows[identity] = window

        reset_in = max(0.0, window.reset_at - now)
        if window.count >= self.max_requests:
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                retry_after_s=math.ceil(reset_in),
                reset_in_s=reset_in,
            )

        window.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - window.count,
            retry_after_s=0.0,
            reset_in_s=reset_in,
        )

    async def reset(self, identity: str) -> None:
        self._windows.pop(identity, None)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]

    def __len__(self) -> int:
        return len(self._windows)
