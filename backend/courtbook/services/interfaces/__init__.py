"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .rate_limiter import RateLimiter, RateLimitDecision
from .memory_rate_limiter import InMemoryRateLimiter

__all__ = ['RateLimiter', 'RateLimitDecision', 'InMemoryRateLimiter']
