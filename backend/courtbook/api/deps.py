"""
Shared route dependencies: client identity and the booking rate gate.
"""

import math

from fastapi import Depends, Request, Response

from courtbook.core.exceptions import RateLimited
from courtbook.core.logging import get_logger
from courtbook.core.metrics import record_booking_attempt, record_rate_limit
from courtbook.services.interfaces.rate_limiter import RateLimiter
from courtbook.services.strategy_factory import get_rate_limiter

logger = get_logger(__name__)

FORWARDED_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def client_identifier(request: Request) -> str:
    """Best-effort client IP: proxy headers first, then the socket peer."""
    for header in FORWARDED_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-For is "client, proxy1, proxy2"
            first = value.split(",")[0].strip()
            if first:
                return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_booking_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """
    Count a booking attempt against the caller's quota.

    Runs as a route dependency, so it is evaluated before the request body is
    validated: malformed requests still consume quota.
    """
    identity = client_identifier(request)
    decision = await limiter.hit(identity)
    record_rate_limit(limiter.name, decision.allowed)

    if not decision.allowed:
        record_booking_attempt("rate_limited")
        logger.warning(
            "booking_rate_limited",
            client_ip=identity,
            limit=decision.limit,
            retry_after_s=decision.retry_after_s,
        )
        raise RateLimited(retry_after=math.ceil(decision.retry_after_s))

    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
