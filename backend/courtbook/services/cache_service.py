"""
Redis caching for the court catalog.

CACHING STRATEGY
================

What we cache:
  - The active court list (JSON-serialized), key "courts:active"

Why:
  - Every booking page load asks for the court list first
  - Courts are read-only to the booking flow and change only through
    provisioning, so a TTL is enough to pick up changes

Why NOT cache availability:
  - Availability must reflect bookings made seconds ago; a stale "available"
    slot only produces a 409 later, but a stale "taken" slot loses a sale
  - The availability query hits the (court_id, date, status) index and is cheap
"""

import json
from typing import Optional

from courtbook.core.config import get_settings
from courtbook.core.logging import get_logger
from courtbook.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

COURTS_CACHE_KEY = "courts:active"


async def get_cached_courts() -> Optional[list[dict]]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(COURTS_CACHE_KEY)
        if data:
            logger.debug("cache_hit", key=COURTS_CACHE_KEY)
            return json.loads(data)
        logger.debug("cache_miss", key=COURTS_CACHE_KEY)
    except Exception as e:
        logger.error("cache_get_error", key=COURTS_CACHE_KEY, error=str(e))

    return None


async def set_cached_courts(courts: list[dict]) -> None:
    client = await get_redis()
    if not client:
        return

    ttl = get_settings().REDIS_CACHE_TTL
    try:
        await client.setex(COURTS_CACHE_KEY, ttl, json.dumps(courts, default=str))
        logger.debug("cache_set", key=COURTS_CACHE_KEY, ttl=ttl)
    except Exception as e:
        logger.error("cache_set_error", key=COURTS_CACHE_KEY, error=str(e))


async def invalidate_court_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.delete(COURTS_CACHE_KEY)
        logger.info("cache_invalidated", key=COURTS_CACHE_KEY)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
