"""
Court catalog endpoint with Redis caching.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.core.logging import get_logger
from courtbook.db.session import get_db
from courtbook.schemas.court import CourtResponse
from courtbook.services.cache_service import get_cached_courts, set_cached_courts
from courtbook.services.court_service import list_active_courts

logger = get_logger(__name__)
router = APIRouter(prefix="/courts", tags=["Courts"])


@router.get("/", response_model=list[CourtResponse])
async def list_courts(db: AsyncSession = Depends(get_db)):
    """
    List active courts.
    Results are cached in Redis for REDIS_CACHE_TTL seconds.
    """
    cached = await get_cached_courts()
    if cached is not None:
        logger.info("courts_list_cache_hit", count=len(cached))
        return [CourtResponse(**court) for court in cached]

    courts = await list_active_courts(db)
    response_data = [CourtResponse.model_validate(court).model_dump() for court in courts]
    await set_cached_courts(response_data)
    return [CourtResponse(**court) for court in response_data]
