"""
Court lookups. Courts are read-only here.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.models.court import Court


async def get_active_court(db: AsyncSession, court_id: int) -> Optional[Court]:
    result = await db.execute(
        select(Court).where(Court.id == court_id, Court.is_active.is_(True))
    )
    return result.scalar_one_or_none()


async def list_active_courts(db: AsyncSession) -> list[Court]:
    result = await db.execute(
        select(Court).where(Court.is_active.is_(True)).order_by(Court.name.asc())
    )
    return list(result.scalars().all())
