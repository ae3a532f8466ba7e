#!/usr/bin/env python3
"""Create courts by name (existing names are left alone) and drop the cached court list."""

import argparse
import asyncio
from pathlib import Path
import sys
from typing import Optional

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from sqlalchemy import select

from courtbook.core.logging import get_logger, setup_logging
from courtbook.db.session import SessionLocal, engine, unit_of_work
from courtbook.infrastructure.redis_client import close_redis
from courtbook.models.court import Court
from courtbook.services.cache_service import invalidate_court_cache

logger = get_logger("seed_courts")

DEFAULT_COURTS = ("Court 1", "Court 2")


async def seed(names: list[str]) -> int:
    created = 0
    async with SessionLocal() as db:
        async with unit_of_work(db):
            result = await db.execute(select(Court.name).where(Court.name.in_(names)))
            existing = set(result.scalars().all())
            for name in names:
                if name in existing:
                    continue
                db.add(Court(name=name))
                created += 1
    logger.info("courts_seeded", created=created, skipped=len(names) - created)

    await invalidate_court_cache()
    await close_redis()
    await engine.dispose()
    return created


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed courts")
    parser.add_argument("names", nargs="*", default=list(DEFAULT_COURTS), help="Court names")
    args = parser.parse_args(argv)

    setup_logging()
    asyncio.run(seed(args.names))
    return 0


if __name__ == "__main__":
    sys.exit(main())
