#!/usr/bin/env python3
"""Provision an admin account, or reactivate and reset an existing one."""

import argparse
import asyncio
import getpass
from pathlib import Path
import sys
import uuid
from typing import Optional

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from sqlalchemy import select

from courtbook.core.logging import get_logger, setup_logging
from courtbook.core.security import hash_password
from courtbook.db.session import SessionLocal, engine, unit_of_work
from courtbook.models.admin_user import AdminUser

logger = get_logger("create_admin")


async def upsert_admin(email: str, name: str, password: str, user_id: Optional[str]) -> AdminUser:
    async with SessionLocal() as db:
        async with unit_of_work(db):
            result = await db.execute(select(AdminUser).where(AdminUser.email == email))
            admin = result.scalar_one_or_none()
            if admin is None:
                admin = AdminUser(
                    user_id=user_id or uuid.uuid4().hex,
                    email=email,
                    name=name,
                    hashed_password=hash_password(password),
                )
                db.add(admin)
                logger.info("admin_created", email=email, admin_user_id=admin.user_id)
            else:
                admin.name = name
                admin.hashed_password = hash_password(password)
                admin.is_active = True
                logger.info("admin_updated", email=email, admin_user_id=admin.user_id)
    await engine.dispose()
    return admin


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create or update an admin user")
    parser.add_argument("email", help="Admin login email")
    parser.add_argument("--name", default="Administrator", help="Display name")
    parser.add_argument(
        "--user-id",
        default=None,
        help="External user id to link (default: a random id)",
    )
    args = parser.parse_args(argv)

    setup_logging()
    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1
    if getpass.getpass("Repeat password: ") != password:
        print("Passwords do not match", file=sys.stderr)
        return 1

    asyncio.run(upsert_admin(args.email.strip().lower(), args.name, password, args.user_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
