"""
Admin authentication: login and admin resolution for protected endpoints.
"""

from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.core.exceptions import Forbidden, Unauthorized
from courtbook.core.logging import get_logger
from courtbook.core.security import create_access_token, get_current_user_id, verify_password
from courtbook.db.session import get_db
from courtbook.models.admin_user import AdminUser
from courtbook.schemas.admin import AdminLogin

logger = get_logger(__name__)


async def get_admin_by_user_id(db: AsyncSession, user_id: str) -> Optional[AdminUser]:
    result = await db.execute(select(AdminUser).where(AdminUser.user_id == user_id))
    return result.scalar_one_or_none()


async def authenticate_admin(db: AsyncSession, login_data: AdminLogin) -> str:
    """
    Check admin credentials and return a JWT access token.
    Raises 401 if credentials are invalid, 403 if the account is deactivated.
    """
    result = await db.execute(
        select(AdminUser).where(AdminUser.email == login_data.email.lower())
    )
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(login_data.password, admin.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise Unauthorized("Invalid email or password")

    if not admin.is_active:
        logger.warning("login_rejected", reason="inactive", admin_user_id=admin.user_id)
        raise Forbidden("Account is deactivated")

    token = create_access_token(data={"sub": admin.user_id})
    logger.info("admin_logged_in", admin_user_id=admin.user_id)
    return token


async def get_current_admin(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> AdminUser:
    """
    Resolve the bearer token to an active admin.

    No or invalid token is a 401 (raised by get_current_user_id); a valid
    token for someone who is not an active admin is a 403.
    """
    admin = await get_admin_by_user_id(db, user_id)
    if admin is None or not admin.is_active:
        logger.warning("admin_access_denied", user_id=user_id)
        raise Forbidden()
    return admin
