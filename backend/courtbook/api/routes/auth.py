"""
Admin authentication endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.db.session import get_db
from courtbook.models.admin_user import AdminUser
from courtbook.schemas.admin import AdminLogin, AdminResponse, Token
from courtbook.services.auth_service import authenticate_admin, get_current_admin

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=Token)
async def login(login_data: AdminLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate an admin and receive a JWT access token."""
    token = await authenticate_admin(db, login_data)
    return Token(access_token=token)


@router.get("/me", response_model=AdminResponse)
async def current_admin(admin: AdminUser = Depends(get_current_admin)):
    return admin
