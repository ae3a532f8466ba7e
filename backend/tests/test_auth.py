"""
Tests for admin authentication.
"""

import pytest
from httpx import AsyncClient

ADMIN_PASSWORD = "adminpassword123"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user):
    """Valid credentials return a JWT token."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "admin@example.com",
        "password": ADMIN_PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_token_grants_admin_access(client: AsyncClient, admin_user):
    login = await client.post("/api/v1/auth/login", json={
        "email": "ADMIN@example.com",
        "password": ADMIN_PASSWORD,
    })
    token = login.json()["access_token"]

    response = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "admin-user-1"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, admin_user):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "admin@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_nonexistent_user(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anything123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_admin(client: AsyncClient, db_session, admin_user):
    admin_user.is_active = False
    await db_session.commit()

    response = await client.post("/api/v1/auth/login", json={
        "email": "admin@example.com",
        "password": ADMIN_PASSWORD,
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_admin_token_is_forbidden(
    client: AsyncClient, db_session, admin_user, admin_headers
):
    admin_user.is_active = False
    await db_session.commit()

    response = await client.get("/api/v1/auth/me", headers=admin_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401
