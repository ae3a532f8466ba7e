"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh SQLite file database (or TEST_DATABASE_URL, e.g. a
PostgreSQL test database) with all tables created, and an HTTP client whose
requests each open their own session, like production.
"""

import os

# Settings are read once; configure them before courtbook is imported.
TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
os.environ.setdefault("BOOKING_ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from courtbook.main import app
from courtbook.db.base import Base
from courtbook.db.session import get_db
from courtbook.core.security import create_access_token, hash_password
from courtbook.models.admin_user import AdminUser
from courtbook.models.court import Court
from courtbook.services.interfaces.memory_rate_limiter import InMemoryRateLimiter
from courtbook.services.scheduling import operating_today
from courtbook.services.strategy_factory import get_rate_limiter

ADMIN_PASSWORD = "adminpassword123"


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create tables on a per-test database, then drop them."""
    url = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    test_engine = create_async_engine(url, echo=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def rate_limiter() -> InMemoryRateLimiter:
    return InMemoryRateLimiter(max_requests=5, window_seconds=900)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, rate_limiter) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB and rate limiter dependencies overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def court(db_session: AsyncSession) -> Court:
    court = Court(name="Court 1", description="Indoor hard court")
    db_session.add(court)
    await db_session.commit()
    await db_session.refresh(court)
    return court


@pytest_asyncio.fixture
async def inactive_court(db_session: AsyncSession) -> Court:
    court = Court(name="Closed Court", is_active=False)
    db_session.add(court)
    await db_session.commit()
    await db_session.refresh(court)
    return court


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> AdminUser:
    admin = AdminUser(
        user_id="admin-user-1",
        email="admin@example.com",
        name="Front Desk",
        hashed_password=hash_password(ADMIN_PASSWORD),
    )
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_headers(admin_user: AdminUser) -> dict:
    token = create_access_token(data={"sub": admin_user.user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def non_admin_headers() -> dict:
    """A valid token for someone who is not in admin_users."""
    token = create_access_token(data={"sub": "regular-user-42"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def booking_day():
    """A date inside the booking window where no slot can be in the past."""
    return operating_today() + timedelta(days=3)


@pytest.fixture
def booking_payload(court: Court, booking_day):
    """Factory for valid booking request bodies; keyword args override fields."""

    def _make(**overrides) -> dict:
        payload = {
            "customer_name": "Juan Dela Cruz",
            "customer_email": "juan@example.com",
            "customer_phone": "09171234567",
            "court_id": court.id,
            "date": booking_day.isoformat(),
            "start_time": "10:00",
            "end_time": "12:00",
            "payment_method": "GCASH",
            "reference_code": "GC-123456789",
        }
        payload.update(overrides)
        return payload

    return _make
