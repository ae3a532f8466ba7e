"""
Tests for the admin dashboard endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_stats_count_bookings_by_status(client: AsyncClient, admin_headers, booking_payload):
    first = await client.post("/api/v1/bookings/", json=booking_payload(start_time="08:00", end_time="09:00"))
    second = await client.post("/api/v1/bookings/", json=booking_payload(start_time="10:00", end_time="11:00"))
    await client.post("/api/v1/bookings/", json=booking_payload(start_time="12:00", end_time="13:00"))

    await client.post(
        "/api/v1/admin/payments/verify",
        json={"paymentId": first.json()["payment"]["id"], "approved": True},
        headers=admin_headers,
    )
    await client.post(
        "/api/v1/admin/payments/verify",
        json={
            "paymentId": second.json()["payment"]["id"],
            "approved": False,
            "rejectionReason": "Amount mismatch",
        },
        headers=admin_headers,
    )

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {
        "total_bookings": 3,
        "pending_verification": 1,
        "confirmed": 1,
        "cancelled": 1,
        "completed": 0,
    }


@pytest.mark.asyncio
async def test_recent_bookings_newest_first(client: AsyncClient, admin_headers, booking_payload):
    numbers = []
    for hour in (8, 10, 12):
        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(start_time=f"{hour:02d}:00", end_time=f"{hour + 1:02d}:00"),
        )
        numbers.append(response.json()["booking_number"])

    response = await client.get(
        "/api/v1/admin/bookings/recent", params={"limit": 2}, headers=admin_headers
    )
    assert response.status_code == 200
    assert [b["booking_number"] for b in response.json()] == [numbers[2], numbers[1]]


@pytest.mark.asyncio
async def test_recent_bookings_limit_is_bounded(client: AsyncClient, admin_headers):
    response = await client.get(
        "/api/v1/admin/bookings/recent", params={"limit": 0}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["field"] == "limit"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path", ["/api/v1/admin/stats", "/api/v1/admin/payments/pending", "/api/v1/admin/bookings/recent"]
)
async def test_dashboard_requires_admin(client: AsyncClient, non_admin_headers, path):
    assert (await client.get(path)).status_code == 401
    assert (await client.get(path, headers=non_admin_headers)).status_code == 403


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["cache"] == {"status": "disabled"}
    assert health.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in health.headers

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "booking_attempts_total" in metrics.text
