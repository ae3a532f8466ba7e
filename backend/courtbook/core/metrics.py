"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking creation attempts',
    ['status']  # success, invalid, conflict, rate_limited, error
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking creation latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

slot_conflicts = Counter(
    'booking_slot_conflicts_total',
    'Slot conflicts detected during booking creation',
    ['stage']  # precheck, constraint
)

# Payment verification metrics
payment_verifications = Counter(
    'payment_verifications_total',
    'Admin payment verification outcomes',
    ['result']  # verified, rejected, already_processed, not_found
)

# Rate limiting metrics
rate_limit_decisions = Counter(
    'rate_limit_decisions_total',
    'Booking rate limiter decisions',
    ['backend', 'result']  # memory/redis, allowed/limited
)

# Reference metrics
reference_lookups = Counter(
    'booking_reference_lookups_total',
    'Booking status lookups by reference form and outcome',
    ['form', 'result']  # encrypted/legacy, found/invalid/not_found
)

# Redis metrics
redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, invalid, conflict, rate_limited, error"""
    booking_attempts.labels(status=status).inc()


def record_slot_conflict(stage: str):
    slot_conflicts.labels(stage=stage).inc()


def record_payment_verification(result: str):
    payment_verifications.labels(result=result).inc()


def record_rate_limit(backend: str, allowed: bool):
    """Record rate limiter decision."""
    result = "allowed" if allowed else "limited"
    rate_limit_decisions.labels(backend=backend, result=result).inc()


def record_reference_lookup(form: str, result: str):
    reference_lookups.labels(form=form, result=result).inc()
