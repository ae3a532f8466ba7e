"""
Court Booking API - Main Application Entry Point

A court reservation service demonstrating:
- Race-safe slot allocation backed by a unique reservation constraint
- Encrypted, tamper-evident booking references for login-free lookups
- Transactional admin payment verification
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from courtbook.core.config import get_settings
from courtbook.core.exceptions import CourtBookingError, InternalError
from courtbook.core.logging import setup_logging, get_logger
from courtbook.core.metrics import metrics_endpoint
from courtbook.core.reference_codec import assert_encryption_ready
from courtbook.api.router import api_router
from courtbook.api.middleware import RequestLoggingMiddleware
from courtbook.infrastructure.redis_client import get_redis, close_redis
from courtbook.services.cache_service import get_cache_stats

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Refuse to serve bookings that could not be looked up again
    assert_encryption_ready()

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Court booking API with race-safe slot reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(CourtBookingError)
async def court_booking_error_handler(request: Request, exc: CourtBookingError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("internal_error", error_code=exc.error_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers(),
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures outside a service transaction still answer with the error body."""
    error = InternalError("DATABASE_ERROR")
    logger.error(
        "internal_error",
        error_code=error.error_code,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report only the first problem, named by its field."""
    errors = exc.errors()
    first = errors[0] if errors else {}

    field = next(
        (str(part) for part in reversed(first.get("loc", ())) if isinstance(part, str)),
        None,
    )
    if field in ("body", "query"):
        field = None

    ctx_error = first.get("ctx", {}).get("error")
    message = str(ctx_error) if ctx_error else first.get("msg", "Invalid request")

    body = {"error": message}
    if field:
        body["field"] = field
    return JSONResponse(status_code=400, content=body)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
