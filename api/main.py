"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from database.engine import init_db, close_db
from api.routes import health
from api.routes.v1 import (
    approvals,
    interviews,
    loa,
    requests,
    resumes,
    screening,
)

# Import middleware components
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    RateLimitMiddleware,
    SlidingWindowRateLimiter,
    default_rules,
    AuthenticationMiddleware,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)

# Redis client for the rate limiter; connects on first use
rate_limit_redis = (
    redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        health_check_interval=30,
    )
    if settings.rate_limit_enabled
    else None
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")

    if rate_limit_redis is not None:
        await rate_limit_redis.aclose()

    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Help-desk hiring workflow: requisition approval through letter of acceptance",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Setup error handlers (before middleware)
setup_error_handlers(app)

# Add middleware (order matters - the last one added runs first)
# 1. Rate limiting middleware (innermost - sees the authenticated user id)
if rate_limit_redis is not None:
    app.add_middleware(
        RateLimitMiddleware,
        redis_url=settings.redis_url,
        rules=default_rules(
            per_second=settings.rate_limit_per_second,
            per_minute=settings.rate_limit_per_minute,
            per_hour=settings.rate_limit_per_hour,
            uploads_per_minute=settings.rate_limit_uploads_per_minute,
        ),
        key_prefix="helpdesk:ratelimit",
        enable_headers=True,
        limiter=SlidingWindowRateLimiter(rate_limit_redis),
    )

# 2. Authentication middleware (validates JWT tokens)
app.add_middleware(
    AuthenticationMiddleware,
    jwt_secret=settings.jwt_secret_key,
    jwt_algorithm=settings.jwt_algorithm,
)

# 3. Structured logging middleware (logs all requests/responses)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    log_response_body=settings.log_response_body,
    max_body_size=settings.log_max_body_size,
)

# 4. Error handling middleware (catches everything the handlers did not)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# 5. CORS middleware (outermost, so preflight and error responses carry CORS headers)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])

for router in (
    requests.router,
    approvals.router,
    resumes.router,
    interviews.router,
    screening.router,
    loa.router,
):
    app.include_router(router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": "0.1.0",
        "status": "running",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
