"""
TTI Admissions API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging with request IDs
- Database and Redis connections
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tti_admissions.api import api_router
from tti_admissions.core.config import settings
from tti_admissions.core.database import close_db, init_db
from tti_admissions.core.logging import RequestIDMiddleware, init_logging
from tti_admissions.core.redis import close_redis, init_redis, redis_status
from tti_admissions.modules.admissions.directory import CourseDirectory

init_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Connects Redis and the database on startup. Connection failures are
    fatal only in production; elsewhere rate limiting falls back to memory.
    """
    logger.info(f"Starting TTI Admissions API in {settings.python_env} mode...")

    # Initialize Redis
    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    # Initialize Database
    try:
        await init_db()
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    if not settings.head_email:
        logger.warning("HEAD_EMAIL is not configured; head notification emails will be skipped")
    unconfigured = CourseDirectory.from_settings(settings).unconfigured_courses()
    if unconfigured:
        logger.warning(
            f"No teachers configured for {', '.join(c.value for c in unconfigured)}; "
            "head approvals for these courses will fail until COURSE_TEACHERS is set"
        )

    yield  # Application runs here

    logger.info("Shutting down TTI Admissions API...")
    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title="TTI Admissions API",
    description="Admissions workflow for the TTI Foundation",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

app.add_middleware(RequestIDMiddleware)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to TTI Admissions API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """
    Readiness check endpoint.

    Redis being down degrades rate limiting to per-process memory but does
    not make the service unready.
    """
    return {"status": "ready", "redis": await redis_status()}
