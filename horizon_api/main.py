"""
Main FastAPI application for the Horizon Telemetry API.

This module contains the FastAPI application instance and the root endpoint.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from horizon_api.config import settings
from horizon_api.database import create_tables
from horizon_api.routers.analysis import router as analysis_router
from horizon_api.routers.status import router as status_router
from horizon_api.routers.telemetry import router as telemetry_router
from horizon_api.utils.logging_config import setup_logging, get_logger

# Import all models so their tables are registered on Base.metadata
import horizon_api.models  # noqa: F401

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown events. In DEBUG mode missing tables are
    created on startup; otherwise run `alembic upgrade head`.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Horizon Telemetry API - Application starting up")
    logger.info(f"Environment: {'Development' if settings.DEBUG else 'Production'}")
    logger.info(f"API prefix: {settings.API_PREFIX}")
    logger.info(f"Database: {settings.SQLALCHEMY_DATABASE_URI.split('://')[0]}")
    logger.info(f"Tracked nodes: {', '.join(settings.TRACKED_NODES) or 'all'}")
    logger.info("=" * 60)

    if settings.DEBUG:
        await create_tables()
        logger.info("Database tables checked")
    else:
        logger.warning("Remember to run 'alembic upgrade head' to apply database migrations")

    yield

    # Shutdown
    logger.info("=" * 60)
    logger.info("Horizon Telemetry API - Application shutting down")
    logger.info("=" * 60)


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Transmitter site telemetry: stored readings, RF metrics and narrated station reports",
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Set up CORS
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/")
@limiter.limit(f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_WINDOW}seconds")
async def root(request: Request):
    """
    Root endpoint returning API information.

    Rate limit: RATE_LIMIT_REQUESTS requests per RATE_LIMIT_WINDOW seconds
    """
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }


# Include routers
app.include_router(status_router, prefix=settings.API_PREFIX)
app.include_router(telemetry_router, prefix=settings.API_PREFIX)
app.include_router(analysis_router, prefix=settings.API_PREFIX)
