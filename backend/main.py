"""
FastAPI application entry point for PhotoSpotter

Initializes the FastAPI app, registers routers, and sets up startup/shutdown events.
"""
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from photospotter.core.config import settings
from photospotter.core.database import engine, Base
from photospotter.core.exceptions import PhotoSpotterError
from photospotter.core.logging_config import setup_logging, get_logger
from photospotter.core.metrics import init_metrics, get_metrics, get_content_type
from photospotter.middleware.logging_middleware import RequestLoggingMiddleware
from photospotter.api.v1.events import router as events_router
from photospotter.api.v1.guests import router as guests_router
from photospotter.api.v1.photos import router as photos_router
from photospotter.api.v1.matches import router as matches_router, limiter
from photospotter.api.v1.admin import router as admin_router
import photospotter.models  # noqa: F401  (registers tables on Base.metadata)

# Application version
APP_VERSION = "1.0.0"

# Initialize structured JSON logging
setup_logging(app_version=APP_VERSION)
logger = get_logger(__name__)

# Initialize Prometheus metrics
init_metrics(version=APP_VERSION)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.

    - Startup: Creates the data directory and database tables
    - Shutdown: Logs completion
    """
    logger.info(
        "Application starting",
        extra={
            "event_type": "app_startup",
            "version": APP_VERSION,
            "log_level": settings.LOG_LEVEL,
            "debug_mode": settings.DEBUG,
        }
    )

    # SQLite default path lives under ./data
    if settings.DATABASE_URL.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    Base.metadata.create_all(bind=engine)
    logger.info(
        "Database initialized",
        extra={"event_type": "database_initialized"}
    )

    yield

    logger.info(
        "Application shutdown complete",
        extra={"event_type": "app_shutdown_complete", "version": APP_VERSION}
    )


# Create FastAPI app
app = FastAPI(
    title="PhotoSpotter API",
    description="API for event guest registration, photo uploads, and face-based photo matching",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Rate limiter state for the probe image search
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PhotoSpotterError)
async def photospotter_error_handler(request: Request, exc: PhotoSpotterError):
    """Render domain errors as {"detail": message} with their mapped status."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "event_type": "domain_error",
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
            "path": request.url.path,
            "details": exc.details,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Register API routers
app.include_router(events_router, prefix=settings.API_V1_PREFIX)
app.include_router(guests_router, prefix=settings.API_V1_PREFIX)
app.include_router(photos_router, prefix=settings.API_V1_PREFIX)
app.include_router(matches_router, prefix=settings.API_V1_PREFIX)
app.include_router(admin_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    """Root endpoint - API status check"""
    return {
        "name": "PhotoSpotter API",
        "version": APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint (no authentication required)"""
    return {"status": "healthy"}


@app.get("/metrics")
async def prometheus_metrics():
    """
    Prometheus metrics endpoint

    Returns Prometheus-compatible metrics for scraping.
    """
    return Response(
        content=get_metrics(),
        media_type=get_content_type()
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
