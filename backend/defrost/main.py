"""FastAPI application for the DEFROST proximity alert backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from defrost.config import get_settings
from defrost.database import (
    check_db_ready,
    create_engine_from_url,
    create_session_maker,
    init_db,
)
from defrost.dependencies import create_services
from defrost.rate_limit import limiter
from defrost.routers import alerts_router, health_router, reports_router
from defrost.tasks.scheduler import setup_scheduler, shutdown_scheduler
from defrost.websocket import websocket_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting DEFROST backend...")

    engine = create_engine_from_url(settings.database_url, echo=settings.debug)

    try:
        if settings.auto_create_tables:
            await init_db(engine)
        await check_db_ready(engine)
        logger.info("Database ready")
    except Exception as e:
        logger.error(f"Database not ready: {e}")
        await engine.dispose()
        raise

    services = create_services(settings, create_session_maker(engine))
    app.state.services = services

    # Consumer first so the scheduler's first snapshot is handled
    services.pipeline.start()
    scheduler = setup_scheduler(
        services.feed_source, settings.feed_poll_interval_seconds
    )

    yield

    # Shutdown
    shutdown_scheduler(scheduler)
    await services.pipeline.stop()
    await engine.dispose()
    logger.info("DEFROST backend shut down")


# Create FastAPI app
app = FastAPI(
    title="DEFROST API",
    description="Anonymous incident reports with proximity alerts",
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(health_router)
app.include_router(reports_router, prefix=settings.api_v1_prefix)
app.include_router(alerts_router, prefix=settings.api_v1_prefix)
app.include_router(websocket_router)  # WebSocket at /ws/alerts


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "DEFROST API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "defrost.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
