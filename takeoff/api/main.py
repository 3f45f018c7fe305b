"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, observability middleware,
and a lifespan that creates tables and runs the extraction scheduler.

Dependencies: fastapi, takeoff.api.routers, takeoff.workers, uvicorn
System role: API entry point with router assembly and server launch
"""

from contextlib import asynccontextmanager
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from takeoff.boundary.db.create_tables import create_all_tables
from takeoff.configs import get_settings
from takeoff.observability.logger import configure_logging
from takeoff.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from takeoff.workers.scheduler import build_scheduler
from . import api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup: logging, tables, and (when enabled) the extraction scheduler.
    Shutdown: stops the scheduler and waits for in-flight jobs.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    await create_all_tables()

    app.state.scheduler = None
    if settings.extraction.worker_enabled:
        scheduler = build_scheduler(settings)
        await scheduler.start()
        app.state.scheduler = scheduler
        logger.info(f"{__name__}:lifespan - Extraction scheduler running in API process")

    yield

    if app.state.scheduler is not None:
        await app.state.scheduler.stop()
    logger.info(f"{__name__}:lifespan - Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Takeoff Extraction API",
        description="Asynchronous extraction of construction takeoff items from drawings, BOQs, and schedules",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "takeoff.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
