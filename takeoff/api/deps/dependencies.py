"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: takeoff.configs, takeoff.application, takeoff.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from takeoff.configs import Settings, get_settings
from takeoff.boundary.db import get_async_db, get_async_session_factory
from takeoff.application.services import (
    ExtractionService,
    JobService,
    ProjectSnapshotService,
)
from takeoff.core.extraction.dependency_gate import DependencyGate


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory for long-lived handlers (status stream).

    Returns:
        async_sessionmaker: Process-wide async session factory
    """
    return get_async_session_factory()


def get_extraction_service(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> ExtractionService:
    """
    Get extraction service instance.

    Wakes the in-process scheduler after enqueueing when one is running.

    Args:
        request: Current request (app state holds the scheduler)
        db: Async database session (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        ExtractionService: Extraction service instance
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    return ExtractionService(
        db=db,
        gate=DependencyGate(schedule_code_limit=settings.extraction.schedule_code_limit),
        on_enqueued=scheduler.notify if scheduler is not None else None,
    )


def get_job_service(db: AsyncSession = Depends(get_async_db)) -> JobService:
    """
    Get job service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        JobService: Job service instance
    """
    return JobService(db=db)


def get_snapshot_service(db: AsyncSession = Depends(get_async_db)) -> ProjectSnapshotService:
    """
    Get project snapshot service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        ProjectSnapshotService: Snapshot service instance
    """
    return ProjectSnapshotService(db=db)
