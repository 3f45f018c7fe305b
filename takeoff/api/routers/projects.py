"""
Project status API endpoints.

Routes:
    GET /projects/{project_id}/snapshot
    GET /projects/{project_id}/stream

Dependencies: takeoff.application.services.snapshot_service, takeoff.models
System role: Project status pull and push HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from takeoff.api.deps import get_session_factory, get_settings_dependency, get_snapshot_service
from takeoff.application.services.snapshot_service import (
    ProjectSnapshotService,
    project_event_stream,
)
from takeoff.configs import Settings
from takeoff.core.exceptions import ProjectNotFoundError
from takeoff.models.project import ProjectSnapshotResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/{project_id}/snapshot", response_model=ProjectSnapshotResponse)
async def get_project_snapshot(
    project_id: UUID,
    snapshot_service: ProjectSnapshotService = Depends(get_snapshot_service),
) -> ProjectSnapshotResponse:
    """
    Get the current files, items, and recent logs of a project.

    Raises:
        HTTPException(404): Project not found
    """
    try:
        return await snapshot_service.snapshot(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{project_id}/stream")
async def stream_project(
    project_id: UUID,
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_settings_dependency),
) -> StreamingResponse:
    """
    Stream project snapshots as server-sent events.

    Sends "event: project-update" with the snapshot whenever it changes and
    a ": heartbeat" comment otherwise, every stream interval.

    Raises:
        HTTPException(404): Project not found
    """
    async with session_factory() as session:
        try:
            await ProjectSnapshotService(session).snapshot(project_id, log_limit=1)
        except ProjectNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)

    logger.info(
        f"{__name__}:stream_project - Stream opened",
        extra={"project_id": str(project_id)},
    )
    return StreamingResponse(
        project_event_stream(
            session_factory,
            project_id,
            interval=settings.extraction.stream_interval_seconds,
            is_disconnected=request.is_disconnected,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
