"""
Project snapshot service.

Builds the pull snapshot of a project (files, items, recent logs) and the
server-sent event stream that republishes it whenever it changes. Status
is eventually consistent within one scheduler tick.

Dependencies: sqlalchemy, takeoff.boundary.db, takeoff.models
System role: Status read model for polling and streaming clients
"""

import asyncio
import hashlib
import json
import logging
from typing import AsyncIterator, Awaitable, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.item_crud import item_crud
from takeoff.boundary.db.CRUD.log_crud import DEFAULT_LOG_LIMIT, log_crud
from takeoff.boundary.db.CRUD.project_crud import project_crud
from takeoff.core.exceptions import ProjectNotFoundError
from takeoff.models.project import (
    ProjectFileResponse,
    ProjectItemResponse,
    ProjectLogResponse,
    ProjectResponse,
    ProjectSnapshotResponse,
)
from takeoff.models.streaming import HEARTBEAT_FRAME, StreamEvent, StreamEventType

logger = logging.getLogger(__name__)


def snapshot_fingerprint(
    files: list[ProjectFileResponse],
    items: list[ProjectItemResponse],
    logs: list[ProjectLogResponse],
) -> str:
    """Stable digest of file states, item ids, and log ids."""
    payload = {
        "files": [
            [str(file.id), file.status, file.updated_at.isoformat()] for file in files
        ],
        "items": [str(item.id) for item in items],
        "logs": [str(log.id) for log in logs],
    }
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class ProjectSnapshotService:
    """Read model over a project's extraction state."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def snapshot(
        self,
        project_id: UUID,
        log_limit: int = DEFAULT_LOG_LIMIT,
    ) -> ProjectSnapshotResponse:
        """
        Build the current snapshot of a project.

        Args:
            project_id: Project UUID
            log_limit: Recent logs to include (capped at 200)

        Returns:
            ProjectSnapshotResponse with fingerprint

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        project = await project_crud.get_by_id(self.db, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        files = [
            ProjectFileResponse.model_validate(file)
            for file in await file_crud.list_for_project(self.db, project_id)
        ]
        items = [
            ProjectItemResponse.model_validate(item)
            for item in await item_crud.list_for_project(self.db, project_id)
        ]
        logs = [
            ProjectLogResponse.model_validate(log)
            for log in await log_crud.list_recent(self.db, project_id, limit=log_limit)
        ]

        return ProjectSnapshotResponse(
            project=ProjectResponse.model_validate(project),
            files=files,
            items=items,
            logs=logs,
            fingerprint=snapshot_fingerprint(files, items, logs),
        )


async def project_event_stream(
    session_factory: async_sessionmaker[AsyncSession],
    project_id: UUID,
    interval: float,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    max_frames: int | None = None,
) -> AsyncIterator[str]:
    """
    Yield server-sent event frames for a project.

    Emits a project-update event whenever the snapshot fingerprint changes
    and a heartbeat comment otherwise, once per interval. A fresh session
    is used for every poll.

    Args:
        session_factory: Session factory for polling
        project_id: Project UUID
        interval: Seconds between polls
        is_disconnected: Client disconnect check; the stream ends when it returns True
        max_frames: Stop after this many frames (None streams until disconnect)

    Yields:
        Encoded SSE frames
    """
    last_fingerprint: str | None = None
    sent = 0
    while max_frames is None or sent < max_frames:
        if is_disconnected is not None and await is_disconnected():
            logger.info(
                f"{__name__}:project_event_stream - Client disconnected",
                extra={"project_id": str(project_id)},
            )
            break

        async with session_factory() as session:
            snapshot = await ProjectSnapshotService(session).snapshot(project_id)

        if snapshot.fingerprint != last_fingerprint:
            last_fingerprint = snapshot.fingerprint
            event = StreamEvent(
                event=StreamEventType.PROJECT_UPDATE,
                data=snapshot.model_dump(mode="json"),
            )
            yield event.to_sse()
        else:
            yield HEARTBEAT_FRAME

        sent += 1
        if max_frames is not None and sent >= max_frames:
            break
        await asyncio.sleep(interval)
