"""
Project log CRUD operations.

Append-only progress sink. The pipeline writes here and never reads back;
the snapshot service and the status stream are the only readers.

Dependencies: sqlalchemy, takeoff.boundary.db.models
System role: Progress audit trail persistence
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.models.log_model import LogLevel, ProjectLogModel

DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 200


class ProjectLogCRUD(BaseCRUD[ProjectLogModel]):
    """CRUD operations for ProjectLogModel."""

    def __init__(self) -> None:
        """Initialize ProjectLogCRUD with ProjectLogModel."""
        super().__init__(ProjectLogModel)

    async def append(
        self,
        session: AsyncSession,
        project_id: UUID,
        message: str,
        file_id: UUID | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> ProjectLogModel:
        """
        Append one progress line.

        Args:
            session: Async database session
            project_id: Project UUID
            message: Human-readable message
            file_id: Related file, if any
            level: Severity

        Returns:
            Created ProjectLogModel
        """
        return await self.create(
            session,
            project_id=project_id,
            file_id=file_id,
            level=level,
            message=message,
        )

    async def list_recent(
        self,
        session: AsyncSession,
        project_id: UUID,
        limit: int = DEFAULT_LOG_LIMIT,
    ) -> Sequence[ProjectLogModel]:
        """
        List the most recent logs of a project, newest first.

        Args:
            session: Async database session
            project_id: Project UUID
            limit: Maximum rows, clamped to [1, 200]

        Returns:
            Sequence of ProjectLogModels
        """
        limit = max(1, min(limit, MAX_LOG_LIMIT))
        stmt = (
            select(ProjectLogModel)
            .where(ProjectLogModel.project_id == project_id)
            .order_by(ProjectLogModel.created_at.desc(), ProjectLogModel.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


log_crud = ProjectLogCRUD()
