"""
Project file CRUD operations.

Provides status transitions and per-sheet progress persistence for
uploaded files, always scoped by project.

Dependencies: sqlalchemy, takeoff.boundary.db.models
System role: File persistence operations for the extraction pipeline
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.models.file_model import FileStatus, FileType, ProjectFileModel


class ProjectFileCRUD(BaseCRUD[ProjectFileModel]):
    """
    CRUD operations for ProjectFileModel.

    Extends BaseCRUD with project-scoped lookups and status writes.
    """

    def __init__(self) -> None:
        """Initialize ProjectFileCRUD with ProjectFileModel."""
        super().__init__(ProjectFileModel)

    async def get_for_project(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID,
    ) -> ProjectFileModel | None:
        """
        Retrieve a file only if it belongs to the project.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: File UUID

        Returns:
            ProjectFileModel if found in the project, None otherwise
        """
        stmt = select(ProjectFileModel).where(
            ProjectFileModel.project_id == project_id,
            ProjectFileModel.id == file_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_project(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_type: FileType | None = None,
        status: FileStatus | None = None,
    ) -> Sequence[ProjectFileModel]:
        """
        List project files in upload order.

        Args:
            session: Async database session
            project_id: Project UUID
            file_type: Optional type filter
            status: Optional status filter

        Returns:
            Sequence of ProjectFileModels ordered by creation time
        """
        stmt = select(ProjectFileModel).where(ProjectFileModel.project_id == project_id)
        if file_type is not None:
            stmt = stmt.where(ProjectFileModel.file_type == file_type)
        if status is not None:
            stmt = stmt.where(ProjectFileModel.status == status)
        stmt = stmt.order_by(ProjectFileModel.created_at, ProjectFileModel.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def set_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: FileStatus,
    ) -> ProjectFileModel | None:
        """
        Update file processing status.

        Args:
            session: Async database session
            id: File UUID
            status: New status

        Returns:
            Updated ProjectFileModel if found, None otherwise
        """
        return await self.update_by_id(session, id, status=status)

    async def set_sheet_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: FileStatus,
        sheet_status: list[dict],
    ) -> ProjectFileModel | None:
        """
        Persist BOQ per-sheet progress together with the file status.

        Args:
            session: Async database session
            id: File UUID
            status: File status derived from the sheets
            sheet_status: Serialized sheet entries

        Returns:
            Updated ProjectFileModel if found, None otherwise
        """
        return await self.update_by_id(session, id, status=status, sheet_status=sheet_status)


file_crud = ProjectFileCRUD()
