"""
Project CRUD operations.

Dependencies: sqlalchemy, takeoff.boundary.db.models
System role: Project persistence operations
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.models.project_model import ProjectModel, ProjectStatus


class ProjectCRUD(BaseCRUD[ProjectModel]):
    """CRUD operations for ProjectModel."""

    def __init__(self) -> None:
        """Initialize ProjectCRUD with ProjectModel."""
        super().__init__(ProjectModel)

    async def set_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: ProjectStatus,
    ) -> ProjectModel | None:
        """
        Overwrite the derived project status.

        Args:
            session: Async database session
            id: Project UUID
            status: Recomputed status

        Returns:
            Updated ProjectModel if found, None otherwise
        """
        return await self.update_by_id(session, id, status=status)


project_crud = ProjectCRUD()
