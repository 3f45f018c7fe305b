"""
Job service.

Read access to extraction jobs for status polling.

Dependencies: takeoff.boundary.db.CRUD, takeoff.boundary.db.models
System role: Job status queries
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.project_crud import project_crud
from takeoff.boundary.db.models.job_model import ExtractionJobModel
from takeoff.core.exceptions import JobNotFoundError, ProjectNotFoundError


class JobService:
    """Job status queries over the job store."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize job service.

        Args:
            db: AsyncSession for database operations
        """
        self.db = db

    async def get_job(self, job_id: UUID) -> ExtractionJobModel:
        """
        Get one job for polling.

        Args:
            job_id: Job UUID

        Returns:
            ExtractionJobModel

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        job = await job_crud.get_by_id(self.db, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def list_jobs(self, project_id: UUID) -> Sequence[ExtractionJobModel]:
        """
        List all jobs of a project in creation order.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        if await project_crud.get_by_id(self.db, project_id) is None:
            raise ProjectNotFoundError(project_id)
        return await job_crud.list_for_project(self.db, project_id)
