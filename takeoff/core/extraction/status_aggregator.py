"""
Project status aggregator.

Rewrites the stored project status from the current job statuses. Safe to
call any number of times; it never adjusts the status incrementally.

Dependencies: sqlalchemy, takeoff.boundary.db
System role: Derived project status maintenance
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.project_crud import project_crud
from takeoff.boundary.db.models.project_model import ProjectStatus
from takeoff.core.extraction.status import recompute_project_status

logger = logging.getLogger(__name__)


class ProjectStatusAggregator:
    """Derives and stores project status from the job store."""

    async def refresh(self, session: AsyncSession, project_id: UUID) -> ProjectStatus:
        """
        Recompute and persist the project status.

        Called after every terminal job transition and after every enqueue
        batch. Does not commit.

        Args:
            session: Async database session
            project_id: Project UUID

        Returns:
            The derived ProjectStatus
        """
        jobs = await job_crud.list_for_project(session, project_id)
        status = recompute_project_status(job.status for job in jobs)
        await project_crud.set_status(session, project_id, status)

        logger.debug(
            f"{__name__}:refresh - Project status {status.value}",
            extra={"project_id": str(project_id), "jobs": len(jobs)},
        )
        return status
