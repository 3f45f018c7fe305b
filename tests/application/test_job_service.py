"""
Test suite for JobService.

Uses a mocked session with the CRUD singletons patched out.

System role: Verification of job status queries
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.application.services.job_service import JobService
from takeoff.core.exceptions import JobNotFoundError, ProjectNotFoundError


@pytest.fixture
def mock_db_session() -> AsyncSession:
    """Provide mock async database session."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def job_service(mock_db_session: AsyncSession) -> JobService:
    """Provide JobService with mocked session."""
    return JobService(db=mock_db_session)


class TestGetJob:
    """Test get_job."""

    @pytest.mark.asyncio
    async def test_returns_job(self, job_service, mock_db_session):
        # Arrange
        job_id = uuid.uuid4()
        job = MagicMock(id=job_id)

        # Act
        with patch("takeoff.application.services.job_service.job_crud") as mock_crud:
            mock_crud.get_by_id = AsyncMock(return_value=job)
            result = await job_service.get_job(job_id)

        # Assert
        assert result is job
        mock_crud.get_by_id.assert_awaited_once_with(mock_db_session, job_id)

    @pytest.mark.asyncio
    async def test_missing_job_raises(self, job_service):
        with patch("takeoff.application.services.job_service.job_crud") as mock_crud:
            mock_crud.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(JobNotFoundError):
                await job_service.get_job(uuid.uuid4())


class TestListJobs:
    """Test list_jobs."""

    @pytest.mark.asyncio
    async def test_lists_jobs_of_existing_project(self, job_service, mock_db_session):
        project_id = uuid.uuid4()
        jobs = [MagicMock(), MagicMock()]

        with patch("takeoff.application.services.job_service.project_crud") as mock_projects, patch(
            "takeoff.application.services.job_service.job_crud"
        ) as mock_jobs:
            mock_projects.get_by_id = AsyncMock(return_value=MagicMock(id=project_id))
            mock_jobs.list_for_project = AsyncMock(return_value=jobs)
            result = await job_service.list_jobs(project_id)

        assert result == jobs
        mock_jobs.list_for_project.assert_awaited_once_with(mock_db_session, project_id)

    @pytest.mark.asyncio
    async def test_unknown_project_raises(self, job_service):
        with patch("takeoff.application.services.job_service.project_crud") as mock_projects:
            mock_projects.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(ProjectNotFoundError):
                await job_service.list_jobs(uuid.uuid4())
