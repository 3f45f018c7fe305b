"""
Test suite for ExtractionService.

Tests start and retry requests against SQLite: idempotent resubmission,
drawing deferral, active-job reuse, and retry preconditions.

System role: Verification of job creation orchestration
"""

import uuid
from unittest.mock import MagicMock

import pytest

from takeoff.application.services.extraction_service import ExtractionService
from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.item_crud import item_crud
from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.log_crud import log_crud
from takeoff.boundary.db.CRUD.project_crud import project_crud
from takeoff.boundary.db.models import FileStatus, FileType, ItemSource, JobStatus, ProjectStatus
from takeoff.core.exceptions import (
    ProjectFileNotFoundError,
    ProjectNotFoundError,
    RetryNotAllowedError,
)
from takeoff.core.extraction.dependency_gate import DependencyGate, GateDecision


class StaleFirstGate(DependencyGate):
    """Gate whose first evaluation reports schedules still running."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    async def evaluate(self, session, project_id):
        self.calls += 1
        if self.calls == 1:
            return GateDecision(False, "Waiting for schedule files to be ready: finishes.pdf", True)
        return await super().evaluate(session, project_id)


async def _messages(session_factory, project_id):
    async with session_factory() as session:
        logs = await log_crud.list_recent(session, project_id, limit=200)
    return [log.message for log in reversed(logs)]


class TestStartExtraction:
    """Test start_extraction."""

    @pytest.mark.asyncio
    async def test_enqueues_every_file_schedules_first(self, session_factory, create_project, create_file):
        # Arrange
        project = await create_project()
        drawing = await create_file(project, FileType.DRAWING, name="plan.pdf")
        boq = await create_file(project, FileType.BOQ, name="boq.xlsx")
        on_enqueued = MagicMock()

        # Act: no schedules uploaded, so drawings are queued and fail fast later
        async with session_factory() as session:
            result = await ExtractionService(session, on_enqueued=on_enqueued).start_extraction(project.id, "key-1")

        # Assert
        assert [job.file_id for job in result.jobs] == [boq.id, drawing.id]
        assert result.deferred_file_ids == []
        assert all(job.status == JobStatus.QUEUED for job in result.jobs)
        on_enqueued.assert_called_once_with()
        assert await _messages(session_factory, project.id) == [
            "Queued extraction for boq.xlsx.",
            "Queued extraction for plan.pdf.",
        ]
        async with session_factory() as session:
            assert (await project_crud.get_by_id(session, project.id)).status == ProjectStatus.ANALYZING

    @pytest.mark.asyncio
    async def test_same_key_returns_same_jobs(self, session_factory, create_project, create_file):
        # Arrange
        project = await create_project()
        await create_file(project, FileType.SCHEDULE, name="finishes.pdf")
        await create_file(project, FileType.BOQ, name="boq.xlsx")
        async with session_factory() as session:
            first = await ExtractionService(session).start_extraction(project.id, "key-1")

        # Act
        async with session_factory() as session:
            second = await ExtractionService(session).start_extraction(project.id, "key-1")

        # Assert
        assert [job.id for job in second.jobs] == [job.id for job in first.jobs]
        async with session_factory() as session:
            assert len(await job_crud.list_for_project(session, project.id)) == 2
        assert len(await _messages(session_factory, project.id)) == 2

    @pytest.mark.asyncio
    async def test_active_job_is_reused_across_keys(self, session_factory, create_project, create_file):
        project = await create_project()
        await create_file(project, FileType.SCHEDULE, name="finishes.pdf")
        async with session_factory() as session:
            first = await ExtractionService(session).start_extraction(project.id, "key-1")

        async with session_factory() as session:
            second = await ExtractionService(session).start_extraction(project.id, "key-2")

        assert second.jobs[0].id == first.jobs[0].id
        assert second.jobs[0].idempotency_key == "key-1"

    @pytest.mark.asyncio
    async def test_drawings_deferred_until_schedules_ready(self, session_factory, create_project, create_file):
        # Arrange
        project = await create_project()
        schedule = await create_file(project, FileType.SCHEDULE, name="finishes.pdf")
        drawing = await create_file(project, FileType.DRAWING, name="plan.pdf", status=FileStatus.FAILED)

        # Act
        async with session_factory() as session:
            result = await ExtractionService(session).start_extraction(project.id, "key-1")

        # Assert
        assert [job.file_id for job in result.jobs] == [schedule.id]
        assert result.deferred_file_ids == [drawing.id]
        async with session_factory() as session:
            assert (await file_crud.get_by_id(session, drawing.id)).status == FileStatus.PENDING
            assert await job_crud.get_active_for_file(session, drawing.id) is None
        assert (
            "Deferred extraction for plan.pdf until schedules are ready "
            "(Waiting for schedule files to be ready: finishes.pdf)."
        ) in await _messages(session_factory, project.id)

    @pytest.mark.asyncio
    async def test_drawing_released_when_schedule_finishes_during_deferral(
        self, session_factory, create_project, create_file
    ):
        # Arrange: the first gate check predates a schedule job finishing
        project = await create_project()
        schedule = await create_file(project, FileType.SCHEDULE, name="finishes.pdf", status=FileStatus.READY)
        drawing = await create_file(project, FileType.DRAWING, name="plan.pdf", status=FileStatus.FAILED)
        async with session_factory() as session:
            await item_crud.replace_for_source(
                session,
                project.id,
                schedule.id,
                ItemSource.SCHEDULE,
                [{"item_code": "PV 02", "description": "Tile", "fields": {}, "row_index": 0}],
            )
            await session.commit()
        gate = StaleFirstGate()

        # Act
        async with session_factory() as session:
            result = await ExtractionService(session, gate=gate).start_extraction(
                project.id, "key-1", file_ids=[drawing.id]
            )

        # Assert
        assert result.deferred_file_ids == []
        assert [job.file_id for job in result.jobs] == [drawing.id]
        assert result.jobs[0].idempotency_key.startswith("schedule-release-")
        async with session_factory() as session:
            active = await job_crud.get_active_for_file(session, drawing.id)
        assert active is not None
        assert active.status == JobStatus.QUEUED

    @pytest.mark.asyncio
    async def test_restricted_to_requested_files(self, session_factory, create_project, create_file):
        project = await create_project()
        wanted = await create_file(project, FileType.BOQ, name="a.xlsx")
        await create_file(project, FileType.BOQ, name="b.xlsx")

        async with session_factory() as session:
            result = await ExtractionService(session).start_extraction(
                project.id, "key-1", file_ids=[wanted.id, wanted.id]
            )

        assert [job.file_id for job in result.jobs] == [wanted.id]

    @pytest.mark.asyncio
    async def test_unknown_project(self, test_async_db):
        with pytest.raises(ProjectNotFoundError):
            await ExtractionService(test_async_db).start_extraction(uuid.uuid4(), "key-1")

    @pytest.mark.asyncio
    async def test_file_from_other_project(self, test_async_db, create_project, create_file):
        project = await create_project("A")
        other = await create_project("B")
        foreign = await create_file(other, FileType.BOQ, name="b.xlsx")

        with pytest.raises(ProjectFileNotFoundError):
            await ExtractionService(test_async_db).start_extraction(project.id, "key-1", file_ids=[foreign.id])


class TestRetryFile:
    """Test retry_file."""

    @pytest.mark.asyncio
    async def test_retry_failed_file(self, session_factory, create_project, create_file):
        # Arrange
        project = await create_project()
        boq = await create_file(project, FileType.BOQ, name="boq.xlsx", status=FileStatus.FAILED)
        on_enqueued = MagicMock()

        # Act
        async with session_factory() as session:
            job = await ExtractionService(session, on_enqueued=on_enqueued).retry_file(project.id, boq.id, "retry-1")

        # Assert
        assert job.status == JobStatus.QUEUED
        assert job.idempotency_key == "retry-1"
        on_enqueued.assert_called_once_with()
        async with session_factory() as session:
            assert (await file_crud.get_by_id(session, boq.id)).status == FileStatus.PENDING
        assert await _messages(session_factory, project.id) == ["Retry extraction queued for boq.xlsx."]

    @pytest.mark.asyncio
    async def test_retry_is_idempotent(self, session_factory, create_project, create_file):
        project = await create_project()
        boq = await create_file(project, FileType.BOQ, name="boq.xlsx", status=FileStatus.FAILED)
        async with session_factory() as session:
            first = await ExtractionService(session).retry_file(project.id, boq.id, "retry-1")

        async with session_factory() as session:
            second = await ExtractionService(session).retry_file(project.id, boq.id, "retry-1")

        assert second.id == first.id

    @pytest.mark.parametrize("status", [FileStatus.PENDING, FileStatus.PROCESSING, FileStatus.READY])
    @pytest.mark.asyncio
    async def test_retry_requires_failed_status(self, test_async_db, create_project, create_file, status):
        project = await create_project()
        boq = await create_file(project, FileType.BOQ, name="boq.xlsx", status=status)

        with pytest.raises(RetryNotAllowedError) as exc_info:
            await ExtractionService(test_async_db).retry_file(project.id, boq.id, "retry-1")

        assert exc_info.value.details["status"] == status.value

    @pytest.mark.asyncio
    async def test_retry_unknown_file(self, test_async_db, create_project):
        project = await create_project()

        with pytest.raises(ProjectFileNotFoundError):
            await ExtractionService(test_async_db).retry_file(project.id, uuid.uuid4(), "retry-1")
