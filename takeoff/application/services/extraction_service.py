"""
Extraction service orchestrator.

Turns start and retry requests into extraction jobs. Enqueueing is
idempotent per (project, file, idempotency key); a file that already has
an active job keeps it instead of getting a second one. Drawings are held
back while the project's schedules are not ready.

Dependencies: sqlalchemy, takeoff.boundary.db, takeoff.core
System role: Job creation orchestration for the HTTP API
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.log_crud import log_crud
from takeoff.boundary.db.CRUD.project_crud import project_crud
from takeoff.boundary.db.models.file_model import FileStatus, FileType, ProjectFileModel
from takeoff.boundary.db.models.job_model import ExtractionJobModel
from takeoff.core.exceptions import (
    ProjectFileNotFoundError,
    ProjectNotFoundError,
    RetryNotAllowedError,
)
from takeoff.core.extraction.dependency_gate import DependencyGate
from takeoff.core.extraction.status_aggregator import ProjectStatusAggregator

logger = logging.getLogger(__name__)

# Schedules are enqueued first so their jobs are claimed ahead of drawings.
_ENQUEUE_ORDER = {FileType.SCHEDULE: 0, FileType.BOQ: 1, FileType.DRAWING: 2}


@dataclass
class StartExtractionResult:
    """Jobs of a start request plus the drawings deferred by the gate."""

    jobs: list[ExtractionJobModel]
    deferred_file_ids: list[UUID] = field(default_factory=list)


class ExtractionService:
    """
    Extraction service orchestrator.

    Commits its own writes; each public method is one transaction.
    """

    def __init__(
        self,
        db: AsyncSession,
        gate: DependencyGate | None = None,
        aggregator: ProjectStatusAggregator | None = None,
        on_enqueued: Callable[[], None] | None = None,
    ) -> None:
        """
        Initialize extraction service.

        Args:
            db: AsyncSession for database operations
            gate: Dependency gate for drawing deferral
            aggregator: Project status aggregator
            on_enqueued: Called after new jobs are committed (wakes the scheduler)
        """
        self.db = db
        self._aggregator = aggregator or ProjectStatusAggregator()
        self._gate = gate or DependencyGate(aggregator=self._aggregator)
        self._on_enqueued = on_enqueued

    async def start_extraction(
        self,
        project_id: UUID,
        idempotency_key: str,
        file_ids: Sequence[UUID] | None = None,
    ) -> StartExtractionResult:
        """
        Enqueue one job per target file under a shared idempotency key.

        Args:
            project_id: Project UUID
            idempotency_key: Caller-supplied deduplication token
            file_ids: Files to extract; every project file when None

        Returns:
            StartExtractionResult with jobs in enqueue order

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectFileNotFoundError: If a requested file is not in the project
        """
        await self._require_project(project_id)
        files = await self._target_files(project_id, file_ids)
        files.sort(key=lambda file: _ENQUEUE_ORDER[file.file_type])

        decision = await self._gate.evaluate(self.db, project_id)
        jobs: list[ExtractionJobModel] = []
        deferred: list[UUID] = []

        for file in files:
            if file.file_type == FileType.DRAWING and not decision.satisfied and decision.has_schedules:
                if file.status != FileStatus.READY:
                    await self._defer_drawing(file, decision.reason)
                    deferred.append(file.id)
                    continue

            active = await job_crud.get_active_for_file(self.db, file.id)
            if active is not None and active.idempotency_key != idempotency_key:
                jobs.append(active)
                continue

            existing = await job_crud.get_by_identity(self.db, project_id, file.id, idempotency_key)
            job = existing or await job_crud.enqueue(self.db, project_id, file.id, idempotency_key)
            jobs.append(job)
            if existing is not None:
                continue

            if file.status != FileStatus.READY:
                await file_crud.set_status(self.db, file.id, FileStatus.PENDING)
            await log_crud.append(
                self.db,
                project_id,
                f"Queued extraction for {file.original_name}.",
                file_id=file.id,
            )

        await self._aggregator.refresh(self.db, project_id)
        await self.db.commit()

        if deferred:
            released = await self._release_after_deferral(project_id)
            jobs.extend(released)
            released_ids = {job.file_id for job in released}
            deferred = [file_id for file_id in deferred if file_id not in released_ids]

        logger.info(
            f"{__name__}:start_extraction - {len(jobs)} jobs, {len(deferred)} deferred",
            extra={"project_id": str(project_id), "idempotency_key": idempotency_key},
        )
        self._notify()
        return StartExtractionResult(jobs=jobs, deferred_file_ids=deferred)

    async def retry_file(
        self,
        project_id: UUID,
        file_id: UUID,
        idempotency_key: str,
    ) -> ExtractionJobModel:
        """
        Enqueue a retry job for a failed file.

        Args:
            project_id: Project UUID
            file_id: File UUID
            idempotency_key: Caller-supplied deduplication token

        Returns:
            ExtractionJobModel: The retry job

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectFileNotFoundError: If the file is not in the project
            RetryNotAllowedError: If the file is not in failed state
        """
        await self._require_project(project_id)
        file = await file_crud.get_for_project(self.db, project_id, file_id)
        if file is None:
            raise ProjectFileNotFoundError(file_id, project_id)

        existing = await job_crud.get_by_identity(self.db, project_id, file_id, idempotency_key)
        if existing is not None:
            return existing

        if file.status != FileStatus.FAILED:
            raise RetryNotAllowedError(file_id, file.status.value)

        job = await job_crud.enqueue(self.db, project_id, file_id, idempotency_key)
        await file_crud.set_status(self.db, file_id, FileStatus.PENDING)
        await log_crud.append(
            self.db,
            project_id,
            f"Retry extraction queued for {file.original_name}.",
            file_id=file_id,
        )
        await self._aggregator.refresh(self.db, project_id)
        await self.db.commit()

        logger.info(
            f"{__name__}:retry_file - Retry queued for {file.original_name}",
            extra={"project_id": str(project_id), "file_id": str(file_id), "job_id": str(job.id)},
        )
        self._notify()
        return job

    async def _require_project(self, project_id: UUID) -> None:
        if await project_crud.get_by_id(self.db, project_id) is None:
            raise ProjectNotFoundError(project_id)

    async def _target_files(
        self,
        project_id: UUID,
        file_ids: Sequence[UUID] | None,
    ) -> list[ProjectFileModel]:
        if file_ids is None:
            return list(await file_crud.list_for_project(self.db, project_id))

        files = []
        for file_id in dict.fromkeys(file_ids):
            file = await file_crud.get_for_project(self.db, project_id, file_id)
            if file is None:
                raise ProjectFileNotFoundError(file_id, project_id)
            files.append(file)
        return files

    async def _defer_drawing(self, file: ProjectFileModel, reason: str) -> None:
        await file_crud.set_status(self.db, file.id, FileStatus.PENDING)
        await log_crud.append(
            self.db,
            file.project_id,
            f"Deferred extraction for {file.original_name} until schedules are ready ({reason}).",
            file_id=file.id,
        )

    async def _release_after_deferral(self, project_id: UUID) -> list[ExtractionJobModel]:
        """
        Re-check the gate once the deferral is committed.

        A schedule job that completed between the gate check and the commit
        released before these drawings were pending, so they are released here.
        """
        released = await self._gate.release_deferred(self.db, project_id)
        if released:
            await self.db.commit()
        return released

    def _notify(self) -> None:
        if self._on_enqueued is not None:
            self._on_enqueued()
