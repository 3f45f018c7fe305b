"""
Extraction job CRUD operations.

The job store contract: idempotent enqueue, atomic claim of the oldest
queued job, and conditional terminal transitions. No other component
writes job status.

Dependencies: sqlalchemy, takeoff.boundary.db.models
System role: Durable job queue operations for the extraction scheduler
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from takeoff.boundary.db.base import utcnow
from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.models.job_model import (
    ACTIVE_JOB_STATUSES,
    ExtractionJobModel,
    JobStage,
    JobStatus,
)

_IDENTITY_COLUMNS = ["project_id", "file_id", "idempotency_key"]


class JobCRUD(BaseCRUD[ExtractionJobModel]):
    """
    CRUD operations for ExtractionJobModel.

    Extends BaseCRUD with the queue primitives used by the scheduler and
    the job processor.
    """

    def __init__(self) -> None:
        """Initialize JobCRUD with ExtractionJobModel."""
        super().__init__(ExtractionJobModel)

    async def get_by_identity(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID,
        idempotency_key: str,
    ) -> ExtractionJobModel | None:
        """
        Retrieve job by its unique (project, file, idempotency key) triple.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: File UUID
            idempotency_key: Caller-supplied deduplication token

        Returns:
            ExtractionJobModel if found, None otherwise
        """
        stmt = select(ExtractionJobModel).where(
            ExtractionJobModel.project_id == project_id,
            ExtractionJobModel.file_id == file_id,
            ExtractionJobModel.idempotency_key == idempotency_key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def enqueue(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID,
        idempotency_key: str,
    ) -> ExtractionJobModel:
        """
        Insert a queued job, or return the existing one for the same identity.

        Insert-if-absent semantics: an existing job is returned untouched
        whatever its status, so a resubmitted request never resets work.
        Concurrent duplicate inserts are absorbed by ON CONFLICT DO NOTHING
        against the unique identity constraint.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: File UUID
            idempotency_key: Caller-supplied deduplication token

        Returns:
            ExtractionJobModel: The new or pre-existing job
        """
        existing = await self.get_by_identity(session, project_id, file_id, idempotency_key)
        if existing is not None:
            return existing

        dialect = session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = (
            insert(ExtractionJobModel)
            .values(
                project_id=project_id,
                file_id=file_id,
                idempotency_key=idempotency_key,
                status=JobStatus.QUEUED,
                stage=JobStage.QUEUED,
                message="Queued",
            )
            .on_conflict_do_nothing(index_elements=_IDENTITY_COLUMNS)
        )
        await session.execute(stmt)

        job = await self.get_by_identity(session, project_id, file_id, idempotency_key)
        if job is None:
            raise RuntimeError(
                f"Failed to create extraction job for file {file_id} (key={idempotency_key})"
            )
        return job

    async def claim_next_queued(self, session: AsyncSession) -> ExtractionJobModel | None:
        """
        Atomically move the oldest queued job to processing.

        Single conditional UPDATE over a locked subselect: the row lock
        (SKIP LOCKED on PostgreSQL) plus the status='queued' predicate make
        the transition compare-and-set, so exactly one caller wins a job.

        Args:
            session: Async database session

        Returns:
            The claimed ExtractionJobModel, or None when nothing is claimable
        """
        queued = aliased(ExtractionJobModel)
        candidate = (
            select(queued.id)
            .where(queued.status == JobStatus.QUEUED)
            .order_by(queued.created_at, queued.id)
            .limit(1)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )
        stmt = (
            update(ExtractionJobModel)
            .where(
                ExtractionJobModel.id == candidate,
                ExtractionJobModel.status == JobStatus.QUEUED,
            )
            .values(
                status=JobStatus.PROCESSING,
                stage=JobStage.PROCESSING,
                message="Starting extraction",
                started_at=utcnow(),
            )
            .returning(ExtractionJobModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_stage(
        self,
        session: AsyncSession,
        id: UUID,
        stage: JobStage,
        message: str,
    ) -> ExtractionJobModel | None:
        """
        Update the progress label of a running job.

        Args:
            session: Async database session
            id: Job UUID
            stage: Progress stage
            message: Human-readable progress message

        Returns:
            Updated ExtractionJobModel if found, None otherwise
        """
        return await self.update_by_id(session, id, stage=stage, message=message)

    async def _finish(
        self,
        session: AsyncSession,
        id: UUID,
        status: JobStatus,
        message: str,
        error: dict | None,
    ) -> ExtractionJobModel | None:
        stmt = (
            update(ExtractionJobModel)
            .where(
                ExtractionJobModel.id == id,
                ExtractionJobModel.status == JobStatus.PROCESSING,
            )
            .values(
                status=status,
                stage=JobStage.FINALIZING,
                message=message,
                error=error,
                finished_at=utcnow(),
            )
            .returning(ExtractionJobModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def complete(
        self,
        session: AsyncSession,
        id: UUID,
        message: str = "Completed",
    ) -> ExtractionJobModel | None:
        """
        Mark a processing job as done.

        Args:
            session: Async database session
            id: Job UUID
            message: Completion message

        Returns:
            Updated ExtractionJobModel, or None if the job was not processing
        """
        return await self._finish(session, id, JobStatus.DONE, message, None)

    async def fail(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
        kind: str,
        message: str = "Failed",
    ) -> ExtractionJobModel | None:
        """
        Mark a processing job as failed with error details.

        Args:
            session: Async database session
            id: Job UUID
            error_message: Human-readable error description
            kind: Error category (structural, adapter, dependency)
            message: Status message

        Returns:
            Updated ExtractionJobModel, or None if the job was not processing
        """
        error = {"message": error_message, "kind": kind}
        return await self._finish(session, id, JobStatus.FAILED, message, error)

    async def list_for_project(
        self,
        session: AsyncSession,
        project_id: UUID,
    ) -> Sequence[ExtractionJobModel]:
        """
        List all jobs of a project in creation order.

        Args:
            session: Async database session
            project_id: Project UUID

        Returns:
            Sequence of ExtractionJobModels
        """
        stmt = (
            select(ExtractionJobModel)
            .where(ExtractionJobModel.project_id == project_id)
            .order_by(ExtractionJobModel.created_at, ExtractionJobModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_active_for_project(self, session: AsyncSession, project_id: UUID) -> int:
        """
        Count queued or processing jobs of a project.

        Args:
            session: Async database session
            project_id: Project UUID

        Returns:
            Number of active jobs
        """
        stmt = select(func.count(ExtractionJobModel.id)).where(
            ExtractionJobModel.project_id == project_id,
            ExtractionJobModel.status.in_(ACTIVE_JOB_STATUSES),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def get_active_for_file(
        self,
        session: AsyncSession,
        file_id: UUID,
        exclude_id: UUID | None = None,
    ) -> ExtractionJobModel | None:
        """
        Retrieve the oldest queued or processing job of a file.

        Args:
            session: Async database session
            file_id: File UUID
            exclude_id: Job to ignore (typically the caller's own job)

        Returns:
            Active ExtractionJobModel if any, None otherwise
        """
        stmt = select(ExtractionJobModel).where(
            ExtractionJobModel.file_id == file_id,
            ExtractionJobModel.status.in_(ACTIVE_JOB_STATUSES),
        )
        if exclude_id is not None:
            stmt = stmt.where(ExtractionJobModel.id != exclude_id)
        stmt = stmt.order_by(ExtractionJobModel.created_at).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def requeue_stale(
        self,
        session: AsyncSession,
        older_than: datetime,
    ) -> list[UUID]:
        """
        Reset processing jobs claimed before the cutoff back to queued.

        Recovers jobs orphaned by a crashed worker process.

        Args:
            session: Async database session
            older_than: Claims with started_at before this are stale

        Returns:
            IDs of requeued jobs
        """
        stmt = (
            update(ExtractionJobModel)
            .where(
                ExtractionJobModel.status == JobStatus.PROCESSING,
                ExtractionJobModel.started_at < older_than,
            )
            .values(
                status=JobStatus.QUEUED,
                stage=JobStage.QUEUED,
                message="Requeued after stale claim",
                started_at=None,
            )
            .returning(ExtractionJobModel.id)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


job_crud = JobCRUD()
