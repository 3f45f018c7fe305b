"""
Extraction job ORM model.

One unit of extraction work bound to exactly one project file. The
(project_id, file_id, idempotency_key) triple is unique so resubmitting a
request returns the existing job instead of creating a duplicate.

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: Durable work queue for the extraction scheduler
"""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from takeoff.boundary.db.base import Base, UUIDMixin, TimestampMixin, str_enum


class JobStatus(str, enum.Enum):
    """
    Extraction job states.

    QUEUED: Waiting to be claimed by the scheduler
    PROCESSING: Claimed by exactly one worker
    DONE: Completed successfully
    FAILED: Completed with an error; see error field
    """

    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


ACTIVE_JOB_STATUSES = (JobStatus.QUEUED, JobStatus.PROCESSING)


class JobStage(str, enum.Enum):
    """Free-form progress labels shown while a job runs."""

    QUEUED = "queued"
    PROCESSING = "processing"
    EXTRACTING = "extracting"
    FINALIZING = "finalizing"


class ExtractionJobModel(Base, UUIDMixin, TimestampMixin):
    """
    Extraction job ORM model.

    Attributes:
        project_id: Owning project
        file_id: File processed by this job
        idempotency_key: Caller-supplied deduplication token
        status: queued | processing | done | failed
        stage: Progress label
        message: Human-readable status message
        error: {"message": str, "kind": "structural" | "adapter" | "dependency"} or None
        started_at: Set when the scheduler claims the job
        finished_at: Set on terminal transition

    Workflow:
        1. Request handler enqueues job (status=queued)
        2. Scheduler claims oldest queued job atomically (status=processing)
        3. Handler sets done/failed with finished_at
    """

    __tablename__ = "extraction_jobs"
    __table_args__ = (
        UniqueConstraint(
            "project_id",
            "file_id",
            "idempotency_key",
            name="uq_extraction_jobs_identity",
        ),
        Index("ix_extraction_jobs_status_created", "status", "created_at"),
        Index("ix_extraction_jobs_project_status", "project_id", "status"),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_id: Mapped[UUID] = mapped_column(
        ForeignKey("project_files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[JobStatus] = mapped_column(
        str_enum(JobStatus),
        nullable=False,
        default=JobStatus.QUEUED,
    )
    stage: Mapped[JobStage] = mapped_column(
        str_enum(JobStage),
        nullable=False,
        default=JobStage.QUEUED,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False, default="Queued")
    error: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)

    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
