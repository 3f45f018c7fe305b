"""
Project file ORM model.

One uploaded artifact (drawing, BOQ spreadsheet, or schedule). Status
transitions are driven by the extraction jobs processing the file; the
only external transition is an explicit retry moving failed -> pending.

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: File persistence with per-sheet progress for BOQ files
"""

import enum
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from takeoff.boundary.db.base import Base, UUIDMixin, TimestampMixin, str_enum


class FileType(str, enum.Enum):
    """Kinds of uploaded documents."""

    DRAWING = "drawing"
    BOQ = "boq"
    SCHEDULE = "schedule"


class FileStatus(str, enum.Enum):
    """
    File processing lifecycle states.

    PENDING: Waiting for (or deferred from) an extraction job
    PROCESSING: A job is extracting items
    READY: Items extracted
    FAILED: Extraction failed; eligible for retry
    """

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class ProjectFileModel(Base, UUIDMixin, TimestampMixin):
    """
    Project file ORM model.

    Attributes:
        project_id: Owning project
        original_name: Name as uploaded
        stored_path: Local path of the stored upload
        file_type: drawing | boq | schedule
        status: pending | processing | ready | failed
        sheet_status: BOQ only. List of
            {"sheet_name", "status", "error"?, "parts": [{"index", "status", "error"?}]}
    """

    __tablename__ = "project_files"

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    original_name: Mapped[str] = mapped_column(String(512), nullable=False)
    stored_path: Mapped[str] = mapped_column(Text, nullable=False)

    file_type: Mapped[FileType] = mapped_column(
        str_enum(FileType),
        nullable=False,
        index=True,
    )
    status: Mapped[FileStatus] = mapped_column(
        str_enum(FileStatus),
        nullable=False,
        default=FileStatus.PENDING,
        index=True,
    )
    sheet_status: Mapped[list | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
    )

    project = relationship("ProjectModel", back_populates="files")
