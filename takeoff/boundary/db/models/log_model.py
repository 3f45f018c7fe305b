"""
Project log ORM model.

Append-only audit trail of human-readable extraction progress messages,
keyed by project and optionally file.

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: Write-only progress sink consumed by the status stream
"""

import enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from takeoff.boundary.db.base import Base, UUIDMixin, TimestampMixin, str_enum


class LogLevel(str, enum.Enum):
    """Severity of a project log line."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ProjectLogModel(Base, UUIDMixin, TimestampMixin):
    """Project log ORM model."""

    __tablename__ = "project_logs"
    __table_args__ = (Index("ix_project_logs_project_created", "project_id", "created_at"),)

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    file_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("project_files.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    level: Mapped[LogLevel] = mapped_column(
        str_enum(LogLevel),
        nullable=False,
        default=LogLevel.INFO,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
