"""
Project ORM model.

Container for uploaded construction documents. Its status is a derived
view over the extraction jobs of the project and is rewritten by the
status aggregator after every terminal job transition.

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: Project persistence and derived analysis status
"""

import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from takeoff.boundary.db.base import Base, UUIDMixin, TimestampMixin, str_enum


class ProjectStatus(str, enum.Enum):
    """
    Project analysis states.

    IN_PROGRESS: Created, no extraction requested yet
    ANALYZING: At least one job queued or processing
    FINALIZED: No active jobs remain
    """

    IN_PROGRESS = "in_progress"
    ANALYZING = "analyzing"
    FINALIZED = "finalized"


class ProjectModel(Base, UUIDMixin, TimestampMixin):
    """
    Project ORM model.

    Attributes:
        id: UUID primary key
        name: Display name
        status: Derived analysis status (never authoritative)
        files: Uploaded files (cascade delete)
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[ProjectStatus] = mapped_column(
        str_enum(ProjectStatus),
        nullable=False,
        default=ProjectStatus.IN_PROGRESS,
    )

    files = relationship(
        "ProjectFileModel",
        back_populates="project",
        cascade="all, delete-orphan",
    )
