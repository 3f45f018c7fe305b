"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - ProjectModel, ProjectFileModel, ExtractionJobModel, ProjectItemModel, ProjectLogModel
  - project_crud, file_crud, job_crud, item_crud, log_crud: CRUD operation singletons

Dependencies: sqlalchemy, takeoff.configs
System role: Database adapter providing persistent storage for projects,
files, extraction jobs, items, and progress logs.
"""

from takeoff.boundary.db.base import Base, TimestampMixin, UUIDMixin
from takeoff.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from takeoff.boundary.db.models import (
    ACTIVE_JOB_STATUSES,
    ExtractionJobModel,
    FileStatus,
    FileType,
    ItemSource,
    JobStage,
    JobStatus,
    LogLevel,
    ProjectFileModel,
    ProjectItemModel,
    ProjectLogModel,
    ProjectModel,
    ProjectStatus,
)
from takeoff.boundary.db.CRUD import (
    BaseCRUD,
    file_crud,
    item_crud,
    job_crud,
    log_crud,
    project_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ProjectModel",
    "ProjectStatus",
    "ProjectFileModel",
    "FileType",
    "FileStatus",
    "ExtractionJobModel",
    "JobStatus",
    "JobStage",
    "ACTIVE_JOB_STATUSES",
    "ProjectItemModel",
    "ItemSource",
    "ProjectLogModel",
    "LogLevel",
    # CRUD
    "BaseCRUD",
    "project_crud",
    "file_crud",
    "job_crud",
    "item_crud",
    "log_crud",
]
