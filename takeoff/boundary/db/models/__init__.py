"""
Database models package.

Exports:
  - ProjectModel, ProjectStatus: Project container and derived status
  - ProjectFileModel, FileType, FileStatus: Uploaded files
  - ExtractionJobModel, JobStatus, JobStage: Extraction work queue
  - ProjectItemModel, ItemSource: Extracted line items
  - ProjectLogModel, LogLevel: Progress audit trail

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: Database model definitions for domain entities
"""

from takeoff.boundary.db.models.project_model import ProjectModel, ProjectStatus
from takeoff.boundary.db.models.file_model import FileStatus, FileType, ProjectFileModel
from takeoff.boundary.db.models.job_model import (
    ACTIVE_JOB_STATUSES,
    ExtractionJobModel,
    JobStage,
    JobStatus,
)
from takeoff.boundary.db.models.item_model import ItemSource, ProjectItemModel
from takeoff.boundary.db.models.log_model import LogLevel, ProjectLogModel

__all__ = [
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
]
