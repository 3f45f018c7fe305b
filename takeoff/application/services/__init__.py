"""Service orchestrators."""

from .extraction_service import ExtractionService, StartExtractionResult
from .job_service import JobService
from .snapshot_service import ProjectSnapshotService, project_event_stream

__all__ = [
    "ExtractionService",
    "StartExtractionResult",
    "JobService",
    "ProjectSnapshotService",
    "project_event_stream",
]
