"""
Derived status rules.

Pure functions shared by the status aggregator, the chunked sheet
processor, and the job processor. Stored statuses are always recomputed
from their inputs, never adjusted incrementally.

Dependencies: takeoff.boundary.db.models
System role: Single source of the aggregation rules
"""

from collections.abc import Iterable

from takeoff.boundary.db.models.file_model import FileStatus
from takeoff.boundary.db.models.job_model import ACTIVE_JOB_STATUSES, JobStatus
from takeoff.boundary.db.models.project_model import ProjectStatus


def recompute_project_status(job_statuses: Iterable[JobStatus]) -> ProjectStatus:
    """
    Derive project status from the statuses of its jobs.

    analyzing iff any job is queued or processing, otherwise finalized.
    """
    if any(status in ACTIVE_JOB_STATUSES for status in job_statuses):
        return ProjectStatus.ANALYZING
    return ProjectStatus.FINALIZED


def recompute_sheet_status(parts: list[dict] | None, fallback: str | None = None) -> str:
    """
    Derive a sheet's aggregate status from its chunk part records.

    failed iff any part failed, otherwise ready. A sheet without parts
    keeps its recorded status, defaulting to ready.
    """
    if not parts:
        return fallback or FileStatus.READY.value
    if any(part.get("status") == FileStatus.FAILED.value for part in parts):
        return FileStatus.FAILED.value
    return FileStatus.READY.value


def recompute_file_status(sheets: list[dict]) -> FileStatus:
    """A BOQ file is failed if any sheet is failed, otherwise ready."""
    if any(sheet.get("status") == FileStatus.FAILED.value for sheet in sheets):
        return FileStatus.FAILED
    return FileStatus.READY


def summarize_failures(sheets: list[dict]) -> str:
    """
    Human-readable summary of failed sheets and parts.

    Example: "Summary: 2 parts failed (part 2/3 on sheet 'A': timeout)"
    """
    failures: list[str] = []
    for sheet in sheets:
        parts = sheet.get("parts") or []
        failed_parts = [part for part in parts if part.get("status") == FileStatus.FAILED.value]
        if failed_parts:
            for part in failed_parts:
                failures.append(
                    f"part {part['index'] + 1}/{len(parts)} on sheet '{sheet['sheet_name']}'"
                    f": {part.get('error') or 'unknown error'}"
                )
        elif sheet.get("status") == FileStatus.FAILED.value:
            failures.append(
                f"sheet '{sheet['sheet_name']}': {sheet.get('error') or 'unknown error'}"
            )

    if not failures:
        return "Summary: no failures"
    noun = "part" if len(failures) == 1 else "parts"
    return f"Summary: {len(failures)} {noun} failed ({'; '.join(failures)})"
