"""
Test suite for derived status rules.

System role: Verification of project, sheet, and file status aggregation
"""

import itertools

import pytest

from takeoff.boundary.db.models import FileStatus, JobStatus, ProjectStatus
from takeoff.core.extraction.status import (
    recompute_file_status,
    recompute_project_status,
    recompute_sheet_status,
    summarize_failures,
)

JOB_STATUS_MULTISETS = [
    combo
    for size in range(0, 5)
    for combo in itertools.combinations_with_replacement(list(JobStatus), size)
]


class TestRecomputeProjectStatus:
    """Test project status derivation over every job status multiset up to size 4."""

    @pytest.mark.parametrize("statuses", JOB_STATUS_MULTISETS)
    def test_analyzing_iff_any_active(self, statuses):
        # Act
        result = recompute_project_status(statuses)

        # Assert
        active = any(s in (JobStatus.QUEUED, JobStatus.PROCESSING) for s in statuses)
        expected = ProjectStatus.ANALYZING if active else ProjectStatus.FINALIZED
        assert result == expected

    def test_accepts_generator(self):
        statuses = (s for s in [JobStatus.DONE, JobStatus.QUEUED])
        assert recompute_project_status(statuses) == ProjectStatus.ANALYZING


class TestRecomputeSheetStatus:
    """Test sheet status derivation from part records."""

    def test_all_parts_ready(self):
        parts = [{"index": 0, "status": "ready"}, {"index": 1, "status": "ready"}]
        assert recompute_sheet_status(parts) == "ready"

    def test_any_part_failed(self):
        parts = [
            {"index": 0, "status": "ready"},
            {"index": 1, "status": "failed", "error": "timeout"},
        ]
        assert recompute_sheet_status(parts) == "failed"

    def test_no_parts_keeps_fallback(self):
        assert recompute_sheet_status([], fallback="failed") == "failed"
        assert recompute_sheet_status(None) == "ready"


class TestRecomputeFileStatus:
    """Test BOQ file status derivation from sheet entries."""

    def test_ready_when_all_sheets_ready(self):
        sheets = [{"sheet_name": "A", "status": "ready"}, {"sheet_name": "B", "status": "ready"}]
        assert recompute_file_status(sheets) == FileStatus.READY

    def test_failed_when_any_sheet_failed(self):
        sheets = [{"sheet_name": "A", "status": "ready"}, {"sheet_name": "B", "status": "failed"}]
        assert recompute_file_status(sheets) == FileStatus.FAILED

    def test_no_sheets_is_ready(self):
        assert recompute_file_status([]) == FileStatus.READY


class TestSummarizeFailures:
    """Test the human-readable failure summary."""

    def test_no_failures(self):
        sheets = [{"sheet_name": "A", "status": "ready", "parts": [{"index": 0, "status": "ready"}]}]
        assert summarize_failures(sheets) == "Summary: no failures"

    def test_single_failed_part(self):
        # Arrange
        sheets = [
            {
                "sheet_name": "Bill 1",
                "status": "failed",
                "parts": [
                    {"index": 0, "status": "ready"},
                    {"index": 1, "status": "failed", "error": "timeout"},
                    {"index": 2, "status": "ready"},
                ],
            }
        ]

        # Act
        summary = summarize_failures(sheets)

        # Assert
        assert summary == "Summary: 1 part failed (part 2/3 on sheet 'Bill 1': timeout)"

    def test_failures_across_sheets(self):
        sheets = [
            {
                "sheet_name": "A",
                "status": "failed",
                "parts": [{"index": 0, "status": "failed", "error": "bad json"}],
            },
            {"sheet_name": "B", "status": "failed", "error": "unreadable"},
        ]

        summary = summarize_failures(sheets)

        assert summary.startswith("Summary: 2 parts failed (")
        assert "part 1/1 on sheet 'A': bad json" in summary
        assert "sheet 'B': unreadable" in summary
