"""
Extraction pipeline.

Exports:
  - plan_chunks, RowChunk: Worksheet chunk planning
  - recompute_project_status, recompute_sheet_status: Status derivation rules
  - ChunkedSheetProcessor: BOQ handler
  - DependencyGate, GateDecision: Schedule-before-drawing rule
  - ProjectStatusAggregator: Derived project status
  - ExtractionJobProcessor: Per-job handler dispatch
"""

from takeoff.core.extraction.chunking import RowChunk, is_blank_row, plan_chunks
from takeoff.core.extraction.status import (
    recompute_file_status,
    recompute_project_status,
    recompute_sheet_status,
    summarize_failures,
)
from takeoff.core.extraction.status_aggregator import ProjectStatusAggregator
from takeoff.core.extraction.dependency_gate import DependencyGate, GateDecision
from takeoff.core.extraction.sheet_processor import ChunkedSheetProcessor, SheetRunResult
from takeoff.core.extraction.job_processor import ExtractionJobProcessor

__all__ = [
    "RowChunk",
    "is_blank_row",
    "plan_chunks",
    "recompute_file_status",
    "recompute_project_status",
    "recompute_sheet_status",
    "summarize_failures",
    "ProjectStatusAggregator",
    "DependencyGate",
    "GateDecision",
    "ChunkedSheetProcessor",
    "SheetRunResult",
    "ExtractionJobProcessor",
]
