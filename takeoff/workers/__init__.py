"""
Extraction workers module.

In-process scheduler that claims queued extraction jobs and runs them
with bounded concurrency. Runs inside the API lifespan or standalone via
``python -m takeoff.workers``.

Dependencies: asyncio, takeoff.core, takeoff.boundary
System role: Background job processing
"""

from takeoff.workers.scheduler import (
    ExtractionScheduler,
    build_job_processor,
    build_scheduler,
)

__all__ = ["ExtractionScheduler", "build_job_processor", "build_scheduler"]
