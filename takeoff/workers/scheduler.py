"""
Extraction scheduler.

Polls the job store and keeps up to max_concurrency jobs running as
asyncio tasks inside the current process. Each tick claims queued jobs
one at a time until all slots are busy or nothing is claimable. Claims
are atomic in the store, so several scheduler processes may share one
database.

Dependencies: asyncio, sqlalchemy, takeoff.boundary, takeoff.core
System role: Bounded worker pool for extraction jobs
"""

import asyncio
import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from takeoff.boundary.db.base import utcnow
from takeoff.boundary.db.connection import get_async_session_factory
from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.extraction.registry import AdapterRegistry, build_default_registry
from takeoff.boundary.db.models.file_model import FileType
from takeoff.configs import Settings
from takeoff.core.extraction.job_processor import ExtractionJobProcessor
from takeoff.core.extraction.sheet_processor import ChunkedSheetProcessor
from takeoff.core.extraction.dependency_gate import DependencyGate
from takeoff.core.extraction.status_aggregator import ProjectStatusAggregator
from takeoff.observability.correlation import set_correlation_id

logger = logging.getLogger(__name__)


class ExtractionScheduler:
    """
    In-process worker pool for extraction jobs.

    Owns its in-flight task set; a finished task always leaves the set and
    wakes the ticker so the free slot is refilled without waiting a full
    poll interval. No exception from a job escapes the scheduler.

    Usage:
        scheduler = ExtractionScheduler(session_factory, processor)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        processor: ExtractionJobProcessor,
        max_concurrency: int = 12,
        poll_interval: float = 2.0,
        stale_job_timeout_seconds: int = 0,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            session_factory: Session factory used for claims
            processor: Job processor run for every claimed job
            max_concurrency: Maximum jobs in flight
            poll_interval: Seconds between ticks
            stale_job_timeout_seconds: Requeue processing jobs older than this
                on start (0 disables the sweep)
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._session_factory = session_factory
        self._processor = processor
        self._max_concurrency = max_concurrency
        self._poll_interval = poll_interval
        self._stale_timeout = stale_job_timeout_seconds
        self._in_flight: set[asyncio.Task] = set()
        self._ticker: asyncio.Task | None = None
        self._tick_lock = asyncio.Lock()
        self._wakeup = asyncio.Event()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def start(self) -> None:
        """Run the optional stale sweep, then launch the ticker (first tick immediate)."""
        if self.running:
            return
        if self._stale_timeout > 0:
            await self.requeue_stale()
        self._ticker = asyncio.create_task(self._run(), name="extraction-scheduler")
        logger.info(
            f"{__name__}:start - Scheduler started",
            extra={"max_concurrency": self._max_concurrency, "poll_interval": self._poll_interval},
        )

    async def stop(self) -> None:
        """Cancel the ticker and wait for in-flight jobs to finish."""
        if self._ticker is not None:
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                logger.debug(f"{__name__}:stop - Ticker cancelled")
            self._ticker = None

        if self._in_flight:
            logger.info(f"{__name__}:stop - Waiting for {len(self._in_flight)} in-flight jobs")
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info(f"{__name__}:stop - Scheduler stopped")

    def notify(self) -> None:
        """Wake the ticker early, e.g. right after new jobs were enqueued."""
        self._wakeup.set()

    async def tick(self) -> int:
        """
        Fill free slots with claimed jobs.

        Returns:
            Number of jobs dispatched by this tick
        """
        async with self._tick_lock:
            dispatched = 0
            while len(self._in_flight) < self._max_concurrency:
                job_id = await self._claim_one()
                if job_id is None:
                    break
                self._dispatch(job_id)
                dispatched += 1
            return dispatched

    async def requeue_stale(self) -> list[UUID]:
        """Requeue processing jobs whose claim is older than the stale timeout."""
        cutoff = utcnow() - timedelta(seconds=self._stale_timeout)
        async with self._session_factory() as session:
            job_ids = await job_crud.requeue_stale(session, cutoff)
            await session.commit()
        if job_ids:
            logger.warning(
                f"{__name__}:requeue_stale - Requeued {len(job_ids)} stale jobs",
                extra={"job_ids": [str(job_id) for job_id in job_ids]},
            )
        return job_ids

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.exception(f"{__name__}:_run - Tick failed: {type(e).__name__}: {e}")

            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                logger.debug(f"{__name__}:_run - Poll interval elapsed")
            self._wakeup.clear()

    async def _claim_one(self) -> UUID | None:
        async with self._session_factory() as session:
            job = await job_crud.claim_next_queued(session)
            await session.commit()
        return job.id if job is not None else None

    def _dispatch(self, job_id: UUID) -> None:
        task = asyncio.create_task(self._run_job(job_id), name=f"extraction-job-{job_id}")
        self._in_flight.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        self._wakeup.set()

    async def _run_job(self, job_id: UUID) -> None:
        set_correlation_id(f"job-{job_id}")
        try:
            await self._processor.process(job_id)
        except Exception as e:
            logger.exception(
                f"{__name__}:_run_job - Job {job_id} raised: {type(e).__name__}: {e}",
                extra={"job_id": str(job_id)},
            )


def build_job_processor(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    registry: AdapterRegistry | None = None,
) -> ExtractionJobProcessor:
    """
    Wire the job processor from settings.

    Args:
        settings: Application settings
        session_factory: Session factory for job sessions
        registry: Adapter registry (Gemini adapters when None)

    Returns:
        ExtractionJobProcessor
    """
    registry = registry or build_default_registry(settings.llm)
    extraction = settings.extraction
    aggregator = ProjectStatusAggregator()
    return ExtractionJobProcessor(
        session_factory=session_factory,
        registry=registry,
        sheet_processor=ChunkedSheetProcessor(
            adapter=registry.get(FileType.BOQ),
            max_rows_per_chunk=extraction.max_rows_per_chunk,
            min_blank_run=extraction.min_blank_run,
            max_parallel_chunks=extraction.max_parallel_chunks,
        ),
        gate=DependencyGate(aggregator=aggregator, schedule_code_limit=extraction.schedule_code_limit),
        aggregator=aggregator,
    )


def build_scheduler(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    registry: AdapterRegistry | None = None,
) -> ExtractionScheduler:
    """
    Wire a scheduler and its processor from settings.

    Args:
        settings: Application settings
        session_factory: Session factory (process-wide factory when None)
        registry: Adapter registry (Gemini adapters when None)

    Returns:
        ExtractionScheduler, not yet started
    """
    session_factory = session_factory or get_async_session_factory()
    extraction = settings.extraction
    return ExtractionScheduler(
        session_factory=session_factory,
        processor=build_job_processor(settings, session_factory, registry),
        max_concurrency=extraction.max_concurrency,
        poll_interval=extraction.poll_interval_seconds,
        stale_job_timeout_seconds=extraction.stale_job_timeout_seconds,
    )
