"""
Test suite for ExtractionScheduler.

The processor is replaced by in-memory doubles; claims go through the
real job store on SQLite.

System role: Verification of the bounded worker pool
"""

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import update

from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.models import ExtractionJobModel, FileType, JobStatus
from takeoff.workers.scheduler import ExtractionScheduler


class RecordingProcessor:
    """Processor double that optionally blocks until released."""

    def __init__(self, block: bool = False, fail: bool = False) -> None:
        self.release = asyncio.Event()
        if not block:
            self.release.set()
        self.fail = fail
        self.processed = []
        self.running = 0
        self.peak = 0

    async def process(self, job_id):
        self.running += 1
        self.peak = max(self.peak, self.running)
        try:
            await self.release.wait()
            self.processed.append(job_id)
            if self.fail:
                raise RuntimeError("processor crashed")
        finally:
            self.running -= 1


async def _enqueue(session_factory, project, files):
    async with session_factory() as session:
        ids = [(await job_crud.enqueue(session, project.id, file.id, "k")).id for file in files]
        await session.commit()
    return ids


async def _wait_for(predicate, timeout=5.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


@pytest.fixture
async def queued_jobs(session_factory, create_project, create_file):
    project = await create_project()
    files = [await create_file(project, FileType.SCHEDULE, name=f"s{i}.pdf") for i in range(5)]
    return await _enqueue(session_factory, project, files)


class TestSchedulerInit:
    """Test constructor validation."""

    def test_rejects_zero_concurrency(self, session_factory):
        with pytest.raises(ValueError):
            ExtractionScheduler(session_factory, RecordingProcessor(), max_concurrency=0)


class TestTick:
    """Test slot filling."""

    @pytest.mark.asyncio
    async def test_tick_respects_max_concurrency(self, session_factory, queued_jobs):
        # Arrange
        processor = RecordingProcessor(block=True)
        scheduler = ExtractionScheduler(session_factory, processor, max_concurrency=2)

        # Act
        first = await scheduler.tick()
        second = await scheduler.tick()

        # Assert
        assert first == 2
        assert second == 0
        assert scheduler.in_flight == 2

        # Act: finish the running jobs; jobs that complete during the tick
        # free their slot, so one tick may drain the rest of the queue
        processor.release.set()
        await scheduler.stop()
        third = await scheduler.tick()
        await scheduler.stop()

        # Assert
        assert 1 <= third <= 3
        assert len(processor.processed) == len(queued_jobs)
        assert processor.peak <= 2
        assert scheduler.in_flight == 0

    @pytest.mark.asyncio
    async def test_each_job_is_dispatched_once(self, session_factory, queued_jobs):
        processor = RecordingProcessor()
        scheduler = ExtractionScheduler(session_factory, processor, max_concurrency=1)

        for _ in range(len(queued_jobs) + 2):
            await scheduler.tick()
            await scheduler.stop()

        assert len(processor.processed) == len(queued_jobs)
        assert set(processor.processed) == set(queued_jobs)

    @pytest.mark.asyncio
    async def test_empty_queue_dispatches_nothing(self, session_factory):
        scheduler = ExtractionScheduler(session_factory, RecordingProcessor())

        assert await scheduler.tick() == 0


class TestRunLoop:
    """Test the background ticker."""

    @pytest.mark.asyncio
    async def test_completed_jobs_free_slots_without_waiting_for_poll(self, session_factory, queued_jobs):
        # Arrange: poll interval far longer than the test
        processor = RecordingProcessor()
        scheduler = ExtractionScheduler(session_factory, processor, max_concurrency=2, poll_interval=60)

        # Act
        await scheduler.start()
        await _wait_for(lambda: len(processor.processed) == len(queued_jobs))
        await scheduler.stop()

        # Assert
        assert sorted(processor.processed) == sorted(queued_jobs)
        assert processor.peak <= 2
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_processor_exceptions_are_contained(self, session_factory, queued_jobs):
        processor = RecordingProcessor(fail=True)
        scheduler = ExtractionScheduler(session_factory, processor, max_concurrency=3, poll_interval=60)

        await scheduler.start()
        await _wait_for(lambda: len(processor.processed) == len(queued_jobs))
        assert scheduler.running is True
        await scheduler.stop()

        assert scheduler.in_flight == 0

    @pytest.mark.asyncio
    async def test_notify_wakes_ticker(self, session_factory, create_project, create_file):
        # Arrange
        processor = RecordingProcessor()
        scheduler = ExtractionScheduler(session_factory, processor, poll_interval=60)
        await scheduler.start()
        await asyncio.sleep(0.05)
        project = await create_project()
        file = await create_file(project, FileType.SCHEDULE)
        job_ids = await _enqueue(session_factory, project, [file])

        # Act
        scheduler.notify()
        await _wait_for(lambda: processor.processed == job_ids)
        await scheduler.stop()


class TestStaleSweep:
    """Test recovery of orphaned claims."""

    @pytest.mark.asyncio
    async def test_requeue_stale(self, session_factory, queued_jobs):
        # Arrange: one job claimed long ago by a dead worker
        async with session_factory() as session:
            claimed = await job_crud.claim_next_queued(session)
            await session.execute(
                update(ExtractionJobModel)
                .where(ExtractionJobModel.id == claimed.id)
                .values(started_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
            )
            await session.commit()
        scheduler = ExtractionScheduler(session_factory, RecordingProcessor(), stale_job_timeout_seconds=600)

        # Act
        requeued = await scheduler.requeue_stale()

        # Assert
        assert requeued == [claimed.id]
        async with session_factory() as session:
            assert (await job_crud.get_by_id(session, claimed.id)).status == JobStatus.QUEUED
