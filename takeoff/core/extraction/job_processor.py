"""
Extraction job processor.

Runs one claimed job to its terminal state. The job's file type selects
the handler: BOQ files go through the chunked sheet processor, schedules
and drawings through a single adapter call. Any failure marks the file
and the job failed; the project status is refreshed whatever happens.

Dependencies: sqlalchemy, takeoff.boundary, takeoff.core
System role: Type-specific job handling for the extraction scheduler
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.item_crud import item_crud
from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.log_crud import log_crud
from takeoff.boundary.db.models.file_model import FileStatus, FileType, ProjectFileModel
from takeoff.boundary.db.models.item_model import ItemSource
from takeoff.boundary.db.models.job_model import ExtractionJobModel, JobStage
from takeoff.boundary.db.models.log_model import LogLevel
from takeoff.boundary.extraction.base import ExtractedItem, ExtractionRequest, ExtractionResult
from takeoff.boundary.extraction.registry import AdapterRegistry
from takeoff.core.exceptions import (
    ERROR_KIND_ADAPTER,
    DependencyNotSatisfiedError,
    ExtractionError,
    TakeoffException,
    error_kind,
)
from takeoff.core.extraction.dependency_gate import DependencyGate
from takeoff.core.extraction.sheet_processor import ChunkedSheetProcessor
from takeoff.core.extraction.status_aggregator import ProjectStatusAggregator

logger = logging.getLogger(__name__)


def _item_rows(items: list[ExtractedItem]) -> list[dict]:
    return [
        {
            "item_code": item.item_code,
            "description": item.description,
            "notes": item.notes,
            "box": item.box,
            "fields": item.fields,
            "category": item.category,
            "subcategory": item.subcategory,
            "row_index": item.row_index if item.row_index is not None else position,
        }
        for position, item in enumerate(items)
    ]


class ExtractionJobProcessor:
    """
    Processes extraction jobs claimed by the scheduler.

    Opens its own session per job so concurrent jobs never share one.
    Usage:
        processor = ExtractionJobProcessor(session_factory, registry, sheet_processor)
        await processor.process(job_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: AdapterRegistry,
        sheet_processor: ChunkedSheetProcessor,
        gate: DependencyGate | None = None,
        aggregator: ProjectStatusAggregator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._registry = registry
        self._sheet_processor = sheet_processor
        self._aggregator = aggregator or ProjectStatusAggregator()
        self._gate = gate or DependencyGate(aggregator=self._aggregator)

    async def process(self, job_id: UUID) -> None:
        """
        Run a job to done or failed.

        Args:
            job_id: ID of a job in processing state
        """
        async with self._session_factory() as session:
            job = await job_crud.get_by_id(session, job_id)
            if job is None:
                logger.warning(f"{__name__}:process - Job {job_id} not found")
                return

            project_id = job.project_id
            file_id = job.file_id
            file_name: str | None = None

            try:
                file = await file_crud.get_for_project(session, project_id, file_id)
                if file is None:
                    await self._fail_missing_file(session, job)
                    return
                file_name = file.original_name

                if file.status == FileStatus.READY:
                    await log_crud.append(
                        session,
                        project_id,
                        f"Skipping extraction for {file_name} (already ready).",
                        file_id=file_id,
                    )
                    await job_crud.complete(session, job_id, "Skipped (already ready)")
                    await session.commit()
                    return

                await file_crud.set_status(session, file_id, FileStatus.PROCESSING)
                await log_crud.append(
                    session,
                    project_id,
                    f"Starting extraction for {file_name}.",
                    file_id=file_id,
                )
                await session.commit()

                logger.info(
                    f"{__name__}:process - Processing {file.file_type.value} file {file_name}",
                    extra={"job_id": str(job_id), "file_id": str(file_id)},
                )

                if file.file_type == FileType.BOQ:
                    await self._process_boq(session, job, file)
                elif file.file_type == FileType.SCHEDULE:
                    await self._process_schedule(session, job, file)
                else:
                    await self._process_drawing(session, job, file)

            except Exception as e:
                logger.exception(
                    f"{__name__}:process - Job {job_id} failed: {type(e).__name__}: {e}",
                    extra={"job_id": str(job_id), "file_id": str(file_id)},
                )
                await session.rollback()
                await self._record_failure(session, job_id, project_id, file_id, file_name, e)

            finally:
                await self._aggregator.refresh(session, project_id)
                await session.commit()

    async def _fail_missing_file(self, session: AsyncSession, job: ExtractionJobModel) -> None:
        await log_crud.append(
            session,
            job.project_id,
            "Extraction failed: file not found.",
            file_id=job.file_id,
            level=LogLevel.ERROR,
        )
        await job_crud.fail(session, job.id, "File not found", "structural", message="File not found")
        await session.commit()

    async def _record_failure(
        self,
        session: AsyncSession,
        job_id: UUID,
        project_id: UUID,
        file_id: UUID,
        file_name: str | None,
        exc: Exception,
    ) -> None:
        message = exc.message if isinstance(exc, TakeoffException) else str(exc)
        if file_name is not None:
            await file_crud.set_status(session, file_id, FileStatus.FAILED)
            await log_crud.append(
                session,
                project_id,
                f"Extraction failed for {file_name}: {message}",
                file_id=file_id,
                level=LogLevel.ERROR,
            )
        await job_crud.fail(session, job_id, message, error_kind(exc))
        await session.commit()

    async def _call_adapter(self, request: ExtractionRequest) -> ExtractionResult:
        """Invoke the registered adapter; foreign exceptions become ExtractionError."""
        adapter = self._registry.get(request.file_type)
        try:
            return await adapter.extract(request)
        except TakeoffException:
            raise
        except Exception as e:
            raise ExtractionError(f"{type(e).__name__}: {e}", file_name=request.file_name) from e

    async def _process_boq(
        self,
        session: AsyncSession,
        job: ExtractionJobModel,
        file: ProjectFileModel,
    ) -> None:
        await job_crud.set_stage(session, job.id, JobStage.EXTRACTING, "Extracting BOQ items")
        await log_crud.append(
            session,
            file.project_id,
            f"Extracting BOQ items from {file.original_name}.",
            file_id=file.id,
        )
        await session.commit()

        result = await self._sheet_processor.process(session, file)

        if result.status == FileStatus.READY:
            await log_crud.append(
                session,
                file.project_id,
                f"Extraction completed for {file.original_name} ({result.item_count} items).",
                file_id=file.id,
            )
            await job_crud.complete(session, job.id, f"Extracted {result.item_count} BOQ items")
        else:
            summary = result.summary
            await log_crud.append(
                session,
                file.project_id,
                f"Extraction failed for {file.original_name}. {summary}",
                file_id=file.id,
                level=LogLevel.ERROR,
            )
            await job_crud.fail(session, job.id, summary, ERROR_KIND_ADAPTER)
        await session.commit()

    async def _process_schedule(
        self,
        session: AsyncSession,
        job: ExtractionJobModel,
        file: ProjectFileModel,
    ) -> None:
        await job_crud.set_stage(session, job.id, JobStage.EXTRACTING, "Extracting schedule items")
        await session.commit()

        result = await self._call_adapter(
            ExtractionRequest(
                file_type=FileType.SCHEDULE,
                file_name=file.original_name,
                file_path=file.stored_path,
            )
        )

        await item_crud.replace_for_source(
            session,
            file.project_id,
            file.id,
            ItemSource.SCHEDULE,
            _item_rows(result.items),
        )
        await file_crud.set_status(session, file.id, FileStatus.READY)
        await log_crud.append(
            session,
            file.project_id,
            f"Extraction completed for {file.original_name} ({len(result.items)} items).",
            file_id=file.id,
        )
        await job_crud.complete(session, job.id, f"Extracted {len(result.items)} schedule items")
        await session.commit()

        try:
            await self._gate.release_deferred(session, file.project_id)
            await session.commit()
        except Exception as e:
            # The schedule job is already committed as done; a failed release leaves drawings pending.
            logger.exception(
                f"{__name__}:_process_schedule - Releasing deferred drawings failed: {e}",
                extra={"project_id": str(file.project_id)},
            )
            await session.rollback()

    async def _process_drawing(
        self,
        session: AsyncSession,
        job: ExtractionJobModel,
        file: ProjectFileModel,
    ) -> None:
        decision = await self._gate.evaluate(session, file.project_id)
        if not decision.satisfied:
            raise DependencyNotSatisfiedError(
                f"Schedule dependency not satisfied: {decision.reason}",
                project_id=file.project_id,
            )

        codes = await self._gate.schedule_codes(session, file.project_id, file_id=file.id)
        await job_crud.set_stage(session, job.id, JobStage.EXTRACTING, "Extracting drawing items")
        await session.commit()

        result = await self._call_adapter(
            ExtractionRequest(
                file_type=FileType.DRAWING,
                file_name=file.original_name,
                file_path=file.stored_path,
                context={"schedule_codes": codes},
            )
        )

        await item_crud.replace_for_source(
            session,
            file.project_id,
            file.id,
            ItemSource.CAD,
            _item_rows(result.items),
        )
        await file_crud.set_status(session, file.id, FileStatus.READY)
        await log_crud.append(
            session,
            file.project_id,
            f"Extraction completed for {file.original_name} ({len(result.items)} items).",
            file_id=file.id,
        )
        await job_crud.complete(session, job.id, f"Extracted {len(result.items)} drawing items")
        await session.commit()
