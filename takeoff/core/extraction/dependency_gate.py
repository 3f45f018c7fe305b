"""
Dependency gate between schedules and drawings.

Drawing extraction uses the project's schedule codes, so drawings may run
only when every schedule file of the project is ready and at least one
schedule item exists. Drawings held back by the gate wait in pending and
are released in one batch when a schedule job completes.

Dependencies: sqlalchemy, takeoff.boundary.db, takeoff.core.extraction
System role: Cross-file ordering for the extraction pipeline
"""

import logging
import uuid
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.item_crud import item_crud
from takeoff.boundary.db.CRUD.job_crud import job_crud
from takeoff.boundary.db.CRUD.log_crud import log_crud
from takeoff.boundary.db.models.file_model import FileStatus, FileType
from takeoff.boundary.db.models.item_model import ItemSource
from takeoff.boundary.db.models.job_model import ExtractionJobModel
from takeoff.boundary.db.models.log_model import LogLevel
from takeoff.core.exceptions import DependencyNotSatisfiedError
from takeoff.core.extraction.status_aggregator import ProjectStatusAggregator

logger = logging.getLogger(__name__)

MAX_CODE_LENGTH = 80


@dataclass(frozen=True)
class GateDecision:
    """
    Result of a gate evaluation.

    Attributes:
        satisfied: Drawings may run
        reason: Human-readable explanation
        has_schedules: The project has at least one schedule file
    """

    satisfied: bool
    reason: str
    has_schedules: bool


class DependencyGate:
    """Evaluates the schedule-before-drawing rule and releases deferred drawings."""

    def __init__(
        self,
        aggregator: ProjectStatusAggregator | None = None,
        schedule_code_limit: int = 300,
    ) -> None:
        self._aggregator = aggregator or ProjectStatusAggregator()
        self._code_limit = schedule_code_limit

    async def evaluate(self, session: AsyncSession, project_id: UUID) -> GateDecision:
        """
        Check whether drawings of a project may run.

        Args:
            session: Async database session
            project_id: Project UUID

        Returns:
            GateDecision
        """
        schedules = await file_crud.list_for_project(session, project_id, file_type=FileType.SCHEDULE)
        if not schedules:
            return GateDecision(False, "No schedule files uploaded for this project", False)

        waiting = [file for file in schedules if file.status != FileStatus.READY]
        if waiting:
            names = ", ".join(file.original_name for file in waiting)
            return GateDecision(False, f"Waiting for schedule files to be ready: {names}", True)

        count = await item_crud.count_by_source(session, project_id, ItemSource.SCHEDULE)
        if count == 0:
            return GateDecision(False, "No schedule items extracted yet", True)

        return GateDecision(True, "Schedules ready", True)

    async def schedule_codes(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID | None = None,
    ) -> list[str]:
        """
        Distinct schedule codes of a project for drawing extraction.

        Uses fields["CODE"] when present, otherwise item_code. Codes are
        trimmed and codes longer than 80 characters are dropped. The list
        is capped at the configured limit. Both the sent count and any cap
        are written to the project log. Does not commit.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: Drawing file the codes are sent for

        Returns:
            Codes in extraction order

        Raises:
            DependencyNotSatisfiedError: No usable schedule code exists
        """
        items = await item_crud.list_for_project(session, project_id, source=ItemSource.SCHEDULE)
        codes: list[str] = []
        seen: set[str] = set()
        for item in items:
            raw = (item.fields or {}).get("CODE") or item.item_code or ""
            code = str(raw).strip()
            if code and len(code) <= MAX_CODE_LENGTH and code not in seen:
                seen.add(code)
                codes.append(code)

        if not codes:
            raise DependencyNotSatisfiedError(
                "Schedule extraction is required before drawing extraction.",
                project_id=project_id,
            )

        to_send = codes[: self._code_limit]
        await log_crud.append(
            session,
            project_id,
            f"Sending {len(to_send)} schedule code(s) for drawing extraction.",
            file_id=file_id,
        )
        if len(codes) > self._code_limit:
            logger.warning(
                f"{__name__}:schedule_codes - Truncating {len(codes)} schedule codes to {self._code_limit}",
                extra={"project_id": str(project_id)},
            )
            await log_crud.append(
                session,
                project_id,
                f"Schedule code list truncated from {len(codes)} to {self._code_limit} items "
                "to keep the prompt within limits.",
                file_id=file_id,
                level=LogLevel.WARNING,
            )
        return to_send

    async def release_deferred(
        self,
        session: AsyncSession,
        project_id: UUID,
    ) -> list[ExtractionJobModel]:
        """
        Enqueue deferred drawings once the gate is satisfied.

        Every pending drawing without an active job gets a job under one
        fresh idempotency key shared by the release batch. Does not commit.

        Args:
            session: Async database session
            project_id: Project UUID

        Returns:
            Jobs created by the release (empty when the gate is closed)
        """
        decision = await self.evaluate(session, project_id)
        if not decision.satisfied:
            logger.info(
                f"{__name__}:release_deferred - Gate closed: {decision.reason}",
                extra={"project_id": str(project_id)},
            )
            return []

        drawings = await file_crud.list_for_project(
            session,
            project_id,
            file_type=FileType.DRAWING,
            status=FileStatus.PENDING,
        )
        idempotency_key = f"schedule-release-{uuid.uuid4()}"
        released: list[ExtractionJobModel] = []
        for drawing in drawings:
            if await job_crud.get_active_for_file(session, drawing.id) is not None:
                continue
            job = await job_crud.enqueue(session, project_id, drawing.id, idempotency_key)
            await log_crud.append(
                session,
                project_id,
                f"Queued extraction for {drawing.original_name} after schedule completed.",
                file_id=drawing.id,
            )
            released.append(job)

        if released:
            await self._aggregator.refresh(session, project_id)
            logger.info(
                f"{__name__}:release_deferred - Released {len(released)} deferred drawings",
                extra={"project_id": str(project_id)},
            )
        return released
