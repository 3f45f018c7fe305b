"""
Extraction API endpoints.

Routes:
    POST /projects/{project_id}/extractions/start
    POST /projects/{project_id}/files/{file_id}/retry

Dependencies: takeoff.application.services.extraction_service, takeoff.models
System role: Extraction job creation HTTP API
"""

import logging
import uuid
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from takeoff.api.deps import get_extraction_service
from takeoff.application.services.extraction_service import ExtractionService
from takeoff.core.exceptions import (
    ProjectFileNotFoundError,
    ProjectNotFoundError,
    RetryNotAllowedError,
)
from takeoff.models.job import JobResponse, StartExtractionRequest, StartExtractionResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/projects", tags=["extractions"])


@router.post("/{project_id}/extractions/start", response_model=StartExtractionResponse)
async def start_extraction(
    project_id: UUID,
    body: StartExtractionRequest | None = Body(default=None),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    extraction_service: ExtractionService = Depends(get_extraction_service),
) -> StartExtractionResponse:
    """
    Enqueue extraction jobs for a project's files.

    Resubmitting with the same Idempotency-Key returns the same jobs. A key
    is generated when the header is absent.

    Args:
        project_id: Project UUID
        body: Optional {"file_ids": [...]} restricting the target files
        idempotency_key: Deduplication token from the Idempotency-Key header
        extraction_service: Injected ExtractionService

    Returns:
        StartExtractionResponse: Jobs plus drawings deferred until schedules are ready

    Raises:
        HTTPException(404): Project or file not found
    """
    key = idempotency_key or str(uuid.uuid4())
    file_ids = body.file_ids if body is not None else None
    try:
        result = await extraction_service.start_extraction(project_id, key, file_ids)
    except (ProjectNotFoundError, ProjectFileNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)

    return StartExtractionResponse(
        jobs=[JobResponse.model_validate(job) for job in result.jobs],
        deferred_file_ids=result.deferred_file_ids,
    )


@router.post("/{project_id}/files/{file_id}/retry", response_model=JobResponse)
async def retry_file(
    project_id: UUID,
    file_id: UUID,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    extraction_service: ExtractionService = Depends(get_extraction_service),
) -> JobResponse:
    """
    Retry extraction of a failed file.

    BOQ files only reprocess the sheet chunks that failed; other files are
    reprocessed whole.

    Raises:
        HTTPException(404): Project or file not found
        HTTPException(400): File is not in failed state
    """
    key = idempotency_key or str(uuid.uuid4())
    try:
        job = await extraction_service.retry_file(project_id, file_id, key)
    except (ProjectNotFoundError, ProjectFileNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    except RetryNotAllowedError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return JobResponse.model_validate(job)
