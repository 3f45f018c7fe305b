"""
Job API endpoints.

Routes:
    GET /jobs/{job_id}
    GET /projects/{project_id}/jobs

Dependencies: takeoff.application.services.job_service, takeoff.models
System role: Job status HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from takeoff.api.deps import get_job_service
from takeoff.application.services.job_service import JobService
from takeoff.core.exceptions import JobNotFoundError, ProjectNotFoundError
from takeoff.models.job import JobListResponse, JobResponse

router = APIRouter(tags=["jobs"])


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job_status(
    job_id: UUID,
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """
    Get job status for frontend polling.

    Clients poll while the job is queued or processing; status is
    eventually consistent within one scheduler tick.

    Args:
        job_id: Job UUID
        job_service: Injected JobService

    Returns:
        JobResponse with status, stage, message, and error (when failed)

    Raises:
        HTTPException(404): Job not found

    Example Response:
        {
            "id": "123e4567-e89b-12d3-a456-426614174000",
            "status": "failed",
            "stage": "finalizing",
            "message": "Failed",
            "error": {"message": "Schedule dependency not satisfied: ...", "kind": "dependency"},
            ...
        }
    """
    try:
        job = await job_service.get_job(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return JobResponse.model_validate(job)


@router.get("/projects/{project_id}/jobs", response_model=JobListResponse)
async def list_project_jobs(
    project_id: UUID,
    job_service: JobService = Depends(get_job_service),
) -> JobListResponse:
    """List all extraction jobs of a project in creation order."""
    try:
        jobs = await job_service.list_jobs(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return JobListResponse(jobs=[JobResponse.model_validate(job) for job in jobs], total=len(jobs))
