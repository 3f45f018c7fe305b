"""
Extraction job schemas.

Request/response schemas for enqueueing and polling extraction jobs.

Dependencies: pydantic
System role: Job API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class JobError(BaseModel):
    """Error recorded on a failed job."""

    message: str
    kind: str = Field(description="structural | adapter | dependency")


class JobResponse(BaseModel):
    """Response schema for one extraction job."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    file_id: uuid.UUID
    idempotency_key: str
    status: str
    stage: str
    message: str
    error: JobError | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class StartExtractionRequest(BaseModel):
    """Body of the start-extraction request."""

    file_ids: list[uuid.UUID] | None = Field(
        default=None,
        description="Files to extract; all extractable files when omitted",
    )


class StartExtractionResponse(BaseModel):
    """Jobs created (or reused) by a start-extraction request."""

    jobs: list[JobResponse]
    deferred_file_ids: list[uuid.UUID] = Field(
        default_factory=list,
        description="Drawings held back until the project's schedules are ready",
    )


class JobListResponse(BaseModel):
    """All jobs of a project."""

    jobs: list[JobResponse]
    total: int
