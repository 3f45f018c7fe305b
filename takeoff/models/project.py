"""
Project snapshot schemas.

Read models for the pull snapshot and the status stream.

Dependencies: pydantic
System role: Project status API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SheetPart(BaseModel):
    """Progress of one chunk of a BOQ sheet."""

    index: int
    status: str
    error: str | None = None


class SheetStatus(BaseModel):
    """Progress of one BOQ sheet."""

    sheet_name: str
    status: str
    error: str | None = None
    parts: list[SheetPart] = Field(default_factory=list)


class ProjectResponse(BaseModel):
    """Project summary."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    status: str
    created_at: datetime
    updated_at: datetime


class ProjectFileResponse(BaseModel):
    """Uploaded file with its extraction status."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    original_name: str
    file_type: str
    status: str
    sheet_status: list[SheetStatus] | None = None
    updated_at: datetime


class ProjectItemResponse(BaseModel):
    """Extracted item."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    file_id: uuid.UUID
    source: str
    item_code: str
    description: str
    notes: str
    box: dict[str, float] | None = None
    fields: dict[str, Any] = Field(default_factory=dict)
    category: str | None = None
    subcategory: str | None = None
    sheet_name: str | None = None
    row_index: int | None = None
    chunk_index: int | None = None


class ProjectLogResponse(BaseModel):
    """Progress log line."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    file_id: uuid.UUID | None = None
    level: str
    message: str
    created_at: datetime


class ProjectSnapshotResponse(BaseModel):
    """Point-in-time view of a project's extraction state."""

    project: ProjectResponse
    files: list[ProjectFileResponse]
    items: list[ProjectItemResponse]
    logs: list[ProjectLogResponse]
    fingerprint: str = Field(description="Changes whenever files, items, or logs change")
