"""
Extraction adapter contract.

Every adapter is awaited as ``await adapter.extract(request)`` and returns
an ExtractionResult. Any exception raised by an adapter means the unit
(file or chunk) failed; callers never inspect adapter internals.

Dependencies: pydantic, takeoff.boundary.db.models
System role: Boundary between the job pipeline and extraction backends
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, Field

from takeoff.boundary.db.models.file_model import FileType


class ExtractedItem(BaseModel):
    """One structured line returned by an adapter."""

    item_code: str = Field(default="", description="Item key or code")
    description: str = Field(default="", description="Item description")
    notes: str = Field(default="", description="Free text notes")
    box: dict[str, float] | None = Field(
        default=None,
        description="Normalized drawing bounding box {left, top, right, bottom}",
    )
    row_index: int | None = Field(
        default=None,
        description="Row index local to the submitted rows (BOQ only)",
    )
    category: str | None = Field(default=None, description="Grouping label")
    subcategory: str | None = Field(default=None, description="Secondary grouping label")
    fields: dict[str, str] = Field(default_factory=dict, description="Raw column values")


@dataclass
class ExtractionRequest:
    """
    Input of one extraction call.

    Attributes:
        file_type: Kind of document
        file_name: Original upload name
        file_path: Local path of the stored upload
        rows: BOQ chunk rows (cells as trimmed strings), None for documents
        row_offset: Sheet row index of rows[0]
        sheet_name: Worksheet of the chunk
        chunk_index: Zero-based chunk index within the sheet
        chunk_count: Number of chunks of the sheet
        context: Extra hints, e.g. {"schedule_codes": [...]} for drawings
    """

    file_type: FileType
    file_name: str
    file_path: str
    rows: list[list[str]] | None = None
    row_offset: int = 0
    sheet_name: str | None = None
    chunk_index: int = 0
    chunk_count: int = 1
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class ExtractionResult:
    """Items produced by one extraction call plus the backend's raw payload."""

    items: list[ExtractedItem]
    raw: Any = None


class ExtractionAdapter(Protocol):
    """Anything with an async extract(request) -> ExtractionResult."""

    async def extract(self, request: ExtractionRequest) -> ExtractionResult: ...
