"""
Gemini-backed extraction adapters.

BOQ chunks are sent as labelled text rows; schedules and drawings are sent
as base64 media parts. All three use LangChain structured output and retry
transient failures with exponential backoff. A call that still fails is
raised as ExtractionError so the caller marks the unit failed.

Dependencies: langchain_google_genai, langchain_core, tenacity, pydantic
System role: Concrete extraction backends for the job pipeline
"""

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from takeoff.boundary.extraction.base import (
    ExtractedItem,
    ExtractionRequest,
    ExtractionResult,
)
from takeoff.boundary.extraction.prompts import (
    BOQ_ROWS_PROMPT,
    SCHEDULE_PROMPT,
    build_drawing_prompt,
    render_rows,
)
from takeoff.boundary.extraction.schemas import (
    BoqRowsResponse,
    DrawingResponse,
    FieldValue,
    ScheduleResponse,
)
from takeoff.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


def _fields_to_dict(values: list[FieldValue]) -> dict[str, str]:
    return {value.name: value.value for value in values if value.name}


def _guess_mime_type(file_name: str) -> str:
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type or "application/octet-stream"


class GeminiStructuredAdapter:
    """
    Shared plumbing for the Gemini adapters.

    Holds the chat model and runs a structured call under a tenacity retry
    loop. Subclasses build the messages and map the response to items.
    """

    response_schema: type[BaseModel]

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash",
        temperature: float = 0.0,
        max_retries: int = 3,
        model: Any | None = None,
    ) -> None:
        """
        Initialize adapter.

        Args:
            model_id: Gemini model identifier
            temperature: Sampling temperature
            max_retries: Attempts per call before giving up
            model: Pre-built chat model (tests inject a fake)
        """
        self._model = model or ChatGoogleGenerativeAI(model=model_id, temperature=temperature)
        self._max_retries = max_retries
        self._structured = self._model.with_structured_output(self.response_schema)

    async def _invoke(self, messages: list[BaseMessage], file_name: str) -> BaseModel:
        """Run the structured call with retry; raise ExtractionError on final failure."""
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(Exception),
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential_jitter(initial=1, max=30, jitter=2),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:_invoke - Retry {retry_state.attempt_number}/"
                    f"{self._max_retries} for {file_name}"
                ),
                reraise=True,
            ):
                with attempt:
                    response = await self._structured.ainvoke(messages)
        except Exception as e:
            raise ExtractionError(
                f"Extraction call failed: {type(e).__name__}: {e}",
                file_name=file_name,
            ) from e

        if response is None:
            raise ExtractionError("Extraction returned no structured output", file_name=file_name)
        return response

    async def _media_message(self, prompt: str, request: ExtractionRequest) -> HumanMessage:
        data = await asyncio.to_thread(Path(request.file_path).read_bytes)
        return HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {
                    "type": "media",
                    "mime_type": _guess_mime_type(request.file_name),
                    "data": base64.b64encode(data).decode("ascii"),
                },
            ]
        )


class BoqSheetAdapter(GeminiStructuredAdapter):
    """Extracts priced lines from one chunk of BOQ worksheet rows."""

    response_schema = BoqRowsResponse

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        rows = request.rows or []
        messages = BOQ_ROWS_PROMPT.format_messages(
            sheet_name=request.sheet_name or "",
            part=request.chunk_index + 1,
            part_count=request.chunk_count,
            rows=render_rows(rows),
        )
        response = await self._invoke(messages, request.file_name)

        items = [
            ExtractedItem(
                item_code=row.item_code,
                description=row.description,
                notes=row.notes,
                row_index=row.row_index,
                category=row.category,
                subcategory=row.subcategory,
                fields=_fields_to_dict(row.fields),
            )
            for row in response.items
            if 0 <= row.row_index < len(rows)
        ]
        return ExtractionResult(items=items, raw=response.model_dump())


class ScheduleAdapter(GeminiStructuredAdapter):
    """Extracts schedule entries (codes and descriptions) from a document."""

    response_schema = ScheduleResponse

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        message = await self._media_message(SCHEDULE_PROMPT, request)
        response = await self._invoke([message], request.file_name)

        items = []
        for entry in response.items:
            fields = _fields_to_dict(entry.fields)
            fields.setdefault("CODE", entry.item_code)
            items.append(
                ExtractedItem(
                    item_code=entry.item_code,
                    description=entry.description,
                    notes=entry.notes,
                    fields=fields,
                )
            )
        return ExtractionResult(items=items, raw=response.model_dump())


class DrawingAdapter(GeminiStructuredAdapter):
    """Extracts annotated items with bounding boxes from a drawing."""

    response_schema = DrawingResponse

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        codes = list(request.context.get("schedule_codes", []))
        system = SystemMessage(content=build_drawing_prompt(codes))
        message = await self._media_message("Begin the extraction.", request)
        response = await self._invoke([system, message], request.file_name)

        items = [
            ExtractedItem(
                item_code=entry.item_code,
                description=entry.description,
                notes=entry.notes,
                box=entry.box.model_dump(),
            )
            for entry in response.items
        ]
        return ExtractionResult(items=items, raw=response.model_dump())
