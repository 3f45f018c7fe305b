"""
Chunked sheet processor (BOQ handler).

Reads every worksheet of a BOQ file, splits long sheets into row chunks,
and submits chunks to the BOQ adapter concurrently. Each chunk succeeds
or fails on its own: a successful chunk replaces exactly its own items,
a failed chunk is recorded as a failed part and leaves its previous
items alone. A retry run only resubmits what failed last time.

Dependencies: asyncio, sqlalchemy, takeoff.boundary, takeoff.core.extraction
System role: BOQ extraction with partial-failure isolation
"""

import asyncio
import logging
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.file_crud import file_crud
from takeoff.boundary.db.CRUD.item_crud import item_crud
from takeoff.boundary.db.CRUD.log_crud import log_crud
from takeoff.boundary.db.models.file_model import FileStatus, FileType, ProjectFileModel
from takeoff.boundary.db.models.item_model import ItemSource
from takeoff.boundary.db.models.log_model import LogLevel
from takeoff.boundary.extraction.base import ExtractionAdapter, ExtractionRequest
from takeoff.boundary.extraction.sheet_reader import SheetReader, SheetRows
from takeoff.core.extraction.chunking import RowChunk, is_blank_row, plan_chunks
from takeoff.core.extraction.status import (
    recompute_file_status,
    recompute_sheet_status,
    summarize_failures,
)

logger = logging.getLogger(__name__)


@dataclass
class SheetRunResult:
    """Outcome of one BOQ file run."""

    status: FileStatus
    sheets: list[dict]
    item_count: int

    @property
    def summary(self) -> str:
        return summarize_failures(self.sheets)


@dataclass
class _ChunkTarget:
    sheet_index: int
    sheet: SheetRows
    chunk: RowChunk
    chunk_count: int


def is_retry_run(file: ProjectFileModel) -> bool:
    """A run is a retry when the stored sheet progress records a failed sheet."""
    return any(
        entry.get("status") == FileStatus.FAILED.value for entry in (file.sheet_status or [])
    )


def failed_part_indices(entry: dict) -> set[int]:
    return {
        part["index"]
        for part in entry.get("parts") or []
        if part.get("status") == FileStatus.FAILED.value
    }


class ChunkedSheetProcessor:
    """
    Runs BOQ extraction chunk by chunk.

    Sheets are handled in workbook order; the chunks of one sheet run
    concurrently, at most max_parallel_chunks at a time per file. Database
    writes share the caller's session and are serialized by a lock.
    """

    def __init__(
        self,
        adapter: ExtractionAdapter,
        reader: SheetReader | None = None,
        max_rows_per_chunk: int = 350,
        min_blank_run: int = 1,
        max_parallel_chunks: int = 4,
    ) -> None:
        """
        Initialize processor.

        Args:
            adapter: BOQ extraction adapter
            reader: Spreadsheet reader
            max_rows_per_chunk: Row threshold per chunk
            min_blank_run: Blank rows required for a chunk boundary
            max_parallel_chunks: Concurrent adapter calls per file
        """
        self._adapter = adapter
        self._reader = reader or SheetReader()
        self._max_rows = max_rows_per_chunk
        self._min_blank_run = min_blank_run
        self._max_parallel = max_parallel_chunks

    async def process(self, session: AsyncSession, file: ProjectFileModel) -> SheetRunResult:
        """
        Extract a BOQ file and persist items and per-sheet progress.

        Fresh run: every chunk of every sheet, and all previous BOQ items
        of the file are dropped first. Retry run: only failed sheets; within
        a sheet only its failed parts, or the whole sheet if none recorded.

        Args:
            session: Async database session (committed after each chunk)
            file: BOQ file being processed

        Returns:
            SheetRunResult with the derived file status and merged sheet entries
        """
        sheets = await asyncio.to_thread(self._reader.read, file.stored_path)
        retry = is_retry_run(file)
        previous = {entry["sheet_name"]: entry for entry in file.sheet_status or []}

        if not retry:
            await item_crud.delete_for_source(session, file.id, ItemSource.BOQ)
            previous = {}

        logger.info(
            f"{__name__}:process - {'Retry' if retry else 'Fresh'} run for {file.original_name}",
            extra={"file_id": str(file.id), "sheets": len(sheets)},
        )

        lock = asyncio.Lock()
        semaphore = asyncio.Semaphore(self._max_parallel)
        merged: list[dict] = []
        item_count = 0

        for sheet_index, sheet in enumerate(sheets):
            prior = previous.get(sheet.name)
            targets = self._select_targets(sheet_index, sheet, prior, retry)
            if targets is None:
                merged.append(prior)
                continue

            results = await asyncio.gather(
                *(self._run_chunk(session, file, target, lock, semaphore) for target in targets),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result

            parts = {part["index"]: part for part in (prior or {}).get("parts") or []}
            for part, count in results:
                parts[part["index"]] = part
                item_count += count
            ordered = [parts[index] for index in sorted(parts)]
            entry = {"sheet_name": sheet.name, "parts": ordered}
            entry["status"] = recompute_sheet_status(ordered)
            merged.append(entry)

        status = recompute_file_status(merged)
        await file_crud.set_sheet_status(session, file.id, status, merged)
        await session.commit()
        return SheetRunResult(status=status, sheets=merged, item_count=item_count)

    def _select_targets(
        self,
        sheet_index: int,
        sheet: SheetRows,
        prior: dict | None,
        retry: bool,
    ) -> list[_ChunkTarget] | None:
        """Chunks to submit for a sheet, or None to keep the prior entry untouched."""
        if retry and prior is not None and prior.get("status") != FileStatus.FAILED.value:
            return None

        chunks = plan_chunks(sheet.rows, self._max_rows, self._min_blank_run)
        count = len(chunks)
        wanted = failed_part_indices(prior) if retry and prior is not None else set()
        if wanted:
            chunks = [chunk for chunk in chunks if chunk.index in wanted]
        return [
            _ChunkTarget(sheet_index=sheet_index, sheet=sheet, chunk=chunk, chunk_count=count)
            for chunk in chunks
        ]

    async def _run_chunk(
        self,
        session: AsyncSession,
        file: ProjectFileModel,
        target: _ChunkTarget,
        lock: asyncio.Lock,
        semaphore: asyncio.Semaphore,
    ) -> tuple[dict, int]:
        """Extract one chunk; adapter failures become a failed part record."""
        chunk = target.chunk
        rows = target.sheet.rows[chunk.start:chunk.end]
        label = f"BOQ sheet {target.sheet.name} (part {chunk.index + 1}/{target.chunk_count})"

        if all(is_blank_row(row) for row in rows):
            return {"index": chunk.index, "status": FileStatus.READY.value}, 0

        request = ExtractionRequest(
            file_type=FileType.BOQ,
            file_name=file.original_name,
            file_path=file.stored_path,
            rows=rows,
            row_offset=chunk.start,
            sheet_name=target.sheet.name,
            chunk_index=chunk.index,
            chunk_count=target.chunk_count,
        )

        try:
            async with semaphore:
                result = await self._adapter.extract(request)
        except Exception as e:
            logger.error(
                f"{__name__}:_run_chunk - Extraction failed for {label}: {e}",
                extra={"file_id": str(file.id), "error_type": type(e).__name__},
            )
            async with lock:
                await log_crud.append(
                    session,
                    file.project_id,
                    f"Extraction failed for {label}: {e}",
                    file_id=file.id,
                    level=LogLevel.ERROR,
                )
                await session.commit()
            return {"index": chunk.index, "status": FileStatus.FAILED.value, "error": str(e)}, 0

        rows_out = [
            {
                "item_code": item.item_code,
                "description": item.description,
                "notes": item.notes,
                "box": item.box,
                "fields": item.fields,
                "category": item.category,
                "subcategory": item.subcategory,
                "sheet_index": target.sheet_index,
                "row_index": chunk.start + (item.row_index if item.row_index is not None else position),
                "chunk_count": target.chunk_count,
            }
            for position, item in enumerate(result.items)
        ]

        async with lock:
            await item_crud.replace_chunk(
                session,
                file.project_id,
                file.id,
                target.sheet.name,
                chunk.index,
                rows_out,
            )
            await log_crud.append(
                session,
                file.project_id,
                f"Extraction response received for {label} ({len(rows_out)} items)",
                file_id=file.id,
            )
            await session.commit()

        return {"index": chunk.index, "status": FileStatus.READY.value}, len(rows_out)

