"""
Test doubles for the extraction boundary.

Provides: Scripted extraction adapter, in-memory sheet reader, BOQ row builders
System role: Deterministic stand-ins for Gemini and spreadsheet I/O
"""

from typing import Callable

from takeoff.boundary.extraction.base import ExtractedItem, ExtractionRequest, ExtractionResult
from takeoff.boundary.extraction.sheet_reader import SheetRows


class ScriptedAdapter:
    """
    Extraction adapter that records requests and answers from a handler.

    The handler receives the request and returns an ExtractionResult or
    raises; without a handler every call returns the fixed items.
    """

    def __init__(
        self,
        handler: Callable[[ExtractionRequest], ExtractionResult] | None = None,
        items: list[ExtractedItem] | None = None,
    ) -> None:
        self.requests: list[ExtractionRequest] = []
        self._handler = handler
        self._items = items or []

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return ExtractionResult(items=list(self._items))


class StaticSheetReader:
    """SheetReader stand-in returning fixed worksheets for any path."""

    def __init__(self, sheets: list[SheetRows]) -> None:
        self.sheets = sheets
        self.paths: list[str] = []

    def read(self, path) -> list[SheetRows]:
        self.paths.append(str(path))
        return self.sheets


def boq_rows(total: int = 800, blank_every: int = 10) -> list[list[str]]:
    """Rows with a blank row at indices blank_every-1, 2*blank_every-1, ..."""
    rows: list[list[str]] = []
    for index in range(total):
        if index % blank_every == blank_every - 1:
            rows.append([])
        else:
            rows.append([f"{index // blank_every + 1}.{index % blank_every + 1}", f"Line {index}", "m2", "10"])
    return rows


def one_item_per_row(request: ExtractionRequest) -> ExtractionResult:
    """Handler emitting one item for every non-blank submitted row."""
    items = [
        ExtractedItem(
            item_code=row[0],
            description=row[1],
            row_index=position,
            fields={"UNIT": row[2], "QTY": row[3]},
        )
        for position, row in enumerate(request.rows or [])
        if row
    ]
    return ExtractionResult(items=items)
