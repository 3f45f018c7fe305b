"""
Row chunk planning for large worksheets.

Pure functions. A worksheet longer than the row threshold is split into
contiguous chunks whose boundaries fall on runs of blank rows, so a
logical block of lines is never cut in the middle.

Dependencies: None
System role: Chunk boundaries for the chunked sheet processor
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RowChunk:
    """Half-open row range [start, end) of a worksheet."""

    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


def is_blank_row(row: list[str]) -> bool:
    """A row is blank when every cell is empty after trimming."""
    return all(not str(cell).strip() for cell in row)


def _next_boundary(blank: list[bool], search_from: int, min_blank_run: int) -> int | None:
    """First index >= search_from that starts a run of at least min_blank_run blank rows."""
    total = len(blank)
    index = search_from
    while index < total:
        if not blank[index]:
            index += 1
            continue
        run_end = index
        while run_end < total and blank[run_end]:
            run_end += 1
        if run_end - index >= min_blank_run:
            return index
        index = run_end
    return None


def plan_chunks(rows: list[list[str]], max_rows: int, min_blank_run: int = 1) -> list[RowChunk]:
    """
    Split rows into contiguous chunks.

    A sheet of at most max_rows rows is a single chunk. Otherwise each
    chunk ends right before the first run of at least min_blank_run blank
    rows that starts at or after chunk start + max_rows; that run opens
    the next chunk. With no such run the chunk extends to the end.

    Args:
        rows: Worksheet rows
        max_rows: Row threshold per chunk
        min_blank_run: Consecutive blank rows required for a boundary

    Returns:
        Chunks covering every row exactly once, in order

    Raises:
        ValueError: If max_rows or min_blank_run is below 1
    """
    if max_rows < 1 or min_blank_run < 1:
        raise ValueError("max_rows and min_blank_run must be at least 1")

    total = len(rows)
    if total <= max_rows:
        return [RowChunk(index=0, start=0, end=total)]

    blank = [is_blank_row(row) for row in rows]
    chunks: list[RowChunk] = []
    start = 0
    while start < total:
        boundary = _next_boundary(blank, start + max_rows, min_blank_run)
        end = total if boundary is None else boundary
        chunks.append(RowChunk(index=len(chunks), start=start, end=end))
        start = end
    return chunks
