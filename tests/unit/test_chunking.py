"""
Test suite for worksheet chunk planning.

System role: Verification of blank-row chunk boundaries
"""

import pytest

from takeoff.core.extraction.chunking import RowChunk, is_blank_row, plan_chunks
from tests.fakes import boq_rows


class TestIsBlankRow:
    """Test blank row detection."""

    @pytest.mark.parametrize("row", [[], [""], ["", "  ", "\t"]])
    def test_blank(self, row):
        assert is_blank_row(row) is True

    @pytest.mark.parametrize("row", [["x"], ["", "0"], ["  ", "m2"]])
    def test_not_blank(self, row):
        assert is_blank_row(row) is False


class TestPlanChunks:
    """Test chunk boundaries."""

    def test_short_sheet_is_single_chunk(self):
        # Arrange
        rows = boq_rows(total=120)

        # Act
        chunks = plan_chunks(rows, max_rows=350)

        # Assert
        assert chunks == [RowChunk(index=0, start=0, end=120)]

    def test_sheet_exactly_at_threshold_is_single_chunk(self):
        chunks = plan_chunks(boq_rows(total=350), max_rows=350)

        assert len(chunks) == 1
        assert chunks[0].size == 350

    def test_empty_sheet(self):
        assert plan_chunks([], max_rows=350) == [RowChunk(index=0, start=0, end=0)]

    def test_long_sheet_splits_on_first_blank_after_threshold(self):
        # Arrange: blank rows at 9, 19, ..., 799
        rows = boq_rows(total=800)

        # Act
        chunks = plan_chunks(rows, max_rows=350)

        # Assert
        assert [(c.index, c.start, c.end) for c in chunks] == [
            (0, 0, 359),
            (1, 359, 709),
            (2, 709, 800),
        ]

    def test_blank_row_opens_next_chunk(self):
        rows = boq_rows(total=800)

        chunks = plan_chunks(rows, max_rows=350)

        for chunk in chunks[1:]:
            assert is_blank_row(rows[chunk.start])

    def test_no_blank_row_after_threshold_extends_to_end(self):
        # Arrange: only blank row sits before the threshold
        rows = [["a", str(i)] for i in range(500)]
        rows[100] = []

        # Act
        chunks = plan_chunks(rows, max_rows=350)

        # Assert
        assert chunks == [RowChunk(index=0, start=0, end=500)]

    def test_min_blank_run_skips_single_blank_rows(self):
        # Arrange: single blanks every 10 rows, one double blank at 424-425
        rows = boq_rows(total=800)
        rows[424] = []
        rows[425] = []

        # Act
        chunks = plan_chunks(rows, max_rows=350, min_blank_run=2)

        # Assert
        assert chunks[0] == RowChunk(index=0, start=0, end=424)
        assert chunks[1].start == 424

    @pytest.mark.parametrize("max_rows", [1, 7, 50, 350, 799, 800, 1000])
    @pytest.mark.parametrize("min_blank_run", [1, 2, 3])
    def test_chunks_cover_every_row_once(self, max_rows, min_blank_run):
        rows = boq_rows(total=800, blank_every=7)

        chunks = plan_chunks(rows, max_rows=max_rows, min_blank_run=min_blank_run)

        assert chunks[0].start == 0
        assert chunks[-1].end == 800
        for previous, current in zip(chunks, chunks[1:]):
            assert previous.end == current.start
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert all(c.size > 0 for c in chunks)

    @pytest.mark.parametrize("max_rows,min_blank_run", [(0, 1), (350, 0), (-1, -1)])
    def test_invalid_arguments(self, max_rows, min_blank_run):
        with pytest.raises(ValueError):
            plan_chunks(boq_rows(total=10), max_rows=max_rows, min_blank_run=min_blank_run)
