"""
Spreadsheet reader for BOQ files.

Returns every worksheet in workbook order with all of its rows. Blank
rows are kept because chunk boundaries are placed on them.

Dependencies: openpyxl, csv (stdlib)
System role: Tabular input for the chunked sheet processor
"""

import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from takeoff.core.exceptions import UnsupportedFileTypeError

logger = logging.getLogger(__name__)

WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv"}


@dataclass
class SheetRows:
    """One worksheet: its name and its rows of trimmed cell strings."""

    name: str
    rows: list[list[str]]


def cell_text(value: Any) -> str:
    """Coerce a cell value to a trimmed string; None becomes ''."""
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _trim_trailing(row: list[str]) -> list[str]:
    end = len(row)
    while end and not row[end - 1]:
        end -= 1
    return row[:end]


class SheetReader:
    """Reads .xlsx/.xlsm workbooks and .csv files into SheetRows."""

    def read(self, path: str | Path) -> list[SheetRows]:
        """
        Read all worksheets of a file.

        Args:
            path: Local file path

        Returns:
            Worksheets in workbook order

        Raises:
            UnsupportedFileTypeError: If the extension is not supported
        """
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix in WORKBOOK_EXTENSIONS:
            return self._read_workbook(path)
        if suffix in CSV_EXTENSIONS:
            return self._read_csv(path)
        raise UnsupportedFileTypeError(
            f"Unsupported spreadsheet type '{suffix or path.name}'",
            file_name=path.name,
        )

    def _read_workbook(self, path: Path) -> list[SheetRows]:
        wb = load_workbook(path, read_only=True, data_only=True)
        try:
            sheets = [
                SheetRows(
                    name=ws.title,
                    rows=[
                        _trim_trailing([cell_text(value) for value in row])
                        for row in ws.iter_rows(values_only=True)
                    ],
                )
                for ws in wb.worksheets
            ]
        finally:
            wb.close()

        logger.info(
            f"{__name__}:_read_workbook - Read {len(sheets)} sheets from {path.name}",
            extra={"sheets": [sheet.name for sheet in sheets]},
        )
        return sheets

    def _read_csv(self, path: Path) -> list[SheetRows]:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            rows = [_trim_trailing([cell_text(value) for value in row]) for row in csv.reader(handle)]
        return [SheetRows(name=path.stem, rows=rows)]
