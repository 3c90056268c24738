"""
Import Row Sources - bridge from spreadsheet files to ImportRow.

The adapter pattern lets the import orchestrator stay unaware of where rows
come from (xlsx, csv, or a list built in a test).

Expected layout (header row first, ignored):
    name | serial | tenant | manufacturer | role | site | device type
"""

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from openpyxl import load_workbook

from .config import settings
from .models import ImportRow


def _is_blank(cells: Sequence[Any]) -> bool:
    return all(c is None or str(c).strip() == "" for c in cells)


class RowSource(ABC):
    """
    Abstract tabular input for bulk import.

    Implementations yield one ImportRow per non-blank data row.
    """

    @abstractmethod
    def rows(self) -> Iterator[ImportRow]:
        """Yield data rows in sheet order, header excluded."""
        pass

    def __iter__(self) -> Iterator[ImportRow]:
        return self.rows()


class XlsxRowSource(RowSource):
    """
    Rows from an .xlsx workbook.

    Uses the configured sheet (default "Sheet1"), falling back to the
    active sheet when the workbook has no sheet of that name.
    """

    def __init__(self, path: str | Path, sheet_name: Optional[str] = None):
        self._path = Path(path)
        self._sheet_name = sheet_name or settings.IMPORT_SHEET
        if not self._path.exists():
            raise FileNotFoundError(f"Import file not found: {self._path}")

    def rows(self) -> Iterator[ImportRow]:
        workbook = load_workbook(self._path, read_only=True, data_only=True)
        try:
            if self._sheet_name in workbook.sheetnames:
                sheet = workbook[self._sheet_name]
            else:
                sheet = workbook.active

            for row_num, cells in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
                if _is_blank(cells):
                    continue
                yield ImportRow.from_cells(cells, row_number=row_num)
        finally:
            workbook.close()


class CsvRowSource(RowSource):
    """Rows from a comma-separated file with a header line."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"Import file not found: {self._path}")

    def rows(self) -> Iterator[ImportRow]:
        with open(self._path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.reader(f)
            next(reader, None)  # header
            for row_num, cells in enumerate(reader, start=2):
                if _is_blank(cells):
                    continue
                yield ImportRow.from_cells(cells, row_number=row_num)


class InMemoryRowSource(RowSource):
    """
    In-memory source for programmatic setup.

    Accepts ImportRow objects or raw cell sequences (no header).
    """

    def __init__(self, rows: Optional[list] = None):
        self._rows: list[ImportRow] = []
        for row in rows or []:
            self.add_row(row)

    def add_row(self, row: ImportRow | Sequence[Any]):
        """Add a single row."""
        if not isinstance(row, ImportRow):
            row = ImportRow.from_cells(row, row_number=len(self._rows) + 1)
        self._rows.append(row)

    def rows(self) -> Iterator[ImportRow]:
        return iter(list(self._rows))


def open_source(path: str | Path, sheet_name: Optional[str] = None) -> RowSource:
    """Pick a source by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        return XlsxRowSource(path, sheet_name=sheet_name)
    if suffix == ".csv":
        return CsvRowSource(path)
    raise ValueError(f"Unsupported file format: {suffix}")
