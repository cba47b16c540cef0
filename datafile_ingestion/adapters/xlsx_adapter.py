"""
XLSX tabular source (openpyxl, read-only workbook).

Cells keep the types openpyxl reports: numbers stay numeric and date cells
arrive as datetime, so numeric and date accessors do not re-parse them.

Options:
  sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
  start_row: rows before the first data row (e.g. 1 for a header row).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Sequence

from datafile_ingestion.adapters.base import RowCursorSource


class XlsxTabularSource(RowCursorSource):
    """Read one worksheet of an .xlsx workbook one row at a time."""

    def __init__(
        self,
        source_path: Path | str,
        *,
        sheet: int | str | None = None,
        start_row: int = 0,
        date_formats: Sequence[str] | None = None,
    ):
        super().__init__(start_row=start_row, date_formats=date_formats)
        self._path = Path(source_path)
        self._sheet = sheet

    @property
    def name(self) -> str:
        return self._path.name

    def _get_sheet(self, wb: Any) -> Any:
        if self._sheet is None:
            return wb.active
        if isinstance(self._sheet, int):
            return wb.worksheets[self._sheet]
        return wb[self._sheet]

    def _iter_rows(self) -> Iterator[Sequence[Any]]:
        try:
            import openpyxl
        except ImportError as e:
            raise ImportError("XLSX support requires openpyxl. Install with: pip install openpyxl") from e

        wb = openpyxl.load_workbook(self._path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb)
            yield from sheet.iter_rows(values_only=True)
        finally:
            wb.close()
