"""
CSV tabular source.

Uses csv.reader. Configurable: delimiter, encoding, quoting, start_row.
Handles BOM via utf-8-sig when encoding is utf-8. Streams rows.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator, Sequence

from datafile_ingestion.adapters.base import RowCursorSource


_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}


def _get_encoding(encoding: str) -> str:
    if encoding.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return encoding


def _get_quoting(quoting: str | int) -> int:
    if isinstance(quoting, int):
        return quoting
    return _QUOTING.get(str(quoting).lower(), csv.QUOTE_MINIMAL)


class CsvTabularSource(RowCursorSource):
    """Read a CSV file one row at a time.  Every cell is a string."""

    def __init__(
        self,
        source_path: Path | str,
        *,
        start_row: int = 0,
        delimiter: str = ",",
        encoding: str = "utf-8",
        quoting: str | int = "minimal",
        date_formats: Sequence[str] | None = None,
    ):
        super().__init__(start_row=start_row, date_formats=date_formats)
        self._path = Path(source_path)
        self._delimiter = delimiter
        self._encoding = _get_encoding(encoding)
        self._quoting = _get_quoting(quoting)

    @property
    def name(self) -> str:
        return self._path.name

    def _iter_rows(self) -> Iterator[Sequence[Any]]:
        with self._path.open("r", encoding=self._encoding, newline="") as f:
            yield from csv.reader(f, delimiter=self._delimiter, quoting=self._quoting)
