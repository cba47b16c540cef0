"""
Tabular source protocol and the shared row cursor.

Contract:
    A TabularSource is a forward-only cursor over rows.  has_next_row() peeks,
    advance_row() moves, and the *_cell() accessors read the current row by
    0-based column index.  row_index is the 0-based index of the current row
    within the whole sheet/file (header rows included), -1 before the first
    advance.

Architecture: datafile_ingestion/adapters. File I/O only, no DB imports.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterator, Protocol, Sequence, runtime_checkable

from datafile_kernel.exceptions import CellFormatError, SourceError

DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%H:%M",
    "%H:%M:%S",
)

_EPOCH = date(1970, 1, 1)

_END = object()
_UNSET = object()


@runtime_checkable
class TabularSource(Protocol):
    """Protocol for row-by-row access to a tabular data file."""

    @property
    def row_index(self) -> int:
        ...

    def has_next_row(self) -> bool:
        ...

    def advance_row(self) -> None:
        ...

    def is_row_empty(self) -> bool:
        ...

    def string_cell(self, index: int, empty_as_null: bool = True) -> str | None:
        ...

    def numeric_cell(self, index: int, empty_as_zero: bool = False) -> float | None:
        ...

    def date_cell(self, index: int) -> datetime | None:
        ...


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RowCursorSource:
    """
    Base cursor implementing TabularSource over an iterator of row sequences.

    Subclasses implement _iter_rows().  start_row rows are skipped before the
    first data row (typically 1 for a header row).
    """

    def __init__(self, *, start_row: int = 0, date_formats: Sequence[str] | None = None):
        if start_row < 0:
            raise ValueError("start_row must be >= 0")
        self._start_row = start_row
        self._date_formats = tuple(date_formats) if date_formats else DEFAULT_DATE_FORMATS
        self._rows: Iterator[Sequence[Any]] | None = None
        self._peeked: Any = _UNSET
        self._current: list[Any] | None = None
        self._row_index = -1
        self._next_index = 0

    def _iter_rows(self) -> Iterator[Sequence[Any]]:
        raise NotImplementedError

    # -- cursor ------------------------------------------------------------

    def _ensure_open(self) -> Iterator[Sequence[Any]]:
        if self._rows is None:
            self._rows = self._iter_rows()
            for _ in range(self._start_row):
                if next(self._rows, _END) is _END:
                    break
                self._next_index += 1
        return self._rows

    @property
    def row_index(self) -> int:
        return self._row_index

    def has_next_row(self) -> bool:
        rows = self._ensure_open()
        if self._peeked is _UNSET:
            self._peeked = next(rows, _END)
        return self._peeked is not _END

    def advance_row(self) -> None:
        if not self.has_next_row():
            raise SourceError("No more rows to read")
        self._current = list(self._peeked)
        self._peeked = _UNSET
        self._row_index = self._next_index
        self._next_index += 1

    def _cell(self, index: int) -> Any:
        if self._current is None:
            raise SourceError("No current row - call advance_row() first")
        if index < 0 or index >= len(self._current):
            return None
        return self._current[index]

    def is_row_empty(self) -> bool:
        if self._current is None:
            raise SourceError("No current row - call advance_row() first")
        return all(_is_blank(v) for v in self._current)

    # -- cell accessors ----------------------------------------------------

    def _format_error(self, index: int, value: Any, expected: str) -> CellFormatError:
        return CellFormatError(self._row_index + 1, index + 1, value, expected)

    def string_cell(self, index: int, empty_as_null: bool = True) -> str | None:
        value = self._cell(index)
        if _is_blank(value):
            return None if empty_as_null else ""
        if isinstance(value, str):
            return value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        return str(value)

    def numeric_cell(self, index: int, empty_as_zero: bool = False) -> float | None:
        value = self._cell(index)
        if _is_blank(value):
            return 0.0 if empty_as_zero else None
        if isinstance(value, bool):
            raise self._format_error(index, value, "number")
        if isinstance(value, (int, float, Decimal)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip().replace(",", ""))
            except ValueError:
                raise self._format_error(index, value, "number") from None
        raise self._format_error(index, value, "number")

    def date_cell(self, index: int) -> datetime | None:
        value = self._cell(index)
        if _is_blank(value):
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time())
        if isinstance(value, time):
            return datetime.combine(_EPOCH, value)
        if isinstance(value, str):
            s = value.strip()
            try:
                return datetime.fromisoformat(s)
            except ValueError:
                pass
            for fmt in self._date_formats:
                try:
                    parsed = datetime.strptime(s, fmt)
                except ValueError:
                    continue
                if parsed.year == 1900 and "%Y" not in fmt:
                    parsed = parsed.replace(year=_EPOCH.year)
                return parsed
        raise self._format_error(index, value, "date")

    # -- diagnostics -------------------------------------------------------

    def describe_row(self) -> str:
        """Debug dump of the current row's cells."""
        row = self._row_index + 1
        parts = [f"Row {row}"]
        if self._current is None or self.is_row_empty():
            parts.append(" Null")
        else:
            for col in range(len(self._current)):
                parts.append(f", ({row},{col + 1}) = {self.string_cell(col)}")
        return "".join(parts)

    # -- lifecycle ---------------------------------------------------------

    def close(self) -> None:
        rows = self._rows
        if rows is not None and hasattr(rows, "close"):
            rows.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
