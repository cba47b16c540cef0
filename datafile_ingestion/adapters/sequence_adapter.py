"""In-memory tabular source over a sequence of rows."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

from datafile_ingestion.adapters.base import RowCursorSource


class SequenceTabularSource(RowCursorSource):
    """Rows supplied as lists/tuples of raw cell values."""

    def __init__(
        self,
        rows: Iterable[Sequence[Any]],
        *,
        start_row: int = 0,
        date_formats: Sequence[str] | None = None,
        name: str = "<memory>",
    ):
        super().__init__(start_row=start_row, date_formats=date_formats)
        self._data = [tuple(r) for r in rows]
        self.name = name

    def _iter_rows(self) -> Iterator[Sequence[Any]]:
        return iter(self._data)
