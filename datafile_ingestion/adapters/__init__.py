"""Tabular sources for data file import (file I/O only, no DB)."""

from datafile_ingestion.adapters.base import (
    DEFAULT_DATE_FORMATS,
    RowCursorSource,
    TabularSource,
)
from datafile_ingestion.adapters.csv_adapter import CsvTabularSource
from datafile_ingestion.adapters.sequence_adapter import SequenceTabularSource
from datafile_ingestion.adapters.xlsx_adapter import XlsxTabularSource

__all__ = [
    "DEFAULT_DATE_FORMATS",
    "CsvTabularSource",
    "RowCursorSource",
    "SequenceTabularSource",
    "TabularSource",
    "XlsxTabularSource",
]
