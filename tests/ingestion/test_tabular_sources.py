"""Tests for tabular sources: row cursor, cell rules, CSV and XLSX files."""

import tempfile
from datetime import date, datetime, time
from pathlib import Path

import pytest

from datafile_ingestion.adapters import (
    CsvTabularSource,
    SequenceTabularSource,
    TabularSource,
    XlsxTabularSource,
)
from datafile_kernel.exceptions import CellFormatError, SourceError


def _at_row(*cells):
    source = SequenceTabularSource([list(cells)])
    source.advance_row()
    return source


class TestRowCursor:
    """has_next_row / advance_row / row_index / start_row."""

    def test_satisfies_protocol(self):
        assert isinstance(SequenceTabularSource([]), TabularSource)

    def test_iterates_all_rows(self):
        source = SequenceTabularSource([["a"], ["b"]])
        seen = []
        while source.has_next_row():
            source.advance_row()
            seen.append(source.string_cell(0))
        assert seen == ["a", "b"]

    def test_row_index_counts_skipped_header(self):
        source = SequenceTabularSource([["header"], ["a"], ["b"]], start_row=1)
        assert source.row_index == -1
        source.advance_row()
        assert source.row_index == 1
        assert source.string_cell(0) == "a"

    def test_has_next_row_does_not_advance(self):
        source = SequenceTabularSource([["a"]])
        assert source.has_next_row()
        assert source.has_next_row()
        source.advance_row()
        assert not source.has_next_row()

    def test_advance_past_end(self):
        source = SequenceTabularSource([])
        with pytest.raises(SourceError):
            source.advance_row()

    def test_cell_before_first_advance(self):
        with pytest.raises(SourceError):
            SequenceTabularSource([["a"]]).string_cell(0)

    def test_negative_start_row_rejected(self):
        with pytest.raises(ValueError):
            SequenceTabularSource([], start_row=-1)

    def test_is_row_empty(self):
        assert _at_row("", None, "  ").is_row_empty()
        assert not _at_row("", "x").is_row_empty()


class TestStringCell:
    def test_blank_as_null_or_empty(self):
        source = _at_row("  ")
        assert source.string_cell(0) is None
        assert source.string_cell(0, empty_as_null=False) == ""

    def test_out_of_range_is_empty(self):
        assert _at_row("a").string_cell(5) is None

    def test_integral_float_rendered_without_fraction(self):
        assert _at_row(30.0).string_cell(0) == "30"
        assert _at_row(2.5).string_cell(0) == "2.5"

    def test_date_rendered_iso(self):
        assert _at_row(date(2024, 3, 1)).string_cell(0) == "2024-03-01"


class TestNumericCell:
    def test_number_and_string(self):
        source = _at_row(3, " 1,234.5 ")
        assert source.numeric_cell(0) == 3.0
        assert source.numeric_cell(1) == 1234.5

    def test_blank_as_none_or_zero(self):
        source = _at_row("")
        assert source.numeric_cell(0) is None
        assert source.numeric_cell(0, empty_as_zero=True) == 0.0

    def test_unparsable(self):
        with pytest.raises(CellFormatError) as exc_info:
            _at_row("thirty").numeric_cell(0)
        assert exc_info.value.row == 1
        assert exc_info.value.column == 1

    def test_boolean_is_not_a_number(self):
        with pytest.raises(CellFormatError):
            _at_row(True).numeric_cell(0)


class TestDateCell:
    def test_datetime_passes_through(self):
        moment = datetime(2024, 3, 1, 9, 30)
        assert _at_row(moment).date_cell(0) == moment

    def test_date_widened_to_midnight(self):
        assert _at_row(date(2024, 3, 1)).date_cell(0) == datetime(2024, 3, 1)

    def test_time_placed_on_epoch(self):
        assert _at_row(time(9, 30)).date_cell(0) == datetime(1970, 1, 1, 9, 30)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2024-03-01", datetime(2024, 3, 1)),
            ("2024-03-01T09:30:00", datetime(2024, 3, 1, 9, 30)),
            ("2024/03/01", datetime(2024, 3, 1)),
            ("25/12/2024", datetime(2024, 12, 25)),
            ("09:30", datetime(1970, 1, 1, 9, 30)),
        ],
    )
    def test_strings(self, text, expected):
        assert _at_row(text).date_cell(0) == expected

    def test_custom_formats(self):
        source = SequenceTabularSource([["01.03.2024"]], date_formats=["%d.%m.%Y"])
        source.advance_row()
        assert source.date_cell(0) == datetime(2024, 3, 1)

    def test_unparsable(self):
        with pytest.raises(CellFormatError):
            _at_row("next tuesday").date_cell(0)


class TestDescribeRow:
    def test_dump(self):
        assert _at_row("Ann", 30.0).describe_row() == "Row 1, (1,1) = Ann, (1,2) = 30"

    def test_empty_row(self):
        assert _at_row("", None).describe_row() == "Row 1 Null"


class TestCsvTabularSource:
    def _write(self, content: str, encoding: str = "utf-8") -> Path:
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".csv", delete=False, newline="", encoding=encoding
        ) as f:
            f.write(content)
            return Path(f.name)

    def test_reads_rows_after_header(self):
        path = self._write("name,age\nAnn,30\nBob,41\n")
        try:
            with CsvTabularSource(path, start_row=1) as source:
                rows = []
                while source.has_next_row():
                    source.advance_row()
                    rows.append((source.string_cell(0), source.numeric_cell(1)))
            assert rows == [("Ann", 30.0), ("Bob", 41.0)]
            assert source.name == path.name
        finally:
            path.unlink()

    def test_bom_stripped(self):
        path = self._write("\ufeffname\nAnn\n")
        try:
            with CsvTabularSource(path) as source:
                source.advance_row()
                assert source.string_cell(0) == "name"
        finally:
            path.unlink()

    def test_custom_delimiter(self):
        path = self._write("a;b\n1;2\n")
        try:
            with CsvTabularSource(path, delimiter=";", start_row=1) as source:
                source.advance_row()
                assert source.string_cell(1) == "2"
        finally:
            path.unlink()

    def test_close_before_exhaustion(self):
        path = self._write("a\nb\nc\n")
        try:
            source = CsvTabularSource(path)
            source.advance_row()
            source.close()
            assert source.row_index == 0
        finally:
            path.unlink()


class TestXlsxTabularSource:
    def test_typed_cells(self):
        openpyxl = pytest.importorskip("openpyxl")
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "people.xlsx"
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.append(["name", "age", "born"])
            ws.append(["Ann", 30, datetime(1994, 5, 17)])
            wb.save(path)

            with XlsxTabularSource(path, start_row=1) as source:
                source.advance_row()
                assert source.string_cell(0) == "Ann"
                assert source.numeric_cell(1) == 30.0
                assert source.date_cell(2) == datetime(1994, 5, 17)
                assert not source.has_next_row()

    def test_sheet_by_name(self):
        openpyxl = pytest.importorskip("openpyxl")
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "book.xlsx"
            wb = openpyxl.Workbook()
            wb.active.append(["first"])
            other = wb.create_sheet("Other")
            other.append(["second"])
            wb.save(path)

            with XlsxTabularSource(path, sheet="Other") as source:
                source.advance_row()
                assert source.string_cell(0) == "second"
