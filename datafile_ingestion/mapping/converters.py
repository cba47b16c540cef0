"""
Custom display-value converters.

A converter registered on a DataField replaces the type-driven coercion for
that field: the trimmed string cell is handed to from_display_value() and the
result is used as-is.  Converters signal bad input with ConversionError.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Protocol, runtime_checkable

from datafile_kernel.exceptions import ConversionError


@runtime_checkable
class Converter(Protocol):
    def from_display_value(self, display_value: str) -> Any:
        ...


class UpperCaseConverter:
    def from_display_value(self, display_value: str) -> str:
        return display_value.upper()


class LowerCaseConverter:
    def from_display_value(self, display_value: str) -> str:
        return display_value.lower()


_TRUE_WORDS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "n", "0", "off"})


def parse_boolean(text: str) -> bool:
    """Parse yes/no style text.  Raises ValueError when unrecognised."""
    low = text.strip().lower()
    if low in _TRUE_WORDS:
        return True
    if low in _FALSE_WORDS:
        return False
    raise ValueError(f"Cannot interpret {text!r} as yes/no")


class YesNoConverter:
    def from_display_value(self, display_value: str) -> bool:
        try:
            return parse_boolean(display_value)
        except ValueError as exc:
            raise ConversionError(display_value, str(exc)) from exc


class DateConverter:
    """Parse dates with a fixed strptime format."""

    def __init__(self, fmt: str = "%Y-%m-%d"):
        self.fmt = fmt

    def from_display_value(self, display_value: str) -> date:
        try:
            return datetime.strptime(display_value, self.fmt).date()
        except ValueError as exc:
            raise ConversionError(
                display_value, f"Expected a date formatted as {self.fmt}"
            ) from exc


class DecimalConverter:
    """Parse a decimal string (thousands separators allowed) at a fixed scale."""

    def __init__(self, scale: int = 2):
        self.scale = scale
        self._quantum = Decimal(1).scaleb(-scale)

    def from_display_value(self, display_value: str) -> Decimal:
        try:
            value = Decimal(display_value.replace(",", ""))
        except InvalidOperation as exc:
            raise ConversionError(display_value, "Expected a decimal number") from exc
        return value.quantize(self._quantum, rounding=ROUND_HALF_UP)


CONVERTERS: dict[str, Callable[[], Converter]] = {
    "upper": UpperCaseConverter,
    "lower": LowerCaseConverter,
    "yes_no": YesNoConverter,
    "iso_date": DateConverter,
    "decimal2": lambda: DecimalConverter(2),
}


def get_converter(name: str) -> Converter:
    """Instantiate a registered converter by name.  Raises KeyError if unknown."""
    try:
        factory = CONVERTERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown converter {name!r}; expected one of {sorted(CONVERTERS)}"
        ) from None
    return factory()
