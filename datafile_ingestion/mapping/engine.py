"""
Value coercion matrix: typed attribute values from raw tabular cells.

Reads one cell through the TabularSource accessor matching the attribute's
type tag and converts it to the Python value the entity attribute expects.
Every AttributeType has an entry in _COERCERS (an entry of None means the tag
is never written on import); the table is checked at import time.

Failure taxonomy (returned, never raised):
    CONVERSION_FAILED  custom converter rejected the display value
    INVALID_VALUE      cell cannot be read as / converted to the type
    VALUE_REQUIRED     required field coerced to None
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable

from datafile_kernel.domain.attributes import AttributeMetadata, AttributeType
from datafile_kernel.exceptions import CellFormatError, ConversionError
from datafile_kernel.logging_config import get_logger

from datafile_ingestion.adapters.base import TabularSource
from datafile_ingestion.domain.types import DataField
from datafile_ingestion.mapping.converters import parse_boolean

logger = get_logger("ingestion.mapping")

VALUE_REQUIRED = "VALUE_REQUIRED"
INVALID_VALUE = "INVALID_VALUE"
CONVERSION_FAILED = ConversionError.code

_INT32 = (-(2**31), 2**31 - 1)
_INT64 = (-(2**63), 2**63 - 1)


# -----------------------------------------------------------------------------
# Result type
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CoercionResult:
    """
    Outcome of coercing one field.

    success=True with skipped=True means the attribute kind is not importable;
    the field contributes nothing and no problem is raised.
    """

    success: bool
    value: Any = None
    skipped: bool = False
    code: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, value: Any) -> "CoercionResult":
        return cls(success=True, value=value)

    @classmethod
    def skip(cls) -> "CoercionResult":
        return cls(success=True, skipped=True)

    @classmethod
    def failed(cls, code: str, message: str) -> "CoercionResult":
        return cls(success=False, code=code, message=message)


class TypeMismatch(ValueError):
    """A cell was read but does not conform to the attribute's type."""


# -----------------------------------------------------------------------------
# Text checks
# -----------------------------------------------------------------------------


_MASK_CHECKS: dict[str, Callable[[str], bool]] = {
    "#": str.isdigit,
    "A": str.isalpha,
    "*": str.isalnum,
}


def matches_format_mask(value: str, mask: str) -> bool:
    """# digit, A letter, * letter or digit, anything else literal."""
    if len(value) != len(mask):
        return False
    for ch, m in zip(value, mask):
        check = _MASK_CHECKS.get(m)
        if check is None:
            if ch != m:
                return False
        elif not check(ch):
            return False
    return True


def _enforce_text_rules(value: str, attribute: AttributeMetadata) -> None:
    if attribute.format_mask and not matches_format_mask(value, attribute.format_mask):
        raise TypeMismatch(f"Expected the format {attribute.format_mask}.")
    validator = attribute.validator
    if validator is not None and validator.regex:
        if re.fullmatch(validator.regex, value) is None:
            raise TypeMismatch(validator.message or f"Expected to match {validator.regex}.")


# -----------------------------------------------------------------------------
# Per-type coercers: (source, index, attribute, empty_as_zero) -> value | None
# -----------------------------------------------------------------------------


def _text(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> str | None:
    raw = source.string_cell(index, True)
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    _enforce_text_rules(value, attribute)
    return value


def _bool(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> bool | None:
    raw = source.string_cell(index, True)
    if raw is None or not raw.strip():
        return None
    try:
        return parse_boolean(raw)
    except ValueError as exc:
        raise TypeMismatch("Expected yes/no or true/false.") from exc


def _enumeration(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> Any:
    raw = source.string_cell(index, True)
    if raw is None or not raw.strip():
        return None
    text = raw.strip()
    enum_type = attribute.enum_type
    if enum_type is None:
        return text
    low = text.lower()
    for member in enum_type:
        if str(member.value).lower() == low:
            return member
    for member in enum_type:
        if member.name.lower() == low:
            return member
    allowed = ", ".join(str(m.value) for m in enum_type)
    raise TypeMismatch(f"Expected one of: {allowed}.")


def _integral(bounds: tuple[int, int]) -> Callable[..., int | None]:
    low, high = bounds

    def coerce(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> int | None:
        number = source.numeric_cell(index, empty_as_zero)
        if number is None:
            return None
        # fraction dropped toward zero, saturating at the type's limits
        if number >= high:
            return high
        if number <= low:
            return low
        return int(number)

    return coerce


def _decimal(places: int) -> Callable[..., Decimal | None]:
    quantum = Decimal(1).scaleb(-places)

    def coerce(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> Decimal | None:
        number = source.numeric_cell(index, empty_as_zero)
        if number is None:
            return None
        try:
            return Decimal(str(number)).quantize(quantum, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise TypeMismatch(f"Expected a number with at most {places} decimal places.") from exc

    return coerce


def _temporal(project: Callable[[datetime], Any]) -> Callable[..., Any]:
    def coerce(source: TabularSource, index: int, attribute: AttributeMetadata, empty_as_zero: bool) -> Any:
        moment = source.date_cell(index)
        if moment is None:
            return None
        return project(moment)

    return coerce


Coercer = Callable[[TabularSource, int, AttributeMetadata, bool], Any]

_COERCERS: dict[AttributeType, Coercer | None] = {
    AttributeType.BOOL: _bool,
    AttributeType.TEXT: _text,
    AttributeType.MARKUP: _text,
    AttributeType.MEMO: _text,
    AttributeType.ID: _text,
    AttributeType.ENUMERATION: _enumeration,
    AttributeType.INTEGER: _integral(_INT32),
    AttributeType.LONG_INTEGER: _integral(_INT64),
    AttributeType.DECIMAL2: _decimal(2),
    AttributeType.DECIMAL5: _decimal(5),
    AttributeType.DECIMAL10: _decimal(10),
    AttributeType.DATE: _temporal(datetime.date),
    AttributeType.TIME: _temporal(datetime.time),
    AttributeType.DATETIME: _temporal(lambda moment: moment),
    AttributeType.TIMESTAMP: _temporal(lambda moment: moment),
    # Association values arrive through the business-key sub-binding.
    AttributeType.ASSOCIATION: None,
    AttributeType.COLLECTION: None,
    AttributeType.INVERSE_ONE: None,
    AttributeType.INVERSE_MANY: None,
    AttributeType.GEOMETRY: None,
    AttributeType.COLOUR: None,
}

_missing = set(AttributeType) - set(_COERCERS)
if _missing:
    raise RuntimeError(f"No coercion entry for attribute types: {sorted(t.value for t in _missing)}")
del _missing


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def required_message(display_name: str) -> str:
    return f"A value is required for '{display_name}' but no value was found."


def invalid_value_message(raw: Any, display_name: str, cause: str) -> str:
    return f"The value '{raw}' found for '{display_name}' is invalid or the wrong type. {cause}".rstrip()


def _with_required(field: DataField, attribute: AttributeMetadata, value: Any) -> CoercionResult:
    if value is None and field.required:
        return CoercionResult.failed(VALUE_REQUIRED, required_message(attribute.display_name))
    return CoercionResult.ok(value)


def _convert(field: DataField, attribute: AttributeMetadata, source: TabularSource) -> CoercionResult:
    raw = source.string_cell(field.index, True)
    text = raw.strip() if raw is not None else ""
    if not text:
        return _with_required(field, attribute, None)
    try:
        value = field.converter.from_display_value(text)
    except (ConversionError, ValueError) as exc:
        return CoercionResult.failed(
            CONVERSION_FAILED,
            f"The value for '{attribute.display_name}' is invalid: {exc}",
        )
    return _with_required(field, attribute, value)


def coerce_field_value(
    field: DataField,
    attribute: AttributeMetadata,
    source: TabularSource,
    empty_as_zero: bool = False,
) -> CoercionResult:
    """
    Coerce the current row's cell for field into the attribute's type.

    A converter on the field replaces type dispatch.  A required field whose
    value comes out as None yields VALUE_REQUIRED; a cell that cannot be
    converted yields INVALID_VALUE instead (never both).  Fields that look up
    by pattern skip the attribute's format mask and validator.  Kinds with no
    coercer are skipped, except that a required one yields VALUE_REQUIRED.
    """
    if field.converter is not None:
        return _convert(field, attribute, source)

    coercer = _COERCERS[attribute.attribute_type]
    if field.load_action.matches_pattern:
        # a search pattern is not a stored value
        attribute = replace(attribute, format_mask=None, validator=None)
    if coercer is None:
        logger.debug(
            "attribute_type_not_importable",
            extra={
                "binding": field.binding,
                "attribute_type": attribute.attribute_type.value,
            },
        )
        if field.required:
            # no value can be produced for this kind
            return _with_required(field, attribute, None)
        return CoercionResult.skip()

    try:
        value = coercer(source, field.index, attribute, empty_as_zero)
    except (CellFormatError, TypeMismatch, ValueError, ArithmeticError) as exc:
        raw = source.string_cell(field.index, False)
        if isinstance(exc, TypeMismatch):
            cause = str(exc)
        elif isinstance(exc, CellFormatError):
            cause = f"Expected a {exc.expected}."
        else:
            cause = ""
        return CoercionResult.failed(
            INVALID_VALUE,
            invalid_value_message(raw, attribute.display_name, cause),
        )
    return _with_required(field, attribute, value)
