"""Value coercion and display-value converters (pure, reads cells only)."""

from datafile_ingestion.mapping.converters import (
    CONVERTERS,
    Converter,
    DateConverter,
    DecimalConverter,
    LowerCaseConverter,
    UpperCaseConverter,
    YesNoConverter,
    get_converter,
    parse_boolean,
)
from datafile_ingestion.mapping.engine import (
    CoercionResult,
    coerce_field_value,
    matches_format_mask,
)

__all__ = [
    "CONVERTERS",
    "CoercionResult",
    "Converter",
    "DateConverter",
    "DecimalConverter",
    "LowerCaseConverter",
    "UpperCaseConverter",
    "YesNoConverter",
    "coerce_field_value",
    "get_converter",
    "matches_format_mask",
    "parse_boolean",
]
