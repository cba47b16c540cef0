"""
Typed Exception Hierarchy for the Data File Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

An import run produces two kinds of failure:

  - Per-field problems (bad binding, unconvertible cell, missing reference).
    These are caught by the row assembler and recorded in the ProblemReport.
    They never abort a row.
  - Configuration failures (no entity type, no source, unknown source format).
    These propagate to the caller; the session cannot continue.

Every exception carries a class-level CODE so that callers and the problem
report can identify it without parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DatafileKernelError (base)
    |
    +-- ConfigurationError
    |   +-- LoaderNotInitialisedError
    |   +-- UnknownEntityTypeError
    |   +-- UnsupportedSourceFormatError
    |
    +-- BindingError
    |   +-- InvalidBindingError
    |   +-- BindingPathError
    |
    +-- ConversionError
    |
    +-- SourceError
    |   +-- CellFormatError
    |
    +-- ReferenceResolutionError
        +-- UnresolvedReferenceError
        +-- ReferenceMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | LOADER_NOT_INITIALISED      | Row requested before context was set
                | UNKNOWN_ENTITY_TYPE         | Entity type name not in the schema
                | UNSUPPORTED_SOURCE_FORMAT   | No adapter for the source format
----------------|-----------------------------|-----------------------------------------
Binding         | INVALID_BINDING             | Binding does not resolve to an attribute
                | BINDING_PATH_ERROR          | Path cannot be read/written/populated
----------------|-----------------------------|-----------------------------------------
Conversion      | CONVERSION_FAILED           | Custom converter rejected a value
----------------|-----------------------------|-----------------------------------------
Source          | CELL_FORMAT_ERROR           | Cell cannot be read as requested kind
----------------|-----------------------------|-----------------------------------------
Reference       | REFERENCE_NOT_FOUND         | Lookup missed, creation not enabled
                | REFERENCE_MISMATCH          | Confirmed value differs from linked one
"""

from __future__ import annotations

from typing import Any


class DatafileKernelError(Exception):
    """
    Base exception for all data file kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DATAFILE_KERNEL_ERROR"


# Configuration exceptions (fatal to the session)


class ConfigurationError(DatafileKernelError):
    """Base exception for session configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class LoaderNotInitialisedError(ConfigurationError):
    """A row was requested before the session context was complete."""

    code: str = "LOADER_NOT_INITIALISED"

    def __init__(self, missing: str):
        self.missing = missing
        super().__init__(
            f"The loader has not been initialised correctly - "
            f"check that you set the {missing} for the loader."
        )


class UnknownEntityTypeError(ConfigurationError):
    """Entity type name is not known to the schema provider."""

    code: str = "UNKNOWN_ENTITY_TYPE"

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"Unknown entity type: {entity_type}")


class UnsupportedSourceFormatError(ConfigurationError):
    """No tabular source adapter is registered for the format."""

    code: str = "UNSUPPORTED_SOURCE_FORMAT"

    def __init__(self, source_format: str):
        self.source_format = source_format
        super().__init__(f"No adapter for source format {source_format!r}")


# Binding exceptions


class BindingError(DatafileKernelError):
    """Base exception for binding path errors."""

    code: str = "BINDING_ERROR"


class InvalidBindingError(BindingError):
    """Binding does not resolve to any known attribute."""

    code: str = "INVALID_BINDING"

    def __init__(self, entity_type: str, binding: str, segment: str | None = None):
        self.entity_type = entity_type
        self.binding = binding
        self.segment = segment
        detail = f" (no attribute {segment!r})" if segment else ""
        super().__init__(f"Invalid binding {binding!r} for {entity_type}{detail}")


class BindingPathError(BindingError):
    """A path could not be read, written or populated on an entity graph."""

    code: str = "BINDING_PATH_ERROR"

    def __init__(self, binding: str, reason: str):
        self.binding = binding
        self.reason = reason
        super().__init__(f"Cannot process binding {binding!r}: {reason}")


# Conversion exceptions


class ConversionError(DatafileKernelError):
    """A custom converter could not convert a display value."""

    code: str = "CONVERSION_FAILED"

    def __init__(self, value: str, message: str):
        self.value = value
        super().__init__(message)


# Source exceptions


class SourceError(DatafileKernelError):
    """Base exception for tabular source errors."""

    code: str = "SOURCE_ERROR"


class CellFormatError(SourceError):
    """A cell could not be read as the requested kind of value."""

    code: str = "CELL_FORMAT_ERROR"

    def __init__(self, row: int, column: int, value: Any, expected: str):
        self.row = row
        self.column = column
        self.value = value
        self.expected = expected
        super().__init__(f"Cell value {value!r} is not a valid {expected}")


# Reference resolution exceptions


class ReferenceResolutionError(DatafileKernelError):
    """Base exception for compound binding lookup failures."""

    code: str = "REFERENCE_RESOLUTION_ERROR"


class UnresolvedReferenceError(ReferenceResolutionError):
    """Lookup found nothing and creation of the reference is not enabled."""

    code: str = "REFERENCE_NOT_FOUND"

    def __init__(self, value: Any, singular_alias: str, plural_alias: str):
        self.value = value
        self.singular_alias = singular_alias
        self.plural_alias = plural_alias
        super().__init__(
            f"The {singular_alias} '{value}' doesn't match any existing {plural_alias}."
        )


class ReferenceMismatchError(ReferenceResolutionError):
    """ConfirmValue found an entity that differs from the one already linked."""

    code: str = "REFERENCE_MISMATCH"

    def __init__(self, value: Any, existing: Any):
        self.value = value
        self.existing = existing
        super().__init__(
            f"The value '{value}' doesn't match the existing value of '{existing}'."
        )
