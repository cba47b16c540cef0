"""
Import definition schema.

Human-authored YAML import definitions are parsed by the loader into these
frozen dataclasses.  They name the target entity type, the session options,
the source format and the ordered columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceDef:
    """Tabular source format and reader options."""

    format: str = "csv"  # csv | xlsx
    start_row: int = 0  # rows before the first data row
    options: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDef:
    """One column: binding plus optional action, required flag and converter."""

    binding: str
    action: str | None = None  # LoadAction value; None = session default
    required: bool = False
    converter: str | None = None  # name in the converter registry
    treat_empty_numeric_as_zero: bool | None = None


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportDefinition:
    """A complete, reusable import definition."""

    name: str
    entity_type: str
    activity: str = "create_find"
    create_missing_associations: bool = False
    treat_empty_numeric_as_zero: bool = False
    field_offset: int = 0
    source: SourceDef = field(default_factory=SourceDef)
    fields: tuple[FieldDef, ...] = ()
