"""
datafile_ingestion.domain.types -- Field descriptors and session options.

ZERO I/O. Imports only from datafile_kernel/domain/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from datafile_kernel.domain.binding import BindingPath

if TYPE_CHECKING:
    from datafile_ingestion.mapping.converters import Converter


class ActivityType(str, Enum):
    """Session-wide policy: construct entities, locate them, or both."""

    CREATE_ALL = "create_all"  # Build every entity implied by the row; never look up
    CREATE_FIND = "create_find"  # Build the row entity; look up (or create) references
    FIND = "find"  # Build nothing; locate an existing entity by the row's values


class LoadAction(str, Enum):
    """Per-field policy for applying a loaded value."""

    SET_VALUE = "set_value"
    LOOKUP_EQUALS = "lookup_equals"
    LOOKUP_LIKE = "lookup_like"
    LOOKUP_CONTAINS = "lookup_contains"
    CONFIRM_VALUE = "confirm_value"

    def filter_operand(self, value: Any) -> tuple[str, Any]:
        """(operator, operand) used when this action filters a query."""
        if self is LoadAction.LOOKUP_LIKE:
            return "like", value
        if self is LoadAction.LOOKUP_CONTAINS:
            return "like", f"%{value}%"
        return "equals", value

    @property
    def matches_pattern(self) -> bool:
        return self in (LoadAction.LOOKUP_LIKE, LoadAction.LOOKUP_CONTAINS)


_IMMUTABLE_FIELDS = frozenset({"binding", "path"})


@dataclass(eq=False)
class DataField:
    """
    One declared column: where it is read from and where its value goes.

    index is 0-based and may be shifted by a session field offset; binding is
    fixed once set.  treat_empty_numeric_as_zero=None inherits the session
    default.
    """

    binding: str
    index: int = 0
    load_action: LoadAction = LoadAction.SET_VALUE
    required: bool = False
    treat_empty_numeric_as_zero: bool | None = None
    converter: "Converter | None" = None

    def __post_init__(self) -> None:
        self.path = BindingPath.parse(self.binding)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"DataField.{name} cannot be changed once set")
        super().__setattr__(name, value)

    @property
    def is_compound(self) -> bool:
        return self.path.is_compound

    def empty_numeric_as_zero(self, session_default: bool) -> bool:
        """Field setting wins over the session default when present."""
        if self.treat_empty_numeric_as_zero is None:
            return session_default
        return self.treat_empty_numeric_as_zero


@dataclass(frozen=True)
class SessionOptions:
    """Recognised import session options."""

    activity: ActivityType = ActivityType.CREATE_FIND
    create_missing_associations: bool = False
    treat_empty_numeric_as_zero: bool = False
    field_offset: int = 0
