"""
Attribute type tags and metadata for entity schemas.

Pure value objects. A SchemaProvider produces these; the coercion matrix and
path resolver consume them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AttributeType(str, Enum):
    """Closed set of attribute kinds an entity schema can declare."""

    BOOL = "bool"
    TEXT = "text"
    MARKUP = "markup"
    MEMO = "memo"
    INTEGER = "integer"
    LONG_INTEGER = "long_integer"
    DECIMAL2 = "decimal2"
    DECIMAL5 = "decimal5"
    DECIMAL10 = "decimal10"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    ID = "id"
    ENUMERATION = "enumeration"
    ASSOCIATION = "association"  # to-one reference
    COLLECTION = "collection"  # to-many
    GEOMETRY = "geometry"
    COLOUR = "colour"
    INVERSE_ONE = "inverse_one"  # read-only, never written on import
    INVERSE_MANY = "inverse_many"  # read-only, never written on import


@dataclass(frozen=True)
class ValidatorSpec:
    """Text validator declared on an attribute (kind plus optional regex)."""

    kind: str
    regex: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class AttributeMetadata:
    """
    Metadata for one attribute of an entity type.

    owner_type is the entity type declaring the attribute; target_type is set
    for relation kinds only. owned distinguishes composition (the owner's graph
    includes the target) from aggregation (a shared reference).
    """

    name: str
    attribute_type: AttributeType
    display_name: str
    owner_type: Any
    target_type: Any = None
    owned: bool = False
    format_mask: str | None = None
    validator: ValidatorSpec | None = None
    enum_type: type[Enum] | None = None


@dataclass(frozen=True)
class EntityMetadata:
    """Names and business key for an entity type."""

    entity_type: Any
    name: str
    singular_alias: str
    plural_alias: str
    business_key: str
