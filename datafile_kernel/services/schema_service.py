"""
SqlAlchemySchemaProvider -- entity schema metadata from SQLAlchemy mappers.

Responsibility:
    Answers the SchemaProvider protocol for mapped classes: attribute type
    tags, display names, format masks and validators (from column ``info``),
    relation targets, and entity aliases / business keys (from class-level
    conventions on datafile_kernel.db.base.Entity).

Type inference (when ``info["attribute_type"]`` is absent):
    UUIDString / Uuid -> ID          Boolean -> BOOL
    Enum -> ENUMERATION              BigInteger -> LONG_INTEGER
    Integer -> INTEGER               Numeric(scale<=2) -> DECIMAL2
    Numeric(scale<=5) -> DECIMAL5    other Numeric / Float -> DECIMAL10
    Date -> DATE                     Time -> TIME
    DateTime(timezone) -> TIMESTAMP  DateTime -> DATETIME
    Text -> MEMO                     String / other -> TEXT
    relationship(uselist=False) -> ASSOCIATION
    relationship(uselist=True) -> COLLECTION
    viewonly relationships -> INVERSE_ONE / INVERSE_MANY
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.ext.hybrid import HybridExtensionType
from sqlalchemy.orm import ColumnProperty, RelationshipProperty, registry as orm_registry

from datafile_kernel.db.base import Base, UUIDString
from datafile_kernel.domain.attributes import (
    AttributeMetadata,
    AttributeType,
    EntityMetadata,
    ValidatorSpec,
)
from datafile_kernel.exceptions import UnknownEntityTypeError
from datafile_kernel.logging_config import get_logger

logger = get_logger("services.schema")

DEFAULT_BUSINESS_KEY = "biz_key"


def _display_name(name: str, info: dict[str, Any]) -> str:
    return info.get("display_name") or name.replace("_", " ").title()


def _validator_from_info(info: dict[str, Any]) -> ValidatorSpec | None:
    raw = info.get("validator")
    if raw is None:
        return None
    if isinstance(raw, ValidatorSpec):
        return raw
    return ValidatorSpec(
        kind=raw.get("kind", "regex"),
        regex=raw.get("regex"),
        message=raw.get("message"),
    )


def _column_type_tag(column_type: Any) -> AttributeType:
    # Order matters: Text subclasses String, BigInteger subclasses Integer,
    # Float subclasses Numeric.
    if isinstance(column_type, (UUIDString, sqltypes.Uuid)):
        return AttributeType.ID
    if isinstance(column_type, sqltypes.Boolean):
        return AttributeType.BOOL
    if isinstance(column_type, sqltypes.Enum):
        return AttributeType.ENUMERATION
    if isinstance(column_type, sqltypes.BigInteger):
        return AttributeType.LONG_INTEGER
    if isinstance(column_type, sqltypes.Integer):
        return AttributeType.INTEGER
    if isinstance(column_type, sqltypes.Float):
        return AttributeType.DECIMAL10
    if isinstance(column_type, sqltypes.Numeric):
        scale = column_type.scale
        if scale is not None and scale <= 2:
            return AttributeType.DECIMAL2
        if scale is not None and scale <= 5:
            return AttributeType.DECIMAL5
        return AttributeType.DECIMAL10
    if isinstance(column_type, sqltypes.DateTime):
        if column_type.timezone:
            return AttributeType.TIMESTAMP
        return AttributeType.DATETIME
    if isinstance(column_type, sqltypes.Date):
        return AttributeType.DATE
    if isinstance(column_type, sqltypes.Time):
        return AttributeType.TIME
    if isinstance(column_type, sqltypes.Text):
        return AttributeType.MEMO
    return AttributeType.TEXT


def _relationship_type_tag(prop: RelationshipProperty) -> AttributeType:
    if prop.viewonly:
        return AttributeType.INVERSE_MANY if prop.uselist else AttributeType.INVERSE_ONE
    return AttributeType.COLLECTION if prop.uselist else AttributeType.ASSOCIATION


class SqlAlchemySchemaProvider:
    """SchemaProvider over SQLAlchemy mapped classes."""

    def __init__(self, registry: orm_registry | None = None):
        self._registry = registry if registry is not None else Base.registry
        self._attributes: dict[tuple[Any, str], AttributeMetadata | None] = {}

    def _mapper(self, entity_type: Any):
        try:
            return sa_inspect(entity_type)
        except NoInspectionAvailable as exc:
            raise UnknownEntityTypeError(getattr(entity_type, "__name__", str(entity_type))) from exc

    def entity_type_named(self, name: str) -> Any:
        for mapper in self._registry.mappers:
            if mapper.class_.__name__ == name:
                return mapper.class_
        raise UnknownEntityTypeError(name)

    def entity(self, entity_type: Any) -> EntityMetadata:
        self._mapper(entity_type)
        name = entity_type.__name__
        singular = getattr(entity_type, "__singular_alias__", None) or name
        plural = getattr(entity_type, "__plural_alias__", None) or f"{singular}s"
        return EntityMetadata(
            entity_type=entity_type,
            name=name,
            singular_alias=singular,
            plural_alias=plural,
            business_key=getattr(entity_type, "__business_key__", None) or DEFAULT_BUSINESS_KEY,
        )

    def attribute(self, entity_type: Any, name: str) -> AttributeMetadata | None:
        key = (entity_type, name)
        if key not in self._attributes:
            self._attributes[key] = self._build_attribute(entity_type, name)
        return self._attributes[key]

    def _build_attribute(self, entity_type: Any, name: str) -> AttributeMetadata | None:
        mapper = self._mapper(entity_type)

        prop = mapper.attrs.get(name)
        if isinstance(prop, RelationshipProperty):
            info = dict(prop.info)
            explicit = info.get("attribute_type")
            return AttributeMetadata(
                name=name,
                attribute_type=AttributeType(explicit) if explicit else _relationship_type_tag(prop),
                display_name=_display_name(name, info),
                owner_type=entity_type,
                target_type=prop.mapper.class_,
                owned="delete-orphan" in prop.cascade,
            )

        if isinstance(prop, ColumnProperty):
            column = prop.columns[0]
            info = {**column.info, **prop.info}
            explicit = info.get("attribute_type")
            attribute_type = AttributeType(explicit) if explicit else _column_type_tag(column.type)
            enum_type = None
            if isinstance(column.type, sqltypes.Enum):
                enum_type = column.type.enum_class
            return AttributeMetadata(
                name=name,
                attribute_type=attribute_type,
                display_name=_display_name(name, info),
                owner_type=entity_type,
                format_mask=info.get("format_mask"),
                validator=_validator_from_info(info),
                enum_type=enum_type,
            )

        descriptor = mapper.all_orm_descriptors.get(name)
        if descriptor is not None and descriptor.extension_type is HybridExtensionType.HYBRID_PROPERTY:
            info = dict(getattr(descriptor, "info", {}) or {})
            explicit = info.get("attribute_type")
            return AttributeMetadata(
                name=name,
                attribute_type=AttributeType(explicit) if explicit else AttributeType.TEXT,
                display_name=_display_name(name, info),
                owner_type=entity_type,
            )

        logger.debug(
            "attribute_not_found",
            extra={"entity": entity_type.__name__, "attribute": name},
        )
        return None
