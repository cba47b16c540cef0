"""
Collaborator protocols the import engine depends on.

Contract:
    SchemaProvider answers questions about entity types and their attributes.
    Persistence builds filtered queries, constructs entities and reads/writes
    values along binding paths (auto-creating missing intermediates on populate).

The SQLAlchemy implementations live in datafile_kernel.services.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from datafile_kernel.domain.attributes import AttributeMetadata, EntityMetadata


@runtime_checkable
class SchemaProvider(Protocol):
    """Entity schema metadata lookups."""

    def entity(self, entity_type: Any) -> EntityMetadata:
        """Names, aliases and business key for an entity type."""
        ...

    def attribute(self, entity_type: Any, name: str) -> AttributeMetadata | None:
        """Metadata for a single (non-dotted) attribute, or None if unknown."""
        ...

    def entity_type_named(self, name: str) -> Any:
        """Resolve an entity type from its name. Raises UnknownEntityTypeError."""
        ...


@runtime_checkable
class EntityQuery(Protocol):
    """A filtered query over one entity type."""

    def add_equals(self, binding: str, value: Any) -> None:
        ...

    def add_like(self, binding: str, pattern: str) -> None:
        ...

    @property
    def is_empty(self) -> bool:
        """True while no filter criteria have been added."""
        ...

    def single_result(self) -> Any | None:
        """Zero-or-one result."""
        ...

    def results(self) -> list[Any]:
        ...


@runtime_checkable
class Persistence(Protocol):
    """Query execution, instantiation and path access on entity graphs."""

    def new_query(self, entity_type: Any) -> EntityQuery:
        ...

    def new_instance(self, entity_type: Any) -> Any:
        ...

    def get(self, entity: Any, binding: str) -> Any:
        ...

    def set(self, entity: Any, binding: str, value: Any) -> None:
        ...

    def populate(self, entity: Any, binding: str, value: Any) -> None:
        """Set value at binding, creating missing intermediate entities."""
        ...
