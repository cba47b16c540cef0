"""
Path resolver: binding paths resolved one segment at a time against a schema.

Contract:
    resolve() walks a BindingPath from a root entity type and records, for
    every segment, the owning entity type, the attribute metadata and whether
    the segment is a plain attribute, a to-one or a to-many relation.  Every
    non-terminal segment must be a relation.

    target_metadata() additionally widens an association terminal to the
    target's business key, so ``company`` on Invoice takes its coercion type from
    ``company.name`` when Company.__business_key__ is "name".

Failure modes:
    InvalidBindingError when any segment is unknown, or a plain attribute is
    followed by further segments.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from datafile_kernel.domain.attributes import AttributeMetadata, AttributeType
from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.domain.ports import SchemaProvider
from datafile_kernel.exceptions import InvalidBindingError


class Relation(str, Enum):
    ATTRIBUTE = "attribute"
    TO_ONE = "to_one"
    TO_MANY = "to_many"


_RELATIONS: dict[AttributeType, Relation] = {
    AttributeType.ASSOCIATION: Relation.TO_ONE,
    AttributeType.INVERSE_ONE: Relation.TO_ONE,
    AttributeType.COLLECTION: Relation.TO_MANY,
    AttributeType.INVERSE_MANY: Relation.TO_MANY,
}


@dataclass(frozen=True)
class PathStep:
    """One resolved segment of a binding."""

    segment: str
    owner_type: Any
    attribute: AttributeMetadata
    relation: Relation

    @property
    def owned(self) -> bool:
        """Composition (True) versus shared reference (False)."""
        return self.attribute.owned

    @property
    def target_type(self) -> Any:
        return self.attribute.target_type


@dataclass(frozen=True)
class ResolvedPath:
    """A binding with every segment resolved; binding may be widened."""

    binding: BindingPath
    steps: tuple[PathStep, ...]
    widened: bool = False

    @property
    def terminal(self) -> AttributeMetadata:
        return self.steps[-1].attribute

    @property
    def owner_type(self) -> Any:
        """Entity type declaring the terminal attribute."""
        return self.steps[-1].owner_type

    def step(self, depth: int) -> PathStep:
        return self.steps[depth]


class PathResolver:
    """Resolves bindings against a SchemaProvider."""

    def __init__(self, schema: SchemaProvider):
        self._schema = schema

    def resolve(self, entity_type: Any, binding: str | BindingPath) -> ResolvedPath:
        path = binding if isinstance(binding, BindingPath) else BindingPath.parse(binding)
        steps: list[PathStep] = []
        owner = entity_type
        for depth, segment in enumerate(path.segments):
            attribute = self._schema.attribute(owner, segment)
            if attribute is None:
                raise InvalidBindingError(_type_name(entity_type), str(path), segment)
            relation = _RELATIONS.get(attribute.attribute_type, Relation.ATTRIBUTE)
            steps.append(PathStep(segment, owner, attribute, relation))
            if depth < len(path) - 1:
                if relation is Relation.ATTRIBUTE:
                    raise InvalidBindingError(_type_name(entity_type), str(path), path.segments[depth + 1])
                owner = attribute.target_type
        return ResolvedPath(path, tuple(steps))

    def target_metadata(self, entity_type: Any, binding: str | BindingPath) -> ResolvedPath:
        """Resolve binding, widening an association terminal to its business key."""
        resolved = self.resolve(entity_type, binding)
        if resolved.terminal.attribute_type is not AttributeType.ASSOCIATION:
            return resolved
        target = resolved.terminal.target_type
        key = self._schema.entity(target).business_key
        widened = self.resolve(entity_type, BindingPath.of(resolved.binding, key))
        return ResolvedPath(widened.binding, widened.steps, widened=True)

    def driving_type(self, entity_type: Any, binding: str | BindingPath) -> Any:
        """
        Entity type a compound lookup queries: the owner of the first-level
        binding's terminal, i.e. the target of the first segment.
        """
        path = binding if isinstance(binding, BindingPath) else BindingPath.parse(binding)
        return self.resolve(entity_type, path.first_level).owner_type


def _type_name(entity_type: Any) -> str:
    return getattr(entity_type, "__name__", str(entity_type))
