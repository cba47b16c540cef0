"""
Lookup-or-create resolution for compound bindings.

Contract:
    LookupResolver.resolve() handles one compound field of one row.  The
    entity addressed by the binding's first segment is queried with the
    field's load action operator applied to the remainder of the binding.

    found, CONFIRM_VALUE   compare with what the context already references;
                           a different entity raises ReferenceMismatchError
    found, other actions   link it when the context references nothing yet
    missing, creatable     reuse the entity cached under (binding, value) or
                           populate the full path and cache the new entity
    missing, otherwise     raise UnresolvedReferenceError

    Creation is enabled by activity CREATE_ALL or create_missing_associations.

Invariants:
    - One CreationCache is shared by every row of a session, so a given
      (binding, value) pair yields the same sub-entity instance for the run.
    - Nothing is added to a database session or flushed here.
"""

from __future__ import annotations

from typing import Any, Iterator

from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.domain.ports import Persistence, SchemaProvider
from datafile_kernel.exceptions import ReferenceMismatchError, UnresolvedReferenceError
from datafile_kernel.logging_config import get_logger

from datafile_ingestion.domain.types import ActivityType, DataField, LoadAction
from datafile_ingestion.resolution.path_resolver import PathResolver

logger = get_logger("ingestion.lookup")

CacheKey = tuple[str, Any]


class CreationCache:
    """Sub-entities created during one session, keyed by (binding, raw value)."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    @staticmethod
    def key(binding: str | BindingPath, value: Any) -> CacheKey:
        return str(binding), value

    def get(self, binding: str | BindingPath, value: Any) -> Any | None:
        return self._entries.get(self.key(binding, value))

    def put(self, binding: str | BindingPath, value: Any, entity: Any) -> None:
        self._entries[self.key(binding, value)] = entity

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(self._entries)


class LookupResolver:
    """Resolves compound bindings for CREATE_FIND (and auto-create) sessions."""

    def __init__(
        self,
        persistence: Persistence,
        schema: SchemaProvider,
        cache: CreationCache,
        *,
        activity: ActivityType = ActivityType.CREATE_FIND,
        create_missing: bool = False,
        path_resolver: PathResolver | None = None,
    ):
        self._persistence = persistence
        self._schema = schema
        self._cache = cache
        self._activity = activity
        self._create_missing = create_missing
        self._paths = path_resolver or PathResolver(schema)

    @property
    def creates_missing(self) -> bool:
        return self._activity is ActivityType.CREATE_ALL or self._create_missing

    def resolve(
        self,
        entity_type: Any,
        context: Any,
        field: DataField,
        binding: BindingPath,
        value: Any,
    ) -> None:
        """
        Resolve a compound binding on context.

        A match found by a lookup action is linked to context when the
        relation is still empty, so later rows naming the same value share
        one entity.  An existing link is never replaced.  CONFIRM_VALUE only
        compares and never links.

        Raises:
            UnresolvedReferenceError: nothing matched and creation is disabled.
            ReferenceMismatchError: CONFIRM_VALUE found a different entity.
            InvalidBindingError: binding does not resolve.
        """
        if value is None:
            return

        search_binding = binding.first
        rest = binding.remainder
        driving_type = self._paths.driving_type(entity_type, binding)

        query = self._persistence.new_query(driving_type)
        operator, operand = field.load_action.filter_operand(value)
        if operator == "like":
            query.add_like(str(rest), operand)
        else:
            query.add_equals(str(rest), operand)

        found = query.single_result()
        if found is not None:
            self._found(context, field, search_binding, rest, value, found)
            return

        if not self.creates_missing:
            meta = self._schema.entity(driving_type)
            logger.debug(
                "reference_not_found",
                extra={"binding": str(binding), "value": value, "entity": meta.name},
            )
            raise UnresolvedReferenceError(value, meta.singular_alias, meta.plural_alias)

        cached = self._cache.get(binding, value)
        if cached is not None:
            self._persistence.set(context, search_binding, cached)
            logger.debug(
                "reference_reused",
                extra={"binding": str(binding), "value": value},
            )
            return

        self._persistence.populate(context, str(binding), value)
        created = self._persistence.get(context, search_binding)
        self._cache.put(binding, value, created)
        logger.debug(
            "reference_created",
            extra={
                "binding": str(binding),
                "value": value,
                "entity": type(created).__name__,
            },
        )

    def _found(
        self,
        context: Any,
        field: DataField,
        search_binding: str,
        rest: BindingPath,
        value: Any,
        found: Any,
    ) -> None:
        existing = self._persistence.get(context, search_binding)
        if field.load_action is LoadAction.CONFIRM_VALUE:
            if existing is not None and existing is not found:
                shown = self._persistence.get(existing, str(rest))
                raise ReferenceMismatchError(value, shown)
            return
        if existing is None:
            self._persistence.set(context, search_binding, found)
