"""
SqlAlchemyPersistence -- Persistence collaborator over a SQLAlchemy Session.

Responsibility:
    Builds filtered queries for one entity type, where filter bindings may be
    dotted paths through relationships (``contact.name`` on Company becomes
    ``Company.contact.has(Contact.name == ...)``), executes them, constructs
    new instances and gives path access via datafile_kernel.services.binder.

Non-goals:
    - Does NOT add new instances to the session.  Entities built during an
      import are the caller's to persist or discard.
    - Does NOT commit or roll back.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.exceptions import BindingPathError, InvalidBindingError
from datafile_kernel.services.binder import get_path, populate_path, set_path


def path_criterion(
    entity_type: type,
    binding: BindingPath,
    build: Callable[[Any], ColumnElement],
    full_binding: BindingPath | None = None,
) -> ColumnElement:
    """
    Filter expression for ``binding`` on ``entity_type``.

    Relationship segments become ``has`` (to-one) or ``any`` (to-many) clauses;
    build() is applied to the terminal attribute.
    """
    full = full_binding or binding
    segment = binding.first
    relationships = sa_inspect(entity_type).relationships
    if not binding.is_compound:
        attr = getattr(entity_type, segment, None)
        if attr is None:
            raise InvalidBindingError(entity_type.__name__, str(full), segment)
        if segment in relationships:
            raise BindingPathError(str(full), f"{segment!r} is a relation; filter on one of its attributes")
        return build(attr)

    prop = relationships.get(segment)
    if prop is None:
        raise InvalidBindingError(entity_type.__name__, str(full), segment)
    inner = path_criterion(prop.mapper.class_, binding.remainder, build, full)
    relation = getattr(entity_type, segment)
    return relation.any(inner) if prop.uselist else relation.has(inner)


class SqlAlchemyQuery:
    """EntityQuery accumulating AND-ed criteria over one entity type."""

    def __init__(self, session: Session, entity_type: type):
        self._session = session
        self._entity_type = entity_type
        self._criteria: list[ColumnElement] = []
        self._filters: list[tuple[str, str, Any]] = []

    @property
    def entity_type(self) -> type:
        return self._entity_type

    @property
    def filters(self) -> tuple[tuple[str, str, Any], ...]:
        """(binding, operator, operand) triples in the order added."""
        return tuple(self._filters)

    @property
    def is_empty(self) -> bool:
        return not self._criteria

    def add_equals(self, binding: str, value: Any) -> None:
        path = BindingPath.parse(binding)
        self._criteria.append(path_criterion(self._entity_type, path, lambda attr: attr == value))
        self._filters.append((str(path), "=", value))

    def add_like(self, binding: str, pattern: str) -> None:
        path = BindingPath.parse(binding)
        self._criteria.append(path_criterion(self._entity_type, path, lambda attr: attr.like(pattern)))
        self._filters.append((str(path), "LIKE", pattern))

    @property
    def statement(self):
        return select(self._entity_type).where(*self._criteria)

    def single_result(self) -> Any | None:
        return self._session.scalars(self.statement.limit(1)).first()

    def results(self) -> list[Any]:
        return list(self._session.scalars(self.statement))

    def __str__(self) -> str:
        where = " AND ".join(f"{b} {op} {v!r}" for b, op, v in self._filters)
        return f"{self._entity_type.__name__}" + (f" WHERE {where}" if where else "")


class SqlAlchemyPersistence:
    """Persistence collaborator bound to one SQLAlchemy Session."""

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def new_query(self, entity_type: type) -> SqlAlchemyQuery:
        return SqlAlchemyQuery(self._session, entity_type)

    def new_instance(self, entity_type: type) -> Any:
        return entity_type()

    def get(self, entity: Any, binding: str) -> Any:
        return get_path(entity, binding)

    def set(self, entity: Any, binding: str, value: Any) -> None:
        set_path(entity, binding, value)

    def populate(self, entity: Any, binding: str, value: Any) -> None:
        populate_path(entity, binding, value, factory=self.new_instance)
