"""
Path access on mapped entity graphs.

get_path / set_path / populate_path read and write values along a dotted
binding.  populate_path creates any missing to-one intermediate entity on the
way down; to-many segments cannot be traversed.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.exceptions import BindingPathError

EntityFactory = Callable[[type], Any]


def _as_path(binding: str | BindingPath) -> BindingPath:
    if isinstance(binding, BindingPath):
        return binding
    return BindingPath.parse(binding)


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, set, tuple, dict))


def _relation_target(owner_type: type, segment: str, binding: BindingPath) -> type:
    """Target class of the to-one relationship ``owner_type.segment``."""
    try:
        mapper = sa_inspect(owner_type)
    except NoInspectionAvailable as exc:
        raise BindingPathError(str(binding), f"{owner_type.__name__} is not a mapped entity") from exc
    prop = mapper.relationships.get(segment)
    if prop is None:
        raise BindingPathError(str(binding), f"{segment!r} is not a relation of {owner_type.__name__}")
    if prop.uselist:
        raise BindingPathError(str(binding), f"cannot traverse collection {segment!r}")
    return prop.mapper.class_


def _read(owner: Any, segment: str, binding: BindingPath) -> Any:
    if _is_collection(owner):
        raise BindingPathError(str(binding), f"cannot traverse collection before {segment!r}")
    if not hasattr(type(owner), segment):
        raise BindingPathError(str(binding), f"{type(owner).__name__} has no attribute {segment!r}")
    return getattr(owner, segment)


def _assign(owner: Any, segment: str, value: Any, binding: BindingPath) -> None:
    if not hasattr(type(owner), segment):
        raise BindingPathError(str(binding), f"{type(owner).__name__} has no attribute {segment!r}")
    mapper = sa_inspect(type(owner), raiseerr=False)
    prop = mapper.relationships.get(segment) if mapper is not None else None
    if prop is not None and not prop.uselist and value is not None:
        target = prop.mapper.class_
        if not isinstance(value, target):
            raise BindingPathError(str(binding), f"{segment!r} expects a {target.__name__}, got {value!r}")
    setattr(owner, segment, value)


def get_path(entity: Any, binding: str | BindingPath) -> Any:
    """Value at binding, or None if an intermediate is unset."""
    path = _as_path(binding)
    current = entity
    for segment in path.segments:
        if current is None:
            return None
        current = _read(current, segment, path)
    return current


def set_path(entity: Any, binding: str | BindingPath, value: Any) -> None:
    """Set value at binding.  Every intermediate must already exist."""
    path = _as_path(binding)
    owner = entity
    if path.is_compound:
        owner = get_path(entity, path.parent)
        if owner is None:
            raise BindingPathError(str(path), f"{path.parent} is not set")
    _assign(owner, path.last, value, path)


def populate_path(
    entity: Any,
    binding: str | BindingPath,
    value: Any,
    factory: EntityFactory | None = None,
) -> None:
    """Set value at binding, constructing missing intermediates with factory."""
    path = _as_path(binding)
    make = factory or (lambda entity_type: entity_type())
    current = entity
    for segment in path.segments[:-1]:
        child = _read(current, segment, path)
        if child is None:
            child = make(_relation_target(type(current), segment, path))
            setattr(current, segment, child)
        elif _is_collection(child):
            raise BindingPathError(str(path), f"cannot traverse collection {segment!r}")
        current = child
    _assign(current, path.last, value, path)
