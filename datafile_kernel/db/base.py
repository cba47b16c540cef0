"""
Module: datafile_kernel.db.base
Responsibility: Declarative base classes for SQLAlchemy entity models that the
    import engine can populate.  Provides the UUID primary key convention and
    the class-level entity conventions (business key, display aliases) read by
    the schema provider.
Architecture position: Kernel > DB.  Lowest-level import target for models.
    MUST NOT import from services/ or outer layers.

Entity conventions (class attributes, all optional):
    __business_key__   attribute name holding the natural display key
                       (default "biz_key"); association terminals are widened
                       to it to choose how a cell is coerced.
    __singular_alias__ human name for one instance (default: class name).
    __plural_alias__   human name for many instances (default: singular + "s").

Column ``info`` keys read by the schema provider:
    attribute_type  explicit AttributeType (or its value), overriding inference
    display_name    label used in problem messages
    format_mask     text mask enforced on import
    validator       dict with "kind", optional "regex" and "message"
"""

from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID kept as a 36-character string so SQLite and PostgreSQL agree."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""

    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
    }


class Entity(Base):
    """
    Abstract base for importable entities.

    Contract:
        Provides a uuid4 primary key and the entity conventions described in
        the module docstring.
    """

    __abstract__ = True

    __business_key__: ClassVar[str] = "biz_key"
    __singular_alias__: ClassVar[str | None] = None
    __plural_alias__: ClassVar[str | None] = None

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )



# models annotate their keys with this name
UUID = PyUUID
