"""SQLAlchemy-backed collaborators: schema provider, persistence, path binder."""

from datafile_kernel.services.binder import get_path, populate_path, set_path
from datafile_kernel.services.persistence_service import (
    SqlAlchemyPersistence,
    SqlAlchemyQuery,
)
from datafile_kernel.services.schema_service import SqlAlchemySchemaProvider

__all__ = [
    "SqlAlchemyPersistence",
    "SqlAlchemyQuery",
    "SqlAlchemySchemaProvider",
    "get_path",
    "populate_path",
    "set_path",
]
