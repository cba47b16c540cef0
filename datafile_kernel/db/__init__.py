"""Database layer - engine and base classes."""

from datafile_kernel.db.base import UUID, Base, Entity, UUIDString
from datafile_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "reset_engine",
    "Base",
    "Entity",
    "UUIDString",
    "UUID",
]
