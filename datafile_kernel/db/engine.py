"""
Engine and session plumbing for code that persists import results.

The import engine only builds object graphs in memory; it never opens, adds
to or commits a session.  Callers that want to save ``run.results`` use the
helpers here::

    init_engine_from_url("sqlite:///people.db")
    create_tables()
    with session_scope() as session:
        session.add_all(run.results)

SQLite URLs share one connection (StaticPool) so a ``:memory:`` database is
the same database for every session.  Other dialects get a QueuePool.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from datafile_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_factory: sessionmaker[Session] | None = None


def _pool_arguments(url: str, pool_size: int, max_overflow: int, pool_pre_ping: bool) -> dict:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": pool_pre_ping,
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
) -> Engine:
    """
    Create the process-wide engine and its session factory.

    Calling it again disposes the previous engine's pool and replaces both.
    Pool sizing arguments apply to non-SQLite URLs only.
    """
    global _engine, _factory

    engine = create_engine(
        database_url,
        echo=echo,
        **_pool_arguments(database_url, pool_size, max_overflow, pool_pre_ping),
    )
    if _engine is not None:
        _engine.dispose()
    _engine = engine
    _factory = sessionmaker(bind=engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": engine.dialect.name, "echo": echo},
    )
    return engine


def _require_factory() -> sessionmaker[Session]:
    if _factory is None:
        raise RuntimeError("No database engine; call init_engine_from_url() first")
    return _factory


def get_engine() -> Engine:
    _require_factory()
    assert _engine is not None
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory bound to the engine.  Concurrent runs each take their own session."""
    return _require_factory()


def get_session() -> Session:
    """A new session.  The caller closes it."""
    return _require_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Session that commits when the block exits cleanly and rolls back otherwise."""
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("session_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create tables for every model imported so far."""
    from datafile_kernel.db.base import Base

    Base.metadata.create_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and drop the factory (test teardown)."""
    global _engine, _factory

    engine, _engine, _factory = _engine, None, None
    if engine is not None:
        engine.dispose()
