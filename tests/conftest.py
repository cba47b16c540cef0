"""
Pytest fixtures for the data file loader test suite.

Provides:
- Structured logging setup and a captured_logs fixture
- An in-memory SQLite database with the fixture entity schema
- Per-test sessions rolled back at teardown
- Schema provider / persistence collaborators and a session builder
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from datafile_kernel.db.engine import create_tables, init_engine_from_url, reset_engine
from datafile_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from datafile_kernel.services import SqlAlchemyPersistence, SqlAlchemySchemaProvider
from datafile_ingestion.adapters import SequenceTabularSource
from datafile_ingestion.services import ImportSession

# Register the fixture entities on Base.metadata before tables are created.
from tests.fixtures import models  # noqa: F401


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture datafile_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "reference_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("datafile_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """In-memory SQLite engine with every fixture table, created once."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Session inside an outer transaction that is rolled back at teardown."""
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def schema() -> SqlAlchemySchemaProvider:
    return SqlAlchemySchemaProvider()


@pytest.fixture
def persistence(session) -> SqlAlchemyPersistence:
    return SqlAlchemyPersistence(session)


@pytest.fixture
def make_session(schema, persistence):
    """
    Build an ImportSession over in-memory rows.

    Usage::

        s = make_session(Person, [["Ann", "30"]], activity=ActivityType.CREATE_ALL)
    """

    def _make(entity_type, rows, **options) -> ImportSession:
        source = SequenceTabularSource(rows)
        return ImportSession(schema, persistence, entity_type, source, **options)

    return _make
