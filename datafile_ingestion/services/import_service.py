"""
Import service: definition + file -> entities and a problem report.

Orchestrates the tabular source adapters and an ImportSession for a parsed
ImportDefinition.  Uses structured logging (LogContext, get_logger("ingestion.*")).

Non-goals:
    Never commits, flushes or adds entities to the database session.  What
    happens to the resulting entities is the caller's decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy.orm import Session

from datafile_config.schema import ImportDefinition, SourceDef
from datafile_kernel.domain.ports import SchemaProvider
from datafile_kernel.domain.problems import ProblemReport
from datafile_kernel.exceptions import UnsupportedSourceFormatError
from datafile_kernel.logging_config import LogContext, get_logger
from datafile_kernel.services.persistence_service import SqlAlchemyPersistence
from datafile_kernel.services.schema_service import SqlAlchemySchemaProvider

from datafile_ingestion.adapters.base import RowCursorSource
from datafile_ingestion.adapters.csv_adapter import CsvTabularSource
from datafile_ingestion.adapters.xlsx_adapter import XlsxTabularSource
from datafile_ingestion.domain.types import ActivityType, LoadAction, SessionOptions
from datafile_ingestion.mapping.converters import get_converter
from datafile_ingestion.services.import_session import ImportSession

logger = get_logger("ingestion.import_service")

SourceFactory = Callable[[Path, SourceDef], RowCursorSource]


def _open_csv(path: Path, source_def: SourceDef) -> RowCursorSource:
    return CsvTabularSource(path, start_row=source_def.start_row, **source_def.options)


def _open_xlsx(path: Path, source_def: SourceDef) -> RowCursorSource:
    return XlsxTabularSource(path, start_row=source_def.start_row, **source_def.options)


def _default_sources() -> dict[str, SourceFactory]:
    return {
        "csv": _open_csv,
        "xlsx": _open_xlsx,
    }


@dataclass
class ImportRun:
    """Outcome of one ImportService.run()."""

    results: list[Any]
    report: ProblemReport
    rows_read: int

    @property
    def has_errors(self) -> bool:
        return self.report.has_errors()


class ImportService:
    """Runs import definitions against files.  Uses session, schema provider, sources."""

    def __init__(
        self,
        session: Session,
        schema_provider: SchemaProvider | None = None,
        sources: dict[str, SourceFactory] | None = None,
    ):
        self._session = session
        self._schema = schema_provider or SqlAlchemySchemaProvider()
        self._sources = sources if sources is not None else _default_sources()

    def open_source(self, path: Path | str, source_def: SourceDef) -> RowCursorSource:
        factory = self._sources.get(source_def.format)
        if factory is None:
            raise UnsupportedSourceFormatError(source_def.format)
        return factory(Path(path), source_def)

    def build_session(self, definition: ImportDefinition, source: Any) -> ImportSession:
        """Session for definition over source, fields declared, offset pending."""
        entity_type = self._schema.entity_type_named(definition.entity_type)
        options = SessionOptions(
            activity=ActivityType(definition.activity),
            create_missing_associations=definition.create_missing_associations,
            treat_empty_numeric_as_zero=definition.treat_empty_numeric_as_zero,
            field_offset=definition.field_offset,
        )
        import_session = ImportSession(
            self._schema,
            SqlAlchemyPersistence(self._session),
            entity_type,
            source,
            options=options,
        )
        for field_def in definition.fields:
            import_session.add_field(
                field_def.binding,
                load_action=LoadAction(field_def.action) if field_def.action else None,
                required=field_def.required,
                converter=get_converter(field_def.converter) if field_def.converter else None,
                treat_empty_numeric_as_zero=field_def.treat_empty_numeric_as_zero,
            )
        return import_session

    def run(self, definition: ImportDefinition, path: Path | str) -> ImportRun:
        """Read every row of path with definition; never commits."""
        path = Path(path)
        run_id = uuid4()
        with LogContext.bind(
            correlation_id=str(run_id),
            producer="ingestion",
            definition=definition.name,
            entity_type=definition.entity_type,
            source_name=path.name,
        ):
            logger.info(
                "import_session_started",
                extra={
                    "activity": definition.activity,
                    "source_format": definition.source.format,
                    "fields": len(definition.fields),
                },
            )
            source = self.open_source(path, definition.source)
            try:
                with self.build_session(definition, source) as import_session:
                    results = import_session.results(skip_empty_rows=True)
                    report = import_session.report
                    rows_read = import_session.rows_assembled
            finally:
                source.close()

            logger.info(
                "bulk_import_completed",
                extra={
                    "rows_read": rows_read,
                    "entities": sum(1 for r in results if r is not None),
                    "warnings": len(report.warnings),
                    "errors": len(report.errors),
                },
            )
        return ImportRun(results=results, report=report, rows_read=rows_read)
