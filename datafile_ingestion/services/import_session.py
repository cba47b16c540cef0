"""
ImportSession -- stateful driver of one import over one tabular source.

Responsibility:
    Owns the session options, the ordered field descriptors, the creation
    cache shared by every row, and the cumulative ProblemReport.  Callers
    either drive the loop themselves (has_next / advance / row_result) or
    bulk-consume the source with results().

Invariants:
    - Field indices follow declaration order; apply_field_offset() shifts
      every declared index by the offset each time it is called.
    - The options' field_offset is applied once, before the first row.
    - The creation cache lives as long as the session and is cleared on close.
    - A session is single-threaded: the cache and report are mutated in place.

Failure modes:
    LoaderNotInitialisedError when a row is requested before the entity type,
    source, schema or persistence collaborator is set.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterator

from datafile_kernel.domain.ports import Persistence, SchemaProvider
from datafile_kernel.domain.problems import ProblemReport, describe_location
from datafile_kernel.exceptions import LoaderNotInitialisedError
from datafile_kernel.logging_config import get_logger

from datafile_ingestion.adapters.base import TabularSource
from datafile_ingestion.domain.types import (
    ActivityType,
    DataField,
    LoadAction,
    SessionOptions,
)
from datafile_ingestion.mapping.converters import Converter
from datafile_ingestion.resolution.lookup import CreationCache, LookupResolver
from datafile_ingestion.resolution.path_resolver import PathResolver
from datafile_ingestion.services.row_assembler import AssembledRow, RowAssembler

logger = get_logger("ingestion.import_session")


class ImportSession:
    """
    One import run: options, fields, creation cache and problem report.

    Options can be given as a SessionOptions instance, as keyword overrides
    (activity=..., create_missing_associations=..., ...) or both.
    """

    def __init__(
        self,
        schema: SchemaProvider | None,
        persistence: Persistence | None,
        entity_type: Any = None,
        source: TabularSource | None = None,
        options: SessionOptions | None = None,
        report: ProblemReport | None = None,
        **overrides: Any,
    ):
        options = options or SessionOptions()
        if overrides:
            options = replace(options, **overrides)
        self._options = options
        self._schema = schema
        self._persistence = persistence
        self.entity_type = entity_type
        self.source = source
        self._report = report if report is not None else ProblemReport()
        self._fields: list[DataField] = []
        self._cache = CreationCache()
        self._assembler: RowAssembler | None = None
        self._pending_offset = options.field_offset
        self._rows_assembled = 0

    # -- configuration -----------------------------------------------------

    @property
    def options(self) -> SessionOptions:
        return self._options

    @property
    def activity(self) -> ActivityType:
        return self._options.activity

    @property
    def fields(self) -> tuple[DataField, ...]:
        return tuple(self._fields)

    @property
    def report(self) -> ProblemReport:
        return self._report

    @property
    def creation_cache(self) -> CreationCache:
        return self._cache

    @property
    def rows_assembled(self) -> int:
        return self._rows_assembled

    def add_field(
        self,
        binding: str,
        load_action: LoadAction | None = None,
        required: bool = False,
        converter: Converter | None = None,
        treat_empty_numeric_as_zero: bool | None = None,
    ) -> DataField:
        """
        Declare the next column.

        Without an explicit load_action a compound binding in a CREATE_FIND
        session looks up by equality; everything else sets the value.
        """
        data_field = DataField(
            binding,
            index=len(self._fields),
            required=required,
            treat_empty_numeric_as_zero=treat_empty_numeric_as_zero,
            converter=converter,
        )
        if load_action is not None:
            data_field.load_action = load_action
        elif data_field.is_compound and self.activity is ActivityType.CREATE_FIND:
            data_field.load_action = LoadAction.LOOKUP_EQUALS
        self._fields.append(data_field)
        return data_field

    def add_descriptor(self, data_field: DataField) -> DataField:
        """Declare a prepared descriptor; its index becomes the next column."""
        data_field.index = len(self._fields)
        self._fields.append(data_field)
        return data_field

    def add_fields(self, *bindings: str) -> list[DataField]:
        return [self.add_field(b) for b in bindings]

    def apply_field_offset(self, offset: int) -> None:
        """Shift every declared field index by offset (cumulative)."""
        for data_field in self._fields:
            data_field.index += offset

    # -- iteration ---------------------------------------------------------

    def _require_source(self) -> TabularSource:
        if self.source is None:
            raise LoaderNotInitialisedError("source")
        return self.source

    def has_next(self) -> bool:
        return self._require_source().has_next_row()

    def advance(self) -> None:
        self._require_source().advance_row()

    def is_row_empty(self) -> bool:
        return self._require_source().is_row_empty()

    # -- assembly ----------------------------------------------------------

    def _ready(self) -> RowAssembler:
        if self.entity_type is None:
            raise LoaderNotInitialisedError("entity type")
        if self._schema is None:
            raise LoaderNotInitialisedError("schema provider")
        if self._persistence is None:
            raise LoaderNotInitialisedError("persistence")
        self._require_source()

        if self._pending_offset:
            self.apply_field_offset(self._pending_offset)
            self._pending_offset = 0

        if self._assembler is None:
            paths = PathResolver(self._schema)
            lookup = LookupResolver(
                self._persistence,
                self._schema,
                self._cache,
                activity=self.activity,
                create_missing=self._options.create_missing_associations,
                path_resolver=paths,
            )
            self._assembler = RowAssembler(
                self._schema, self._persistence, lookup, self._options, path_resolver=paths
            )
        return self._assembler

    def assemble_row(self) -> AssembledRow:
        """Assemble the current row; its problems are also added to report."""
        assembler = self._ready()
        assembled = assembler.assemble(self.entity_type, self._fields, self.source)
        self._report.extend(assembled.problems)
        self._rows_assembled += 1
        return assembled

    def row_result(self) -> Any:
        """Entity for the current row (None in FIND mode when nothing matched)."""
        return self.assemble_row().entity

    def iter_rows(self, skip_empty_rows: bool = False) -> Iterator[AssembledRow]:
        """Advance through the remaining rows, assembling each."""
        self._ready()
        while self.has_next():
            self.advance()
            if skip_empty_rows and self.is_row_empty():
                continue
            yield self.assemble_row()

    def results(self, skip_empty_rows: bool = False) -> list[Any]:
        """Bulk-consume the source; one entity (or None) per row."""
        entities = [assembled.entity for assembled in self.iter_rows(skip_empty_rows)]
        logger.debug(
            "session_results_collected",
            extra={
                "rows": len(entities),
                "problems": len(self._report),
                "cached_references": len(self._cache),
            },
        )
        return entities

    # -- diagnostics -------------------------------------------------------

    def describe_location(self, column: int | None = None) -> str:
        """``Row R[, column C].`` for the current row; column is a 0-based index."""
        row = self._require_source().row_index + 1
        return describe_location(row, None if column is None else column + 1)

    def describe_row(self) -> str:
        source = self._require_source()
        describe = getattr(source, "describe_row", None)
        if describe is None:
            return self.describe_location()
        return describe()

    # -- lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """End the session: forget cached references."""
        self._cache.clear()

    def __enter__(self) -> "ImportSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
