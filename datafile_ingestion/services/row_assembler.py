"""
RowAssembler -- builds (or finds) one entity from the current source row.

Contract:
    assemble() walks the declared fields in order.  For each field:

    1. Resolve the binding's terminal attribute.  An association terminal is
       widened to the target's business key to pick the coercion type only;
       the value is still applied through the declared binding.  Unknown
       binding: error.
    2. Coerce the cell (datafile_ingestion.mapping.engine).  Coercion failure
       or a missing required value: warning, field skipped.
    3. Apply a non-None value according to the activity:
         CREATE_ALL   compound -> populate the path, simple -> set
         FIND         lookup/confirm actions add a filter with their
                      operator; SET_VALUE fields are ignored
         CREATE_FIND  compound -> LookupResolver, simple SET_VALUE -> set
    4. Reference failures are errors; any other assignment failure is a
       warning.  Neither stops the remaining fields.

    In FIND mode the accumulated query runs after the last field and its
    first match (or None) is the row's entity.  No entity is constructed.

Failure modes:
    Only configuration errors and persistence errors (SQLAlchemyError and
    other unexpected exceptions) propagate out of assemble().
"""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Any, Sequence

from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.domain.ports import EntityQuery, Persistence, SchemaProvider
from datafile_kernel.domain.problems import ProblemReport
from datafile_kernel.exceptions import (
    BindingPathError,
    InvalidBindingError,
    ReferenceResolutionError,
)
from datafile_kernel.logging_config import get_logger

from datafile_ingestion.adapters.base import TabularSource
from datafile_ingestion.domain.types import (
    ActivityType,
    DataField,
    LoadAction,
    SessionOptions,
)
from datafile_ingestion.mapping.engine import coerce_field_value
from datafile_ingestion.resolution.lookup import LookupResolver
from datafile_ingestion.resolution.path_resolver import PathResolver

logger = get_logger("ingestion.row_assembler")

ASSIGNMENT_FAILED = "ASSIGNMENT_FAILED"


@dataclass
class AssembledRow:
    """The entity produced for one row and the problems met building it."""

    entity: Any
    row: int
    problems: ProblemReport = dc_field(default_factory=ProblemReport)

    @property
    def has_errors(self) -> bool:
        return self.problems.has_errors()


def invalid_binding_message(binding: str) -> str:
    return f"An invalid binding '{binding}' was provided."


def assignment_message(cause: Exception) -> str:
    return f"The value was loaded but could not be processed: {cause}"


class RowAssembler:
    """Applies a session's field descriptors to the source's current row."""

    def __init__(
        self,
        schema: SchemaProvider,
        persistence: Persistence,
        lookup: LookupResolver,
        options: SessionOptions,
        path_resolver: PathResolver | None = None,
    ):
        self._schema = schema
        self._persistence = persistence
        self._lookup = lookup
        self._options = options
        self._paths = path_resolver or PathResolver(schema)

    def assemble(
        self,
        entity_type: Any,
        fields: Sequence[DataField],
        source: TabularSource,
    ) -> AssembledRow:
        row = source.row_index + 1
        problems = ProblemReport()
        activity = self._options.activity

        entity = None
        query: EntityQuery | None = None
        if activity is ActivityType.FIND:
            query = self._persistence.new_query(entity_type)
        else:
            entity = self._persistence.new_instance(entity_type)

        for data_field in fields:
            column = data_field.index + 1

            try:
                resolved = self._paths.target_metadata(entity_type, data_field.path)
            except InvalidBindingError as exc:
                problems.add_error(
                    exc.code, invalid_binding_message(data_field.binding), row, column
                )
                continue

            result = coerce_field_value(
                data_field,
                resolved.terminal,
                source,
                data_field.empty_numeric_as_zero(self._options.treat_empty_numeric_as_zero),
            )
            if not result.success:
                problems.add_warning(result.code, result.message, row, column)
                continue
            if result.skipped or result.value is None:
                continue

            try:
                if query is not None:
                    _add_filter(query, data_field.load_action, data_field.path, result.value)
                else:
                    self._apply(entity_type, entity, data_field, data_field.path, result.value)
            except ReferenceResolutionError as exc:
                problems.add_error(exc.code, str(exc), row, column)
            except InvalidBindingError as exc:
                problems.add_error(
                    exc.code, invalid_binding_message(data_field.binding), row, column
                )
            except (BindingPathError, AttributeError, TypeError, ValueError) as exc:
                problems.add_warning(ASSIGNMENT_FAILED, assignment_message(exc), row, column)

        if query is not None and not query.is_empty:
            entity = query.single_result()

        for problem in problems:
            logger.debug(
                "field_problem",
                extra={
                    "row": problem.row,
                    "column": problem.column,
                    "severity": problem.severity.value,
                    "code": problem.code,
                },
            )
        logger.debug(
            "row_assembled",
            extra={
                "row": row,
                "activity": activity.value,
                "found": entity is not None,
                "problems": len(problems),
            },
        )
        return AssembledRow(entity=entity, row=row, problems=problems)

    def _apply(
        self,
        entity_type: Any,
        entity: Any,
        data_field: DataField,
        binding: BindingPath,
        value: Any,
    ) -> None:
        if self._options.activity is ActivityType.CREATE_ALL:
            if binding.is_compound:
                self._persistence.populate(entity, str(binding), value)
            else:
                self._persistence.set(entity, str(binding), value)
            return

        # CREATE_FIND
        if binding.is_compound:
            self._lookup.resolve(entity_type, entity, data_field, binding, value)
        elif data_field.load_action is LoadAction.SET_VALUE:
            self._persistence.set(entity, str(binding), value)


def _add_filter(query: EntityQuery, action: LoadAction, binding: BindingPath, value: Any) -> None:
    if action is LoadAction.SET_VALUE:
        return
    operator, operand = action.filter_operand(value)
    if operator == "like":
        query.add_like(str(binding), operand)
    else:
        query.add_equals(str(binding), operand)
