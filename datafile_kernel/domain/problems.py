"""
Problem reporting for import runs.

Problems are the error representation for per-field failures: they are
recorded, never raised. A ProblemReport is an ordered, append-only list of
problems with 1-based row and optional 1-based column locations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


def describe_location(row: int, column: int | None = None) -> str:
    """Human-readable location, e.g. ``Row 3, column 2.`` (both 1-based)."""
    where = f"Row {row}"
    if column is not None:
        where += f", column {column}"
    return where + "."


@dataclass(frozen=True)
class Problem:
    """
    A single warning or error raised while importing.

    Guarantees:
        - Immutable (frozen dataclass)
        - code is always present (machine-readable)
        - row and column are 1-based
    """

    severity: Severity
    code: str
    message: str
    row: int
    column: int | None = None

    @property
    def where(self) -> str:
        return describe_location(self.row, self.column)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "row": self.row,
            "column": self.column,
            "where": self.where,
        }

    def __str__(self) -> str:
        return f"{self.where} {self.message}"


@dataclass
class ProblemReport:
    """Ordered collection of problems; appending never aborts processing."""

    problems: list[Problem] = field(default_factory=list)

    def add(self, problem: Problem) -> Problem:
        self.problems.append(problem)
        return problem

    def add_warning(
        self, code: str, message: str, row: int, column: int | None = None
    ) -> Problem:
        return self.add(Problem(Severity.WARNING, code, message, row, column))

    def add_error(
        self, code: str, message: str, row: int, column: int | None = None
    ) -> Problem:
        return self.add(Problem(Severity.ERROR, code, message, row, column))

    def extend(self, other: "ProblemReport") -> None:
        self.problems.extend(other.problems)

    @property
    def warnings(self) -> list[Problem]:
        return [p for p in self.problems if p.severity is Severity.WARNING]

    @property
    def errors(self) -> list[Problem]:
        return [p for p in self.problems if p.severity is Severity.ERROR]

    def has_problems(self) -> bool:
        return bool(self.problems)

    def has_errors(self) -> bool:
        return any(p.is_error for p in self.problems)

    def for_row(self, row: int) -> list[Problem]:
        return [p for p in self.problems if p.row == row]

    def to_dict(self) -> dict[str, Any]:
        return {
            "warnings": len(self.warnings),
            "errors": len(self.errors),
            "problems": [p.to_dict() for p in self.problems],
        }

    def __iter__(self) -> Iterator[Problem]:
        return iter(self.problems)

    def __len__(self) -> int:
        return len(self.problems)
