"""
Pure domain layer.

Value objects and protocols with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O
"""

from datafile_kernel.domain.attributes import (
    AttributeMetadata,
    AttributeType,
    EntityMetadata,
    ValidatorSpec,
)
from datafile_kernel.domain.binding import BindingPath
from datafile_kernel.domain.ports import EntityQuery, Persistence, SchemaProvider
from datafile_kernel.domain.problems import (
    Problem,
    ProblemReport,
    Severity,
    describe_location,
)

__all__ = [
    "AttributeMetadata",
    "AttributeType",
    "BindingPath",
    "EntityMetadata",
    "EntityQuery",
    "Persistence",
    "Problem",
    "ProblemReport",
    "SchemaProvider",
    "Severity",
    "ValidatorSpec",
    "describe_location",
]
