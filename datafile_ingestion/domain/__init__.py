"""
datafile_ingestion.domain -- Pure types for ingestion.

ZERO I/O. Imports only from datafile_kernel/domain/.
"""

from datafile_ingestion.domain.types import (
    ActivityType,
    DataField,
    LoadAction,
    SessionOptions,
)

__all__ = [
    "ActivityType",
    "DataField",
    "LoadAction",
    "SessionOptions",
]
