"""Binding path resolution and lookup-or-create of referenced entities."""

from datafile_ingestion.resolution.lookup import CreationCache, LookupResolver
from datafile_ingestion.resolution.path_resolver import (
    PathResolver,
    PathStep,
    Relation,
    ResolvedPath,
)

__all__ = [
    "CreationCache",
    "LookupResolver",
    "PathResolver",
    "PathStep",
    "Relation",
    "ResolvedPath",
]
