"""
datafile_config -- YAML import definitions.

Public API:
    load_definition(path) -> ImportDefinition
    parse_definition(dict) -> ImportDefinition
"""

from datafile_config.loader import (
    load_definition,
    load_yaml_file,
    parse_definition,
    parse_field,
    parse_source,
)
from datafile_config.schema import FieldDef, ImportDefinition, SourceDef

__all__ = [
    "FieldDef",
    "ImportDefinition",
    "SourceDef",
    "load_definition",
    "load_yaml_file",
    "parse_definition",
    "parse_field",
    "parse_source",
]
