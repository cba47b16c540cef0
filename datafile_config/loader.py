"""
Import definition loader (``datafile_config.loader``).

Responsibility
--------------
Loads YAML import definitions and parses them into the frozen dataclasses
of ``datafile_config.schema``.  Enumerated values (activity, load action,
source format) and converter names are checked here so that a bad definition
fails before any row is read.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required keys.
* Every parsed object is a frozen dataclass from ``schema.py``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``name`` / ``entity_type`` / field ``binding``  -> ``KeyError``.
* Unknown activity, action, source format or converter  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from datafile_config.schema import FieldDef, ImportDefinition, SourceDef
from datafile_ingestion.domain.types import ActivityType, LoadAction
from datafile_ingestion.mapping.converters import CONVERTERS

SOURCE_FORMATS = ("csv", "xlsx")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _choice(value: Any, allowed: list[str], what: str) -> str:
    text = str(value).strip().lower()
    if text not in allowed:
        raise ValueError(f"Unknown {what} {value!r}; expected one of {allowed}")
    return text


def _flag(data: dict[str, Any], key: str, default: bool | None) -> bool | None:
    if key not in data or data[key] is None:
        return default
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def parse_source(data: dict[str, Any] | None) -> SourceDef:
    """Parse the ``source`` block (absent means CSV with no header skip)."""
    if not data:
        return SourceDef()
    start_row = int(data.get("start_row", 0))
    if start_row < 0:
        raise ValueError(f"source.start_row must be >= 0, got {start_row}")
    return SourceDef(
        format=_choice(data.get("format", "csv"), list(SOURCE_FORMATS), "source format"),
        start_row=start_row,
        options=dict(data.get("options") or {}),
    )


def parse_field(data: str | dict[str, Any]) -> FieldDef:
    """
    Parse one ``fields`` entry.

    A bare string is shorthand for a field with that binding and defaults.
    """
    if isinstance(data, str):
        return FieldDef(binding=data)

    action = data.get("action")
    if action is not None:
        action = _choice(action, [a.value for a in LoadAction], "load action")

    converter = data.get("converter")
    if converter is not None and converter not in CONVERTERS:
        raise ValueError(
            f"Unknown converter {converter!r}; expected one of {sorted(CONVERTERS)}"
        )

    return FieldDef(
        binding=data["binding"],
        action=action,
        required=bool(_flag(data, "required", False)),
        converter=converter,
        treat_empty_numeric_as_zero=_flag(data, "treat_empty_numeric_as_zero", None),
    )


def parse_definition(data: dict[str, Any]) -> ImportDefinition:
    """
    Parse an ``ImportDefinition`` from a dict.

    Raises:
        KeyError: if ``name`` or ``entity_type`` is missing.
        ValueError: if an enumerated value or converter name is unknown.
    """
    field_offset = int(data.get("field_offset", 0))
    return ImportDefinition(
        name=data["name"],
        entity_type=data["entity_type"],
        activity=_choice(
            data.get("activity", ActivityType.CREATE_FIND.value),
            [a.value for a in ActivityType],
            "activity",
        ),
        create_missing_associations=bool(_flag(data, "create_missing_associations", False)),
        treat_empty_numeric_as_zero=bool(_flag(data, "treat_empty_numeric_as_zero", False)),
        field_offset=field_offset,
        source=parse_source(data.get("source")),
        fields=tuple(parse_field(f) for f in data.get("fields", [])),
    )


def load_definition(path: Path | str) -> ImportDefinition:
    """Load and parse one YAML import definition file."""
    return parse_definition(load_yaml_file(Path(path)))

