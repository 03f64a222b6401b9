"""
Configuration Loader (``legal_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into typed
``legal_config.schema`` dataclass instances.  Runtime callers use
``legal_config.get_active_config()`` instead.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Imports kernel exceptions
only; has no dependency on engines.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Working-hour values accept integers or numeric strings; unparseable
  working-day entries are dropped, and an empty result is an error.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``config_id`` / ``version``  -> ``KeyError`` propagates.
* Unusable working hours  -> ``InvalidConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from legal_config.schema import FieldLimitsDef, WorkflowConfigurationSet, WorkingHoursDef
from legal_kernel.exceptions import InvalidConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_hour(name: str, value: Any) -> int:
    """Parse an hour given as int or numeric string."""
    if isinstance(value, bool):
        raise InvalidConfigError(name, value, "must be an hour between 0 and 23")
    try:
        hour = int(str(value).strip())
    except ValueError as exc:
        raise InvalidConfigError(name, value, "must be an hour between 0 and 23") from exc
    if not 0 <= hour <= 23:
        raise InvalidConfigError(name, value, "must be an hour between 0 and 23")
    return hour


def parse_working_days(value: Any) -> tuple[int, ...]:
    """
    Parse ISO weekdays from a list or a comma-separated string.

    Entries that are not integers in 1..7 are dropped.

    Raises:
        InvalidConfigError: if no valid day remains.
    """
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        raw = []

    days: list[int] = []
    for item in raw:
        try:
            day = int(str(item).strip())
        except ValueError:
            continue
        if 1 <= day <= 7 and day not in days:
            days.append(day)

    if not days:
        raise InvalidConfigError("working_days", value, "at least one working day is required")
    return tuple(sorted(days))


def parse_working_hours(data: dict[str, Any]) -> WorkingHoursDef:
    """Parse a WorkingHoursDef, filling absent keys with defaults."""
    defaults = WorkingHoursDef()
    start_hour = parse_hour("start_hour", data.get("start_hour", defaults.start_hour))
    end_hour = parse_hour("end_hour", data.get("end_hour", defaults.end_hour))
    if start_hour >= end_hour:
        raise InvalidConfigError("start_hour", start_hour, "must be before end_hour")
    return WorkingHoursDef(
        start_hour=start_hour,
        end_hour=end_hour,
        working_days=parse_working_days(data.get("working_days", defaults.working_days)),
        timezone=str(data.get("timezone", defaults.timezone)),
    )


def parse_field_limits(data: dict[str, Any]) -> FieldLimitsDef:
    """Parse a FieldLimitsDef; unknown keys are rejected."""
    known = set(FieldLimitsDef.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown field limits: {sorted(unknown)}")
    return FieldLimitsDef(**{k: int(v) for k, v in data.items()})


def parse_configuration_set(data: dict[str, Any]) -> WorkflowConfigurationSet:
    """
    Parse the root configuration document.

    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
        InvalidConfigError: if working hours are unusable.
    """
    return WorkflowConfigurationSet(
        config_id=data["config_id"],
        version=int(data["version"]),
        description=data.get("description", ""),
        working_hours=parse_working_hours(data.get("working_hours") or {}),
        field_limits=parse_field_limits(data.get("field_limits") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
