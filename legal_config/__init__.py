"""
legal_config -- single public entrypoint for workflow configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a ``WorkflowConfig`` holding the
    business calendar and field limits as kernel types.

Architecture position:
    Configuration -- YAML-driven, validated at load.  Sits above
    ``legal_kernel``; the kernel and the engines MUST NEVER import
    ``legal_config``.  Callers hand the compiled values to the engines.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic: the same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- configuration file missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``InvalidConfigError`` -- unusable business calendar.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEGAL_CONFIG_TRACE`` log entry with config_id, version, checksum,
    and the resolved calendar.
"""

from __future__ import annotations

import logging
from pathlib import Path

from legal_config.compiler import WorkflowConfig, compile_workflow_config
from legal_config.loader import load_yaml_file, parse_configuration_set
from legal_kernel.domain.calendar import WorkingHoursConfig

_logger = logging.getLogger("legal_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = ["WorkflowConfig", "get_active_config", "get_working_hours_config"]


def get_active_config(config_path: Path | None = None) -> WorkflowConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a configuration YAML file.
            Defaults to legal_config/sets/default.yaml.

    Returns:
        WorkflowConfig with a validated WorkingHoursConfig and FieldLimits.

    Raises:
        FileNotFoundError: If the configuration file is missing.
        InvalidConfigError: If the business calendar is unusable.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    config_set = parse_configuration_set(load_yaml_file(path))
    config = compile_workflow_config(config_set)

    _logger.info(
        "LEGAL_CONFIG_TRACE",
        extra={
            "trace_type": "LEGAL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
            "start_hour": config.working_hours.start_hour,
            "end_hour": config.working_hours.end_hour,
            "working_days": list(config.working_hours.working_days),
            "timezone": config.working_hours.timezone,
        },
    )
    return config


def get_working_hours_config(config_path: Path | None = None) -> WorkingHoursConfig:
    """Shortcut for the business calendar of the active configuration."""
    return get_active_config(config_path).working_hours
