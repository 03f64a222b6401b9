"""
Configuration Compiler -- WorkflowConfigurationSet -> WorkflowConfig.

Translates the parsed source artifact into kernel types and validates the
business calendar.  The WorkflowConfig is what engine callers pass on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from legal_config.schema import WorkflowConfigurationSet
from legal_kernel.domain.calendar import WorkingHoursConfig
from legal_kernel.domain.validation import FieldLimits


@dataclass(frozen=True)
class WorkflowConfig:
    """Validated runtime configuration."""

    config_id: str
    version: int
    checksum: str
    working_hours: WorkingHoursConfig
    field_limits: FieldLimits


def compile_workflow_config(config_set: WorkflowConfigurationSet) -> WorkflowConfig:
    """
    Compile and validate a configuration set.

    Raises:
        InvalidConfigError: if the working hours fail kernel validation.
        ValueError: if a field limit is negative.
    """
    hours = config_set.working_hours
    working_hours = WorkingHoursConfig(
        start_hour=hours.start_hour,
        end_hour=hours.end_hour,
        working_days=hours.working_days,
        timezone=hours.timezone,
    )
    working_hours.validate()

    return WorkflowConfig(
        config_id=config_set.config_id,
        version=config_set.version,
        checksum=config_set.checksum,
        working_hours=working_hours,
        field_limits=FieldLimits(**asdict(config_set.field_limits)),
    )
