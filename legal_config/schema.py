"""
WorkflowConfigurationSet schema.

Defines the human-authored, reviewable source artifact for workflow
configuration.  YAML files are parsed into these types by the loader and
compiled into a WorkflowConfig by the compiler.

Key distinction:
  WorkflowConfigurationSet = source artifact (human-authored, versioned)
  WorkflowConfig           = runtime artifact (validated kernel types)
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WorkingHoursDef:
    """Business calendar as declared in YAML."""

    start_hour: int = 8
    end_hour: int = 17
    working_days: tuple[int, ...] = (1, 2, 3, 4, 5)
    timezone: str = "America/Los_Angeles"


@dataclass(frozen=True)
class FieldLimitsDef:
    """Free-text length limits as declared in YAML."""

    notes: int = 1000
    reason: int = 1000
    status_notes: int = 1000
    review_notes: int = 2000
    closeout_notes: int = 2000
    tracking_id: int = 50
    min_review_notes: int = 10
    min_reason: int = 10


@dataclass(frozen=True)
class WorkflowConfigurationSet:
    """Root configuration artifact."""

    config_id: str
    version: int
    description: str = ""
    working_hours: WorkingHoursDef = field(default_factory=WorkingHoursDef)
    field_limits: FieldLimitsDef = field(default_factory=FieldLimitsDef)
    checksum: str = ""
