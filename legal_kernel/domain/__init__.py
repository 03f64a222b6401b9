"""
Pure domain layer.

This module contains value objects and enumerations with NO dependencies on:
- Persistence
- Directory lookups
- Time/clock (except the injectable Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from legal_kernel.domain.calendar import DEFAULT_WORKING_HOURS, WorkingHoursConfig
from legal_kernel.domain.capabilities import ActionContext, Capabilities
from legal_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from legal_kernel.domain.request import (
    STAGE_HOUR_FIELDS,
    AppRole,
    ComplianceReviewStatus,
    LegalReviewStatus,
    Principal,
    RequestSnapshot,
    RequestStatus,
    ReviewAudience,
    ReviewOutcome,
    ReviewStage,
    StageOwner,
    WorkflowAction,
)
from legal_kernel.domain.validation import (
    DEFAULT_FIELD_LIMITS,
    FieldIssue,
    FieldLimits,
    IssueCode,
    TransitionCheck,
)
from legal_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "ActionContext",
    "AppRole",
    "Capabilities",
    "Clock",
    "ComplianceReviewStatus",
    "DEFAULT_FIELD_LIMITS",
    "DEFAULT_WORKING_HOURS",
    "DeterministicClock",
    "FieldIssue",
    "FieldLimits",
    "Guard",
    "IssueCode",
    "LegalReviewStatus",
    "Principal",
    "RequestSnapshot",
    "RequestStatus",
    "ReviewAudience",
    "ReviewOutcome",
    "ReviewStage",
    "STAGE_HOUR_FIELDS",
    "StageOwner",
    "SystemClock",
    "Transition",
    "TransitionCheck",
    "Workflow",
    "WorkflowAction",
    "WorkingHoursConfig",
]
