"""
Module: legal_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import legal_kernel (and sibling engine modules).
    MUST NOT import legal_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The current instant is passed in (or read once from an injected Clock).
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are wrapped by ``@traced_engine`` (see
    ``legal_engines.tracer``), emitting LEGAL_ENGINE_TRACE log records.

Usage:
    from legal_engines.business_hours import calculate_business_hours
    from legal_engines.time_tracking import calculate_stage_time_update
    from legal_engines.transition_rules import validate_transition
"""

from legal_engines.business_hours import (
    calculate_business_hours,
    count_business_days,
    format_business_hours,
    is_weekend,
    is_within_working_hours,
    is_working_day,
)
from legal_engines.permissions import (
    AvailableActions,
    PermissionCheck,
    ReviewCompletion,
    check_review_completion,
    get_available_actions,
    is_valid_status_transition,
)
from legal_engines.progress import ProgressColor, StatusProgress, calculate_progress
from legal_engines.stage_timing import StageTimingInfo, get_stage_timing_info
from legal_engines.status_summary import RequestStatusSummary, summarize_request_status
from legal_engines.time_tracking import (
    TimeTrackingUpdate,
    calculate_stage_time_update,
    pause_time_tracking,
    resume_time_tracking,
)
from legal_engines.transition_rules import TRANSITION_RULES, validate_transition
from legal_engines.waiting_on import WaitingOnInfo, WaitingOnType, determine_waiting_on

__all__ = [
    "AvailableActions",
    "PermissionCheck",
    "ProgressColor",
    "RequestStatusSummary",
    "ReviewCompletion",
    "StageTimingInfo",
    "StatusProgress",
    "TRANSITION_RULES",
    "TimeTrackingUpdate",
    "WaitingOnInfo",
    "WaitingOnType",
    "calculate_business_hours",
    "calculate_progress",
    "calculate_stage_time_update",
    "check_review_completion",
    "count_business_days",
    "determine_waiting_on",
    "format_business_hours",
    "get_available_actions",
    "get_stage_timing_info",
    "is_valid_status_transition",
    "is_weekend",
    "is_within_working_hours",
    "is_working_day",
    "pause_time_tracking",
    "resume_time_tracking",
    "summarize_request_status",
    "validate_transition",
]
