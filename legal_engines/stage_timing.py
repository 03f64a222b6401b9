"""
Module: legal_engines.stage_timing
Responsibility:
    Resolve which timestamp marks entry into a request's current stage,
    how many business days it has spent there, and how it stands against
    its target return date.  Also renders the matching display strings.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on legal_engines.business_hours for calendar normalization.

Invariants enforced:
    - Determinism: identical snapshot and ``now`` yield identical output.
    - days_in_stage is never negative; days_remaining may be.
    - is_overdue is exactly ``days_remaining < 0``.

Failure modes:
    - InvalidConfigError propagated from the calendar config.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from legal_engines.business_hours import count_business_days, reference_date
from legal_engines.tracer import traced_engine
from legal_kernel.domain.calendar import DEFAULT_WORKING_HOURS, WorkingHoursConfig
from legal_kernel.domain.request import RequestSnapshot, RequestStatus
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.stage_timing")


class UrgencyLevel(str, Enum):
    OVERDUE = "overdue"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class StageTimingInfo:
    """
    Timing facts for the request's current stage.

    Contract:
        ``stage_start_date`` is None when the status's entry timestamp is
        missing; every count is then 0.
    Guarantees:
        ``days_in_stage >= 0`` and ``calendar_days_in_stage >= 0``.
    """

    stage_start_date: datetime | None
    days_in_stage: int
    calendar_days_in_stage: int
    days_remaining: int | None
    target_return_date: date | None
    is_overdue: bool
    is_rush: bool


def _closeout_start(snapshot: RequestSnapshot) -> datetime | None:
    completed = [
        ts
        for ts in (
            snapshot.legal_review_completed_on,
            snapshot.compliance_review_completed_on,
        )
        if ts is not None
    ]
    return max(completed) if completed else None


_STAGE_START: dict[RequestStatus, Callable[[RequestSnapshot], datetime | None]] = {
    RequestStatus.DRAFT: lambda s: s.created,
    RequestStatus.LEGAL_INTAKE: lambda s: s.submitted_on,
    RequestStatus.ASSIGN_ATTORNEY: lambda s: s.submitted_to_assign_attorney_on,
    RequestStatus.IN_REVIEW: lambda s: s.submitted_for_review_on or s.legal_review_assigned_on,
    RequestStatus.CLOSEOUT: _closeout_start,
    RequestStatus.COMPLETED: lambda s: s.closeout_on,
    RequestStatus.CANCELLED: lambda s: s.cancelled_on,
    RequestStatus.ON_HOLD: lambda s: s.on_hold_since,
}


def get_stage_start_date(snapshot: RequestSnapshot) -> datetime | None:
    """Entry timestamp of the current stage, selected by status."""
    resolver = _STAGE_START.get(snapshot.status)
    if resolver is None:
        return snapshot.created
    return resolver(snapshot)


def calculate_business_days_since(
    start: datetime | None,
    now: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> int:
    """Whole working days from the date of *start* up to (not including) today."""
    if start is None:
        return 0
    return count_business_days(
        reference_date(start, config), reference_date(now, config), config
    )


def calculate_days_since(
    start: datetime | None,
    now: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> int:
    """Calendar days between midnight-normalized dates, clamped at 0."""
    if start is None:
        return 0
    return max(0, (reference_date(now, config) - reference_date(start, config)).days)


def calculate_days_until(
    target: date | None,
    now: datetime | date,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> int | None:
    """Calendar days from today to *target*; negative when past."""
    if target is None:
        return None
    return (reference_date(target, config) - reference_date(now, config)).days


@traced_engine("stage_timing", "1.0", fingerprint_fields=("now",))
def get_stage_timing_info(
    snapshot: RequestSnapshot,
    now: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> StageTimingInfo:
    """Compute StageTimingInfo for *snapshot* as of *now*."""
    config.validate()
    stage_start = get_stage_start_date(snapshot)
    days_remaining = calculate_days_until(snapshot.target_return_date, now, config)

    if stage_start is None:
        logger.debug(
            "stage_start_missing",
            extra={"request_id": snapshot.request_id, "status": snapshot.status},
        )

    return StageTimingInfo(
        stage_start_date=stage_start,
        days_in_stage=calculate_business_days_since(stage_start, now, config),
        calendar_days_in_stage=calculate_days_since(stage_start, now, config),
        days_remaining=days_remaining,
        target_return_date=snapshot.target_return_date,
        is_overdue=days_remaining is not None and days_remaining < 0,
        is_rush=snapshot.is_rush_request,
    )


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def format_days_text(days: int) -> str:
    if days <= 0:
        return "today"
    if days == 1:
        return "1 day"
    return f"{days} days"


def format_days_remaining_text(days_remaining: int) -> str:
    if days_remaining < 0:
        overdue = abs(days_remaining)
        return f"{overdue} day overdue" if overdue == 1 else f"{overdue} days overdue"
    if days_remaining == 0:
        return "Due today"
    if days_remaining == 1:
        return "Due tomorrow"
    return f"{days_remaining} days remaining"


def format_stage_duration_text(days: int) -> str:
    """Render a duration as weeks and days, e.g. ``"1 week, 2 days"``."""
    if days < 1:
        return "Less than 1 day"
    weeks, rest = divmod(days, 7)
    if weeks == 0:
        return format_days_text(rest)
    week_text = "1 week" if weeks == 1 else f"{weeks} weeks"
    if rest == 0:
        return week_text
    return f"{week_text}, {format_days_text(rest)}"


def get_urgency_level(days_remaining: int | None) -> UrgencyLevel:
    if days_remaining is None:
        return UrgencyLevel.LOW
    if days_remaining < 0:
        return UrgencyLevel.OVERDUE
    if days_remaining <= 1:
        return UrgencyLevel.HIGH
    if days_remaining <= 3:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW
