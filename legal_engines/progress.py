"""
Module: legal_engines.progress
Responsibility:
    Map a request's status onto a 0-100 completion percentage and a
    progress-bar color.  Timing plays no part in the percentage; the color
    alone looks at the target return date.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Step tables cover every RequestStatus member.
    - Progress is clamped to [0, 100] and is non-decreasing along the
      forward path Draft -> ... -> Completed for a fixed track length.
    - Cancelled / On Hold report the step of ``previous_status``
      (Draft when it is missing).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from legal_engines.tracer import traced_engine
from legal_kernel.domain.request import RequestSnapshot, RequestStatus
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.progress")


class ProgressColor(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    BLUE = "blue"
    GRAY = "gray"


# Draft, Legal Intake, Assign Attorney, In Review, Closeout, Completed
STEPS_WITH_ASSIGN_ATTORNEY: dict[RequestStatus, int] = {
    RequestStatus.DRAFT: 1,
    RequestStatus.LEGAL_INTAKE: 2,
    RequestStatus.ASSIGN_ATTORNEY: 3,
    RequestStatus.IN_REVIEW: 4,
    RequestStatus.CLOSEOUT: 5,
    RequestStatus.AWAITING_FORESIDE_DOCUMENTS: 6,
    RequestStatus.COMPLETED: 6,
    RequestStatus.CANCELLED: 1,
    RequestStatus.ON_HOLD: 1,
}

# Assign Attorney skipped: Draft, Legal Intake, In Review, Closeout, Completed
STEPS_WITHOUT_ASSIGN_ATTORNEY: dict[RequestStatus, int] = {
    RequestStatus.DRAFT: 1,
    RequestStatus.LEGAL_INTAKE: 2,
    RequestStatus.ASSIGN_ATTORNEY: 3,
    RequestStatus.IN_REVIEW: 3,
    RequestStatus.CLOSEOUT: 4,
    RequestStatus.AWAITING_FORESIDE_DOCUMENTS: 5,
    RequestStatus.COMPLETED: 5,
    RequestStatus.CANCELLED: 1,
    RequestStatus.ON_HOLD: 1,
}

_SIDE_STATES = frozenset({RequestStatus.CANCELLED, RequestStatus.ON_HOLD})


@dataclass(frozen=True)
class StatusProgress:
    """
    Completion figures for a progress indicator.

    Guarantees:
        ``0 <= progress <= 100`` and ``1 <= current_step <= total_steps``.
    """

    progress: float
    current_step: int
    total_steps: int
    used_assign_attorney_step: bool
    color: ProgressColor


def _step_table(used_assign_attorney_step: bool) -> dict[RequestStatus, int]:
    if used_assign_attorney_step:
        return STEPS_WITH_ASSIGN_ATTORNEY
    return STEPS_WITHOUT_ASSIGN_ATTORNEY


def effective_status(snapshot: RequestSnapshot) -> RequestStatus:
    """Status used for step lookup; side states borrow ``previous_status``."""
    if snapshot.status in _SIDE_STATES:
        previous = snapshot.previous_status
        if previous is None or previous in _SIDE_STATES:
            logger.debug(
                "previous_status_missing",
                extra={"request_id": snapshot.request_id, "status": snapshot.status},
            )
            return RequestStatus.DRAFT
        return previous
    return snapshot.status


def calculate_progress_for_status(
    status: RequestStatus,
    used_assign_attorney_step: bool,
) -> float:
    """Percentage complete for *status* on the given track length."""
    table = _step_table(used_assign_attorney_step)
    total_steps = max(table.values())
    progress = (table[status] - 1) / (total_steps - 1) * 100
    return max(0.0, min(100.0, progress))


def determine_progress_color(
    status: RequestStatus,
    target_return_date: date | None,
    today: date,
) -> ProgressColor:
    if status is RequestStatus.CANCELLED:
        return ProgressColor.GRAY
    if status is RequestStatus.ON_HOLD:
        return ProgressColor.BLUE
    if status in (RequestStatus.COMPLETED, RequestStatus.AWAITING_FORESIDE_DOCUMENTS):
        return ProgressColor.GREEN
    if target_return_date is None:
        return ProgressColor.GRAY

    days_remaining = (target_return_date - today).days
    if days_remaining < 0:
        return ProgressColor.RED
    if days_remaining <= 1:
        return ProgressColor.YELLOW
    return ProgressColor.GREEN


@traced_engine("progress", "1.0", fingerprint_fields=("today",))
def calculate_progress(snapshot: RequestSnapshot, today: date) -> StatusProgress:
    """Compute StatusProgress for *snapshot*; *today* drives the color only."""
    used = snapshot.submitted_to_assign_attorney_on is not None
    table = _step_table(used)
    total_steps = max(table.values())
    current_step = table[effective_status(snapshot)]

    return StatusProgress(
        progress=calculate_progress_for_status(effective_status(snapshot), used),
        current_step=current_step,
        total_steps=total_steps,
        used_assign_attorney_step=used,
        color=determine_progress_color(
            snapshot.status, snapshot.target_return_date, today
        ),
    )


def get_step_label(current_step: int, total_steps: int) -> str:
    return f"Step {current_step} of {total_steps}"
