"""
Module: legal_engines.status_summary
Responsibility:
    Bundle progress, waiting-on, and stage timing for one request into the
    single projection shown on a status card, all evaluated against one
    reading of the clock.

Architecture position:
    Engines -- composes the progress, waiting_on and stage_timing engines.
    Reads the injected Clock exactly once; never touches system time.
"""

from __future__ import annotations

from dataclasses import dataclass

from legal_engines.business_hours import reference_date
from legal_engines.progress import StatusProgress, calculate_progress, get_step_label
from legal_engines.stage_timing import (
    StageTimingInfo,
    UrgencyLevel,
    get_stage_timing_info,
    get_urgency_level,
)
from legal_engines.waiting_on import (
    WaitingOnInfo,
    determine_waiting_on,
    get_action_text,
    get_waiting_on_display_text,
)
from legal_kernel.domain.calendar import DEFAULT_WORKING_HOURS, WorkingHoursConfig
from legal_kernel.domain.clock import Clock
from legal_kernel.domain.request import RequestSnapshot
from legal_kernel.logging_config import LogContext


@dataclass(frozen=True)
class RequestStatusSummary:
    request_id: str
    progress: StatusProgress
    waiting_on: WaitingOnInfo
    timing: StageTimingInfo
    step_label: str
    waiting_on_text: str
    action_text: str
    urgency: UrgencyLevel


def summarize_request_status(
    snapshot: RequestSnapshot,
    clock: Clock,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> RequestStatusSummary:
    now = clock.now()
    today = reference_date(now, config)

    with LogContext.bind(request_id=snapshot.request_id):
        progress = calculate_progress(snapshot, today)
        waiting_on = determine_waiting_on(snapshot)
        timing = get_stage_timing_info(snapshot, now, config)

    return RequestStatusSummary(
        request_id=snapshot.request_id,
        progress=progress,
        waiting_on=waiting_on,
        timing=timing,
        step_label=get_step_label(progress.current_step, progress.total_steps),
        waiting_on_text=get_waiting_on_display_text(waiting_on),
        action_text=get_action_text(waiting_on, snapshot.status),
        urgency=get_urgency_level(timing.days_remaining),
    )
