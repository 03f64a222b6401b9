"""
Module: legal_engines.time_tracking
Responsibility:
    Propose incremental updates to a request's per-stage reviewer and
    submitter hour counters when ownership of a stage changes hands, when
    a request is put on hold, and when it resumes.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on legal_engines.business_hours.  The returned
    TimeTrackingUpdate is persisted by the caller; nothing is written here.

Invariants enforced:
    - Hours accrue to the party that owned the stage at hand-off time,
      never to the incoming owner.
    - Counters only grow; every proposed value is the old value plus a
      non-negative business-hours delta.
    - Grand totals are always recomputed as the sum of the four stage
      counters for that role, never accumulated separately.

Failure modes:
    - No hand-off timestamp or no current owner: zero accrual, totals are
      still recomputed.
    - Replaying against a stale snapshot double-counts; single-writer
      discipline belongs to the persistence layer.

Usage:
    update = calculate_stage_time_update(
        snapshot, ReviewStage.LEGAL_REVIEW, StageOwner.SUBMITTER, now
    )
    repository.patch(snapshot.id, update.as_dict())
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from legal_engines.business_hours import (
    calculate_business_hours,
    round_hours,
    to_reference_time,
)
from legal_engines.tracer import traced_engine
from legal_kernel.domain.calendar import DEFAULT_WORKING_HOURS, WorkingHoursConfig
from legal_kernel.domain.request import (
    STAGE_HOUR_FIELDS,
    ComplianceReviewStatus,
    LegalReviewStatus,
    RequestSnapshot,
    RequestStatus,
    ReviewStage,
    StageOwner,
)
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.time_tracking")


@dataclass(frozen=True)
class TimeTrackingUpdate:
    """
    Partial update to a request's hour counters.

    Contract:
        Only touched stage counters are set; untouched ones stay None.
        Totals are set whenever any accrual pass ran.
    Guarantees:
        ``as_dict()`` keys match RequestSnapshot field names.
    """

    legal_intake_legal_admin_hours: float | None = None
    legal_intake_submitter_hours: float | None = None
    legal_review_attorney_hours: float | None = None
    legal_review_submitter_hours: float | None = None
    compliance_review_reviewer_hours: float | None = None
    compliance_review_submitter_hours: float | None = None
    closeout_reviewer_hours: float | None = None
    closeout_submitter_hours: float | None = None
    total_reviewer_hours: float | None = None
    total_submitter_hours: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> dict[str, float]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# ---------------------------------------------------------------------------
# Ownership and hand-off resolution
# ---------------------------------------------------------------------------

_LEGAL_REVIEW_OWNERS: dict[LegalReviewStatus, StageOwner] = {
    LegalReviewStatus.IN_PROGRESS: StageOwner.ATTORNEY,
    LegalReviewStatus.WAITING_ON_ATTORNEY: StageOwner.ATTORNEY,
    LegalReviewStatus.WAITING_ON_SUBMITTER: StageOwner.SUBMITTER,
}

_COMPLIANCE_REVIEW_OWNERS: dict[ComplianceReviewStatus, StageOwner] = {
    ComplianceReviewStatus.IN_PROGRESS: StageOwner.REVIEWER,
    ComplianceReviewStatus.WAITING_ON_COMPLIANCE: StageOwner.REVIEWER,
    ComplianceReviewStatus.WAITING_ON_SUBMITTER: StageOwner.SUBMITTER,
}


def get_stage_current_owner(
    snapshot: RequestSnapshot,
    stage: ReviewStage,
) -> StageOwner | None:
    """Who holds *stage* according to the snapshot's sub-statuses."""
    if stage is ReviewStage.LEGAL_REVIEW:
        return _LEGAL_REVIEW_OWNERS.get(snapshot.legal_review_status)
    if stage is ReviewStage.COMPLIANCE_REVIEW:
        return _COMPLIANCE_REVIEW_OWNERS.get(snapshot.compliance_review_status)
    if stage is ReviewStage.CLOSEOUT:
        return StageOwner.REVIEWER
    # Legal intake has no status-based ownership
    return None


def get_stage_last_handoff_date(
    snapshot: RequestSnapshot,
    stage: ReviewStage,
) -> datetime | None:
    if stage is ReviewStage.LEGAL_INTAKE:
        return snapshot.submitted_on
    if stage is ReviewStage.LEGAL_REVIEW:
        return snapshot.legal_status_updated_on
    if stage is ReviewStage.COMPLIANCE_REVIEW:
        return snapshot.compliance_status_updated_on
    return (
        snapshot.closeout_on
        or snapshot.compliance_review_completed_on
        or snapshot.legal_review_completed_on
    )


def owner_field(stage: ReviewStage, owner: StageOwner) -> str:
    """Counter that accrues hours for *owner* within *stage*."""
    reviewer_field, submitter_field = STAGE_HOUR_FIELDS[stage]
    return submitter_field if owner.is_submitter else reviewer_field


def active_stages(snapshot: RequestSnapshot) -> tuple[ReviewStage, ...]:
    """Stages whose clocks are running for the snapshot's status."""
    if snapshot.status is RequestStatus.LEGAL_INTAKE:
        return (ReviewStage.LEGAL_INTAKE,)
    if snapshot.status is RequestStatus.IN_REVIEW:
        stages: list[ReviewStage] = []
        if snapshot.has_legal_track:
            stages.append(ReviewStage.LEGAL_REVIEW)
        if snapshot.has_compliance_track:
            stages.append(ReviewStage.COMPLIANCE_REVIEW)
        return tuple(stages)
    if snapshot.status is RequestStatus.CLOSEOUT:
        return (ReviewStage.CLOSEOUT,)
    return ()


# ---------------------------------------------------------------------------
# Accrual
# ---------------------------------------------------------------------------


def _accrue(
    snapshot: RequestSnapshot,
    stage: ReviewStage,
    now: datetime,
    config: WorkingHoursConfig,
) -> dict[str, float]:
    owner = get_stage_current_owner(snapshot, stage)
    handoff = get_stage_last_handoff_date(snapshot, stage)
    if owner is None or handoff is None:
        logger.debug(
            "stage_time_skipped",
            extra={
                "request_id": snapshot.request_id,
                "stage": stage,
                "has_owner": owner is not None,
                "has_handoff": handoff is not None,
            },
        )
        return {}

    hours = calculate_business_hours(handoff, now, config)
    field = owner_field(stage, owner)
    return {field: round_hours(getattr(snapshot, field) + hours)}


def _with_totals(snapshot: RequestSnapshot, changes: dict[str, float]) -> TimeTrackingUpdate:
    reviewer_total = 0.0
    submitter_total = 0.0
    for reviewer_field, submitter_field in STAGE_HOUR_FIELDS.values():
        reviewer_total += changes.get(reviewer_field, getattr(snapshot, reviewer_field))
        submitter_total += changes.get(submitter_field, getattr(snapshot, submitter_field))
    return TimeTrackingUpdate(
        **changes,
        total_reviewer_hours=round_hours(reviewer_total),
        total_submitter_hours=round_hours(submitter_total),
    )


@traced_engine("time_tracking", "1.0", fingerprint_fields=("stage", "new_owner", "now"))
def calculate_stage_time_update(
    snapshot: RequestSnapshot,
    stage: ReviewStage,
    new_owner: StageOwner | None,
    now: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> TimeTrackingUpdate:
    """Close out the current owner's interval in *stage* as of *now*.

    Preconditions:
        *snapshot* reflects the state immediately before the hand-off;
        *new_owner* is the party taking over (recorded for audit only).

    Postconditions:
        The outgoing owner's counter grows by the business hours since the
        last hand-off; totals are recomputed from all eight counters.
    """
    changes = _accrue(snapshot, stage, now, config)
    update = _with_totals(snapshot, changes)
    logger.info(
        "stage_time_calculated",
        extra={
            "request_id": snapshot.request_id,
            "stage": stage,
            "previous_owner": get_stage_current_owner(snapshot, stage),
            "new_owner": new_owner,
            "changes": changes,
            "total_reviewer_hours": update.total_reviewer_hours,
            "total_submitter_hours": update.total_submitter_hours,
        },
    )
    return update


@traced_engine("time_tracking.pause", "1.0", fingerprint_fields=("now",))
def pause_time_tracking(
    snapshot: RequestSnapshot,
    now: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> TimeTrackingUpdate:
    """Finalize every running stage clock before the request goes on hold."""
    changes: dict[str, float] = {}
    stages = active_stages(snapshot)
    for stage in stages:
        changes.update(_accrue(snapshot, stage, now, config))
    update = _with_totals(snapshot, changes)
    logger.info(
        "time_tracking_paused",
        extra={
            "request_id": snapshot.request_id,
            "status": snapshot.status,
            "stages": [s.value for s in stages],
            "changes": changes,
        },
    )
    return update


def resume_time_tracking(
    snapshot: RequestSnapshot,
    resumed_status: RequestStatus,
) -> TimeTrackingUpdate:
    """No counters change on resume.

    The active hand-off date is re-derived from the status timestamps the
    resume transition writes.
    """
    logger.info(
        "time_tracking_resumed",
        extra={"request_id": snapshot.request_id, "resumed_status": resumed_status},
    )
    return TimeTrackingUpdate()


def calculate_display_duration_minutes(
    start: datetime,
    end: datetime,
    config: WorkingHoursConfig = DEFAULT_WORKING_HOURS,
) -> int:
    """Minutes to show for an interval, never feeding the hour counters.

    Business minutes are preferred.  When they round to zero for a
    positive interval (e.g. entirely outside working hours) the raw
    elapsed minutes are shown instead, with a floor of one minute.
    """
    minutes = round(calculate_business_hours(start, end, config) * 60)
    if minutes > 0:
        return minutes

    elapsed = to_reference_time(end, config) - to_reference_time(start, config)
    if elapsed.total_seconds() <= 0:
        return 0
    raw = max(1, int(elapsed.total_seconds() // 60))
    logger.warning(
        "display_duration_fallback",
        extra={"start": start, "end": end, "raw_minutes": raw},
    )
    return raw
