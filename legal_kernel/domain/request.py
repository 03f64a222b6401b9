"""
Request snapshot and workflow enumerations (``legal_kernel.domain.request``).

Responsibility
--------------
Read-only projection of a legal request as seen by every engine: status,
review audience, per-stage timestamps, review sub-statuses and outcomes,
principals, and the per-stage accumulated hour counters.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Snapshots are
produced by an external persistence layer and never mutated here.

Invariants enforced
-------------------
* Hour counters are non-negative at construction.
* Enumerations are closed; step/ownership tables elsewhere are keyed by them.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum


class RequestStatus(str, Enum):
    """Top-level request lifecycle state."""

    DRAFT = "Draft"
    LEGAL_INTAKE = "Legal Intake"
    ASSIGN_ATTORNEY = "Assign Attorney"
    IN_REVIEW = "In Review"
    CLOSEOUT = "Closeout"
    AWAITING_FORESIDE_DOCUMENTS = "Awaiting Foreside Documents"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    ON_HOLD = "On Hold"


class LegalReviewStatus(str, Enum):
    NOT_REQUIRED = "Not Required"
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    WAITING_ON_SUBMITTER = "Waiting On Submitter"
    WAITING_ON_ATTORNEY = "Waiting On Attorney"
    COMPLETED = "Completed"


class ComplianceReviewStatus(str, Enum):
    NOT_REQUIRED = "Not Required"
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    WAITING_ON_SUBMITTER = "Waiting On Submitter"
    WAITING_ON_COMPLIANCE = "Waiting On Compliance"
    COMPLETED = "Completed"


class ReviewOutcome(str, Enum):
    APPROVED = "Approved"
    APPROVED_WITH_COMMENTS = "Approved With Comments"
    RESPOND_TO_COMMENTS_AND_RESUBMIT = "Respond To Comments And Resubmit"
    NOT_APPROVED = "Not Approved"


class ReviewAudience(str, Enum):
    """Which review tracks a request must pass through."""

    LEGAL = "Legal"
    COMPLIANCE = "Compliance"
    BOTH = "Both"

    @property
    def includes_legal(self) -> bool:
        return self in (ReviewAudience.LEGAL, ReviewAudience.BOTH)

    @property
    def includes_compliance(self) -> bool:
        return self in (ReviewAudience.COMPLIANCE, ReviewAudience.BOTH)


class WorkflowAction(str, Enum):
    """Every transition a caller may request."""

    SUBMIT = "Submit"
    ASSIGN_ATTORNEY = "AssignAttorney"
    SEND_TO_COMMITTEE = "SendToCommittee"
    COMMITTEE_ASSIGN_ATTORNEY = "CommitteeAssignAttorney"
    SUBMIT_LEGAL_REVIEW = "SubmitLegalReview"
    SUBMIT_COMPLIANCE_REVIEW = "SubmitComplianceReview"
    UPDATE_LEGAL_REVIEW_STATUS = "UpdateLegalReviewStatus"
    UPDATE_COMPLIANCE_REVIEW_STATUS = "UpdateComplianceReviewStatus"
    CLOSEOUT = "Closeout"
    COMPLETE_FORESIDE_DOCUMENTS = "CompleteForesideDocuments"
    CANCEL = "Cancel"
    HOLD = "Hold"
    RESUME = "Resume"


class AppRole(str, Enum):
    """Directory group names backing the capability flags."""

    SUBMITTERS = "LW - Submitters"
    LEGAL_ADMIN = "LW - Legal Admin"
    ATTORNEY_ASSIGNER = "LW - Attorney Assigner"
    ATTORNEYS = "LW - Attorneys"
    COMPLIANCE_USERS = "LW - Compliance Users"
    ADMIN = "LW - Admin"


class ReviewStage(str, Enum):
    """Stages that accumulate reviewer / submitter hours."""

    LEGAL_INTAKE = "LegalIntake"
    LEGAL_REVIEW = "LegalReview"
    COMPLIANCE_REVIEW = "ComplianceReview"
    CLOSEOUT = "Closeout"


class StageOwner(str, Enum):
    """Party holding the ball within a stage."""

    ATTORNEY = "Attorney"
    REVIEWER = "Reviewer"
    SUBMITTER = "Submitter"

    @property
    def is_submitter(self) -> bool:
        return self is StageOwner.SUBMITTER


# (reviewer-side field, submitter-side field) per stage
STAGE_HOUR_FIELDS: dict[ReviewStage, tuple[str, str]] = {
    ReviewStage.LEGAL_INTAKE: (
        "legal_intake_legal_admin_hours",
        "legal_intake_submitter_hours",
    ),
    ReviewStage.LEGAL_REVIEW: (
        "legal_review_attorney_hours",
        "legal_review_submitter_hours",
    ),
    ReviewStage.COMPLIANCE_REVIEW: (
        "compliance_review_reviewer_hours",
        "compliance_review_submitter_hours",
    ),
    ReviewStage.CLOSEOUT: (
        "closeout_reviewer_hours",
        "closeout_submitter_hours",
    ),
}


@dataclass(frozen=True)
class Principal:
    """A directory user referenced by the request."""

    id: str
    display_name: str
    email: str | None = None


@dataclass(frozen=True)
class RequestSnapshot:
    """
    Immutable projection of a request consumed by every engine.

    Contract:
        Frozen; produced by the persistence layer.  Missing timestamps are
        ``None`` and degrade gracefully in every consumer.
    Guarantees:
        Hour counters are non-negative.
    Non-goals:
        Does not validate the cross-field invariant that Cancelled / On Hold
        carry a ``previous_status``; consumers fall back to Draft instead.
    """

    id: int
    request_id: str
    status: RequestStatus = RequestStatus.DRAFT
    review_audience: ReviewAudience = ReviewAudience.LEGAL

    # Stage entry timestamps
    created: datetime | None = None
    submitted_on: datetime | None = None
    submitted_to_assign_attorney_on: datetime | None = None
    submitted_for_review_on: datetime | None = None
    legal_review_assigned_on: datetime | None = None
    closeout_on: datetime | None = None
    cancelled_on: datetime | None = None
    on_hold_since: datetime | None = None

    # Stage completion / hand-off timestamps
    legal_review_completed_on: datetime | None = None
    compliance_review_completed_on: datetime | None = None
    legal_status_updated_on: datetime | None = None
    compliance_status_updated_on: datetime | None = None

    # Review tracks
    legal_review_status: LegalReviewStatus | None = None
    compliance_review_status: ComplianceReviewStatus | None = None
    legal_review_outcome: ReviewOutcome | None = None
    compliance_review_outcome: ReviewOutcome | None = None

    # Principals
    created_by: Principal | None = None
    submitted_by: Principal | None = None
    on_hold_by: Principal | None = None
    assigned_attorney: Principal | None = None

    # Accumulated hours
    legal_intake_legal_admin_hours: float = 0.0
    legal_intake_submitter_hours: float = 0.0
    legal_review_attorney_hours: float = 0.0
    legal_review_submitter_hours: float = 0.0
    compliance_review_reviewer_hours: float = 0.0
    compliance_review_submitter_hours: float = 0.0
    closeout_reviewer_hours: float = 0.0
    closeout_submitter_hours: float = 0.0
    total_reviewer_hours: float = 0.0
    total_submitter_hours: float = 0.0

    target_return_date: date | None = None
    is_rush_request: bool = False
    previous_status: RequestStatus | None = None
    is_foreside_review_required: bool = False
    is_retail_use: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name.endswith("_hours") and getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} cannot be negative")

    @property
    def author(self) -> Principal | None:
        """The submitter, falling back to the creator."""
        return self.submitted_by or self.created_by

    @property
    def has_legal_track(self) -> bool:
        return self.review_audience.includes_legal

    @property
    def has_compliance_track(self) -> bool:
        return self.review_audience.includes_compliance

    @property
    def compliance_reviewed(self) -> bool:
        return self.compliance_review_status is ComplianceReviewStatus.COMPLETED

    def stage_hours(self, stage: ReviewStage) -> tuple[float, float]:
        """Return (reviewer_hours, submitter_hours) accrued for *stage*."""
        reviewer_field, submitter_field = STAGE_HOUR_FIELDS[stage]
        return getattr(self, reviewer_field), getattr(self, submitter_field)
