"""
Module: legal_engines.permissions
Responsibility:
    Role-gated checks for every workflow action, the derived set of
    actions available to a user, the review-completion rule that picks
    the status following In Review, and status-graph validity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Capability flags arrive precomputed on ActionContext; this module
    never resolves group membership.

Invariants enforced:
    - Each check returns a PermissionCheck; denial always carries a reason.
    - Status checks run before role checks so the reason names the
      most fundamental blocker.
    - Next status after review: Completed if any required review ended
      Not Approved, else Closeout, and only once every required review
      is complete.

Audit relevance:
    ``log_permission_check`` records grants at INFO and denials at
    WARNING with the acting user, request, and reason.
"""

from __future__ import annotations

from dataclasses import dataclass

from legal_kernel.domain.capabilities import ActionContext
from legal_kernel.domain.request import (
    ComplianceReviewStatus,
    LegalReviewStatus,
    RequestSnapshot,
    RequestStatus,
    ReviewOutcome,
)
from legal_kernel.domain.request_workflow import REQUEST_WORKFLOW
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.permissions")


@dataclass(frozen=True)
class PermissionCheck:
    """Outcome of one permission check.  ``bool(check) == check.allowed``."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> PermissionCheck:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> PermissionCheck:
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


def _wrong_status(message: str, context: ActionContext) -> PermissionCheck:
    return PermissionCheck.deny(f"{message} (current: {context.current_status.value})")


def is_valid_status_transition(
    from_status: RequestStatus,
    to_status: RequestStatus,
) -> PermissionCheck:
    """Whether the request graph has an edge *from_status* -> *to_status*."""
    if from_status.value not in REQUEST_WORKFLOW.states:
        return PermissionCheck.deny(f"Unknown current status: {from_status.value}")
    if not REQUEST_WORKFLOW.is_allowed(from_status.value, to_status.value):
        return PermissionCheck.deny(
            f"Cannot transition from {from_status.value} to {to_status.value}"
        )
    return PermissionCheck.allow()


# ---------------------------------------------------------------------------
# Per-action checks
# ---------------------------------------------------------------------------


def can_save_draft(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.DRAFT:
        return _wrong_status("Can only save drafts when request is in Draft status", context)
    caps = context.capabilities
    if caps.is_admin:
        return PermissionCheck.allow()
    # New requests have no submitter yet; any submitter may save them.
    if context.snapshot.submitted_by is None and caps.is_submitter:
        return PermissionCheck.allow()
    if not context.is_owner:
        return PermissionCheck.deny("Only the request owner can save draft changes")
    return PermissionCheck.allow()


def can_submit_request(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.DRAFT:
        return _wrong_status("Request must be in Draft status to submit", context)
    if not (context.is_owner or context.capabilities.is_admin):
        return PermissionCheck.deny("Only the request owner or admin can submit this request")
    return PermissionCheck.allow()


def can_assign_attorney(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.LEGAL_INTAKE:
        return _wrong_status(
            "Attorney can only be assigned when request is in Legal Intake status", context
        )
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny(
            "You do not have permission to assign attorneys. Requires Legal Admin or Admin role."
        )
    return PermissionCheck.allow()


def can_send_to_committee(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.LEGAL_INTAKE:
        return _wrong_status(
            "Can only send to committee when request is in Legal Intake status", context
        )
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny("Only Legal Admin or Admin can send requests to committee")
    return PermissionCheck.allow()


def can_committee_assign_attorney(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.ASSIGN_ATTORNEY:
        return _wrong_status(
            "Committee can only assign attorney when request is in Assign Attorney status",
            context,
        )
    caps = context.capabilities
    if not (caps.is_attorney_assigner or caps.is_admin):
        return PermissionCheck.deny(
            "Only Attorney Assigner or Admin can assign attorneys from committee"
        )
    return PermissionCheck.allow()


def can_submit_legal_review(context: ActionContext) -> PermissionCheck:
    snapshot = context.snapshot
    if context.current_status is not RequestStatus.IN_REVIEW:
        return _wrong_status(
            "Legal review can only be submitted when request is In Review", context
        )
    if not snapshot.has_legal_track:
        return PermissionCheck.deny("Legal review is not required for this request")
    if snapshot.legal_review_status is LegalReviewStatus.COMPLETED:
        return PermissionCheck.deny("Legal review has already been completed")

    caps = context.capabilities
    if caps.has_admin_override:
        return PermissionCheck.allow()
    if not caps.is_attorney:
        return PermissionCheck.deny(
            "You do not have permission to submit legal reviews. Requires Attorney role."
        )
    if snapshot.assigned_attorney is None:
        return PermissionCheck.deny("No attorney has been assigned to this request")
    if not context.is_assigned_attorney:
        return PermissionCheck.deny("Only the assigned attorney can submit the legal review")
    return PermissionCheck.allow()


def can_submit_compliance_review(context: ActionContext) -> PermissionCheck:
    snapshot = context.snapshot
    if context.current_status is not RequestStatus.IN_REVIEW:
        return _wrong_status(
            "Compliance review can only be submitted when request is In Review", context
        )
    if not snapshot.has_compliance_track:
        return PermissionCheck.deny("Compliance review is not required for this request")
    if snapshot.compliance_review_status is ComplianceReviewStatus.COMPLETED:
        return PermissionCheck.deny("Compliance review has already been completed")
    caps = context.capabilities
    if not (caps.is_compliance_user or caps.is_admin):
        return PermissionCheck.deny(
            "You do not have permission to submit compliance reviews. "
            "Requires Compliance User or Admin role."
        )
    return PermissionCheck.allow()


def can_closeout_request(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.CLOSEOUT:
        return _wrong_status(
            "Request can only be closed out when in Closeout status", context
        )
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny("Only Legal Admin or Admin can closeout requests")
    return PermissionCheck.allow()


def can_complete_foreside_documents(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.AWAITING_FORESIDE_DOCUMENTS:
        return _wrong_status(
            "Can only complete Foreside documents when in Awaiting Foreside Documents status",
            context,
        )
    if context.capabilities.is_admin or context.is_owner:
        return PermissionCheck.allow()
    return PermissionCheck.deny(
        "Only the request submitter or Admin can complete Foreside documents"
    )


def can_cancel_request(context: ActionContext) -> PermissionCheck:
    status = context.current_status
    if status is RequestStatus.COMPLETED:
        return PermissionCheck.deny("Completed requests cannot be cancelled")
    if status is RequestStatus.CANCELLED:
        return PermissionCheck.deny("Request is already cancelled")
    if context.capabilities.has_admin_override:
        return PermissionCheck.allow()
    if context.is_owner and status is RequestStatus.DRAFT:
        return PermissionCheck.allow()
    return PermissionCheck.deny("You do not have permission to cancel this request")


def can_hold_request(context: ActionContext) -> PermissionCheck:
    if context.current_status in (
        RequestStatus.DRAFT,
        RequestStatus.COMPLETED,
        RequestStatus.CANCELLED,
        RequestStatus.ON_HOLD,
    ):
        return PermissionCheck.deny(
            f"Cannot put request on hold when status is {context.current_status.value}"
        )
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny("Only Legal Admin or Admin can put requests on hold")
    return PermissionCheck.allow()


def can_resume_request(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.ON_HOLD:
        return _wrong_status("Can only resume requests that are On Hold", context)
    if context.snapshot.previous_status is None:
        return PermissionCheck.deny("Cannot resume: no previous status recorded")
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny("Only Legal Admin or Admin can resume requests")
    return PermissionCheck.allow()


def can_edit_request(context: ActionContext) -> PermissionCheck:
    caps = context.capabilities
    status = context.current_status
    if caps.is_admin:
        return PermissionCheck.allow()
    if caps.is_legal_admin:
        if status in (RequestStatus.COMPLETED, RequestStatus.CANCELLED):
            return PermissionCheck.deny(f"Cannot edit {status.value} requests")
        return PermissionCheck.allow()
    if context.is_owner and status is RequestStatus.DRAFT:
        return PermissionCheck.allow()
    if status is RequestStatus.IN_REVIEW:
        if caps.is_attorney and context.is_assigned_attorney:
            return PermissionCheck.allow()
        if caps.is_compliance_user:
            return PermissionCheck.allow()
    return PermissionCheck.deny("You do not have permission to edit this request")


def can_override_review_audience(context: ActionContext) -> PermissionCheck:
    if context.current_status is not RequestStatus.LEGAL_INTAKE:
        return _wrong_status(
            "Review audience can only be changed during Legal Intake", context
        )
    if not context.capabilities.has_admin_override:
        return PermissionCheck.deny("Only Legal Admin or Admin can override review audience")
    return PermissionCheck.allow()


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AvailableActions:
    """Which actions the acting user may take right now."""

    can_save_draft: bool
    can_submit: bool
    can_assign_attorney: bool
    can_send_to_committee: bool
    can_committee_assign: bool
    can_submit_legal_review: bool
    can_submit_compliance_review: bool
    can_closeout: bool
    can_complete_foreside_documents: bool
    can_cancel: bool
    can_hold: bool
    can_resume: bool
    can_edit: bool
    can_override_review_audience: bool


def get_available_actions(context: ActionContext) -> AvailableActions:
    return AvailableActions(
        can_save_draft=can_save_draft(context).allowed,
        can_submit=can_submit_request(context).allowed,
        can_assign_attorney=can_assign_attorney(context).allowed,
        can_send_to_committee=can_send_to_committee(context).allowed,
        can_committee_assign=can_committee_assign_attorney(context).allowed,
        can_submit_legal_review=can_submit_legal_review(context).allowed,
        can_submit_compliance_review=can_submit_compliance_review(context).allowed,
        can_closeout=can_closeout_request(context).allowed,
        can_complete_foreside_documents=can_complete_foreside_documents(context).allowed,
        can_cancel=can_cancel_request(context).allowed,
        can_hold=can_hold_request(context).allowed,
        can_resume=can_resume_request(context).allowed,
        can_edit=can_edit_request(context).allowed,
        can_override_review_audience=can_override_review_audience(context).allowed,
    )


@dataclass(frozen=True)
class ReviewCompletion:
    """
    Completion state of the review tracks.

    Contract:
        A track that is not required counts as complete.
        ``next_status`` is None until every required track is complete.
    """

    legal_review_required: bool
    legal_review_complete: bool
    compliance_review_required: bool
    compliance_review_complete: bool
    has_not_approved_outcome: bool
    next_status: RequestStatus | None

    @property
    def all_reviews_complete(self) -> bool:
        return self.legal_review_complete and self.compliance_review_complete


def check_review_completion(snapshot: RequestSnapshot) -> ReviewCompletion:
    legal_required = snapshot.has_legal_track
    compliance_required = snapshot.has_compliance_track
    legal_complete = (
        not legal_required
        or snapshot.legal_review_status is LegalReviewStatus.COMPLETED
    )
    compliance_complete = (
        not compliance_required
        or snapshot.compliance_review_status is ComplianceReviewStatus.COMPLETED
    )
    not_approved = ReviewOutcome.NOT_APPROVED in (
        snapshot.legal_review_outcome,
        snapshot.compliance_review_outcome,
    )

    next_status: RequestStatus | None = None
    if legal_complete and compliance_complete:
        next_status = RequestStatus.COMPLETED if not_approved else RequestStatus.CLOSEOUT

    return ReviewCompletion(
        legal_review_required=legal_required,
        legal_review_complete=legal_complete,
        compliance_review_required=compliance_required,
        compliance_review_complete=compliance_complete,
        has_not_approved_outcome=not_approved,
        next_status=next_status,
    )


def determine_closeout_next_status(snapshot: RequestSnapshot) -> RequestStatus:
    """Closeout leads to Awaiting Foreside Documents when Foreside review is required."""
    if snapshot.is_foreside_review_required:
        return RequestStatus.AWAITING_FORESIDE_DOCUMENTS
    return RequestStatus.COMPLETED


def log_permission_check(
    action: str,
    context: ActionContext,
    result: PermissionCheck,
) -> None:
    data = {
        "action": action,
        "user_id": context.current_user_id,
        "request_id": context.snapshot.request_id,
        "status": context.current_status,
    }
    if result.allowed:
        logger.info("permission_granted", extra=data)
    else:
        logger.warning("permission_denied", extra={**data, "reason": result.reason})
