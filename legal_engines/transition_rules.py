"""
Module: legal_engines.transition_rules
Responsibility:
    Validate a requested workflow transition: payload shape, current-status
    precondition, and the capability preconditions that depend on the
    payload or ownership.  One validator per WorkflowAction, dispatched
    through ``validate_transition``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the orchestration layer that persists a transition.

Invariants enforced:
    - Rules never raise for business outcomes; every failure is a
      FieldIssue inside the returned TransitionCheck.
    - Status mismatches are reported on field ``current_status`` with code
      INVALID_STATUS.
    - Free-text limits come from FieldLimits, never from literals.

Failure modes:
    - KeyError is never raised for a missing payload key; absent keys are
      treated as None.
    - ValueError for an action with no registered validator.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from enum import Enum
from typing import Any

from legal_engines.tracer import traced_engine
from legal_kernel.domain.capabilities import ActionContext
from legal_kernel.domain.request import (
    ComplianceReviewStatus,
    LegalReviewStatus,
    Principal,
    RequestStatus,
    ReviewAudience,
    ReviewOutcome,
    WorkflowAction,
)
from legal_kernel.domain.validation import (
    DEFAULT_FIELD_LIMITS,
    FieldIssue,
    FieldLimits,
    IssueCode,
    TransitionCheck,
)
from legal_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.transition_rules")

Validator = Callable[[Mapping[str, Any], ActionContext, FieldLimits], list[FieldIssue]]

RESUMABLE_STATUSES = frozenset({
    RequestStatus.LEGAL_INTAKE,
    RequestStatus.ASSIGN_ATTORNEY,
    RequestStatus.IN_REVIEW,
    RequestStatus.CLOSEOUT,
    RequestStatus.AWAITING_FORESIDE_DOCUMENTS,
})

NOT_HOLDABLE_STATUSES = frozenset({
    RequestStatus.DRAFT,
    RequestStatus.COMPLETED,
    RequestStatus.CANCELLED,
    RequestStatus.ON_HOLD,
})

UPDATABLE_LEGAL_REVIEW_STATUSES = frozenset({
    LegalReviewStatus.IN_PROGRESS,
    LegalReviewStatus.WAITING_ON_SUBMITTER,
    LegalReviewStatus.WAITING_ON_ATTORNEY,
})

UPDATABLE_COMPLIANCE_REVIEW_STATUSES = frozenset({
    ComplianceReviewStatus.IN_PROGRESS,
    ComplianceReviewStatus.WAITING_ON_SUBMITTER,
    ComplianceReviewStatus.WAITING_ON_COMPLIANCE,
})


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------


def _require_status(
    context: ActionContext,
    allowed: Collection[RequestStatus],
    message: str,
) -> list[FieldIssue]:
    if context.current_status in allowed:
        return []
    return [FieldIssue("current_status", message, IssueCode.INVALID_STATUS)]


def _text(
    payload: Mapping[str, Any],
    name: str,
    label: str,
    issues: list[FieldIssue],
    *,
    max_length: int,
    min_length: int = 0,
    required: bool = False,
) -> str | None:
    value = payload.get(name)
    if value is None:
        if required:
            issues.append(FieldIssue(name, f"{label} is required", IssueCode.REQUIRED))
        return None
    if not isinstance(value, str):
        issues.append(FieldIssue(name, f"{label} must be text", IssueCode.INVALID_TYPE))
        return None
    if len(value) < min_length:
        issues.append(FieldIssue(
            name,
            f"{label} must be at least {min_length} characters",
            IssueCode.TOO_SHORT,
        ))
    elif len(value) > max_length:
        issues.append(FieldIssue(
            name,
            f"{label} cannot exceed {max_length} characters",
            IssueCode.TOO_LONG,
        ))
    return value


def _choice(
    payload: Mapping[str, Any],
    name: str,
    enum_type: type[Enum],
    allowed: Collection[Enum],
    message: str,
    issues: list[FieldIssue],
) -> Enum | None:
    value = payload.get(name)
    try:
        member = enum_type(value)
    except ValueError:
        member = None
    if member is None or member not in allowed:
        code = IssueCode.REQUIRED if value is None else IssueCode.INVALID_CHOICE
        issues.append(FieldIssue(name, message, code))
        return None
    return member


def _flag(
    payload: Mapping[str, Any],
    name: str,
    message: str,
    issues: list[FieldIssue],
) -> bool | None:
    value = payload.get(name)
    if not isinstance(value, bool):
        issues.append(FieldIssue(name, message, IssueCode.REQUIRED))
        return None
    return value


def _as_status(value: Any) -> RequestStatus | None:
    try:
        return RequestStatus(value)
    except ValueError:
        return None


def _has_principal(value: Any) -> bool:
    if isinstance(value, Principal):
        principal_id = value.id
    elif isinstance(value, Mapping):
        principal_id = value.get("id")
    else:
        return False
    return principal_id is not None and str(principal_id) not in ("", "0")


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_submit(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context, {RequestStatus.DRAFT}, "Request can only be submitted from Draft status"
    )
    _text(payload, "submission_notes", "Submission notes", issues, max_length=limits.notes)
    if not (context.is_owner or context.capabilities.is_admin):
        issues.append(FieldIssue(
            "current_user_id",
            "Only the request owner can submit this request",
            IssueCode.NOT_PERMITTED,
        ))
    return issues


def validate_assign_attorney(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.LEGAL_INTAKE},
        "Attorney can only be assigned when request is in Legal Intake status",
    )
    _text(payload, "assignment_notes", "Assignment notes", issues, max_length=limits.notes)
    requires_attorney = context.snapshot.review_audience is not ReviewAudience.COMPLIANCE
    if requires_attorney and not _has_principal(payload.get("attorney")):
        issues.append(FieldIssue(
            "attorney", "Please select an attorney to assign", IssueCode.REQUIRED
        ))
    return issues


def validate_send_to_committee(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.LEGAL_INTAKE},
        "Can only send to committee when request is in Legal Intake status",
    )
    _text(payload, "notes", "Notes", issues, max_length=limits.notes)
    return issues


def validate_committee_assign_attorney(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.ASSIGN_ATTORNEY},
        "Committee can only assign attorney when request is in Assign Attorney status",
    )
    _text(payload, "assignment_notes", "Assignment notes", issues, max_length=limits.notes)
    if not _has_principal(payload.get("attorney")):
        issues.append(FieldIssue(
            "attorney", "Please select an attorney to assign", IssueCode.REQUIRED
        ))
    return issues


def _review_fields(
    payload: Mapping[str, Any], issues: list[FieldIssue], limits: FieldLimits
) -> None:
    _choice(
        payload, "outcome", ReviewOutcome, tuple(ReviewOutcome),
        "Review outcome is required", issues,
    )
    _text(
        payload, "review_notes", "Review notes", issues,
        required=True,
        min_length=limits.min_review_notes,
        max_length=limits.review_notes,
    )


def validate_submit_legal_review(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.IN_REVIEW},
        "Legal review can only be submitted when request is In Review status",
    )
    _review_fields(payload, issues, limits)
    if not (context.capabilities.has_admin_override or context.is_assigned_attorney):
        issues.append(FieldIssue(
            "outcome",
            "Only the assigned attorney can submit the legal review",
            IssueCode.NOT_PERMITTED,
        ))
    return issues


def validate_submit_compliance_review(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.IN_REVIEW},
        "Compliance review can only be submitted when request is In Review status",
    )
    _review_fields(payload, issues, limits)
    _flag(payload, "is_foreside_review_required", "Foreside review flag is required", issues)
    _flag(payload, "is_retail_use", "Retail use flag is required", issues)
    return issues


def validate_update_legal_review_status(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.IN_REVIEW},
        "Can only update legal review status when request is In Review",
    )
    _choice(
        payload, "status", LegalReviewStatus, UPDATABLE_LEGAL_REVIEW_STATUSES,
        "Invalid legal review status", issues,
    )
    _text(payload, "notes", "Status notes", issues, max_length=limits.status_notes)
    return issues


def validate_update_compliance_review_status(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.IN_REVIEW},
        "Can only update compliance review status when request is In Review",
    )
    _choice(
        payload, "status", ComplianceReviewStatus, UPDATABLE_COMPLIANCE_REVIEW_STATUSES,
        "Invalid compliance review status", issues,
    )
    _text(payload, "notes", "Status notes", issues, max_length=limits.status_notes)
    return issues


def tracking_id_required(payload: Mapping[str, Any], context: ActionContext) -> bool:
    """Compliance reviewed AND foreside review required AND retail use.

    Payload flags override the snapshot so the rule can be evaluated
    against values being saved alongside the closeout.
    """
    snapshot = context.snapshot
    compliance_reviewed = payload.get("compliance_reviewed", snapshot.compliance_reviewed)
    foreside = payload.get("is_foreside_review_required", snapshot.is_foreside_review_required)
    retail = payload.get("is_retail_use", snapshot.is_retail_use)
    return bool(compliance_reviewed and foreside and retail)


def validate_closeout(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.CLOSEOUT},
        "Request can only be closed out when in Closeout status",
    )
    tracking_id = _text(
        payload, "tracking_id", "Tracking ID", issues, max_length=limits.tracking_id
    )
    _text(payload, "closeout_notes", "Closeout notes", issues, max_length=limits.closeout_notes)
    if tracking_id_required(payload, context) and not (tracking_id or "").strip():
        issues.append(FieldIssue(
            "tracking_id",
            "Tracking ID is required when Compliance reviewed and both "
            "Foreside Review Required and Retail Use are true",
            IssueCode.REQUIRED,
        ))
    return issues


def validate_complete_foreside_documents(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context,
        {RequestStatus.AWAITING_FORESIDE_DOCUMENTS},
        "Foreside documents can only be completed when request is Awaiting Foreside Documents",
    )
    _text(payload, "notes", "Notes", issues, max_length=limits.notes)
    if not (context.is_owner or context.capabilities.is_admin):
        issues.append(FieldIssue(
            "current_user_id",
            "Only the request owner or an admin can complete Foreside documents",
            IssueCode.NOT_PERMITTED,
        ))
    return issues


def validate_cancel(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues: list[FieldIssue] = []
    _text(
        payload, "cancel_reason", "Cancel reason", issues,
        required=True, min_length=limits.min_reason, max_length=limits.reason,
    )
    status = context.current_status
    if status is RequestStatus.COMPLETED:
        issues.append(FieldIssue(
            "current_status", "Completed requests cannot be cancelled", IssueCode.INVALID_STATUS
        ))
        return issues
    if status is RequestStatus.CANCELLED:
        issues.append(FieldIssue(
            "current_status", "Request is already cancelled", IssueCode.INVALID_STATUS
        ))
        return issues

    capabilities = context.capabilities
    owner_in_draft = context.is_owner and status is RequestStatus.DRAFT
    if not (capabilities.has_admin_override or owner_in_draft):
        issues.append(FieldIssue(
            "cancel_reason",
            "You do not have permission to cancel this request",
            IssueCode.NOT_PERMITTED,
        ))
    return issues


def validate_hold(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues: list[FieldIssue] = []
    _text(
        payload, "on_hold_reason", "Hold reason", issues,
        required=True, min_length=limits.min_reason, max_length=limits.reason,
    )
    if context.current_status in NOT_HOLDABLE_STATUSES:
        issues.append(FieldIssue(
            "current_status",
            f"Cannot put request on hold when status is {context.current_status.value}",
            IssueCode.INVALID_STATUS,
        ))
    return issues


def validate_resume(
    payload: Mapping[str, Any], context: ActionContext, limits: FieldLimits
) -> list[FieldIssue]:
    issues = _require_status(
        context, {RequestStatus.ON_HOLD}, "Can only resume requests that are On Hold"
    )
    recorded = context.snapshot.previous_status
    requested = payload.get("previous_status")
    if recorded is not None:
        if requested not in (None, "") and _as_status(requested) is not recorded:
            issues.append(FieldIssue(
                "previous_status",
                f"Request can only resume to {recorded.value}",
                IssueCode.INVALID_CHOICE,
            ))
            return issues
        previous = recorded
    else:
        previous = requested
    if previous is None or previous == "":
        issues.append(FieldIssue(
            "previous_status", "Previous status is required to resume", IssueCode.REQUIRED
        ))
        return issues
    _choice(
        {"previous_status": previous}, "previous_status", RequestStatus, RESUMABLE_STATUSES,
        f"Cannot resume to status {getattr(previous, 'value', previous)}", issues,
    )
    return issues


TRANSITION_RULES: dict[WorkflowAction, Validator] = {
    WorkflowAction.SUBMIT: validate_submit,
    WorkflowAction.ASSIGN_ATTORNEY: validate_assign_attorney,
    WorkflowAction.SEND_TO_COMMITTEE: validate_send_to_committee,
    WorkflowAction.COMMITTEE_ASSIGN_ATTORNEY: validate_committee_assign_attorney,
    WorkflowAction.SUBMIT_LEGAL_REVIEW: validate_submit_legal_review,
    WorkflowAction.SUBMIT_COMPLIANCE_REVIEW: validate_submit_compliance_review,
    WorkflowAction.UPDATE_LEGAL_REVIEW_STATUS: validate_update_legal_review_status,
    WorkflowAction.UPDATE_COMPLIANCE_REVIEW_STATUS: validate_update_compliance_review_status,
    WorkflowAction.CLOSEOUT: validate_closeout,
    WorkflowAction.COMPLETE_FORESIDE_DOCUMENTS: validate_complete_foreside_documents,
    WorkflowAction.CANCEL: validate_cancel,
    WorkflowAction.HOLD: validate_hold,
    WorkflowAction.RESUME: validate_resume,
}


@traced_engine("transition_rules", "1.0", fingerprint_fields=("action",))
def validate_transition(
    action: WorkflowAction,
    payload: Mapping[str, Any],
    context: ActionContext,
    limits: FieldLimits = DEFAULT_FIELD_LIMITS,
) -> TransitionCheck:
    """Validate *action* with *payload* against *context*.

    Returns:
        TransitionCheck with every issue found; empty issues means the
        transition may be persisted.

    Raises:
        ValueError: if *action* has no registered validator.
    """
    action = WorkflowAction(action)
    validator = TRANSITION_RULES.get(action)
    if validator is None:
        raise ValueError(f"No transition rule registered for {action}")

    with LogContext.bind(
        request_id=context.snapshot.request_id,
        action=action,
        actor_id=context.current_user_id,
    ):
        issues = validator(payload, context, limits)
        check = TransitionCheck(
            action=action.value,
            current_status=context.current_status.value,
            issues=tuple(issues),
        )

        if check.is_valid:
            logger.info(
                "transition_validation_passed",
                extra={"current_status": context.current_status},
            )
        else:
            logger.warning(
                "transition_validation_failed",
                extra={
                    "current_status": context.current_status,
                    "issue_count": len(issues),
                    "issues": [i.to_dict() for i in issues],
                },
            )
    return check
