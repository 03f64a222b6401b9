"""
Tests for role-gated permission checks.

Covers:
- Per-action checks: status first, then role / ownership
- Available-actions aggregate
- Review completion and the status following In Review / Closeout
- Status-graph validity
- Permission audit logging
"""

import logging

import pytest

from legal_engines.permissions import (
    PermissionCheck,
    can_assign_attorney,
    can_cancel_request,
    can_closeout_request,
    can_committee_assign_attorney,
    can_complete_foreside_documents,
    can_edit_request,
    can_hold_request,
    can_override_review_audience,
    can_resume_request,
    can_save_draft,
    can_send_to_committee,
    can_submit_compliance_review,
    can_submit_legal_review,
    can_submit_request,
    check_review_completion,
    determine_closeout_next_status,
    get_available_actions,
    is_valid_status_transition,
    log_permission_check,
)
from legal_kernel.domain.capabilities import ActionContext, Capabilities
from legal_kernel.domain.request import (
    ComplianceReviewStatus,
    LegalReviewStatus,
    RequestStatus,
    ReviewAudience,
    ReviewOutcome,
)

NOBODY = Capabilities()
SUBMITTER = Capabilities(is_submitter=True)
ADMIN = Capabilities(is_admin=True)
LEGAL_ADMIN = Capabilities(is_legal_admin=True)
ASSIGNER = Capabilities(is_attorney_assigner=True)
ATTORNEY = Capabilities(is_attorney=True)
COMPLIANCE = Capabilities(is_compliance_user=True)


@pytest.fixture
def ctx(make_snapshot):
    def _make(status=RequestStatus.DRAFT, caps=NOBODY, user_id="u-100", **fields):
        return ActionContext(
            snapshot=make_snapshot(status=status, **fields),
            capabilities=caps,
            current_user_id=user_id,
        )

    return _make


class TestPermissionCheck:

    def test_truthiness(self):
        assert PermissionCheck.allow()
        assert not PermissionCheck.deny("no")
        assert PermissionCheck.deny("no").reason == "no"


class TestDraftAndSubmit:

    def test_owner_saves_draft(self, ctx):
        assert can_save_draft(ctx())

    def test_stranger_cannot_save_draft(self, ctx):
        check = can_save_draft(ctx(user_id="u-555"))
        assert check.reason == "Only the request owner can save draft changes"

    def test_any_submitter_saves_new_draft(self, ctx):
        assert can_save_draft(ctx(caps=SUBMITTER, user_id="u-555", submitted_by=None))

    def test_save_draft_wrong_status(self, ctx):
        check = can_save_draft(ctx(status=RequestStatus.IN_REVIEW, caps=ADMIN))
        assert check.reason == (
            "Can only save drafts when request is in Draft status (current: In Review)"
        )

    def test_submit(self, ctx):
        assert can_submit_request(ctx())
        assert can_submit_request(ctx(caps=ADMIN, user_id="u-900"))
        assert not can_submit_request(ctx(user_id="u-555"))
        assert not can_submit_request(ctx(status=RequestStatus.LEGAL_INTAKE))


class TestIntakeAndAssignment:

    @pytest.mark.parametrize("check", [can_assign_attorney, can_send_to_committee])
    def test_legal_admin_or_admin(self, ctx, check):
        assert check(ctx(RequestStatus.LEGAL_INTAKE, ADMIN))
        assert check(ctx(RequestStatus.LEGAL_INTAKE, LEGAL_ADMIN))
        assert not check(ctx(RequestStatus.LEGAL_INTAKE, ATTORNEY))
        assert not check(ctx(RequestStatus.IN_REVIEW, ADMIN))

    def test_assign_attorney_denial_reason(self, ctx):
        check = can_assign_attorney(ctx(RequestStatus.LEGAL_INTAKE, SUBMITTER))
        assert check.reason == (
            "You do not have permission to assign attorneys. Requires Legal Admin or Admin role."
        )

    def test_committee_assign(self, ctx):
        assert can_committee_assign_attorney(ctx(RequestStatus.ASSIGN_ATTORNEY, ASSIGNER))
        assert can_committee_assign_attorney(ctx(RequestStatus.ASSIGN_ATTORNEY, ADMIN))
        assert not can_committee_assign_attorney(ctx(RequestStatus.ASSIGN_ATTORNEY, LEGAL_ADMIN))
        assert not can_committee_assign_attorney(ctx(RequestStatus.LEGAL_INTAKE, ASSIGNER))

    def test_override_review_audience(self, ctx):
        assert can_override_review_audience(ctx(RequestStatus.LEGAL_INTAKE, LEGAL_ADMIN))
        assert not can_override_review_audience(ctx(RequestStatus.IN_REVIEW, LEGAL_ADMIN))
        assert not can_override_review_audience(ctx(RequestStatus.LEGAL_INTAKE, SUBMITTER))


class TestReviews:

    def test_assigned_attorney_submits_legal_review(self, ctx, attorney):
        context = ctx(
            RequestStatus.IN_REVIEW, ATTORNEY, user_id="u-200", assigned_attorney=attorney
        )
        assert can_submit_legal_review(context)

    def test_other_attorney_denied(self, ctx, attorney):
        context = ctx(
            RequestStatus.IN_REVIEW, ATTORNEY, user_id="u-201", assigned_attorney=attorney
        )
        assert can_submit_legal_review(context).reason == (
            "Only the assigned attorney can submit the legal review"
        )

    def test_no_attorney_assigned(self, ctx):
        context = ctx(RequestStatus.IN_REVIEW, ATTORNEY, user_id="u-200")
        assert can_submit_legal_review(context).reason == (
            "No attorney has been assigned to this request"
        )

    def test_non_attorney_denied(self, ctx):
        assert "Requires Attorney role" in can_submit_legal_review(
            ctx(RequestStatus.IN_REVIEW, COMPLIANCE)
        ).reason

    def test_legal_review_not_required(self, ctx):
        context = ctx(
            RequestStatus.IN_REVIEW, ADMIN, review_audience=ReviewAudience.COMPLIANCE
        )
        assert can_submit_legal_review(context).reason == (
            "Legal review is not required for this request"
        )

    def test_legal_review_already_done(self, ctx):
        context = ctx(
            RequestStatus.IN_REVIEW, ADMIN, legal_review_status=LegalReviewStatus.COMPLETED
        )
        assert can_submit_legal_review(context).reason == (
            "Legal review has already been completed"
        )

    def test_compliance_review(self, ctx):
        both = {"review_audience": ReviewAudience.BOTH}
        assert can_submit_compliance_review(ctx(RequestStatus.IN_REVIEW, COMPLIANCE, **both))
        assert can_submit_compliance_review(ctx(RequestStatus.IN_REVIEW, ADMIN, **both))
        assert not can_submit_compliance_review(ctx(RequestStatus.IN_REVIEW, LEGAL_ADMIN, **both))
        assert not can_submit_compliance_review(ctx(RequestStatus.IN_REVIEW, COMPLIANCE))

    def test_compliance_review_already_done(self, ctx):
        context = ctx(
            RequestStatus.IN_REVIEW,
            COMPLIANCE,
            review_audience=ReviewAudience.COMPLIANCE,
            compliance_review_status=ComplianceReviewStatus.COMPLETED,
        )
        assert can_submit_compliance_review(context).reason == (
            "Compliance review has already been completed"
        )


class TestCloseoutAndForeside:

    def test_closeout(self, ctx):
        assert can_closeout_request(ctx(RequestStatus.CLOSEOUT, LEGAL_ADMIN))
        assert not can_closeout_request(ctx(RequestStatus.CLOSEOUT, SUBMITTER))
        assert not can_closeout_request(ctx(RequestStatus.COMPLETED, ADMIN))

    def test_foreside_documents(self, ctx):
        status = RequestStatus.AWAITING_FORESIDE_DOCUMENTS
        assert can_complete_foreside_documents(ctx(status))
        assert can_complete_foreside_documents(ctx(status, ADMIN, user_id="u-900"))
        assert not can_complete_foreside_documents(ctx(status, LEGAL_ADMIN, user_id="u-900"))
        assert not can_complete_foreside_documents(ctx(RequestStatus.CLOSEOUT, ADMIN))


class TestCancelHoldResume:

    def test_cancel(self, ctx):
        assert can_cancel_request(ctx())
        assert not can_cancel_request(ctx(RequestStatus.LEGAL_INTAKE))
        assert can_cancel_request(ctx(RequestStatus.ON_HOLD, LEGAL_ADMIN))
        assert can_cancel_request(ctx(RequestStatus.COMPLETED, ADMIN)).reason == (
            "Completed requests cannot be cancelled"
        )
        assert can_cancel_request(ctx(RequestStatus.CANCELLED, ADMIN)).reason == (
            "Request is already cancelled"
        )

    @pytest.mark.parametrize(
        "status",
        [RequestStatus.DRAFT, RequestStatus.COMPLETED, RequestStatus.CANCELLED, RequestStatus.ON_HOLD],
    )
    def test_hold_not_allowed(self, ctx, status):
        assert can_hold_request(ctx(status, ADMIN)).reason == (
            f"Cannot put request on hold when status is {status.value}"
        )

    def test_hold(self, ctx):
        assert can_hold_request(ctx(RequestStatus.CLOSEOUT, LEGAL_ADMIN))
        assert not can_hold_request(ctx(RequestStatus.CLOSEOUT, ATTORNEY))

    def test_resume(self, ctx):
        assert can_resume_request(
            ctx(RequestStatus.ON_HOLD, ADMIN, previous_status=RequestStatus.IN_REVIEW)
        )
        assert can_resume_request(ctx(RequestStatus.ON_HOLD, ADMIN)).reason == (
            "Cannot resume: no previous status recorded"
        )
        assert not can_resume_request(
            ctx(RequestStatus.ON_HOLD, SUBMITTER, previous_status=RequestStatus.IN_REVIEW)
        )
        assert not can_resume_request(ctx(RequestStatus.IN_REVIEW, ADMIN))


class TestEdit:

    def test_admin_edits_anything(self, ctx):
        assert can_edit_request(ctx(RequestStatus.COMPLETED, ADMIN))

    def test_legal_admin_not_terminal(self, ctx):
        assert can_edit_request(ctx(RequestStatus.CLOSEOUT, LEGAL_ADMIN))
        assert can_edit_request(ctx(RequestStatus.CANCELLED, LEGAL_ADMIN)).reason == (
            "Cannot edit Cancelled requests"
        )

    def test_owner_edits_draft_only(self, ctx):
        assert can_edit_request(ctx())
        assert not can_edit_request(ctx(RequestStatus.LEGAL_INTAKE))

    def test_reviewers_edit_in_review(self, ctx, attorney):
        assert can_edit_request(
            ctx(RequestStatus.IN_REVIEW, ATTORNEY, user_id="u-200", assigned_attorney=attorney)
        )
        assert not can_edit_request(ctx(RequestStatus.IN_REVIEW, ATTORNEY, user_id="u-201"))
        assert can_edit_request(ctx(RequestStatus.IN_REVIEW, COMPLIANCE, user_id="u-300"))
        assert not can_edit_request(ctx(RequestStatus.CLOSEOUT, COMPLIANCE, user_id="u-300"))


class TestAvailableActions:

    def test_owner_in_draft(self, ctx):
        actions = get_available_actions(ctx())
        assert actions.can_save_draft
        assert actions.can_submit
        assert actions.can_cancel
        assert actions.can_edit
        assert not actions.can_hold
        assert not actions.can_assign_attorney

    def test_legal_admin_at_intake(self, ctx):
        actions = get_available_actions(ctx(RequestStatus.LEGAL_INTAKE, LEGAL_ADMIN, "u-900"))
        assert actions.can_assign_attorney
        assert actions.can_send_to_committee
        assert actions.can_override_review_audience
        assert actions.can_hold
        assert actions.can_cancel
        assert not actions.can_submit
        assert not actions.can_resume


class TestReviewCompletion:

    def test_legal_only_pending(self, make_snapshot):
        result = check_review_completion(
            make_snapshot(legal_review_status=LegalReviewStatus.IN_PROGRESS)
        )
        assert not result.all_reviews_complete
        assert result.compliance_review_complete  # not required
        assert result.next_status is None

    def test_legal_only_done(self, make_snapshot):
        result = check_review_completion(make_snapshot(
            legal_review_status=LegalReviewStatus.COMPLETED,
            legal_review_outcome=ReviewOutcome.APPROVED,
        ))
        assert result.all_reviews_complete
        assert result.next_status is RequestStatus.CLOSEOUT

    def test_both_waits_for_second(self, make_snapshot):
        result = check_review_completion(make_snapshot(
            review_audience=ReviewAudience.BOTH,
            legal_review_status=LegalReviewStatus.COMPLETED,
            compliance_review_status=ComplianceReviewStatus.IN_PROGRESS,
        ))
        assert result.next_status is None

    def test_not_approved_completes(self, make_snapshot):
        result = check_review_completion(make_snapshot(
            review_audience=ReviewAudience.BOTH,
            legal_review_status=LegalReviewStatus.COMPLETED,
            legal_review_outcome=ReviewOutcome.APPROVED_WITH_COMMENTS,
            compliance_review_status=ComplianceReviewStatus.COMPLETED,
            compliance_review_outcome=ReviewOutcome.NOT_APPROVED,
        ))
        assert result.has_not_approved_outcome
        assert result.next_status is RequestStatus.COMPLETED

    @pytest.mark.parametrize("retail", [True, False])
    def test_closeout_routes_foreside_requests(self, make_snapshot, retail):
        snapshot = make_snapshot(is_foreside_review_required=True, is_retail_use=retail)
        assert determine_closeout_next_status(snapshot) is RequestStatus.AWAITING_FORESIDE_DOCUMENTS

    def test_closeout_completes_without_foreside(self, make_snapshot):
        assert determine_closeout_next_status(
            make_snapshot(is_foreside_review_required=False, is_retail_use=True)
        ) is RequestStatus.COMPLETED


class TestStatusTransitions:

    @pytest.mark.parametrize(
        "source, target",
        [
            (RequestStatus.DRAFT, RequestStatus.LEGAL_INTAKE),
            (RequestStatus.LEGAL_INTAKE, RequestStatus.ASSIGN_ATTORNEY),
            (RequestStatus.IN_REVIEW, RequestStatus.COMPLETED),
            (RequestStatus.CLOSEOUT, RequestStatus.AWAITING_FORESIDE_DOCUMENTS),
            (RequestStatus.ON_HOLD, RequestStatus.CLOSEOUT),
            (RequestStatus.DRAFT, RequestStatus.CANCELLED),
        ],
    )
    def test_allowed(self, source, target):
        assert is_valid_status_transition(source, target)

    @pytest.mark.parametrize(
        "source, target",
        [
            (RequestStatus.DRAFT, RequestStatus.IN_REVIEW),
            (RequestStatus.COMPLETED, RequestStatus.DRAFT),
            (RequestStatus.CANCELLED, RequestStatus.ON_HOLD),
            (RequestStatus.DRAFT, RequestStatus.ON_HOLD),
        ],
    )
    def test_rejected(self, source, target):
        check = is_valid_status_transition(source, target)
        assert check.reason == f"Cannot transition from {source.value} to {target.value}"


class TestPermissionLogging:

    def test_grant_and_denial(self, ctx, caplog):
        caplog.set_level(logging.INFO, logger="legal_kernel")
        context = ctx(user_id="u-555")
        log_permission_check("Submit", context, can_submit_request(ctx()))
        log_permission_check("Submit", context, can_submit_request(context))

        granted = [r for r in caplog.records if r.getMessage() == "permission_granted"]
        denied = [r for r in caplog.records if r.getMessage() == "permission_denied"]
        assert granted[0].levelno == logging.INFO
        assert denied[0].levelno == logging.WARNING
        assert denied[0].reason == "Only the request owner or admin can submit this request"
        assert denied[0].user_id == "u-555"
