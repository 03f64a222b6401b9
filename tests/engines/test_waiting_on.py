"""
Tests for the Waiting-On Resolver.

Covers:
- Per-status resolution
- In Review disambiguation across legal and compliance tracks
- WaitingOnInfo shape checks
- Display and action text
"""

import pytest

from legal_engines.waiting_on import (
    WaitingOnInfo,
    WaitingOnType,
    determine_waiting_on,
    get_action_text,
    get_waiting_on_display_text,
)
from legal_kernel.domain.request import (
    AppRole,
    ComplianceReviewStatus,
    LegalReviewStatus,
    Principal,
    RequestStatus,
    ReviewAudience,
)


class TestSimpleStatuses:

    def test_draft_waits_on_author(self, make_snapshot, submitter):
        info = determine_waiting_on(make_snapshot())
        assert info.type is WaitingOnType.USER
        assert info.principal == submitter
        assert info.identifier == "sam@example.com"
        assert info.display_name == "Sam Submitter"

    def test_author_falls_back_to_creator(self, make_snapshot, submitter):
        info = determine_waiting_on(make_snapshot(submitted_by=None))
        assert info.principal == submitter

    def test_draft_without_author_is_unknown(self, make_snapshot):
        info = determine_waiting_on(make_snapshot(created_by=None, submitted_by=None))
        assert info.type is WaitingOnType.NONE
        assert info.display_name == "Unknown"

    def test_closeout_waits_on_author(self, make_snapshot, submitter):
        info = determine_waiting_on(make_snapshot(status=RequestStatus.CLOSEOUT))
        assert info.principal == submitter

    def test_legal_intake_waits_on_legal_admin(self, make_snapshot):
        info = determine_waiting_on(make_snapshot(status=RequestStatus.LEGAL_INTAKE))
        assert info.type is WaitingOnType.GROUP
        assert info.group_name is AppRole.LEGAL_ADMIN
        assert info.display_name == "Legal Admin"

    def test_assign_attorney_waits_on_committee(self, make_snapshot):
        info = determine_waiting_on(make_snapshot(status=RequestStatus.ASSIGN_ATTORNEY))
        assert info.group_name is AppRole.ATTORNEY_ASSIGNER
        assert info.display_name == "Attorney Assignment Committee"

    def test_on_hold_waits_on_holder(self, make_snapshot, admin_user):
        info = determine_waiting_on(
            make_snapshot(status=RequestStatus.ON_HOLD, on_hold_by=admin_user)
        )
        assert info.principal == admin_user

    def test_on_hold_without_holder(self, make_snapshot):
        info = determine_waiting_on(make_snapshot(status=RequestStatus.ON_HOLD))
        assert info == WaitingOnInfo.none("On hold")

    @pytest.mark.parametrize(
        "status, text",
        [
            (RequestStatus.CANCELLED, "Request cancelled"),
            (RequestStatus.COMPLETED, "Request completed"),
            (RequestStatus.AWAITING_FORESIDE_DOCUMENTS, "Unknown"),
        ],
    )
    def test_none_results(self, make_snapshot, status, text):
        info = determine_waiting_on(make_snapshot(status=status))
        assert info.type is WaitingOnType.NONE
        assert info.display_name == text


class TestInReview:

    def test_waiting_on_submitter_wins(self, make_snapshot, submitter, attorney):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            review_audience=ReviewAudience.BOTH,
            legal_review_status=LegalReviewStatus.IN_PROGRESS,
            compliance_review_status=ComplianceReviewStatus.WAITING_ON_SUBMITTER,
            assigned_attorney=attorney,
        )
        assert determine_waiting_on(snap).principal == submitter

    def test_assigned_attorney(self, make_snapshot, attorney):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            legal_review_status=LegalReviewStatus.IN_PROGRESS,
            assigned_attorney=attorney,
        )
        assert determine_waiting_on(snap).principal == attorney

    def test_no_attorney_goes_to_legal_admin(self, make_snapshot):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            legal_review_status=LegalReviewStatus.NOT_STARTED,
        )
        info = determine_waiting_on(snap)
        assert info.group_name is AppRole.LEGAL_ADMIN
        assert info.display_name == "Legal Admin (to assign attorney)"

    def test_compliance_track(self, make_snapshot):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            review_audience=ReviewAudience.COMPLIANCE,
            compliance_review_status=ComplianceReviewStatus.IN_PROGRESS,
        )
        info = determine_waiting_on(snap)
        assert info.group_name is AppRole.COMPLIANCE_USERS
        assert info.display_name == "Compliance Users"

    def test_legal_done_compliance_pending(self, make_snapshot):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            review_audience=ReviewAudience.BOTH,
            legal_review_status=LegalReviewStatus.COMPLETED,
            compliance_review_status=ComplianceReviewStatus.WAITING_ON_COMPLIANCE,
        )
        assert determine_waiting_on(snap).group_name is AppRole.COMPLIANCE_USERS

    def test_legal_status_ignored_off_track(self, make_snapshot, attorney):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            review_audience=ReviewAudience.COMPLIANCE,
            legal_review_status=LegalReviewStatus.IN_PROGRESS,
            assigned_attorney=attorney,
            compliance_review_status=ComplianceReviewStatus.NOT_STARTED,
        )
        assert determine_waiting_on(snap).group_name is AppRole.COMPLIANCE_USERS

    def test_fallback_is_in_review(self, make_snapshot):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            legal_review_status=LegalReviewStatus.COMPLETED,
        )
        assert determine_waiting_on(snap) == WaitingOnInfo.none("In Review")

    def test_waiting_on_submitter_without_author(self, make_snapshot, attorney):
        snap = make_snapshot(
            status=RequestStatus.IN_REVIEW,
            created_by=None,
            submitted_by=None,
            legal_review_status=LegalReviewStatus.WAITING_ON_SUBMITTER,
            assigned_attorney=attorney,
        )
        assert determine_waiting_on(snap) == WaitingOnInfo.none("In Review")


class TestWaitingOnInfoShape:

    def test_user_identifier_falls_back_to_id(self):
        info = WaitingOnInfo.user(Principal(id="u-1", display_name="Pat"))
        assert info.identifier == "u-1"

    def test_user_requires_principal(self):
        with pytest.raises(ValueError):
            WaitingOnInfo(type=WaitingOnType.USER, identifier="x", display_name="x")

    def test_group_requires_group_name(self):
        with pytest.raises(ValueError):
            WaitingOnInfo(type=WaitingOnType.GROUP, identifier="x", display_name="x")

    def test_cannot_name_both(self, submitter):
        with pytest.raises(ValueError):
            WaitingOnInfo(
                type=WaitingOnType.USER,
                identifier="x",
                display_name="x",
                principal=submitter,
                group_name=AppRole.ADMIN,
            )

    def test_none_cannot_name_party(self, submitter):
        with pytest.raises(ValueError):
            WaitingOnInfo(
                type=WaitingOnType.NONE, identifier="", display_name="x", principal=submitter
            )


class TestDisplayText:

    def test_display_text(self, submitter):
        assert get_waiting_on_display_text(WaitingOnInfo.user(submitter)) == "Waiting on: Sam Submitter"
        assert get_waiting_on_display_text(WaitingOnInfo.none("Request completed")) == "Request completed"

    def test_action_text_for_party(self, submitter):
        info = WaitingOnInfo.user(submitter)
        assert get_action_text(info, RequestStatus.DRAFT) == "Complete form and submit request"
        assert get_action_text(info, RequestStatus.CLOSEOUT) == "Enter tracking ID and close out request"
        assert get_action_text(info, RequestStatus.AWAITING_FORESIDE_DOCUMENTS) == "Action required"

    def test_action_text_for_nobody(self):
        none = WaitingOnInfo.none("x")
        assert get_action_text(none, RequestStatus.COMPLETED) == "Request has been completed"
        assert get_action_text(none, RequestStatus.CANCELLED) == "Request has been cancelled"
        assert get_action_text(none, RequestStatus.IN_REVIEW) == "No action required"
