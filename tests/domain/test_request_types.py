"""Tests for the request snapshot and its enumerations."""

from dataclasses import FrozenInstanceError

import pytest

from legal_kernel.domain.request import (
    STAGE_HOUR_FIELDS,
    ComplianceReviewStatus,
    Principal,
    RequestSnapshot,
    ReviewAudience,
    ReviewStage,
    StageOwner,
)


class TestReviewAudience:

    @pytest.mark.parametrize(
        "audience, legal, compliance",
        [
            (ReviewAudience.LEGAL, True, False),
            (ReviewAudience.COMPLIANCE, False, True),
            (ReviewAudience.BOTH, True, True),
        ],
    )
    def test_tracks(self, audience, legal, compliance):
        assert audience.includes_legal is legal
        assert audience.includes_compliance is compliance

    def test_string_values(self):
        assert ReviewAudience("Both") is ReviewAudience.BOTH


class TestRequestSnapshot:

    def test_frozen(self, make_snapshot):
        snap = make_snapshot()
        with pytest.raises(FrozenInstanceError):
            snap.status = "Completed"

    def test_negative_hours_rejected(self):
        with pytest.raises(ValueError, match="closeout_reviewer_hours"):
            RequestSnapshot(id=1, request_id="CRR-1", closeout_reviewer_hours=-0.1)

    def test_author_prefers_submitter(self, make_snapshot, submitter, attorney):
        assert make_snapshot(created_by=attorney).author == submitter
        assert make_snapshot(submitted_by=None, created_by=attorney).author == attorney
        assert make_snapshot(submitted_by=None, created_by=None).author is None

    def test_tracks_follow_audience(self, make_snapshot):
        snap = make_snapshot(review_audience=ReviewAudience.COMPLIANCE)
        assert not snap.has_legal_track
        assert snap.has_compliance_track

    def test_compliance_reviewed(self, make_snapshot):
        assert not make_snapshot().compliance_reviewed
        assert make_snapshot(
            compliance_review_status=ComplianceReviewStatus.COMPLETED
        ).compliance_reviewed

    def test_stage_hours(self, make_snapshot):
        snap = make_snapshot(legal_review_attorney_hours=4.0, legal_review_submitter_hours=2.0)
        assert snap.stage_hours(ReviewStage.LEGAL_REVIEW) == (4.0, 2.0)
        assert snap.stage_hours(ReviewStage.CLOSEOUT) == (0.0, 0.0)


class TestStageTables:

    def test_every_stage_has_counters(self):
        assert set(STAGE_HOUR_FIELDS) == set(ReviewStage)

    def test_counters_are_snapshot_fields(self):
        names = set(RequestSnapshot.__dataclass_fields__)
        for reviewer_field, submitter_field in STAGE_HOUR_FIELDS.values():
            assert reviewer_field in names
            assert submitter_field in names

    def test_only_submitter_is_submitter(self):
        assert StageOwner.SUBMITTER.is_submitter
        assert not StageOwner.ATTORNEY.is_submitter
        assert not StageOwner.REVIEWER.is_submitter


def test_principal_equality():
    assert Principal("u-1", "Pat") == Principal("u-1", "Pat")
