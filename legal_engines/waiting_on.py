"""
Module: legal_engines.waiting_on
Responsibility:
    Decide who a request is blocked on right now: a specific person, a
    role group, or nobody.  In Review requests are disambiguated across the
    legal and compliance tracks.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Exactly one of {user, group, none}: a WaitingOnInfo never carries
      both a principal and a group name (checked at construction).
    - First match wins in the In Review rules; the final fallback is a
      defined "In Review" none-result, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from legal_engines.tracer import traced_engine
from legal_kernel.domain.request import (
    AppRole,
    ComplianceReviewStatus,
    LegalReviewStatus,
    Principal,
    RequestSnapshot,
    RequestStatus,
)
from legal_kernel.logging_config import get_logger

logger = get_logger("engines.waiting_on")


class WaitingOnType(str, Enum):
    USER = "user"
    GROUP = "group"
    NONE = "none"


@dataclass(frozen=True)
class WaitingOnInfo:
    """
    The party a request is waiting on.

    Contract:
        ``USER`` results carry ``principal``; ``GROUP`` results carry
        ``group_name``; ``NONE`` results carry neither.
    Guarantees:
        ValueError at construction if the shape does not match the type.
    """

    type: WaitingOnType
    identifier: str
    display_name: str
    principal: Principal | None = None
    group_name: AppRole | None = None

    def __post_init__(self) -> None:
        if self.principal is not None and self.group_name is not None:
            raise ValueError("WaitingOnInfo cannot name both a principal and a group")
        if self.type is WaitingOnType.USER and self.principal is None:
            raise ValueError("USER waiting-on requires a principal")
        if self.type is WaitingOnType.GROUP and self.group_name is None:
            raise ValueError("GROUP waiting-on requires a group_name")
        if self.type is WaitingOnType.NONE and (self.principal or self.group_name):
            raise ValueError("NONE waiting-on cannot name a party")

    @classmethod
    def user(cls, principal: Principal) -> WaitingOnInfo:
        return cls(
            type=WaitingOnType.USER,
            identifier=principal.email or principal.id,
            display_name=principal.display_name or "Unknown",
            principal=principal,
        )

    @classmethod
    def group(cls, role: AppRole, display_name: str) -> WaitingOnInfo:
        return cls(
            type=WaitingOnType.GROUP,
            identifier=role.value,
            display_name=display_name,
            group_name=role,
        )

    @classmethod
    def none(cls, display_name: str) -> WaitingOnInfo:
        return cls(type=WaitingOnType.NONE, identifier="", display_name=display_name)


_LEGAL_ATTORNEY_STATES = frozenset({
    LegalReviewStatus.WAITING_ON_ATTORNEY,
    LegalReviewStatus.IN_PROGRESS,
    LegalReviewStatus.NOT_STARTED,
})

_COMPLIANCE_REVIEWER_STATES = frozenset({
    ComplianceReviewStatus.WAITING_ON_COMPLIANCE,
    ComplianceReviewStatus.IN_PROGRESS,
    ComplianceReviewStatus.NOT_STARTED,
})


def _user_or_unknown(principal: Principal | None) -> WaitingOnInfo:
    if principal is None:
        return WaitingOnInfo.none("Unknown")
    return WaitingOnInfo.user(principal)


def _waiting_on_in_review(snapshot: RequestSnapshot) -> WaitingOnInfo:
    submitter = snapshot.author
    waiting_on_submitter = (
        snapshot.legal_review_status is LegalReviewStatus.WAITING_ON_SUBMITTER
        or snapshot.compliance_review_status is ComplianceReviewStatus.WAITING_ON_SUBMITTER
    )
    if waiting_on_submitter and submitter is not None:
        return WaitingOnInfo.user(submitter)

    if snapshot.has_legal_track and snapshot.legal_review_status in _LEGAL_ATTORNEY_STATES:
        if snapshot.assigned_attorney is not None:
            return WaitingOnInfo.user(snapshot.assigned_attorney)
        return WaitingOnInfo.group(AppRole.LEGAL_ADMIN, "Legal Admin (to assign attorney)")

    if (
        snapshot.has_compliance_track
        and snapshot.compliance_review_status in _COMPLIANCE_REVIEWER_STATES
    ):
        return WaitingOnInfo.group(AppRole.COMPLIANCE_USERS, "Compliance Users")

    return WaitingOnInfo.none("In Review")


@traced_engine("waiting_on", "1.0")
def determine_waiting_on(snapshot: RequestSnapshot) -> WaitingOnInfo:
    """Resolve the blocking party for *snapshot*."""
    status = snapshot.status

    if status is RequestStatus.CANCELLED:
        return WaitingOnInfo.none("Request cancelled")
    if status is RequestStatus.ON_HOLD:
        if snapshot.on_hold_by is not None:
            return WaitingOnInfo.user(snapshot.on_hold_by)
        return WaitingOnInfo.none("On hold")
    if status is RequestStatus.COMPLETED:
        return WaitingOnInfo.none("Request completed")

    if status in (RequestStatus.DRAFT, RequestStatus.CLOSEOUT):
        return _user_or_unknown(snapshot.author)
    if status is RequestStatus.LEGAL_INTAKE:
        return WaitingOnInfo.group(AppRole.LEGAL_ADMIN, "Legal Admin")
    if status is RequestStatus.ASSIGN_ATTORNEY:
        return WaitingOnInfo.group(AppRole.ATTORNEY_ASSIGNER, "Attorney Assignment Committee")
    if status is RequestStatus.IN_REVIEW:
        info = _waiting_on_in_review(snapshot)
        if info.type is WaitingOnType.NONE:
            logger.debug(
                "waiting_on_in_review_fallback",
                extra={
                    "request_id": snapshot.request_id,
                    "legal_review_status": snapshot.legal_review_status,
                    "compliance_review_status": snapshot.compliance_review_status,
                },
            )
        return info

    return WaitingOnInfo.none("Unknown")


def get_waiting_on_display_text(info: WaitingOnInfo) -> str:
    if info.type is WaitingOnType.NONE:
        return info.display_name
    return f"Waiting on: {info.display_name}"


_ACTION_TEXT: dict[RequestStatus, str] = {
    RequestStatus.DRAFT: "Complete form and submit request",
    RequestStatus.LEGAL_INTAKE: "Review request and assign attorney or send to committee",
    RequestStatus.ASSIGN_ATTORNEY: "Assign attorney to request",
    RequestStatus.IN_REVIEW: "Complete review and provide feedback",
    RequestStatus.CLOSEOUT: "Enter tracking ID and close out request",
    RequestStatus.ON_HOLD: "Resume request when ready",
}


def get_action_text(info: WaitingOnInfo, status: RequestStatus) -> str:
    """What the waited-on party needs to do next."""
    if info.type is WaitingOnType.NONE:
        if status is RequestStatus.COMPLETED:
            return "Request has been completed"
        if status is RequestStatus.CANCELLED:
            return "Request has been cancelled"
        return "No action required"
    return _ACTION_TEXT.get(status, "Action required")
