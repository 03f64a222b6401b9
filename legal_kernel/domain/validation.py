"""
Transition validation results (``legal_kernel.domain.validation``).

Responsibility:
    Value objects returned by the transition rule set: field-linked issues,
    the aggregate check result, and the configurable field length limits.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - Rules never raise for control flow; they return a TransitionCheck.
    - Status mismatches and missing capabilities are precondition issues;
      everything else is a field issue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from legal_kernel.exceptions import PreconditionFailedError, ValidationFailedError


class IssueCode(str, Enum):
    REQUIRED = "REQUIRED"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    INVALID_CHOICE = "INVALID_CHOICE"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_STATUS = "INVALID_STATUS"
    NOT_PERMITTED = "NOT_PERMITTED"


PRECONDITION_CODES: frozenset[IssueCode] = frozenset(
    {IssueCode.INVALID_STATUS, IssueCode.NOT_PERMITTED}
)


@dataclass(frozen=True)
class FieldIssue:
    """
    A single validation issue linked to a payload field.

    Contract:
        Carries the field path, a user-facing message, and a machine-readable
        code.  Status precondition issues use field ``current_status``.

    Non-goals:
        Does NOT raise -- it IS the error representation.
    """

    field: str
    message: str
    code: IssueCode

    @property
    def is_precondition(self) -> bool:
        return self.code in PRECONDITION_CODES

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "code": self.code.value}


@dataclass(frozen=True)
class TransitionCheck:
    """
    Result of validating one requested transition.

    Guarantees:
        - issues is always a tuple (never None)
        - bool(check) == check.is_valid
    """

    action: str
    current_status: str
    issues: tuple[FieldIssue, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def precondition_issues(self) -> tuple[FieldIssue, ...]:
        return tuple(i for i in self.issues if i.is_precondition)

    @property
    def field_issues(self) -> tuple[FieldIssue, ...]:
        return tuple(i for i in self.issues if not i.is_precondition)

    def issues_for(self, field_name: str) -> tuple[FieldIssue, ...]:
        return tuple(i for i in self.issues if i.field == field_name)

    def raise_for_failure(self) -> None:
        """Raise PreconditionFailedError or ValidationFailedError on failure."""
        if self.is_valid:
            return
        preconditions = self.precondition_issues
        if preconditions:
            raise PreconditionFailedError(
                action=self.action,
                current_status=self.current_status,
                reason=preconditions[0].message,
            )
        raise ValidationFailedError(self.action, list(self.issues))

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass(frozen=True)
class FieldLimits:
    """Maximum / minimum lengths for free-text transition fields."""

    notes: int = 1000
    reason: int = 1000
    status_notes: int = 1000
    review_notes: int = 2000
    closeout_notes: int = 2000
    tracking_id: int = 50
    min_review_notes: int = 10
    min_reason: int = 10

    def __post_init__(self) -> None:
        for name, value in vars(self).items():
            if value < 0:
                raise ValueError(f"{name} cannot be negative")


DEFAULT_FIELD_LIMITS = FieldLimits()
