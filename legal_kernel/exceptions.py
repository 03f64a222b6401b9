"""
Typed Exception Hierarchy for the Legal Request Workflow Core.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LegalWorkflowError:

    LegalWorkflowError (base)
    |
    +-- BusinessCalendarError
    |   +-- InvalidConfigError
    |   +-- RangeExceededError
    |
    +-- TransitionError
        +-- ValidationFailedError
        +-- PreconditionFailedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Calendar        | INVALID_CONFIG              | Working-hours config out of range
                | RANGE_EXCEEDED              | Interval spans more than 365 day-steps
----------------|-----------------------------|-----------------------------------------
Transition      | VALIDATION_FAILED           | Payload field issues (recoverable)
                | PRECONDITION_FAILED         | Wrong status or missing capability
----------------|-----------------------------|-----------------------------------------

===============================================================================
HANDLING PATTERNS
===============================================================================

1. TRANSITION RULES RETURN RESULTS, NOT EXCEPTIONS:

    check = validate_transition(WorkflowAction.HOLD, payload, context)
    if not check:
        return {"errors": [issue.to_dict() for issue in check.issues]}

2. ORCHESTRATORS THAT PREFER EXCEPTIONS:

    try:
        validate_transition(action, payload, context).raise_for_failure()
    except PreconditionFailedError as e:
        api_response(code=e.code, status=e.current_status, reason=e.reason)
    except ValidationFailedError as e:
        api_response(code=e.code, issues=e.issues)

3. CALENDAR ERRORS ARE PROGRAMMING OR CONFIGURATION FAULTS:

    InvalidConfigError and RangeExceededError are not shown to end users;
    they indicate a bad configuration set or a corrupt timestamp.

===============================================================================
"""

from __future__ import annotations

from typing import Any


class LegalWorkflowError(Exception):
    """
    Base exception for all legal workflow errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "LEGAL_WORKFLOW_ERROR"


# Business calendar exceptions


class BusinessCalendarError(LegalWorkflowError):
    """Base exception for business-hours calendar errors."""

    code: str = "BUSINESS_CALENDAR_ERROR"


class InvalidConfigError(BusinessCalendarError):
    """Working-hours configuration is not usable."""

    code: str = "INVALID_CONFIG"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid working hours config {field}={value!r}: {reason}")


class RangeExceededError(BusinessCalendarError):
    """Business-hours walk exceeded its iteration cap."""

    code: str = "RANGE_EXCEEDED"

    def __init__(self, start: Any, end: Any, max_iterations: int):
        self.start = start
        self.end = end
        self.max_iterations = max_iterations
        super().__init__(
            f"Business hours range {start} -> {end} exceeds "
            f"{max_iterations} day iterations"
        )


# Transition exceptions


class TransitionError(LegalWorkflowError):
    """Base exception for workflow transition errors."""

    code: str = "TRANSITION_ERROR"


class ValidationFailedError(TransitionError):
    """Transition payload failed field validation."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, action: str, issues: list[Any]):
        self.action = action
        self.issues = issues
        summary = "; ".join(f"{i.field}: {i.message}" for i in issues)
        super().__init__(f"Validation failed for {action}: {summary}")


class PreconditionFailedError(TransitionError):
    """Transition is not allowed from the current status or for the caller."""

    code: str = "PRECONDITION_FAILED"

    def __init__(self, action: str, current_status: str, reason: str):
        self.action = action
        self.current_status = current_status
        self.reason = reason
        super().__init__(
            f"Cannot perform {action} from status {current_status}: {reason}"
        )
