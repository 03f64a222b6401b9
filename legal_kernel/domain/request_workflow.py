"""
Legal request workflow (``legal_kernel.domain.request_workflow``).

Responsibility
--------------
Declares the fixed state graph of a legal request.  Guards name the
preconditions checked by ``legal_engines.transition_rules`` and
``legal_engines.permissions``; this module only declares them.

Architecture position
---------------------
**Kernel domain layer** -- declarative workflow definition built from the
canonical Guard, Transition, Workflow types.

Invariants enforced
-------------------
* Completed and Cancelled are terminal.
* On Hold returns only to the status it was entered from (Resume is
  guarded by ``previous_status``).
* Cancel is reachable from every non-terminal state.

Audit relevance
---------------
The workflow definition is logged at module-load time with state and
transition counts.
"""

from legal_kernel.domain.request import RequestStatus, WorkflowAction
from legal_kernel.domain.workflow import Guard, Transition, Workflow
from legal_kernel.logging_config import get_logger

logger = get_logger("domain.request_workflow")

S = RequestStatus
A = WorkflowAction


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

OWNER_OR_ADMIN = Guard(
    name="owner_or_admin",
    description="Caller authored the request or holds the Admin role",
)

ATTORNEY_SELECTED = Guard(
    name="attorney_selected",
    description="An attorney is selected unless the audience is Compliance only",
)

REVIEWS_COMPLETE = Guard(
    name="reviews_complete",
    description="Every required review track has a recorded outcome",
)

REVIEW_NOT_APPROVED = Guard(
    name="review_not_approved",
    description="A required review completed with outcome Not Approved",
)

FORESIDE_REVIEW_REQUIRED = Guard(
    name="foreside_review_required",
    description="Compliance flagged the request as requiring Foreside review",
)

PREVIOUS_STATUS_MATCHES = Guard(
    name="previous_status_matches",
    description="Resume target equals the recorded previous status",
)

ADMIN_OR_DRAFT_OWNER = Guard(
    name="admin_or_draft_owner",
    description="Admin or Legal Admin, or the owner while the request is a draft",
)


# -----------------------------------------------------------------------------
# Request Workflow
# -----------------------------------------------------------------------------

_HOLDABLE = (
    S.LEGAL_INTAKE,
    S.ASSIGN_ATTORNEY,
    S.IN_REVIEW,
    S.CLOSEOUT,
    S.AWAITING_FORESIDE_DOCUMENTS,
)
_CANCELLABLE = (S.DRAFT, S.ON_HOLD) + _HOLDABLE

REQUEST_WORKFLOW = Workflow(
    name="legal_request",
    description="Legal / compliance review lifecycle of a request",
    initial_state=S.DRAFT.value,
    states=tuple(s.value for s in RequestStatus),
    transitions=(
        Transition(S.DRAFT.value, S.LEGAL_INTAKE.value, A.SUBMIT.value, guard=OWNER_OR_ADMIN),
        Transition(S.LEGAL_INTAKE.value, S.IN_REVIEW.value, A.ASSIGN_ATTORNEY.value, guard=ATTORNEY_SELECTED),
        Transition(S.LEGAL_INTAKE.value, S.ASSIGN_ATTORNEY.value, A.SEND_TO_COMMITTEE.value),
        Transition(S.ASSIGN_ATTORNEY.value, S.IN_REVIEW.value, A.COMMITTEE_ASSIGN_ATTORNEY.value, guard=ATTORNEY_SELECTED),
        Transition(S.IN_REVIEW.value, S.CLOSEOUT.value, A.SUBMIT_LEGAL_REVIEW.value, guard=REVIEWS_COMPLETE),
        Transition(S.IN_REVIEW.value, S.CLOSEOUT.value, A.SUBMIT_COMPLIANCE_REVIEW.value, guard=REVIEWS_COMPLETE),
        Transition(S.IN_REVIEW.value, S.COMPLETED.value, A.SUBMIT_LEGAL_REVIEW.value, guard=REVIEW_NOT_APPROVED),
        Transition(S.IN_REVIEW.value, S.COMPLETED.value, A.SUBMIT_COMPLIANCE_REVIEW.value, guard=REVIEW_NOT_APPROVED),
        Transition(S.CLOSEOUT.value, S.AWAITING_FORESIDE_DOCUMENTS.value, A.CLOSEOUT.value, guard=FORESIDE_REVIEW_REQUIRED),
        Transition(S.CLOSEOUT.value, S.COMPLETED.value, A.CLOSEOUT.value),
        Transition(S.AWAITING_FORESIDE_DOCUMENTS.value, S.COMPLETED.value, A.COMPLETE_FORESIDE_DOCUMENTS.value, guard=OWNER_OR_ADMIN),
    )
    + tuple(
        Transition(s.value, S.ON_HOLD.value, A.HOLD.value) for s in _HOLDABLE
    )
    + tuple(
        Transition(S.ON_HOLD.value, s.value, A.RESUME.value, guard=PREVIOUS_STATUS_MATCHES)
        for s in _HOLDABLE
    )
    + tuple(
        Transition(s.value, S.CANCELLED.value, A.CANCEL.value, guard=ADMIN_OR_DRAFT_OWNER)
        for s in _CANCELLABLE
    ),
    terminal_states=(S.COMPLETED.value, S.CANCELLED.value),
)

logger.info(
    "request_workflow_defined",
    extra={
        "workflow_name": REQUEST_WORKFLOW.name,
        "state_count": len(REQUEST_WORKFLOW.states),
        "transition_count": len(REQUEST_WORKFLOW.transitions),
    },
)
