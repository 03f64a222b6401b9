"""
Caller capability flags (``legal_kernel.domain.capabilities``).

Role membership is resolved by an external directory layer and handed to
the core as plain booleans.  The core never performs a directory lookup.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from legal_kernel.domain.request import AppRole, RequestSnapshot, RequestStatus

_ROLE_VALUES = frozenset(r.value for r in AppRole)


@dataclass(frozen=True)
class Capabilities:
    """Precomputed role flags for the acting user."""

    is_admin: bool = False
    is_legal_admin: bool = False
    is_attorney_assigner: bool = False
    is_attorney: bool = False
    is_compliance_user: bool = False
    is_submitter: bool = False

    @property
    def has_admin_override(self) -> bool:
        """Admin and Legal Admin bypass ownership checks."""
        return self.is_admin or self.is_legal_admin

    @classmethod
    def from_roles(cls, roles: Iterable[AppRole | str]) -> Capabilities:
        """Build flags from directory group names."""
        names = {AppRole(r) for r in roles if r in _ROLE_VALUES}
        return cls(
            is_admin=AppRole.ADMIN in names,
            is_legal_admin=AppRole.LEGAL_ADMIN in names,
            is_attorney_assigner=AppRole.ATTORNEY_ASSIGNER in names,
            is_attorney=AppRole.ATTORNEYS in names,
            is_compliance_user=AppRole.COMPLIANCE_USERS in names,
            is_submitter=AppRole.SUBMITTERS in names,
        )


@dataclass(frozen=True)
class ActionContext:
    """
    Everything a rule needs to know about the acting user and the request.

    Contract:
        ``current_user_id`` is compared against principal ids on the
        snapshot; it is never resolved against a directory.
    """

    snapshot: RequestSnapshot
    capabilities: Capabilities = Capabilities()
    current_user_id: str | None = None

    @property
    def current_status(self) -> RequestStatus:
        return self.snapshot.status

    @property
    def is_owner(self) -> bool:
        if self.current_user_id is None:
            return False
        owners = (self.snapshot.created_by, self.snapshot.submitted_by)
        return any(p is not None and p.id == self.current_user_id for p in owners)

    @property
    def is_assigned_attorney(self) -> bool:
        attorney = self.snapshot.assigned_attorney
        return (
            attorney is not None
            and self.current_user_id is not None
            and attorney.id == self.current_user_id
        )
