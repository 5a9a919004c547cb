"""Default claim ACL.

Implements the ``allowEdit`` collaborator with ownership and manager
membership. Servers with richer trust models plug in their own
:class:`~claimcore.interfaces.ClaimAccessPolicy`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..interfaces import ClaimAccessPolicy, Subject
from ..permissions import Capabilities

if TYPE_CHECKING:
    from .claim import Claim

WILDERNESS_DENIED = "Only administrators may change the wilderness."
ADMIN_CLAIM_DENIED = "You don't have permission to edit administrative claims."
CLAIM_DENIED = "You don't have permission to edit this claim."


class OwnerAccessPolicy(ClaimAccessPolicy):
    """Owner and managers may edit; administrators may edit everything.

    Checks in order:
    1. ``IGNORE_CLAIMS`` — allowed everywhere.
    2. Wilderness — requires ``COMMAND_ADMIN_CLAIMS``.
    3. Owner of the claim (through the topmost ancestor).
    4. Manager of the claim, or of an ancestor reached through
       ``inherit_parent`` links.
    5. Admin claims (and their subdivisions) — ``COMMAND_ADMIN_CLAIMS``.
    """

    def allow_edit(self, subject: Subject, claim: "Claim") -> Optional[str]:
        if subject.has_capability(Capabilities.IGNORE_CLAIMS):
            return None

        if claim.is_wilderness:
            if subject.has_capability(Capabilities.COMMAND_ADMIN_CLAIMS):
                return None
            return WILDERNESS_DENIED

        subject_id = subject.unique_id
        if subject_id is not None:
            if claim.owner_id is not None and subject_id == claim.owner_id:
                return None
            if self._is_manager(subject_id, claim):
                return None

        if claim.top_level_claim().is_admin:
            if subject.has_capability(Capabilities.COMMAND_ADMIN_CLAIMS):
                return None
            return ADMIN_CLAIM_DENIED

        return CLAIM_DENIED

    @staticmethod
    def _is_manager(subject_id, claim: "Claim") -> bool:
        current: Optional["Claim"] = claim
        while current is not None:
            if subject_id in current.data.managers:
                return True
            if not current.inherit_parent:
                return False
            current = current.parent
        return False


DEFAULT_ACCESS_POLICY = OwnerAccessPolicy()


__all__ = [
    "ADMIN_CLAIM_DENIED",
    "CLAIM_DENIED",
    "DEFAULT_ACCESS_POLICY",
    "OwnerAccessPolicy",
    "WILDERNESS_DENIED",
]
