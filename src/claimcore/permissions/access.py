"""Access checks for editing claim flags and viewing claims.

Answers whether a subject may mutate a claim's flags at a given layer,
independent of the flag values themselves. Used by the flag resolver
before any store write and by listings to mark values as editable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..exceptions import PermissionDeniedError
from ..interfaces import Subject
from ..layers import FlagLayer
from .constants import Capabilities

if TYPE_CHECKING:
    from ..claims.claim import Claim

logger = logging.getLogger(__name__)

DEFAULTS_DENIED = "You do not have permission to change flag defaults."
OVERRIDE_DENIED = "This flag has been forced by an admin and cannot be changed."
INFO_DENIED = "You do not have permission to view information in this claim."


@dataclass(frozen=True)
class EditDecision:
    """Result from an edit check (allowed, or denied with a reason)."""

    allowed: bool = True
    reason: str = ""

    @property
    def denied(self) -> bool:
        return not self.allowed


ALLOWED = EditDecision()


def can_edit_flag(subject: Subject, claim: "Claim", layer: FlagLayer) -> EditDecision:
    """Check whether ``subject`` may change ``claim``'s flags at ``layer``.

    Checks in order:
    1. DEFAULT requires ``MANAGE_FLAG_DEFAULTS``.
    2. OVERRIDE requires ``MANAGE_FLAG_OVERRIDES``.
    3. Player subjects must also pass the claim's own ACL
       (``claim.allow_edit``); console subjects skip it.

    The first failing check supplies the denial reason.

    Example::

        decision = can_edit_flag(player, claim, FlagLayer.CLAIM)
        if decision.denied:
            player.send(decision.reason)
    """
    if layer is FlagLayer.DEFAULT and not subject.has_capability(Capabilities.MANAGE_FLAG_DEFAULTS):
        return EditDecision(False, DEFAULTS_DENIED)

    if layer is FlagLayer.OVERRIDE and not subject.has_capability(Capabilities.MANAGE_FLAG_OVERRIDES):
        return EditDecision(False, OVERRIDE_DENIED)

    if subject.is_player:
        reason = claim.allow_edit(subject)
        if reason is not None:
            return EditDecision(False, reason)

    return ALLOWED


def require_flag_edit(subject: Subject, claim: "Claim", layer: FlagLayer) -> None:
    """Raise :class:`PermissionDeniedError` unless :func:`can_edit_flag` allows."""
    decision = can_edit_flag(subject, claim, layer)
    if decision.denied:
        logger.info(
            "Flag edit denied for %s on claim %s (%s): %s",
            subject.name,
            claim.id,
            layer.value,
            decision.reason,
        )
        raise PermissionDeniedError(decision.reason, claim_id=str(claim.id), layer=layer.value)


def can_view_claim_info(subject: Subject, claim: "Claim") -> bool:
    """Owner, members, console and ``COMMAND_CLAIM_INFO_OTHERS`` may view."""
    if not subject.is_player:
        return True
    if subject.unique_id is not None:
        if subject.unique_id == claim.owner_id or subject.unique_id in claim.data.members():
            return True
    return subject.has_capability(Capabilities.COMMAND_CLAIM_INFO_OTHERS)


def can_transfer_claim(subject: Subject, claim: "Claim") -> EditDecision:
    """Admin claims may only be transferred with ``COMMAND_ADMIN_CLAIMS``."""
    if claim.is_admin and not subject.has_capability(Capabilities.COMMAND_ADMIN_CLAIMS):
        return EditDecision(False, "You don't have permission to transfer administrative claims.")
    return ALLOWED


__all__ = [
    "ALLOWED",
    "DEFAULTS_DENIED",
    "INFO_DENIED",
    "OVERRIDE_DENIED",
    "EditDecision",
    "can_edit_flag",
    "can_transfer_claim",
    "can_view_claim_info",
    "require_flag_edit",
]
