"""Capability constants for the claim engine.

Provides:
- ``Capabilities`` — capability strings checked through
  ``Subject.has_capability`` (dotted ``griefprevention.*`` format).
- ``SubjectRole`` — role tiers mapped to default capability sets.
"""

from __future__ import annotations


class Capabilities:
    """Canonical capability constants.

    Format: ``griefprevention.{area}.{action}``

    Usage::

        subject.has_capability(Capabilities.MANAGE_FLAG_DEFAULTS)
    """

    # ── Commands ────────────────────────────────────────
    COMMAND_LIST_CLAIM_FLAGS = "griefprevention.command.claim.flag"
    COMMAND_CLAIM_INFO = "griefprevention.command.claim.info"
    COMMAND_CLAIM_INFO_OTHERS = "griefprevention.command.claim.info.others"
    COMMAND_TRANSFER_CLAIM = "griefprevention.command.claim.transfer"
    COMMAND_ADMIN_CLAIMS = "griefprevention.command.admin.claims"

    # ── Flag management ─────────────────────────────────
    MANAGE_FLAG_DEFAULTS = "griefprevention.manage.flag-defaults"
    MANAGE_FLAG_OVERRIDES = "griefprevention.manage.flag-overrides"

    # ── Claims ──────────────────────────────────────────
    IGNORE_CLAIMS = "griefprevention.admin.ignore-claims"

    # ── Wildcards ───────────────────────────────────────
    USER_ALL = "griefprevention.user.*"
    MODERATOR_ALL = "griefprevention.moderator.*"
    ADMIN_ALL = "griefprevention.admin.*"


class SubjectRole:
    """Role tiers.

    Not a capability — a label that maps to a default set of
    capabilities via :data:`ROLE_PROFILES`.
    """

    PLAYER = "player"
    MODERATOR = "moderator"
    ADMIN = "admin"

    ALL = frozenset({"player", "moderator", "admin"})


__all__ = [
    "Capabilities",
    "SubjectRole",
]
