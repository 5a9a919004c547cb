"""Capability registry and flag-edit access checks for claimcore.

Defines:
- Capabilities: All capability string constants
- SubjectRole: Role tiers (player/moderator/admin)
- CAPABILITY_INHERITANCE: Parent → children relationships
- ROLE_PROFILES: Role → default capability sets
- expand_capabilities(): Resolve inherited capabilities
- can_edit_flag(): The per-layer flag edit check
"""

from .access import (
    DEFAULTS_DENIED,
    INFO_DENIED,
    OVERRIDE_DENIED,
    EditDecision,
    can_edit_flag,
    can_transfer_claim,
    can_view_claim_info,
    require_flag_edit,
)
from .constants import Capabilities, SubjectRole
from .inheritance import (
    CAPABILITY_INHERITANCE,
    ROLE_PROFILES,
    expand_capabilities,
)

__all__ = [
    "CAPABILITY_INHERITANCE",
    "DEFAULTS_DENIED",
    "INFO_DENIED",
    "OVERRIDE_DENIED",
    "ROLE_PROFILES",
    "Capabilities",
    "EditDecision",
    "SubjectRole",
    "can_edit_flag",
    "can_transfer_claim",
    "can_view_claim_info",
    "expand_capabilities",
    "require_flag_edit",
]
