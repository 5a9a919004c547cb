"""Capability inheritance, expansion, and role profiles.

Provides:
- ``CAPABILITY_INHERITANCE`` — parent → children relationships.
- ``expand_capabilities()`` — resolve inherited capabilities.
- ``ROLE_PROFILES`` — role tier → default capability sets.
"""

from __future__ import annotations

from .constants import Capabilities, SubjectRole

# ── Capability Inheritance ──────────────────────────────
# Parent capability implies all children.

CAPABILITY_INHERITANCE: dict[str, tuple[str, ...]] = {
    Capabilities.ADMIN_ALL: (
        Capabilities.MODERATOR_ALL,
        Capabilities.MANAGE_FLAG_DEFAULTS,
        Capabilities.MANAGE_FLAG_OVERRIDES,
        Capabilities.COMMAND_ADMIN_CLAIMS,
        Capabilities.IGNORE_CLAIMS,
    ),
    Capabilities.MODERATOR_ALL: (
        Capabilities.USER_ALL,
        Capabilities.COMMAND_CLAIM_INFO_OTHERS,
    ),
    Capabilities.USER_ALL: (
        Capabilities.COMMAND_LIST_CLAIM_FLAGS,
        Capabilities.COMMAND_CLAIM_INFO,
        Capabilities.COMMAND_TRANSFER_CLAIM,
    ),
    Capabilities.COMMAND_CLAIM_INFO_OTHERS: (Capabilities.COMMAND_CLAIM_INFO,),
}


def expand_capabilities(capabilities: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Expand capabilities by resolving inheritance.

    ``griefprevention.admin.*`` expands to the moderator and user
    wildcards and everything they imply.

    Args:
        capabilities: Raw capability strings from a subject or profile.

    Returns:
        Deduplicated, sorted tuple with all implied capabilities.
    """
    expanded: set[str] = set(capabilities)
    queue = list(capabilities)

    while queue:
        capability = queue.pop()
        for child in CAPABILITY_INHERITANCE.get(capability, ()):
            if child not in expanded:
                expanded.add(child)
                queue.append(child)

    return tuple(sorted(expanded))


# ── Role → Capability Profiles ──────────────────────────

ROLE_PROFILES: dict[str, tuple[str, ...]] = {
    SubjectRole.PLAYER: (Capabilities.USER_ALL,),
    SubjectRole.MODERATOR: (Capabilities.MODERATOR_ALL,),
    SubjectRole.ADMIN: (Capabilities.ADMIN_ALL,),
}


__all__ = [
    "CAPABILITY_INHERITANCE",
    "ROLE_PROFILES",
    "expand_capabilities",
]
