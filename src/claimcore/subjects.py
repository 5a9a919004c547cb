"""Concrete subjects and identity resolution.

``PlayerSubject`` carries an expanded capability tuple, so wildcard
capabilities granted by a role profile are answered by a set lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional
from uuid import UUID

from .interfaces import IdentityResolver, Subject
from .permissions import ROLE_PROFILES, expand_capabilities

logger = logging.getLogger(__name__)

# Owner id used for administrator-owned claims in storage
ADMIN_USER_UUID = UUID(int=0)

ADMINISTRATOR_NAME = "administrator"
UNKNOWN_NAME = "someone"


@dataclass(frozen=True)
class PlayerSubject(Subject):
    """A player issuing commands.

    - player_id: Unique id of the player
    - player_name: Display name
    - capabilities: Capability strings, already expanded
    """

    player_id: UUID
    player_name: str = ""
    capabilities: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        player_id: UUID,
        player_name: str = "",
        *,
        capabilities: Iterable[str] = (),
        role: str | None = None,
    ) -> "PlayerSubject":
        """Build a subject, expanding role and capability inheritance."""
        granted = list(capabilities)
        if role is not None:
            granted.extend(ROLE_PROFILES.get(role, ()))
        return cls(player_id, player_name, expand_capabilities(granted))

    @property
    def unique_id(self) -> Optional[UUID]:
        return self.player_id

    @property
    def name(self) -> str:
        return self.player_name or str(self.player_id)

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class ConsoleSubject(Subject):
    """The server console: every capability, no claim ACL."""

    console_name: str = "Console"

    @property
    def unique_id(self) -> Optional[UUID]:
        return None

    @property
    def is_player(self) -> bool:
        return False

    @property
    def name(self) -> str:
        return self.console_name

    def has_capability(self, capability: str) -> bool:
        return True


@dataclass
class StaticIdentityResolver(IdentityResolver):
    """Resolve display names from a fixed id -> name mapping."""

    names: Mapping[UUID, str] = field(default_factory=dict)

    def display_name(self, owner_id: Optional[UUID]) -> str:
        if owner_id is None or owner_id == ADMIN_USER_UUID:
            return ADMINISTRATOR_NAME
        name = self.names.get(owner_id)
        if name is None:
            logger.warning("Tried to look up a local player name for invalid UUID: %s", owner_id)
            return UNKNOWN_NAME
        return name


__all__ = [
    "ADMINISTRATOR_NAME",
    "ADMIN_USER_UUID",
    "UNKNOWN_NAME",
    "ConsoleSubject",
    "PlayerSubject",
    "StaticIdentityResolver",
]
