from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

if TYPE_CHECKING:
    from .claims.claim import Claim


class Subject(ABC):
    """Whoever issues a command: a player or the server console."""

    @property
    @abstractmethod
    def unique_id(self) -> Optional[UUID]:
        raise NotImplementedError

    @property
    def is_player(self) -> bool:
        return True

    @property
    def name(self) -> str:
        return str(self.unique_id)

    @abstractmethod
    def has_capability(self, capability: str) -> bool:
        raise NotImplementedError


class IdentityResolver(ABC):
    """Turns owner ids into display names."""

    @abstractmethod
    def display_name(self, owner_id: Optional[UUID]) -> str:
        raise NotImplementedError


class ClaimAccessPolicy(ABC):
    """Claim ACL: ownership and manager/builder/container membership."""

    @abstractmethod
    def allow_edit(self, subject: Subject, claim: "Claim") -> Optional[str]:
        """Return None when allowed, otherwise the denial reason."""
        raise NotImplementedError


class ClaimStorage(ABC):
    """Durable storage for claim records (expected to batch/async write)."""

    @abstractmethod
    def save_claim(self, claim: "Claim") -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_claim(self, claim: "Claim") -> None:
        raise NotImplementedError


class NullClaimStorage(ClaimStorage):
    """Keeps nothing; in-memory state is the source of truth."""

    def save_claim(self, claim: "Claim") -> None:
        return None

    def delete_claim(self, claim: "Claim") -> None:
        return None


__all__ = [
    "ClaimAccessPolicy",
    "ClaimStorage",
    "IdentityResolver",
    "NullClaimStorage",
    "Subject",
]
