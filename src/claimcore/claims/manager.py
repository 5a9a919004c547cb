"""Per-world claim registry.

``ClaimWorldManager`` owns every claim of one world, indexed by id, and
answers spatial queries. Structural changes take the registry lock;
ownership transfers take a per-claim lock so transfers of unrelated
claims never serialize on each other.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional
from uuid import UUID

from ..config import DeletionPolicy, WildernessBounds
from ..exceptions import ClaimHierarchyError, ClaimNotFoundError, NoTransferableOwnerError, StorageError
from ..interfaces import ClaimAccessPolicy, ClaimStorage, NullClaimStorage
from .access import DEFAULT_ACCESS_POLICY
from .claim import Claim, ClaimType, Location

logger = logging.getLogger(__name__)


class ClaimWorldManager:
    """Claim tree and spatial index for a single world.

    Args:
        world_id: World identifier (e.g. ``"world"``, ``"DIM-1"``).
        wilderness: Extent of the synthetic wilderness claim.
        access_policy: Claim ACL used by ``Claim.allow_edit``.
        storage: Persistence collaborator; receives every saved/deleted claim.
        deletion_policy: Handling of children when a claim is deleted.
    """

    def __init__(
        self,
        world_id: str,
        *,
        wilderness: WildernessBounds | None = None,
        access_policy: ClaimAccessPolicy | None = None,
        storage: ClaimStorage | None = None,
        deletion_policy: DeletionPolicy = DeletionPolicy.CASCADE,
    ) -> None:
        self.world_id = world_id
        self.access_policy = access_policy or DEFAULT_ACCESS_POLICY
        self.storage = storage or NullClaimStorage()
        self.deletion_policy = deletion_policy

        self._claims: dict[UUID, Claim] = {}
        self._top_level: tuple[UUID, ...] = ()
        self._registry_lock = threading.RLock()
        self._claim_locks: dict[UUID, threading.Lock] = {}

        self.wilderness = self._create_wilderness(wilderness or WildernessBounds())

    def _create_wilderness(self, bounds: WildernessBounds) -> Claim:
        radius = bounds.radius
        claim = Claim(
            Location.of(self.world_id, -radius, bounds.min_y, -radius),
            Location.of(self.world_id, radius - 1, bounds.max_y, radius - 1),
            ClaimType.WILDERNESS,
        )
        claim._manager = self
        self._claims[claim.id] = claim
        return claim

    # ── Registry ──────────────────────────────────────────

    def add_claim(self, claim: Claim) -> Claim:
        """Register a newly defined claim.

        Subdivisions (and any claim with a parent) must lie inside their
        parent, which must already be registered here.

        Raises:
            ClaimHierarchyError: the claim would break the tree invariants.
        """
        with self._registry_lock:
            if claim.is_wilderness:
                raise ClaimHierarchyError("The wilderness claim is created by the world manager")
            if claim.world_id != self.world_id:
                raise ClaimHierarchyError(
                    f"Claim is in world {claim.world_id!r}, not {self.world_id!r}",
                    claim_id=str(claim.id),
                )
            if claim.id in self._claims:
                raise ClaimHierarchyError("Claim is already registered", claim_id=str(claim.id))

            parent: Optional[Claim] = None
            if claim.parent_id is not None:
                parent = self._claims.get(claim.parent_id)
                if parent is None or parent.is_wilderness:
                    raise ClaimHierarchyError("Parent claim is not registered", claim_id=str(claim.id))
                if not parent.encloses(claim):
                    raise ClaimHierarchyError("Child claim must lie inside its parent", claim_id=str(claim.id))

            claim._manager = self
            self._claims[claim.id] = claim
            if parent is None:
                self._top_level = self._top_level + (claim.id,)
            else:
                parent.children_ids.append(claim.id)

        self.storage.save_claim(claim)
        logger.info("Registered %s claim %s in %s", claim.type.value, claim.id, self.world_id)
        return claim

    def get_claim_by_id(self, claim_id: UUID) -> Optional[Claim]:
        return self._claims.get(claim_id)

    def get_wilderness_claim(self) -> Claim:
        return self.wilderness

    def get_world_claims(self) -> list[Claim]:
        """Top-level claims in registration order."""
        return [self._claims[claim_id] for claim_id in self._top_level if claim_id in self._claims]

    def get_all_claims(self) -> list[Claim]:
        """Every registered claim except the wilderness, parents before children."""
        result: list[Claim] = []
        for claim in self.get_world_claims():
            result.append(claim)
            result.extend(claim.descendants())
        return result

    def get_player_claims(self, owner_id: UUID) -> list[Claim]:
        return [claim for claim in self.get_world_claims() if claim.owner_id == owner_id]

    def find_claim(self, identifier: str) -> Optional[Claim]:
        """Match a claim id string or claim name, both case-insensitively."""
        needle = identifier.strip().lower()
        if not needle:
            return None
        for claim in self.get_all_claims():
            if str(claim.id).lower() == needle:
                return claim
            name = claim.data.name
            if name and name.lower() == needle:
                return claim
        return None

    # ── Spatial queries ───────────────────────────────────

    def get_claim_at(self, location: Location, include_subdivisions: bool = True) -> Claim:
        """Most specific claim containing ``location``.

        Top-level claims are tested first; with ``include_subdivisions``
        the children of the match are searched recursively in child-list
        order. Falls back to the wilderness claim, never None.
        """
        if location.world_id != self.world_id:
            return self.wilderness

        for claim in self.get_world_claims():
            if claim.contains(location):
                if include_subdivisions:
                    return self._deepest_child_at(claim, location)
                return claim
        return self.wilderness

    def _deepest_child_at(self, claim: Claim, location: Location) -> Claim:
        for child in claim.children:
            if child.contains(location):
                return self._deepest_child_at(child, location)
        return claim

    # ── Ownership ─────────────────────────────────────────

    def claim_lock(self, claim_id: UUID) -> threading.Lock:
        with self._registry_lock:
            lock = self._claim_locks.get(claim_id)
            if lock is None:
                lock = self._claim_locks[claim_id] = threading.Lock()
            return lock

    def transfer_claim_owner(self, claim: Claim, new_owner_id: Optional[UUID]) -> None:
        """Give a top-level claim a new owner (None = administrator).

        Only the owner field changes; flags, bounds and hierarchy are
        untouched. The new owner is rolled back if persisting fails.

        Raises:
            NoTransferableOwnerError: ``claim`` has a parent or is the wilderness.
            ClaimNotFoundError: ``claim`` is not registered in this world.
        """
        if claim.parent_id is not None or claim.is_wilderness:
            raise NoTransferableOwnerError(claim_id=str(claim.id))
        if self._claims.get(claim.id) is not claim:
            raise ClaimNotFoundError(claim_id=str(claim.id))

        with self.claim_lock(claim.id):
            previous = claim.owner_id
            claim._set_owner(new_owner_id)
            try:
                self.storage.save_claim(claim)
            except StorageError:
                claim._set_owner(previous)
                raise

        logger.info("Transferred claim %s from %s to %s", claim.id, previous, new_owner_id)

    # ── Deletion ──────────────────────────────────────────

    def delete_claim(self, claim: Claim) -> list[Claim]:
        """Remove ``claim`` according to :attr:`deletion_policy`.

        Returns:
            Every claim removed from the registry.

        Raises:
            ClaimHierarchyError: wilderness, or a reparent that would leave
                a subdivision without a parent.
            ClaimNotFoundError: ``claim`` is not registered in this world.
        """
        if claim.is_wilderness:
            raise ClaimHierarchyError("The wilderness claim cannot be deleted")

        with self._registry_lock:
            if self._claims.get(claim.id) is not claim:
                raise ClaimNotFoundError(claim_id=str(claim.id))

            if self.deletion_policy is DeletionPolicy.CASCADE:
                removed = [claim, *claim.descendants()]
            else:
                self._reparent_children(claim)
                removed = [claim]

            self._detach(claim)
            for gone in removed:
                self._claims.pop(gone.id, None)
                self._claim_locks.pop(gone.id, None)
                gone._manager = None

        for gone in removed:
            self.storage.delete_claim(gone)
        logger.info(
            "Deleted claim %s (%s, %d removed)",
            claim.id,
            self.deletion_policy.value,
            len(removed),
        )
        return removed

    def _detach(self, claim: Claim) -> None:
        parent = claim.parent
        if parent is None:
            self._top_level = tuple(cid for cid in self._top_level if cid != claim.id)
        else:
            parent.children_ids.remove(claim.id)

    def _reparent_children(self, claim: Claim) -> None:
        children = claim.children
        if not children:
            return
        parent = claim.parent
        if parent is None and any(child.is_subdivision for child in children):
            raise ClaimHierarchyError(
                "Cannot delete a top-level claim that still has subdivisions",
                claim_id=str(claim.id),
            )

        moved_ids = [child.id for child in children]
        if parent is None:
            owner = claim.owner_id
            for child in children:
                child.parent_id = None
                child._set_owner(owner)
            self._top_level = _splice(self._top_level, claim.id, moved_ids)
        else:
            for child in children:
                child.parent_id = parent.id
            parent.children_ids[:] = list(_splice(tuple(parent.children_ids), claim.id, moved_ids))
        claim.children_ids.clear()

        for child in children:
            self.storage.save_claim(child)

    # ── Lifecycle ─────────────────────────────────────────

    def close(self) -> None:
        with self._registry_lock:
            for claim in self._claims.values():
                claim._manager = None
            self._claims.clear()
            self._claim_locks.clear()
            self._top_level = ()

    def __len__(self) -> int:
        return sum(1 for claim_id in self._claims if claim_id != self.wilderness.id)

    def __contains__(self, claim: object) -> bool:
        return isinstance(claim, Claim) and self._claims.get(claim.id) is claim


def _splice(ids: tuple[UUID, ...], target: UUID, replacement: Iterable[UUID]) -> tuple[UUID, ...]:
    """Insert ``replacement`` after ``target`` (``target`` is kept)."""
    result: list[UUID] = []
    for claim_id in ids:
        result.append(claim_id)
        if claim_id == target:
            result.extend(replacement)
    return tuple(result)


__all__ = ["ClaimWorldManager"]
