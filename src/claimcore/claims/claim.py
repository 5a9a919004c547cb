"""Claim data model.

Claims live in a per-world registry (``ClaimWorldManager``) and refer to
their parent and children by id; a claim never holds its parent
directly. Subdivisions carry no owner of their own: ``owner_id``
resolves through the topmost ancestor.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ..contexts import Context, claim_context
from ..interfaces import Subject
from .access import DEFAULT_ACCESS_POLICY

if TYPE_CHECKING:
    from .manager import ClaimWorldManager


class ClaimType(str, Enum):
    """Kind of claim; also selects the default/override flag contexts."""

    WILDERNESS = "wilderness"
    ADMIN = "admin"
    BASIC = "basic"
    SUBDIVISION = "subdivision"


@dataclass(frozen=True, order=True)
class Vector3i:
    """Integer block coordinate."""

    x: int
    y: int
    z: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"


@dataclass(frozen=True)
class Location:
    """A block position inside a world."""

    world_id: str
    position: Vector3i

    @classmethod
    def of(cls, world_id: str, x: int, y: int, z: int) -> "Location":
        return cls(world_id, Vector3i(x, y, z))

    def __str__(self) -> str:
        return f"{self.world_id}{self.position}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ClaimData(BaseModel):
    """Descriptive and membership metadata of a claim."""

    name: Optional[str] = None
    greeting: Optional[str] = None
    farewell: Optional[str] = None
    date_created: datetime = Field(default_factory=_now)
    date_last_active: datetime = Field(default_factory=_now)

    accessors: list[UUID] = Field(default_factory=list)
    builders: list[UUID] = Field(default_factory=list)
    containers: list[UUID] = Field(default_factory=list)
    managers: list[UUID] = Field(default_factory=list)

    def members(self) -> set[UUID]:
        """Everyone trusted on the claim at any level."""
        return {*self.accessors, *self.builders, *self.containers, *self.managers}


class Claim:
    """A protected region with an optional parent and ordered children.

    Args:
        lesser: Lesser boundary corner (component-wise <= ``greater``).
        greater: Greater boundary corner, same world as ``lesser``.
        claim_type: One of :class:`ClaimType`.
        owner_id: Owner of a top-level claim; None means administrator-owned.
        cuboid: True for a 3-D region; flat claims ignore the vertical axis.
        parent_id: Id of the parent claim (required for subdivisions).
    """

    def __init__(
        self,
        lesser: Location,
        greater: Location,
        claim_type: ClaimType = ClaimType.BASIC,
        owner_id: Optional[UUID] = None,
        *,
        claim_id: Optional[UUID] = None,
        cuboid: bool = False,
        parent_id: Optional[UUID] = None,
        inherit_parent: bool = True,
        data: Optional[ClaimData] = None,
    ) -> None:
        if lesser.world_id != greater.world_id:
            raise ValueError("Claim corners must be in the same world")
        lo, hi = lesser.position, greater.position
        if lo.x > hi.x or lo.y > hi.y or lo.z > hi.z:
            raise ValueError(f"Lesser corner {lo} exceeds greater corner {hi}")
        if claim_type is ClaimType.SUBDIVISION and parent_id is None:
            raise ValueError("A subdivision requires a parent claim")
        if claim_type is ClaimType.WILDERNESS and (parent_id is not None or owner_id is not None):
            raise ValueError("The wilderness claim has no parent and no owner")

        self.id: UUID = claim_id or uuid4()
        self.type = claim_type
        self.cuboid = cuboid
        self.lesser_boundary_corner = lesser
        self.greater_boundary_corner = greater
        self.parent_id = parent_id
        self.children_ids: list[UUID] = []
        self.inherit_parent = inherit_parent
        self.data = data or ClaimData()
        self.context: Context = claim_context(self.id)
        self._owner_id = owner_id
        self._manager: Optional["ClaimWorldManager"] = None

    def __repr__(self) -> str:
        return f"Claim(id={self.id}, type={self.type.value}, world={self.world_id!r})"

    # ── Hierarchy ─────────────────────────────────────────

    @property
    def world_id(self) -> str:
        return self.lesser_boundary_corner.world_id

    @property
    def manager(self) -> Optional["ClaimWorldManager"]:
        return self._manager

    @property
    def parent(self) -> Optional["Claim"]:
        if self.parent_id is None or self._manager is None:
            return None
        return self._manager.get_claim_by_id(self.parent_id)

    @property
    def children(self) -> list["Claim"]:
        if self._manager is None:
            return []
        found = (self._manager.get_claim_by_id(child_id) for child_id in self.children_ids)
        return [child for child in found if child is not None]

    def ancestors(self) -> Iterator["Claim"]:
        """Parent, grandparent, ... up to the top-level claim."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def top_level_claim(self) -> "Claim":
        top = self
        for ancestor in self.ancestors():
            top = ancestor
        return top

    def descendants(self) -> Iterator["Claim"]:
        """Depth-first, in child-list order."""
        for child in self.children:
            yield child
            yield from child.descendants()

    # ── Ownership ─────────────────────────────────────────

    @property
    def owner_id(self) -> Optional[UUID]:
        if self.parent_id is not None:
            top = self.top_level_claim()
            if top is not self:
                return top._owner_id
        return self._owner_id

    def _set_owner(self, owner_id: Optional[UUID]) -> None:
        self._owner_id = owner_id

    # ── Type ──────────────────────────────────────────────

    @property
    def is_wilderness(self) -> bool:
        return self.type is ClaimType.WILDERNESS

    @property
    def is_admin(self) -> bool:
        return self.type is ClaimType.ADMIN

    @property
    def is_basic(self) -> bool:
        return self.type is ClaimType.BASIC

    @property
    def is_subdivision(self) -> bool:
        return self.type is ClaimType.SUBDIVISION

    # ── Geometry ──────────────────────────────────────────

    def contains_point(self, world_id: str, position: Vector3i) -> bool:
        """Inclusive box test; flat claims ignore the y axis."""
        if world_id != self.world_id:
            return False
        lo = self.lesser_boundary_corner.position
        hi = self.greater_boundary_corner.position
        if not (lo.x <= position.x <= hi.x and lo.z <= position.z <= hi.z):
            return False
        if self.cuboid:
            return lo.y <= position.y <= hi.y
        return True

    def contains(self, location: Location) -> bool:
        return self.contains_point(location.world_id, location.position)

    def encloses(self, other: "Claim") -> bool:
        """True when both corners of ``other`` lie inside this claim."""
        return self.contains(other.lesser_boundary_corner) and self.contains(other.greater_boundary_corner)

    def area(self) -> int:
        """Horizontal footprint in blocks."""
        lo = self.lesser_boundary_corner.position
        hi = self.greater_boundary_corner.position
        return (hi.x - lo.x + 1) * (hi.z - lo.z + 1)

    def corners(self, y: int = 65) -> dict[str, Vector3i]:
        """NW, NE, SW, SE horizontal corners at height ``y``."""
        lo = self.lesser_boundary_corner.position
        hi = self.greater_boundary_corner.position
        return {
            "NW": Vector3i(lo.x, y, lo.z),
            "NE": Vector3i(hi.x, y, lo.z),
            "SW": Vector3i(lo.x, y, hi.z),
            "SE": Vector3i(hi.x, y, hi.z),
        }

    # ── Access ────────────────────────────────────────────

    def allow_edit(self, subject: Subject) -> Optional[str]:
        """Claim ACL check; None when ``subject`` may edit this claim."""
        policy = self._manager.access_policy if self._manager is not None else DEFAULT_ACCESS_POLICY
        return policy.allow_edit(subject, self)


__all__ = [
    "Claim",
    "ClaimData",
    "ClaimType",
    "Location",
    "Vector3i",
]
