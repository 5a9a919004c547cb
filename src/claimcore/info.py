"""Claim information summary."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .claims.claim import Claim, ClaimType, Vector3i
from .interfaces import IdentityResolver
from .tristate import Tristate


class ClaimInfo(BaseModel):
    """Read-only snapshot of a claim for display."""

    model_config = {"frozen": True}

    claim_id: UUID
    name: Optional[str] = None
    owner_name: str
    claim_type: ClaimType
    world_id: str
    cuboid: bool = False
    area: int
    inherit_parent: Optional[bool] = None
    parent_id: Optional[UUID] = None
    pvp: Tristate = Tristate.UNDEFINED

    accessors: list[str] = Field(default_factory=list)
    builders: list[str] = Field(default_factory=list)
    containers: list[str] = Field(default_factory=list)
    managers: list[str] = Field(default_factory=list)

    greeting: Optional[str] = None
    farewell: Optional[str] = None
    date_created: datetime
    date_last_active: datetime

    corners: dict[str, tuple[int, int, int]]


def _position(vector: Vector3i) -> tuple[int, int, int]:
    return (vector.x, vector.y, vector.z)


def build_claim_info(claim: Claim, identities: IdentityResolver, pvp: Tristate) -> ClaimInfo:
    """Snapshot ``claim``, resolving every member id to a display name."""
    data = claim.data

    def names(ids: list[UUID]) -> list[str]:
        return [identities.display_name(member) for member in ids]

    return ClaimInfo(
        claim_id=claim.id,
        name=data.name,
        owner_name=identities.display_name(None if claim.is_admin else claim.owner_id),
        claim_type=claim.type,
        world_id=claim.world_id,
        cuboid=claim.cuboid,
        area=claim.area(),
        inherit_parent=claim.inherit_parent if claim.is_subdivision else None,
        parent_id=claim.parent_id,
        pvp=pvp,
        accessors=names(data.accessors),
        builders=names(data.builders),
        containers=names(data.containers),
        managers=names(data.managers),
        greeting=data.greeting,
        farewell=data.farewell,
        date_created=data.date_created,
        date_last_active=data.date_last_active,
        corners={label: _position(corner) for label, corner in claim.corners().items()},
    )


__all__ = ["ClaimInfo", "build_claim_info"]
