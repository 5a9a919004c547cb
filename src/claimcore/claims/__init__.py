"""Claims: spatial regions with a parent/child hierarchy.

Defines:
- Claim, ClaimType, ClaimData: the claim record
- Location, Vector3i: block positions
- ClaimWorldManager: per-world registry and spatial lookup
- OwnerAccessPolicy: default claim ACL
"""

from .access import DEFAULT_ACCESS_POLICY, OwnerAccessPolicy
from .claim import Claim, ClaimData, ClaimType, Location, Vector3i
from .manager import ClaimWorldManager

__all__ = [
    "DEFAULT_ACCESS_POLICY",
    "Claim",
    "ClaimData",
    "ClaimType",
    "ClaimWorldManager",
    "Location",
    "OwnerAccessPolicy",
    "Vector3i",
]
