"""Claim flags.

Defines:
- FlagCatalog, FlagDefinition, DEFAULT_FLAGS: known flags and their defaults
- FlagResolver: layered listing, decisions, toggle and direct-set
- FlagRow, FlagScope: listing rows and per-claim context selection
"""

from .catalog import DEFAULT_FLAGS, DEFAULT_NAMESPACE, FlagCatalog, FlagDefinition, default_catalog
from .resolver import SCOPED_TYPES, FlagResolver, FlagRow, FlagScope, scope_type

__all__ = [
    "DEFAULT_FLAGS",
    "DEFAULT_NAMESPACE",
    "FlagCatalog",
    "FlagDefinition",
    "FlagResolver",
    "FlagRow",
    "FlagScope",
    "SCOPED_TYPES",
    "default_catalog",
    "scope_type",
]
