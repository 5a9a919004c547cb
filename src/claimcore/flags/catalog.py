"""Registered flag catalog.

Provides:
- ``FlagDefinition`` — a known flag and its default value per claim type.
- ``FlagCatalog`` — the registry direct-set operations validate against.
- ``DEFAULT_FLAGS`` — the standard flag set.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Optional

from ..claims.claim import ClaimType
from ..contexts import ANY_SOURCE

DEFAULT_NAMESPACE = "griefprevention.flag"


class FlagDefinition:
    """A flag and its seeded default.

    Args:
        name: Flag name without namespace (e.g. ``"block-break"``).
        description: One-line help text shown in listings.
        default: Default value for every claim type.
        per_type: Overrides of ``default`` for specific claim types.

    Example::

        pvp = FlagDefinition(
            "pvp",
            "Controls whether players may fight each other.",
            default=False,
            per_type={ClaimType.WILDERNESS: True},
        )
    """

    __slots__ = ("name", "description", "default", "per_type")

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        default: bool = True,
        per_type: Optional[Mapping[ClaimType, bool]] = None,
    ) -> None:
        self.name = name
        self.description = description
        self.default = default
        self.per_type = dict(per_type or {})

    def default_for(self, claim_type: ClaimType) -> bool:
        if claim_type is ClaimType.SUBDIVISION:
            claim_type = ClaimType.BASIC
        return self.per_type.get(claim_type, self.default)

    def __repr__(self) -> str:
        return f"FlagDefinition(name={self.name!r}, default={self.default!r})"


class FlagCatalog:
    """Known flags plus the permission-key convention of a namespace.

    A permission key is ``<namespace>.<flag>``, or
    ``<namespace>.<flag>.<target>`` when a target other than ``any`` is
    given.
    """

    def __init__(
        self,
        definitions: Iterable[FlagDefinition] = (),
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.namespace = namespace
        self._flags: dict[str, FlagDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: FlagDefinition) -> None:
        self._flags[definition.name] = definition

    def get(self, name: str) -> Optional[FlagDefinition]:
        return self._flags.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._flags))

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self) -> Iterator[FlagDefinition]:
        return iter(self._flags.values())

    def __len__(self) -> int:
        return len(self._flags)

    def permission_key(self, flag: str, target: Optional[str] = None) -> str:
        if target and target != ANY_SOURCE:
            return f"{self.namespace}.{flag}.{target}"
        return f"{self.namespace}.{flag}"

    def base_flag(self, key: str) -> str:
        """Strip the namespace prefix from a permission key."""
        prefix = self.namespace + "."
        if key.startswith(prefix):
            return key[len(prefix):]
        return key

    def with_namespace(self, namespace: str) -> "FlagCatalog":
        return FlagCatalog(self._flags.values(), namespace=namespace)


# ── Default Flags ──────────────────────────────────────

_ADMIN_OFF = {ClaimType.ADMIN: False}

DEFAULT_FLAGS: tuple[FlagDefinition, ...] = (
    FlagDefinition("block-break", "Allow blocks to be broken.", per_type=_ADMIN_OFF),
    FlagDefinition("block-place", "Allow blocks to be placed.", per_type=_ADMIN_OFF),
    FlagDefinition("command-execute", "Allow commands to be run."),
    FlagDefinition("command-execute-pvp", "Allow commands to be run while in PvP."),
    FlagDefinition("entity-damage", "Allow entities to take damage."),
    FlagDefinition("entity-riding", "Allow entities to be ridden."),
    FlagDefinition("entity-spawn", "Allow entities to spawn."),
    FlagDefinition("explosion", "Allow explosions.", default=False, per_type={ClaimType.WILDERNESS: True}),
    FlagDefinition("explosion-surface", "Allow explosions above sea level.", per_type={ClaimType.BASIC: False, ClaimType.ADMIN: False}),
    FlagDefinition("fire-spread", "Allow fire to spread.", default=False),
    FlagDefinition("interact-block", "Allow right-clicking blocks.", per_type=_ADMIN_OFF),
    FlagDefinition("interact-entity", "Allow right-clicking entities.", per_type=_ADMIN_OFF),
    FlagDefinition("interact-item", "Allow using items in hand."),
    FlagDefinition("inventory-open", "Allow opening containers.", per_type=_ADMIN_OFF),
    FlagDefinition("item-drop", "Allow items to be dropped."),
    FlagDefinition("item-pickup", "Allow items to be picked up."),
    FlagDefinition("item-spawn", "Allow items to spawn."),
    FlagDefinition("portal-use", "Allow portals to be used."),
    FlagDefinition("projectile-impact", "Allow projectiles to hit blocks and entities."),
    FlagDefinition("pvp", "Allow players to fight each other.", default=False, per_type={ClaimType.WILDERNESS: True}),
    FlagDefinition("spawn-ambient", "Allow ambient creatures to spawn."),
    FlagDefinition("spawn-aquatic", "Allow aquatic creatures to spawn."),
    FlagDefinition("spawn-monster", "Allow monsters to spawn.", per_type={ClaimType.ADMIN: False}),
    FlagDefinition("spawn-passive", "Allow passive creatures to spawn."),
)


def default_catalog(namespace: str = DEFAULT_NAMESPACE) -> FlagCatalog:
    """Fresh catalog holding :data:`DEFAULT_FLAGS`."""
    return FlagCatalog(DEFAULT_FLAGS, namespace=namespace)


__all__ = [
    "DEFAULT_FLAGS",
    "DEFAULT_NAMESPACE",
    "FlagCatalog",
    "FlagDefinition",
    "default_catalog",
]
