"""Flag resolution across the DEFAULT, CLAIM and OVERRIDE layers.

Provides:
- ``FlagScope`` — the context sets selected for a claim (+ source).
- ``FlagRow`` — one listing row: every layer's value for a key.
- ``FlagResolver`` — listing, effective-value lookup, toggling and
  direct-set of claim flags.

Context selection by claim type::

    ADMIN                 default {admin-default, world}     override {admin-override, world}
    BASIC / SUBDIVISION   default {basic-default, world}     override {basic-override, world}
    WILDERNESS            default {wilderness-default, world} no override layer

A registered source context is added to the DEFAULT set only. The CLAIM
layer is always scoped by the singleton ``{claim-identity}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from ..claims.claim import Claim, ClaimType
from ..contexts import (
    ANY_SOURCE,
    Context,
    SourceContextRegistry,
    claim_default_context,
    claim_override_context,
    context_set,
    world_context,
)
from ..exceptions import InvalidContextError, InvalidFlagError, InvalidTristateError
from ..interfaces import Subject
from ..layers import FlagLayer
from ..permissions import EditDecision, can_edit_flag, require_flag_edit
from ..store import FlagStores, PermissionStore
from ..tristate import Tristate
from .catalog import FlagCatalog, default_catalog

logger = logging.getLogger(__name__)

# Claim types that own a distinct set of default/override contexts
SCOPED_TYPES = (ClaimType.WILDERNESS, ClaimType.ADMIN, ClaimType.BASIC)


def scope_type(claim_type: ClaimType) -> ClaimType:
    """Subdivisions share the BASIC default and override contexts."""
    if claim_type is ClaimType.SUBDIVISION:
        return ClaimType.BASIC
    return claim_type


@dataclass(frozen=True)
class FlagScope:
    """Context sets used to read and write each layer for one claim."""

    default_contexts: frozenset[Context]
    override_contexts: frozenset[Context]
    claim_contexts: frozenset[Context]
    source: str = ANY_SOURCE

    @property
    def has_override_layer(self) -> bool:
        return bool(self.override_contexts)


@dataclass
class FlagRow:
    """All layers of one permission key, as shown by a listing.

    ``claim_value`` is ``Tristate.UNDEFINED`` when the claim has not set
    the key but may (an empty settable slot); None when the row has no
    DEFAULT entry and no CLAIM value.
    """

    key: str
    base_flag: str
    source: str = ANY_SOURCE
    default_value: Optional[Tristate] = None
    default_persisted: bool = False
    claim_value: Optional[Tristate] = None
    override_value: Optional[Tristate] = None
    edit: dict[FlagLayer, EditDecision] = field(default_factory=dict)

    @property
    def custom(self) -> bool:
        """No DEFAULT-layer entry exists for this key."""
        return self.default_value is None

    @property
    def forced(self) -> bool:
        """An OVERRIDE is set; no lower layer can change the outcome."""
        return self.override_value is not None

    @property
    def layers(self) -> tuple[FlagLayer, ...]:
        """Layers holding an explicit TRUE/FALSE, lowest precedence first."""
        found = []
        if self.default_value not in (None, Tristate.UNDEFINED):
            found.append(FlagLayer.DEFAULT)
        if self.claim_value not in (None, Tristate.UNDEFINED):
            found.append(FlagLayer.CLAIM)
        if self.override_value not in (None, Tristate.UNDEFINED):
            found.append(FlagLayer.OVERRIDE)
        return tuple(found)

    @property
    def effective_value(self) -> Tristate:
        for layer in sorted(FlagLayer, key=lambda layer: layer.precedence, reverse=True):
            value = self.value_at(layer)
            if value not in (None, Tristate.UNDEFINED):
                return value
        return Tristate.UNDEFINED

    def value_at(self, layer: FlagLayer) -> Optional[Tristate]:
        if layer is FlagLayer.DEFAULT:
            return self.default_value
        if layer is FlagLayer.CLAIM:
            return self.claim_value
        return self.override_value

    def can_edit(self, layer: FlagLayer) -> bool:
        decision = self.edit.get(layer)
        return decision is not None and decision.allowed


class FlagResolver:
    """Reads and mutates claim flags over the transient and persistent stores.

    Args:
        stores: The global flag subject's transient + persistent stores.
        catalog: Registered flags; direct-set validates against it.
        sources: Named source contexts registered by feature modules.
    """

    def __init__(
        self,
        stores: FlagStores | None = None,
        catalog: FlagCatalog | None = None,
        sources: SourceContextRegistry | None = None,
    ) -> None:
        self.stores = stores or FlagStores()
        self.catalog = catalog or default_catalog()
        self.sources = sources or SourceContextRegistry()

    # ── Context selection ─────────────────────────────────

    @staticmethod
    def default_contexts(
        claim_type: ClaimType,
        world_id: str,
        source_context: Context | None = None,
    ) -> frozenset[Context]:
        return context_set(
            claim_default_context(scope_type(claim_type).value),
            world_context(world_id),
            source_context,
        )

    @staticmethod
    def override_contexts(claim_type: ClaimType, world_id: str) -> frozenset[Context]:
        if claim_type is ClaimType.WILDERNESS:
            return frozenset()
        return context_set(
            claim_override_context(scope_type(claim_type).value),
            world_context(world_id),
        )

    def scope_for(self, claim: Claim, source: str | None = None) -> FlagScope:
        """Select the context sets for ``claim``.

        ``source`` only narrows the DEFAULT set, and only when it names a
        registered source context. Otherwise the effective source is ``any``.
        """
        source_context = self.sources.get(source)
        return FlagScope(
            default_contexts=self.default_contexts(claim.type, claim.world_id, source_context),
            override_contexts=self.override_contexts(claim.type, claim.world_id),
            claim_contexts=frozenset({claim.context}),
            source=source if source_context is not None else ANY_SOURCE,
        )

    def _layer_target(self, scope: FlagScope, layer: FlagLayer) -> tuple[PermissionStore, frozenset[Context]]:
        if layer is FlagLayer.DEFAULT:
            return self.stores.transient, scope.default_contexts
        if layer is FlagLayer.CLAIM:
            return self.stores.persistent, scope.claim_contexts
        return self.stores.persistent, scope.override_contexts

    # ── Keys ──────────────────────────────────────────────

    def permission_key(self, key: str) -> str:
        """Accept a base flag (``pvp``) or a full key; return the full key."""
        if key.startswith(self.catalog.namespace + "."):
            return key
        return self.catalog.permission_key(key)

    # ── Listing ───────────────────────────────────────────

    def list_flags(
        self,
        claim: Claim,
        subject: Subject | None = None,
        source: str | None = None,
    ) -> list[FlagRow]:
        """Every key set in any layer, one row per key, sorted by key.

        DEFAULT values come from the transient store, replaced by the
        persistent store's value for the same contexts when present.
        CLAIM and OVERRIDE values are merged into the key's row, creating
        a custom row when the key has no DEFAULT entry. When ``subject``
        is given each shown layer carries its edit decision.
        """
        scope = self.scope_for(claim, source)
        defaults = self.stores.transient.get_permissions(scope.default_contexts)
        default_overrides = self.stores.persistent.get_permissions(scope.default_contexts)
        overrides: Mapping[str, bool] = {}
        if scope.has_override_layer:
            overrides = self.stores.persistent.get_permissions(scope.override_contexts)
        claim_values = self.stores.persistent.get_permissions(scope.claim_contexts)

        rows: dict[str, FlagRow] = {}

        for key in {*defaults, *default_overrides}:
            persisted = key in default_overrides
            value = default_overrides[key] if persisted else defaults[key]
            row = self._row(rows, key, scope.source)
            row.default_value = Tristate.from_bool(value)
            row.default_persisted = persisted
            if key not in claim_values:
                row.claim_value = Tristate.UNDEFINED

        for key, value in claim_values.items():
            self._row(rows, key, scope.source).claim_value = Tristate.from_bool(value)

        for key, value in overrides.items():
            self._row(rows, key, scope.source).override_value = Tristate.from_bool(value)

        if subject is not None:
            decisions = {layer: can_edit_flag(subject, claim, layer) for layer in FlagLayer}
            for row in rows.values():
                for layer in FlagLayer:
                    if row.value_at(layer) is not None:
                        row.edit[layer] = decisions[layer]

        return [rows[key] for key in sorted(rows)]

    def _row(self, rows: dict[str, FlagRow], key: str, source: str) -> FlagRow:
        row = rows.get(key)
        if row is None:
            row = rows[key] = FlagRow(key=key, base_flag=self.catalog.base_flag(key), source=source)
        return row

    # ── Decisions ─────────────────────────────────────────

    def get_value(self, claim: Claim, key: str, layer: FlagLayer, source: str | None = None) -> Tristate:
        """Value stored at exactly one layer (UNDEFINED when absent).

        DEFAULT reads the persistent store first, then the transient one.
        """
        key = self.permission_key(key)
        scope = self.scope_for(claim, source)
        if layer is FlagLayer.DEFAULT:
            value = self.stores.persistent.get_value(scope.default_contexts, key)
            if value is Tristate.UNDEFINED:
                value = self.stores.transient.get_value(scope.default_contexts, key)
            return value
        if layer is FlagLayer.OVERRIDE and not scope.has_override_layer:
            return Tristate.UNDEFINED
        store, contexts = self._layer_target(scope, layer)
        return store.get_value(contexts, key)

    def effective_value(self, claim: Claim, key: str, source: str | None = None) -> Tristate:
        """OVERRIDE > CLAIM > DEFAULT (persistent over transient).

        A subdivision with ``inherit_parent`` that has no CLAIM value of its
        own takes the nearest ancestor's CLAIM value. A source-scoped DEFAULT
        that is unset falls back to the source-less defaults. UNDEFINED means
        no layer sets the key and the caller's action-specific fallback applies.
        """
        key = self.permission_key(key)
        override = self.get_value(claim, key, FlagLayer.OVERRIDE, source)
        if override is not Tristate.UNDEFINED:
            return override

        current: Optional[Claim] = claim
        while current is not None:
            value = self.stores.persistent.get_value({current.context}, key)
            if value is not Tristate.UNDEFINED:
                return value
            current = current.parent if current.inherit_parent else None

        value = self.get_value(claim, key, FlagLayer.DEFAULT, source)
        if value is Tristate.UNDEFINED and self.sources.get(source) is not None:
            value = self.get_value(claim, key, FlagLayer.DEFAULT)
        return value

    def is_allowed(self, claim: Claim, key: str, fallback: bool, source: str | None = None) -> bool:
        """Boolean decision, ``fallback`` when no layer sets the key."""
        value = self.effective_value(claim, key, source).as_bool()
        return fallback if value is None else value

    # ── Mutation ──────────────────────────────────────────

    def toggle_flag(
        self,
        subject: Subject,
        claim: Claim,
        key: str,
        current_value: Tristate | None,
        layer: FlagLayer,
        source: str | None = None,
    ) -> Tristate:
        """Advance ``key`` one step of TRUE -> FALSE -> UNDEFINED -> TRUE.

        ``current_value`` is the value the caller displayed; None reads the
        stored value at ``layer``. The new value is written to the layer's
        store with the same contexts a listing reads it from.

        DEFAULT toggles always land in the transient store. When the
        persistent store already holds a default for the key under the same
        contexts, that value keeps winning in listings and decisions, so the
        toggle has no visible effect until the persistent default is removed.
        A warning is logged in that case.

        Raises:
            PermissionDeniedError: :func:`can_edit_flag` denied the edit.
            InvalidContextError: OVERRIDE requested on the wilderness.
        """
        require_flag_edit(subject, claim, layer)
        key = self.permission_key(key)
        scope = self.scope_for(claim, source)
        if layer is FlagLayer.OVERRIDE and not scope.has_override_layer:
            raise InvalidContextError("The wilderness has no override layer.", claim_id=str(claim.id))

        if current_value is None:
            current_value = self.get_value(claim, key, layer, source)
        new_value = current_value.toggled()

        store, contexts = self._layer_target(scope, layer)
        store.set_value(contexts, key, new_value)
        if layer is FlagLayer.DEFAULT and self.stores.persistent.get_value(contexts, key) is not Tristate.UNDEFINED:
            logger.warning("Persistent default for %s on claim %s shadows the transient toggle", key, claim.id)
        logger.info(
            "%s toggled %s on claim %s (%s): %s -> %s",
            subject.name,
            key,
            claim.id,
            layer.value,
            current_value.value,
            new_value.value,
        )
        return new_value

    def set_flag(
        self,
        subject: Subject,
        claim: Claim,
        flag: str,
        target: str | None,
        value: Union[Tristate, str],
        context: str | None = None,
    ) -> str:
        """Write ``value`` into the CLAIM layer, bypassing the toggle cycle.

        Args:
            flag: Catalog flag name, with or without the namespace prefix.
            target: What the flag applies to (``any`` or None for everything).
            value: Tristate or user text (``true``, ``-1``, ``undefined``, ...);
                UNDEFINED clears the entry.
            context: Registered source name or ``key=value`` further scoping
                the write.

        Returns:
            The permission key written.

        Raises:
            InvalidFlagError: ``flag`` is not in the catalog.
            InvalidTristateError: ``value`` text could not be parsed.
            InvalidContextError: ``context`` could not be resolved.
            PermissionDeniedError: the CLAIM-layer edit was denied.
        """
        base = self.catalog.base_flag(flag)
        if base not in self.catalog:
            raise InvalidFlagError(flag=flag)

        if isinstance(value, str) and not isinstance(value, Tristate):
            parsed = Tristate.from_string(value)
            if parsed is None:
                raise InvalidTristateError(value=value)
            value = parsed

        extra: Context | None = None
        if context is not None:
            extra = self.sources.get(context) or Context.parse(context)
            if extra is None:
                raise InvalidContextError(context=context)

        require_flag_edit(subject, claim, FlagLayer.CLAIM)

        key = self.catalog.permission_key(base, target)
        contexts = context_set(claim.context, extra)
        self.stores.persistent.set_value(contexts, key, value)
        logger.info(
            "%s set %s on claim %s to %s%s",
            subject.name,
            key,
            claim.id,
            value.value,
            f" [{extra}]" if extra else "",
        )
        return key

    # ── Seeding ───────────────────────────────────────────

    def seed_defaults(self, world_id: str) -> int:
        """Write catalog defaults into the transient DEFAULT layer of a world.

        Returns:
            Number of values written.
        """
        written = 0
        for claim_type in SCOPED_TYPES:
            contexts = self.default_contexts(claim_type, world_id)
            for definition in self.catalog:
                key = self.catalog.permission_key(definition.name)
                value = Tristate.from_bool(definition.default_for(claim_type))
                if self.stores.transient.set_value(contexts, key, value):
                    written += 1
        logger.debug("Seeded %d default flag values for world %s", written, world_id)
        return written


__all__ = [
    "FlagResolver",
    "FlagRow",
    "FlagScope",
    "SCOPED_TYPES",
    "scope_type",
]
