"""Claim flag service: the single entry point front ends call.

Owns the world registries, the flag stores and the flag resolver, and
exposes the claim lookup, flag listing/mutation and ownership transfer
operations.

Usage::

    from claimcore.service import get_claim_service

    service = get_claim_service()
    service.register_world("world")
    claim = service.resolve_claim_at("world", Vector3i(10, 64, 10))
    rows = service.list_flags(claim, player)
"""

from __future__ import annotations

import threading
from typing import Optional, Union
from uuid import UUID

from .claims.claim import Claim, Location, Vector3i
from .claims.manager import ClaimWorldManager
from .config import ClaimCoreConfig, load_config_from_env
from .contexts import SourceContextRegistry
from .exceptions import ClaimNotFoundError, ConfigurationError, NoTransferableOwnerError, PermissionDeniedError
from .flags import FlagCatalog, FlagResolver, FlagRow, default_catalog
from .info import ClaimInfo, build_claim_info
from .interfaces import ClaimAccessPolicy, ClaimStorage, IdentityResolver, Subject
from .layers import FlagLayer
from .logging import get_claim_logger
from .permissions import INFO_DENIED, can_transfer_claim, can_view_claim_info
from .store import FlagStores
from .subjects import StaticIdentityResolver
from .tristate import Tristate

logger = get_claim_logger(__name__)

PVP_FLAG = "pvp"


class ClaimFlagService:
    """Claim registries plus the layered flag engine.

    Args:
        config: Engine configuration (loaded from the environment if None).
        identity_resolver: Owner id -> display name.
        storage: Claim persistence collaborator handed to every world.
        access_policy: Claim ACL handed to every world.
        catalog: Known flags; defaults to the standard set under
            ``config.flag_namespace``.
        sources: Registered source contexts.
    """

    def __init__(
        self,
        config: ClaimCoreConfig | None = None,
        identity_resolver: IdentityResolver | None = None,
        storage: ClaimStorage | None = None,
        access_policy: ClaimAccessPolicy | None = None,
        catalog: FlagCatalog | None = None,
        sources: SourceContextRegistry | None = None,
    ) -> None:
        self.config = config or load_config_from_env()
        self.identities = identity_resolver or StaticIdentityResolver()
        self.storage = storage
        self.access_policy = access_policy

        if catalog is None:
            catalog = default_catalog(self.config.flag_namespace)
        elif catalog.namespace != self.config.flag_namespace:
            catalog = catalog.with_namespace(self.config.flag_namespace)

        self.stores = FlagStores()
        self.resolver = FlagResolver(self.stores, catalog, sources)
        self._worlds: dict[str, ClaimWorldManager] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def catalog(self) -> FlagCatalog:
        return self.resolver.catalog

    @property
    def sources(self) -> SourceContextRegistry:
        return self.resolver.sources

    # ── Worlds ────────────────────────────────────────────

    def register_world(self, world_id: str) -> ClaimWorldManager:
        """Create (or return) the registry of ``world_id`` and seed its defaults."""
        if self._closed:
            raise ConfigurationError("Claim service is closed")
        with self._lock:
            manager = self._worlds.get(world_id)
            if manager is not None:
                return manager
            manager = ClaimWorldManager(
                world_id,
                wilderness=self.config.wilderness,
                access_policy=self.access_policy,
                storage=self.storage,
                deletion_policy=self.config.deletion_policy,
            )
            self._worlds[world_id] = manager

        if self.config.seed_default_flags:
            self.resolver.seed_defaults(world_id)
        logger.info("Registered world %s", world_id)
        return manager

    def get_world(self, world_id: str) -> ClaimWorldManager:
        manager = self._worlds.get(world_id)
        if manager is None:
            raise ConfigurationError(f"World {world_id!r} is not registered", world_id=world_id)
        return manager

    def worlds(self) -> list[ClaimWorldManager]:
        return list(self._worlds.values())

    def add_claim(self, claim: Claim) -> Claim:
        return self.get_world(claim.world_id).add_claim(claim)

    # ── Lookup ────────────────────────────────────────────

    def resolve_claim_at(
        self,
        world_id: str,
        position: Vector3i,
        include_subdivisions: bool = True,
    ) -> Claim:
        """Most specific claim at ``position``; the wilderness when none."""
        claim = self.get_world(world_id).get_claim_at(Location(world_id, position), include_subdivisions)
        logger.debug("Resolved %s in %s to claim %s", position, world_id, claim.id)
        return claim

    def resolve_claim_by_id(self, identifier: str, world_id: str | None = None) -> Claim:
        """Find a claim by id or name across every world (or just ``world_id``).

        Raises:
            ClaimNotFoundError: nothing matches ``identifier``.
        """
        managers = [self.get_world(world_id)] if world_id is not None else self.worlds()
        for manager in managers:
            claim = manager.find_claim(identifier)
            if claim is not None:
                return claim
        logger.debug("No claim matches %r", identifier)
        raise ClaimNotFoundError(identifier=identifier)

    # ── Flags ─────────────────────────────────────────────

    def list_flags(self, claim: Claim, subject: Subject | None = None, source: str | None = None) -> list[FlagRow]:
        return self.resolver.list_flags(claim, subject, source)

    def effective_value(self, claim: Claim, key: str, source: str | None = None) -> Tristate:
        return self.resolver.effective_value(claim, key, source)

    def toggle_flag(
        self,
        subject: Subject,
        claim: Claim,
        key: str,
        current_value: Tristate | None,
        layer: FlagLayer,
        source: str | None = None,
    ) -> Tristate:
        return self.resolver.toggle_flag(subject, claim, key, current_value, layer, source)

    def set_flag(
        self,
        subject: Subject,
        claim: Claim,
        flag: str,
        target: str | None,
        value: Union[Tristate, str],
        context: str | None = None,
    ) -> str:
        return self.resolver.set_flag(subject, claim, flag, target, value, context)

    # ── Ownership ─────────────────────────────────────────

    def transfer_owner(
        self,
        claim: Claim,
        new_owner_id: Optional[UUID],
        subject: Subject | None = None,
    ) -> None:
        """Hand a top-level claim to ``new_owner_id`` (None = administrator).

        Raises:
            NoTransferableOwnerError: wilderness, or a claim with a parent.
            PermissionDeniedError: ``subject`` may not transfer admin claims.
        """
        if claim.is_wilderness:
            raise NoTransferableOwnerError("The wilderness cannot be transferred.", claim_id=str(claim.id))
        if subject is not None:
            decision = can_transfer_claim(subject, claim)
            if decision.denied:
                logger.info("Transfer denied for %s: %s", subject.name, decision.reason, claim=claim, subject=subject)
                raise PermissionDeniedError(decision.reason, claim_id=str(claim.id))

        manager = claim.manager or self.get_world(claim.world_id)
        manager.transfer_claim_owner(claim, new_owner_id)
        logger.info(
            "Claim at %s transferred to %s",
            claim.lesser_boundary_corner,
            self.identities.display_name(new_owner_id),
            claim=claim,
            subject=subject,
        )

    def delete_claim(self, claim: Claim) -> list[Claim]:
        """Delete ``claim`` per the configured deletion policy, dropping its flags."""
        manager = claim.manager or self.get_world(claim.world_id)
        removed = manager.delete_claim(claim)
        gone_contexts = {gone.context for gone in removed}
        for scope in self.stores.persistent.scopes():
            if not gone_contexts.isdisjoint(scope):
                self.stores.persistent.clear(scope)
        return removed

    # ── Info ──────────────────────────────────────────────

    def claim_info(self, subject: Subject, claim: Claim) -> ClaimInfo:
        """Display snapshot of ``claim``.

        Raises:
            PermissionDeniedError: ``subject`` is neither owner, member,
                console nor allowed to inspect other claims.
        """
        if not can_view_claim_info(subject, claim):
            raise PermissionDeniedError(INFO_DENIED, claim_id=str(claim.id))
        pvp = self.resolver.effective_value(claim, PVP_FLAG)
        return build_claim_info(claim, self.identities, pvp)

    # ── Lifecycle ─────────────────────────────────────────

    def close(self) -> None:
        with self._lock:
            for manager in self._worlds.values():
                manager.close()
            self._worlds.clear()
            self._closed = True
        self.stores.clear()


# ── Singleton factory ────────────────────────────────────────────

_service: ClaimFlagService | None = None


def get_claim_service(config: ClaimCoreConfig | None = None) -> ClaimFlagService:
    """Get or create the process-wide ClaimFlagService.

    Args:
        config: Engine configuration (used only on first call).
    """
    global _service
    if _service is None:
        _service = ClaimFlagService(config)
    return _service


def reset_claim_service() -> None:
    """Close and drop the singleton (for testing)."""
    global _service
    if _service is not None:
        _service.close()
    _service = None


__all__ = [
    "ClaimFlagService",
    "PVP_FLAG",
    "get_claim_service",
    "reset_claim_service",
]
