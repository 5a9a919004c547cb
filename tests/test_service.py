"""Tests for ClaimFlagService."""

from __future__ import annotations

from uuid import uuid4

import pytest
from claimcore import (
    Claim,
    ClaimCoreConfig,
    ClaimData,
    ClaimFlagService,
    ClaimInfo,
    ClaimNotFoundError,
    ClaimType,
    ConfigurationError,
    ConsoleSubject,
    DeletionPolicy,
    FlagLayer,
    InvalidFlagError,
    Location,
    NoTransferableOwnerError,
    PermissionDeniedError,
    PlayerSubject,
    StaticIdentityResolver,
    SubjectRole,
    Tristate,
    Vector3i,
    WildernessBounds,
    get_claim_service,
    reset_claim_service,
)

WORLD = "world"
NETHER = "nether"


@pytest.fixture
def owner() -> PlayerSubject:
    return PlayerSubject.create(uuid4(), "Alex", role=SubjectRole.PLAYER)


@pytest.fixture
def service(owner: PlayerSubject) -> ClaimFlagService:
    config = ClaimCoreConfig(wilderness=WildernessBounds(radius=1000))
    svc = ClaimFlagService(config, identity_resolver=StaticIdentityResolver({owner.player_id: "Alex"}))
    svc.register_world(WORLD)
    svc.register_world(NETHER)
    yield svc
    svc.close()


@pytest.fixture
def claim(service: ClaimFlagService, owner: PlayerSubject) -> Claim:
    return service.add_claim(
        Claim(
            Location.of(WORLD, 0, 0, 0),
            Location.of(WORLD, 40, 255, 40),
            ClaimType.BASIC,
            owner.player_id,
            data=ClaimData(name="Homestead", greeting="Welcome"),
        )
    )


class TestWorlds:
    """Tests for world registration."""

    def test_register_is_idempotent(self, service: ClaimFlagService) -> None:
        manager = service.get_world(WORLD)
        assert service.register_world(WORLD) is manager
        assert len(service.worlds()) == 2

    def test_unknown_world(self, service: ClaimFlagService) -> None:
        with pytest.raises(ConfigurationError):
            service.get_world("the_end")

    def test_defaults_seeded(self, service: ClaimFlagService, claim: Claim) -> None:
        assert service.effective_value(claim, "pvp") is Tristate.FALSE
        wilderness = service.get_world(WORLD).wilderness
        assert service.effective_value(wilderness, "pvp") is Tristate.TRUE

    def test_seeding_disabled(self) -> None:
        svc = ClaimFlagService(ClaimCoreConfig(seed_default_flags=False))
        svc.register_world(WORLD)
        assert len(svc.stores.transient) == 0
        svc.close()

    def test_custom_namespace(self) -> None:
        svc = ClaimFlagService(ClaimCoreConfig(flag_namespace="server.flag"))
        svc.register_world(WORLD)
        wilderness = svc.get_world(WORLD).wilderness
        assert svc.list_flags(wilderness)[0].key.startswith("server.flag.")
        svc.close()

    def test_closed(self, service: ClaimFlagService) -> None:
        service.close()
        with pytest.raises(ConfigurationError):
            service.register_world("the_end")


class TestResolveClaims:
    """Tests for claim lookup."""

    def test_resolve_at(self, service: ClaimFlagService, claim: Claim) -> None:
        assert service.resolve_claim_at(WORLD, Vector3i(10, 64, 10)) is claim
        wilderness = service.resolve_claim_at(WORLD, Vector3i(500, 64, 500))
        assert wilderness.is_wilderness
        assert service.resolve_claim_at(NETHER, Vector3i(10, 64, 10)).world_id == NETHER

    def test_resolve_by_id_or_name(self, service: ClaimFlagService, claim: Claim) -> None:
        assert service.resolve_claim_by_id(str(claim.id)) is claim
        assert service.resolve_claim_by_id("HOMESTEAD") is claim
        assert service.resolve_claim_by_id("homestead", world_id=WORLD) is claim

    def test_resolve_by_id_other_worlds(self, service: ClaimFlagService) -> None:
        nether_claim = service.add_claim(Claim(Location.of(NETHER, 0, 0, 0), Location.of(NETHER, 5, 5, 5)))
        assert service.resolve_claim_by_id(str(nether_claim.id)) is nether_claim
        with pytest.raises(ClaimNotFoundError):
            service.resolve_claim_by_id(str(nether_claim.id), world_id=WORLD)

    def test_not_found(self, service: ClaimFlagService) -> None:
        with pytest.raises(ClaimNotFoundError, match="No claim found."):
            service.resolve_claim_by_id("nowhere")


class TestFlagOperations:
    """Tests for flag listing and mutation through the service."""

    def test_list_toggle_set(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        rows = {row.base_flag: row for row in service.list_flags(claim, owner)}
        explosion = rows["explosion"]
        assert explosion.default_value is Tristate.FALSE
        assert explosion.can_edit(FlagLayer.CLAIM)

        new_value = service.toggle_flag(owner, claim, explosion.key, explosion.default_value, FlagLayer.CLAIM)
        assert new_value is Tristate.UNDEFINED
        new_value = service.toggle_flag(owner, claim, explosion.key, new_value, FlagLayer.CLAIM)
        assert new_value is Tristate.TRUE
        assert service.effective_value(claim, "explosion") is Tristate.TRUE

        service.set_flag(owner, claim, "explosion", None, "undefined")
        assert service.effective_value(claim, "explosion") is Tristate.FALSE

    def test_set_unknown_flag(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        with pytest.raises(InvalidFlagError):
            service.set_flag(owner, claim, "no-such-flag", None, Tristate.TRUE)


class TestTransfer:
    """Tests for transfer_owner."""

    def test_transfer(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        new_owner = uuid4()
        service.transfer_owner(claim, new_owner, owner)
        assert claim.owner_id == new_owner

    def test_wilderness(self, service: ClaimFlagService) -> None:
        with pytest.raises(NoTransferableOwnerError):
            service.transfer_owner(service.get_world(WORLD).wilderness, uuid4())

    def test_subdivision(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        sub = service.add_claim(
            Claim(Location.of(WORLD, 1, 0, 1), Location.of(WORLD, 5, 255, 5), ClaimType.SUBDIVISION, parent_id=claim.id)
        )
        with pytest.raises(NoTransferableOwnerError):
            service.transfer_owner(sub, uuid4())
        assert sub.owner_id == owner.player_id

    def test_admin_claim_requires_capability(self, service: ClaimFlagService) -> None:
        admin_claim = service.add_claim(
            Claim(Location.of(WORLD, 100, 0, 100), Location.of(WORLD, 120, 255, 120), ClaimType.ADMIN)
        )
        player = PlayerSubject.create(uuid4(), role=SubjectRole.MODERATOR)
        with pytest.raises(PermissionDeniedError):
            service.transfer_owner(admin_claim, uuid4(), player)
        assert admin_claim.owner_id is None
        service.transfer_owner(admin_claim, uuid4(), PlayerSubject.create(uuid4(), role=SubjectRole.ADMIN))
        assert admin_claim.owner_id is not None
        assert admin_claim.is_admin


class TestDelete:
    """Tests for delete_claim."""

    def test_delete_drops_flags(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        service.set_flag(owner, claim, "pvp", None, Tristate.TRUE)
        service.set_flag(owner, claim, "pvp", None, Tristate.TRUE, context="gp_source=player")
        removed = service.delete_claim(claim)
        assert removed == [claim]
        assert all(claim.context not in scope for scope in service.stores.persistent.scopes())
        assert service.resolve_claim_at(WORLD, Vector3i(10, 64, 10)).is_wilderness

    def test_reparent_policy(self) -> None:
        config = ClaimCoreConfig(deletion_policy=DeletionPolicy.REPARENT, wilderness=WildernessBounds(radius=1000))
        svc = ClaimFlagService(config)
        svc.register_world(WORLD)
        top = svc.add_claim(Claim(Location.of(WORLD, 0, 0, 0), Location.of(WORLD, 50, 9, 50)))
        mid = svc.add_claim(
            Claim(Location.of(WORLD, 0, 0, 0), Location.of(WORLD, 20, 9, 20), ClaimType.SUBDIVISION, parent_id=top.id)
        )
        leaf = svc.add_claim(
            Claim(Location.of(WORLD, 0, 0, 0), Location.of(WORLD, 5, 9, 5), ClaimType.SUBDIVISION, parent_id=mid.id)
        )
        assert svc.delete_claim(mid) == [mid]
        assert leaf.parent is top
        svc.close()


class TestClaimInfo:
    """Tests for claim_info."""

    def test_owner_view(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        info = service.claim_info(owner, claim)
        assert isinstance(info, ClaimInfo)
        assert info.claim_id == claim.id
        assert info.name == "Homestead"
        assert info.owner_name == "Alex"
        assert info.claim_type is ClaimType.BASIC
        assert info.area == 41 * 41
        assert info.greeting == "Welcome"
        assert info.pvp is Tristate.FALSE
        assert info.inherit_parent is None
        assert info.corners["SE"] == (40, 65, 40)

    def test_admin_owner_name(self, service: ClaimFlagService) -> None:
        admin_claim = service.add_claim(
            Claim(Location.of(WORLD, 100, 0, 100), Location.of(WORLD, 120, 255, 120), ClaimType.ADMIN)
        )
        assert service.claim_info(ConsoleSubject(), admin_claim).owner_name == "administrator"

    def test_member_names(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        claim.data.builders.append(uuid4())
        info = service.claim_info(owner, claim)
        assert info.builders == ["someone"]

    def test_pvp_reflects_claim_value(self, service: ClaimFlagService, claim: Claim, owner: PlayerSubject) -> None:
        service.set_flag(owner, claim, "pvp", None, Tristate.TRUE)
        assert service.claim_info(owner, claim).pvp is Tristate.TRUE

    def test_stranger_denied(self, service: ClaimFlagService, claim: Claim) -> None:
        stranger = PlayerSubject.create(uuid4(), role=SubjectRole.PLAYER)
        with pytest.raises(PermissionDeniedError, match="do not have permission to view"):
            service.claim_info(stranger, claim)

    def test_moderator_allowed(self, service: ClaimFlagService, claim: Claim) -> None:
        moderator = PlayerSubject.create(uuid4(), role=SubjectRole.MODERATOR)
        assert service.claim_info(moderator, claim).claim_id == claim.id


class TestSingleton:
    """Tests for the process-wide service."""

    def test_get_and_reset(self) -> None:
        reset_claim_service()
        first = get_claim_service(ClaimCoreConfig())
        assert get_claim_service() is first
        reset_claim_service()
        assert get_claim_service(ClaimCoreConfig()) is not first
        reset_claim_service()
