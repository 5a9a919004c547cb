"""Tests for ClaimWorldManager."""

from __future__ import annotations

import threading
from uuid import uuid4

import pytest
from claimcore import (
    Claim,
    ClaimData,
    ClaimHierarchyError,
    ClaimNotFoundError,
    ClaimStorage,
    ClaimType,
    ClaimWorldManager,
    DeletionPolicy,
    Location,
    NoTransferableOwnerError,
    StorageError,
    Vector3i,
    WildernessBounds,
)

WORLD = "world"


def make_claim(lo, hi, claim_type=ClaimType.BASIC, owner=None, **kwargs) -> Claim:
    return Claim(Location.of(WORLD, *lo), Location.of(WORLD, *hi), claim_type, owner, **kwargs)


class RecordingStorage(ClaimStorage):
    """Storage double that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.saved: list[Claim] = []
        self.deleted: list[Claim] = []
        self.fail = False

    def save_claim(self, claim: Claim) -> None:
        if self.fail:
            raise StorageError("disk full")
        self.saved.append(claim)

    def delete_claim(self, claim: Claim) -> None:
        self.deleted.append(claim)


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def manager(storage: RecordingStorage) -> ClaimWorldManager:
    return ClaimWorldManager(WORLD, wilderness=WildernessBounds(radius=1000), storage=storage)


def build_tree(manager: ClaimWorldManager, owner=None):
    parent = manager.add_claim(make_claim((0, 0, 0), (100, 255, 100), owner=owner or uuid4()))
    child = manager.add_claim(make_claim((10, 0, 10), (50, 255, 50), ClaimType.SUBDIVISION, parent_id=parent.id))
    grandchild = manager.add_claim(make_claim((20, 0, 20), (30, 255, 30), ClaimType.SUBDIVISION, parent_id=child.id))
    return parent, child, grandchild


class TestRegistry:
    """Tests for claim registration and lookup."""

    def test_wilderness_sentinel(self, manager: ClaimWorldManager) -> None:
        wilderness = manager.get_wilderness_claim()
        assert wilderness.is_wilderness
        assert wilderness.owner_id is None
        assert wilderness.parent is None
        assert len(manager) == 0

    def test_len_after_close(self, manager: ClaimWorldManager) -> None:
        manager.add_claim(make_claim((0, 0, 0), (10, 10, 10), owner=uuid4()))
        assert len(manager) == 1
        manager.close()
        assert len(manager) == 0

    def test_add_and_get(self, manager: ClaimWorldManager, storage: RecordingStorage) -> None:
        claim = manager.add_claim(make_claim((0, 0, 0), (10, 10, 10), owner=uuid4()))
        assert manager.get_claim_by_id(claim.id) is claim
        assert claim.manager is manager
        assert claim in manager
        assert storage.saved == [claim]
        assert manager.get_world_claims() == [claim]

    def test_child_list_order(self, manager: ClaimWorldManager) -> None:
        parent = manager.add_claim(make_claim((0, 0, 0), (100, 10, 100), owner=uuid4()))
        first = manager.add_claim(make_claim((0, 0, 0), (10, 10, 10), ClaimType.SUBDIVISION, parent_id=parent.id))
        second = manager.add_claim(make_claim((20, 0, 20), (30, 10, 30), ClaimType.SUBDIVISION, parent_id=parent.id))
        assert parent.children == [first, second]
        assert manager.get_all_claims() == [parent, first, second]

    def test_duplicate_rejected(self, manager: ClaimWorldManager) -> None:
        claim = manager.add_claim(make_claim((0, 0, 0), (10, 10, 10)))
        with pytest.raises(ClaimHierarchyError):
            manager.add_claim(claim)

    def test_child_outside_parent_rejected(self, manager: ClaimWorldManager) -> None:
        parent = manager.add_claim(make_claim((0, 0, 0), (10, 10, 10)))
        with pytest.raises(ClaimHierarchyError, match="inside its parent"):
            manager.add_claim(make_claim((5, 0, 5), (20, 10, 20), ClaimType.SUBDIVISION, parent_id=parent.id))
        assert parent.children_ids == []

    def test_unknown_parent_rejected(self, manager: ClaimWorldManager) -> None:
        with pytest.raises(ClaimHierarchyError):
            manager.add_claim(make_claim((0, 0, 0), (1, 1, 1), ClaimType.SUBDIVISION, parent_id=uuid4()))

    def test_other_world_rejected(self, manager: ClaimWorldManager) -> None:
        claim = Claim(Location.of("nether", 0, 0, 0), Location.of("nether", 1, 1, 1))
        with pytest.raises(ClaimHierarchyError):
            manager.add_claim(claim)

    def test_player_claims(self, manager: ClaimWorldManager) -> None:
        owner = uuid4()
        mine = manager.add_claim(make_claim((0, 0, 0), (10, 10, 10), owner=owner))
        manager.add_claim(make_claim((20, 0, 20), (30, 10, 30), owner=uuid4()))
        assert manager.get_player_claims(owner) == [mine]

    def test_find_claim(self, manager: ClaimWorldManager) -> None:
        _, child, _ = build_tree(manager)
        child.data = ClaimData(name="Market")
        assert manager.find_claim("market") is child
        assert manager.find_claim(str(child.id).upper()) is child
        assert manager.find_claim("nowhere") is None
        assert manager.find_claim("  ") is None


class TestSpatialLookup:
    """Tests for get_claim_at."""

    def test_deepest_subdivision(self, manager: ClaimWorldManager) -> None:
        parent, child, grandchild = build_tree(manager)
        assert manager.get_claim_at(Location.of(WORLD, 25, 64, 25)) is grandchild
        assert manager.get_claim_at(Location.of(WORLD, 15, 64, 15)) is child
        assert manager.get_claim_at(Location.of(WORLD, 75, 64, 75)) is parent

    def test_without_subdivisions(self, manager: ClaimWorldManager) -> None:
        parent, _, _ = build_tree(manager)
        assert manager.get_claim_at(Location.of(WORLD, 25, 64, 25), include_subdivisions=False) is parent

    def test_wilderness_fallback(self, manager: ClaimWorldManager) -> None:
        build_tree(manager)
        assert manager.get_claim_at(Location.of(WORLD, 500, 64, 500)) is manager.wilderness
        assert manager.get_claim_at(Location.of("nether", 5, 64, 5)) is manager.wilderness

    def test_first_sibling_wins(self, manager: ClaimWorldManager) -> None:
        """Overlapping children are tested in child-list order."""
        parent = manager.add_claim(make_claim((0, 0, 0), (100, 10, 100)))
        first = manager.add_claim(make_claim((0, 0, 0), (50, 10, 50), ClaimType.SUBDIVISION, parent_id=parent.id))
        manager.add_claim(make_claim((25, 0, 25), (75, 10, 75), ClaimType.SUBDIVISION, parent_id=parent.id))
        assert manager.get_claim_at(Location(WORLD, Vector3i(30, 5, 30))) is first


class TestTransfer:
    """Tests for transfer_claim_owner."""

    def test_transfer_top_level(self, manager: ClaimWorldManager, storage: RecordingStorage) -> None:
        parent, child, _ = build_tree(manager)
        new_owner = uuid4()
        manager.transfer_claim_owner(parent, new_owner)
        assert parent.owner_id == new_owner
        assert child.owner_id == new_owner
        assert storage.saved[-1] is parent

    def test_transfer_to_administrator(self, manager: ClaimWorldManager) -> None:
        parent, _, _ = build_tree(manager)
        manager.transfer_claim_owner(parent, None)
        assert parent.owner_id is None
        assert parent.type is ClaimType.BASIC

    def test_subdivision_rejected(self, manager: ClaimWorldManager) -> None:
        owner = uuid4()
        _, child, grandchild = build_tree(manager, owner)
        for claim in (child, grandchild):
            with pytest.raises(NoTransferableOwnerError):
                manager.transfer_claim_owner(claim, uuid4())
            assert claim.owner_id == owner

    def test_wilderness_rejected(self, manager: ClaimWorldManager) -> None:
        with pytest.raises(NoTransferableOwnerError):
            manager.transfer_claim_owner(manager.wilderness, uuid4())

    def test_unregistered_rejected(self, manager: ClaimWorldManager) -> None:
        with pytest.raises(ClaimNotFoundError):
            manager.transfer_claim_owner(make_claim((0, 0, 0), (1, 1, 1)), uuid4())

    def test_storage_failure_rolls_back(self, manager: ClaimWorldManager, storage: RecordingStorage) -> None:
        owner = uuid4()
        parent, _, _ = build_tree(manager, owner)
        storage.fail = True
        with pytest.raises(StorageError):
            manager.transfer_claim_owner(parent, uuid4())
        assert parent.owner_id == owner

    def test_flags_and_bounds_untouched(self, manager: ClaimWorldManager) -> None:
        parent, child, _ = build_tree(manager)
        lesser, children = parent.lesser_boundary_corner, list(parent.children_ids)
        manager.transfer_claim_owner(parent, uuid4())
        assert parent.lesser_boundary_corner == lesser
        assert parent.children_ids == children
        assert parent.context.value == str(parent.id)

    def test_concurrent_transfers(self, manager: ClaimWorldManager) -> None:
        """Concurrent transfers leave one of the requested owners."""
        parent, _, _ = build_tree(manager)
        owners = [uuid4() for _ in range(16)]
        threads = [threading.Thread(target=manager.transfer_claim_owner, args=(parent, o)) for o in owners]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert parent.owner_id in owners


class TestDeletion:
    """Tests for delete_claim under both policies."""

    def test_cascade(self, manager: ClaimWorldManager, storage: RecordingStorage) -> None:
        parent, child, grandchild = build_tree(manager)
        removed = manager.delete_claim(child)
        assert removed == [child, grandchild]
        assert parent.children_ids == []
        assert manager.get_claim_by_id(grandchild.id) is None
        assert storage.deleted == [child, grandchild]
        assert child.manager is None

    def test_cascade_top_level(self, manager: ClaimWorldManager) -> None:
        parent, _, _ = build_tree(manager)
        assert len(manager.delete_claim(parent)) == 3
        assert manager.get_world_claims() == []
        assert len(manager) == 0

    def test_reparent_to_grandparent(self, storage: RecordingStorage) -> None:
        manager = ClaimWorldManager(
            WORLD,
            wilderness=WildernessBounds(radius=1000),
            storage=storage,
            deletion_policy=DeletionPolicy.REPARENT,
        )
        parent, child, grandchild = build_tree(manager)
        sibling = manager.add_claim(make_claim((60, 0, 60), (70, 255, 70), ClaimType.SUBDIVISION, parent_id=parent.id))
        removed = manager.delete_claim(child)
        assert removed == [child]
        assert grandchild.parent is parent
        assert parent.children == [grandchild, sibling]
        assert manager.get_claim_at(Location.of(WORLD, 25, 64, 25)) is grandchild

    def test_reparent_top_level_with_subdivisions_rejected(self) -> None:
        manager = ClaimWorldManager(
            WORLD,
            wilderness=WildernessBounds(radius=1000),
            deletion_policy=DeletionPolicy.REPARENT,
        )
        parent, child, _ = build_tree(manager)
        with pytest.raises(ClaimHierarchyError):
            manager.delete_claim(parent)
        assert parent in manager
        assert parent.children == [child]

    def test_wilderness_cannot_be_deleted(self, manager: ClaimWorldManager) -> None:
        with pytest.raises(ClaimHierarchyError):
            manager.delete_claim(manager.wilderness)

    def test_unregistered(self, manager: ClaimWorldManager) -> None:
        with pytest.raises(ClaimNotFoundError):
            manager.delete_claim(make_claim((0, 0, 0), (1, 1, 1)))
