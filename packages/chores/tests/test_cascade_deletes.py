from __future__ import annotations

import pytest
from packages.chores.coordinator import MutationCoordinator
from packages.chores.entities import EntityKind
from packages.chores.remote_base import RemoteError
from packages.chores.remote_memory import MemoryRemoteAdapter
from packages.chores.store import EntityStore

HOME = "HOME-2026"


class _FailingAdapter(MemoryRemoteAdapter):
    def __init__(self) -> None:
        super().__init__()
        self.fail_on: set[str] = set()

    def update(self, kind, entity_id, fields):
        if f"update {kind.value}" in self.fail_on:
            raise RemoteError(f"update {kind.value}", "simulated network error")
        return super().update(kind, entity_id, fields)

    def delete(self, kind, entity_id):
        if f"delete {kind.value}" in self.fail_on:
            raise RemoteError(f"delete {kind.value}", "simulated network error")
        return super().delete(kind, entity_id)


@pytest.fixture()
def adapter() -> _FailingAdapter:
    remote = _FailingAdapter()
    remote.insert_household(HOME)
    return remote


@pytest.fixture()
def coordinator(adapter: _FailingAdapter) -> MutationCoordinator:
    c = MutationCoordinator(EntityStore(), adapter, HOME)
    c.refresh(display_name="Alex")
    return c


def _household(coordinator: MutationCoordinator):
    alex = coordinator.store.assignees[0]
    sam = coordinator.add_assignee("Sam")
    kitchen = coordinator.add_category("Kitchen")
    coordinator.toggle_category_assignee(kitchen.id, alex.id)
    mop = coordinator.add_chore("Mop floor", category_id=kitchen.id)
    coordinator.toggle_chore_assignee(mop.id, alex.id)
    coordinator.toggle_chore_assignee(mop.id, sam.id)
    return alex, sam, kitchen, mop


def test_delete_assignee_strips_every_reference(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    alex, sam, kitchen, mop = _household(coordinator)

    assert coordinator.delete_assignee(alex.id)

    assert coordinator.store.get_assignee(alex.id) is None
    assert coordinator.store.get_chore(mop.id).direct_assignee_ids == (sam.id,)
    assert coordinator.store.get_category(kitchen.id).default_assignee_ids == ()

    [remote_chore] = adapter.list_by_household(EntityKind.CHORE, HOME)
    [remote_category] = adapter.list_by_household(EntityKind.CATEGORY, HOME)
    assert remote_chore.direct_assignee_ids == (sam.id,)
    assert remote_category.default_assignee_ids == ()
    assert [a.name for a in adapter.list_by_household(EntityKind.ASSIGNEE, HOME)] == ["Sam"]


def test_delete_category_uncategorizes_its_chores(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    _alex, _sam, kitchen, mop = _household(coordinator)
    dishes = coordinator.add_chore("Wash dishes", category_id=kitchen.id)

    assert coordinator.delete_category(kitchen.id)

    assert coordinator.store.categories == []
    assert {c.id for c in coordinator.store.chores} == {mop.id, dishes.id}
    assert all(c.category_id is None for c in coordinator.store.chores)
    assert all(c.category_id is None for c in adapter.list_by_household(EntityKind.CHORE, HOME))
    assert adapter.list_by_household(EntityKind.CATEGORY, HOME) == []


def test_partial_failure_reverts_locally_and_flags_repair(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    alex, sam, kitchen, mop = _household(coordinator)
    adapter.fail_on.add("update categories")

    assert coordinator.delete_assignee(alex.id) is False

    # Local state is back to the pre-delete snapshot.
    assert coordinator.store.get_assignee(alex.id) is not None
    assert coordinator.store.get_chore(mop.id).direct_assignee_ids == (alex.id, sam.id)
    assert coordinator.error == "Failed to delete assignee. Please try again."
    assert coordinator.needs_repair is True

    # The chore step already went through remotely and is not compensated.
    assert adapter.list_by_household(EntityKind.CHORE, HOME)[0].direct_assignee_ids == (sam.id,)

    adapter.fail_on.clear()
    assert coordinator.repair_references() == 0
    assert coordinator.needs_repair is False
    assert coordinator.store.get_chore(mop.id).direct_assignee_ids == (sam.id,)

    # Retrying the delete finishes the job.
    assert coordinator.delete_assignee(alex.id)
    assert adapter.list_by_household(EntityKind.CATEGORY, HOME)[0].default_assignee_ids == ()


def test_first_step_failure_does_not_flag_repair(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    _alex, _sam, kitchen, _mop = _household(coordinator)
    adapter.fail_on.add("update chores")

    assert coordinator.delete_category(kitchen.id) is False

    assert coordinator.needs_repair is False
    assert coordinator.store.get_category(kitchen.id) is not None


def test_repair_strips_dangling_references(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    alex, sam, kitchen, mop = _household(coordinator)

    # Another session deleted Alex without cleaning up.
    adapter.delete(EntityKind.ASSIGNEE, alex.id)

    assert coordinator.repair_references() == 2
    assert coordinator.store.get_chore(mop.id).direct_assignee_ids == (sam.id,)
    assert coordinator.store.get_category(kitchen.id).default_assignee_ids == ()

    assert coordinator.repair_references() == 0


def test_repair_failure_sets_banner(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    alex, _sam, _kitchen, _mop = _household(coordinator)
    adapter.delete(EntityKind.ASSIGNEE, alex.id)
    adapter.fail_on.add("update categories")

    assert coordinator.repair_references() is None
    assert coordinator.error == "Failed to repair household data. Please try again."


def test_deleting_an_already_deleted_chore_succeeds(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    chore = coordinator.add_chore("Dust shelves")
    adapter.delete(EntityKind.CHORE, chore.id)

    assert coordinator.delete_chore(chore.id)
    assert coordinator.store.chores == []
    assert coordinator.error is None


def test_delete_assignee_skips_chores_another_session_deleted(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    alex, sam, kitchen, mop = _household(coordinator)
    other = MutationCoordinator(EntityStore(), adapter, HOME)
    assert other.refresh()
    assert other.delete_chore(mop.id)

    # This session still holds the chore it no longer has remotely.
    assert coordinator.store.get_chore(mop.id) is not None
    assert coordinator.delete_assignee(alex.id)

    assert coordinator.error is None
    assert coordinator.needs_repair is False
    assert [a.name for a in adapter.list_by_household(EntityKind.ASSIGNEE, HOME)] == ["Sam"]
    assert adapter.list_by_household(EntityKind.CATEGORY, HOME)[0].default_assignee_ids == ()


def test_delete_category_skips_chores_another_session_deleted(
    coordinator: MutationCoordinator, adapter: _FailingAdapter
) -> None:
    _alex, _sam, kitchen, mop = _household(coordinator)
    dishes = coordinator.add_chore("Wash dishes", category_id=kitchen.id)
    other = MutationCoordinator(EntityStore(), adapter, HOME)
    assert other.refresh()
    assert other.delete_chore(mop.id)

    assert coordinator.delete_category(kitchen.id)

    assert coordinator.error is None
    assert adapter.list_by_household(EntityKind.CATEGORY, HOME) == []
    [remote_chore] = adapter.list_by_household(EntityKind.CHORE, HOME)
    assert (remote_chore.id, remote_chore.category_id) == (dishes.id, None)
