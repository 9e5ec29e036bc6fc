"""Shared pytest fixtures for invsync tests."""

import io
from collections import defaultdict
from collections.abc import Generator
from typing import Any

import pytest
from loguru import logger

from invsync.errors import GatewayError
from invsync.models.entities import Group, Host, Inventory
from invsync.models.state import GroupState, HostState, InventoryState
from invsync.services.reconciler import InventoryReconciler

MUTATING_PREFIXES = ("create_", "update_", "delete_", "add_", "remove_")


class FakeController:
    """
    In-memory controller implementing ControllerGatewayPort.

    Ids are assigned per entity kind and never reused. Every call is
    recorded in ``calls``; names listed in ``fail_on`` raise a 500.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: set[str] = set()
        self.inventories: dict[int, Inventory] = {}
        self.groups: dict[int, Group] = {}
        self.hosts: dict[int, Host] = {}
        self.children: dict[int, set[int]] = defaultdict(set)
        self.host_groups: dict[int, set[int]] = defaultdict(set)
        self._last_id: dict[str, int] = defaultdict(int)

    # Test helpers

    @property
    def mutations(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0].startswith(MUTATING_PREFIXES)]

    def calls_named(self, *names: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in names]

    def seed_inventory(self, name: str, inventory_id: int | None = None) -> Inventory:
        inventory = Inventory(id=self._assign("inventory", inventory_id), organization=1, name=name)
        self.inventories[inventory.id] = inventory  # type: ignore[index]
        return inventory

    def seed_group(self, inventory_id: int, name: str, group_id: int | None = None) -> Group:
        group = Group(id=self._assign("group", group_id), inventory=inventory_id, name=name)
        self.groups[group.id] = group  # type: ignore[index]
        return group

    def seed_host(self, inventory_id: int, name: str, host_id: int | None = None) -> Host:
        host = Host(id=self._assign("host", host_id), inventory=inventory_id, name=name)
        self.hosts[host.id] = host  # type: ignore[index]
        return host

    def group_named(self, name: str) -> Group:
        return next(g for g in self.groups.values() if g.name == name)

    def host_named(self, name: str) -> Host:
        return next(h for h in self.hosts.values() if h.name == name)

    def child_names(self, group_id: int) -> set[str]:
        return {self.groups[c].name for c in self.children[group_id]}

    def host_group_names(self, host_id: int) -> set[str]:
        return {self.groups[g].name for g in self.host_groups[host_id]}

    # Inventories

    def create_inventory(self, inventory: Inventory) -> Inventory:
        self._record("create_inventory", inventory.name)
        created = inventory.model_copy(update={"id": self._assign("inventory")})
        self.inventories[created.id] = created  # type: ignore[index]
        return created.model_copy()

    def get_inventory(self, inventory_id: int) -> Inventory:
        self._record("get_inventory", inventory_id)
        return self._lookup(self.inventories, inventory_id).model_copy()

    def update_inventory(self, inventory_id: int, inventory: Inventory) -> Inventory:
        self._record("update_inventory", inventory_id)
        self._lookup(self.inventories, inventory_id)
        self.inventories[inventory_id] = inventory.model_copy(update={"id": inventory_id})
        return self.inventories[inventory_id].model_copy()

    def delete_inventory(self, inventory_id: int) -> None:
        self._record("delete_inventory", inventory_id)
        self._lookup(self.inventories, inventory_id)
        del self.inventories[inventory_id]
        for group_id in [g.id for g in self.groups.values() if g.inventory == inventory_id]:
            self._drop_group(group_id)  # type: ignore[arg-type]
        for host_id in [h.id for h in self.hosts.values() if h.inventory == inventory_id]:
            self._drop_host(host_id)  # type: ignore[arg-type]

    # Groups

    def create_group(self, group: Group) -> Group:
        self._record("create_group", group.name)
        self._lookup(self.inventories, group.inventory)
        created = group.model_copy(update={"id": self._assign("group")})
        self.groups[created.id] = created  # type: ignore[index]
        return created.model_copy()

    def get_group(self, group_id: int) -> Group:
        self._record("get_group", group_id)
        return self._lookup(self.groups, group_id).model_copy()

    def update_group(self, group_id: int, group: Group) -> Group:
        self._record("update_group", group_id)
        self._lookup(self.groups, group_id)
        self.groups[group_id] = group.model_copy(update={"id": group_id})
        return self.groups[group_id].model_copy()

    def delete_group(self, group_id: int) -> None:
        self._record("delete_group", group_id)
        self._lookup(self.groups, group_id)
        self._drop_group(group_id)

    def list_group_children(self, group_id: int) -> list[Group]:
        self._record("list_group_children", group_id)
        self._lookup(self.groups, group_id)
        return [self.groups[c].model_copy() for c in sorted(self.children[group_id])]

    def list_inventory_groups(self, inventory_id: int) -> list[Group]:
        self._record("list_inventory_groups", inventory_id)
        self._lookup(self.inventories, inventory_id)
        return [g.model_copy() for g in self.groups.values() if g.inventory == inventory_id]

    # Hosts

    def create_host(self, host: Host) -> Host:
        self._record("create_host", host.name)
        self._lookup(self.inventories, host.inventory)
        created = host.model_copy(update={"id": self._assign("host")})
        self.hosts[created.id] = created  # type: ignore[index]
        return created.model_copy()

    def get_host(self, host_id: int) -> Host:
        self._record("get_host", host_id)
        return self._lookup(self.hosts, host_id).model_copy()

    def update_host(self, host_id: int, host: Host) -> Host:
        self._record("update_host", host_id)
        self._lookup(self.hosts, host_id)
        self.hosts[host_id] = host.model_copy(update={"id": host_id})
        return self.hosts[host_id].model_copy()

    def delete_host(self, host_id: int) -> None:
        self._record("delete_host", host_id)
        self._lookup(self.hosts, host_id)
        self._drop_host(host_id)

    def list_host_groups(self, host_id: int) -> list[Group]:
        self._record("list_host_groups", host_id)
        self._lookup(self.hosts, host_id)
        return [self.groups[g].model_copy() for g in sorted(self.host_groups[host_id])]

    def list_inventory_hosts(self, inventory_id: int) -> list[Host]:
        self._record("list_inventory_hosts", inventory_id)
        self._lookup(self.inventories, inventory_id)
        return [h.model_copy() for h in self.hosts.values() if h.inventory == inventory_id]

    # Associations

    def add_child_to_group(self, parent_id: int, child_id: int) -> None:
        self._record("add_child_to_group", parent_id, child_id)
        self._lookup(self.groups, parent_id)
        self._lookup(self.groups, child_id)
        self.children[parent_id].add(child_id)

    def remove_child_from_group(self, parent_id: int, child_id: int) -> None:
        self._record("remove_child_from_group", parent_id, child_id)
        self._lookup(self.groups, parent_id)
        self.children[parent_id].discard(child_id)

    def add_group_to_host(self, host_id: int, group_id: int) -> None:
        self._record("add_group_to_host", host_id, group_id)
        self._lookup(self.hosts, host_id)
        self._lookup(self.groups, group_id)
        self.host_groups[host_id].add(group_id)

    def remove_group_from_host(self, host_id: int, group_id: int) -> None:
        self._record("remove_group_from_host", host_id, group_id)
        self._lookup(self.hosts, host_id)
        self.host_groups[host_id].discard(group_id)

    # Internals

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise GatewayError(
                "status: 500, body: internal error",
                "POST",
                f"/fake/{call[0]}",
                status_code=500,
                body="internal error",
            )

    def _assign(self, kind: str, requested: int | None = None) -> int:
        if requested is None:
            requested = self._last_id[kind] + 1
        self._last_id[kind] = max(self._last_id[kind], requested)
        return requested

    def _lookup(self, table: dict[int, Any], key: int | None) -> Any:
        if key not in table:
            raise GatewayError(
                'status: 404, body: {"detail":"Not found."}',
                "GET",
                f"/fake/{key}",
                status_code=404,
                body='{"detail":"Not found."}',
            )
        return table[key]

    def _drop_group(self, group_id: int) -> None:
        del self.groups[group_id]
        self.children.pop(group_id, None)
        for members in (*self.children.values(), *self.host_groups.values()):
            members.discard(group_id)

    def _drop_host(self, host_id: int) -> None:
        del self.hosts[host_id]
        self.host_groups.pop(host_id, None)


@pytest.fixture
def controller() -> FakeController:
    """Provide an empty in-memory controller."""
    return FakeController()


@pytest.fixture
def reconciler(controller: FakeController) -> InventoryReconciler:
    """Provide a reconciler bound to the in-memory controller."""
    return InventoryReconciler(controller)


@pytest.fixture
def desired_inventory() -> InventoryState:
    """Inventory 'Inv': group A with child B, host H in A and B."""
    return InventoryState(
        name="Inv",
        description="Lab inventory",
        variables={"env": "lab"},
        groups=[
            GroupState(name="A", children=["B"], variables={"tier": "web"}),
            GroupState(name="B"),
        ],
        hosts=[
            HostState(name="H", groups=["A", "B"], variables={"ansible_host": "10.0.0.5"}),
        ],
    )


@pytest.fixture
def log_capture() -> Generator[io.StringIO, None, None]:
    """Capture loguru output to a string buffer."""
    string_io = io.StringIO()
    handler_id = logger.add(string_io, format="{level} {message}")
    yield string_io
    logger.remove(handler_id)
