"""Snapshot builder.

Projects controller entities back into declarative InventoryState.
Children and host memberships are always read fresh from the
controller so the snapshot reflects what actually exists, not what
the reconciler intended.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from invsync.errors import ReconciliationError
from invsync.models.entities import Group, Host, Inventory
from invsync.models.state import GroupState, HostState, InventoryState
from invsync.services.steps import step
from invsync.utils.variables import decode_variables

if TYPE_CHECKING:
    from invsync.ports import ControllerGatewayPort


class SnapshotBuilder:
    """Builds InventoryState snapshots. Only issues read calls."""

    def __init__(self, gateway: "ControllerGatewayPort") -> None:
        self.gateway = gateway

    def groups(self, entities: Iterable[Group]) -> list[GroupState]:
        """Snapshot groups with their current child names."""
        states = []
        for group in entities:
            with step("read children of", "group", group.name):
                children = self.gateway.list_group_children(_require_id(group))
                variables = decode_variables(group.variables)
            states.append(
                GroupState(
                    id=group.id,
                    inventory=group.inventory,
                    name=group.name,
                    children=[child.name for child in children],
                    description=group.description,
                    variables=variables,
                )
            )
        return sorted(states, key=lambda s: s.name)

    def hosts(self, entities: Iterable[Host]) -> list[HostState]:
        """Snapshot hosts with their current group names."""
        states = []
        for host in entities:
            with step("read groups of", "host", host.name):
                groups = self.gateway.list_host_groups(_require_id(host))
                variables = decode_variables(host.variables)
            states.append(
                HostState(
                    id=host.id,
                    inventory=host.inventory,
                    name=host.name,
                    groups=[group.name for group in groups],
                    description=host.description,
                    variables=variables,
                )
            )
        return sorted(states, key=lambda s: s.name)

    def inventory(
        self,
        inventory: Inventory,
        groups: list[GroupState],
        hosts: list[HostState],
    ) -> InventoryState:
        """Assemble the inventory snapshot from already built parts."""
        with step("decode variables of", "inventory", inventory.name):
            variables = decode_variables(inventory.variables)
        return InventoryState(
            id=inventory.id,
            organization=inventory.organization,
            name=inventory.name,
            description=inventory.description,
            variables=variables,
            groups=groups,
            hosts=hosts,
        )


def _require_id(entity: Group | Host) -> int:
    if entity.id is None:
        kind = type(entity).__name__.lower()
        raise ReconciliationError(
            f"Cannot snapshot {kind} {entity.name!r}: it has no id",
            action="snapshot",
            kind=kind,
            identifier=entity.name,
        )
    return entity.id
