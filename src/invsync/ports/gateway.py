"""Port interfaces for the automation controller API."""

from typing import Protocol

from invsync.models.entities import Group, Host, Inventory


class InventoryGatewayPort(Protocol):
    """Protocol for inventory CRUD."""

    def create_inventory(self, inventory: Inventory) -> Inventory:
        """Create an inventory. Returns it with its assigned id."""
        ...

    def get_inventory(self, inventory_id: int) -> Inventory:
        """Get inventory by ID."""
        ...

    def update_inventory(self, inventory_id: int, inventory: Inventory) -> Inventory:
        """Replace an inventory's fields."""
        ...

    def delete_inventory(self, inventory_id: int) -> None:
        """Delete an inventory along with its groups and hosts."""
        ...


class GroupGatewayPort(Protocol):
    """Protocol for group CRUD and listing."""

    def create_group(self, group: Group) -> Group:
        """Create a group. Returns it with its assigned id."""
        ...

    def get_group(self, group_id: int) -> Group:
        """Get group by ID."""
        ...

    def update_group(self, group_id: int, group: Group) -> Group:
        """Replace a group's fields."""
        ...

    def delete_group(self, group_id: int) -> None:
        """Delete a group."""
        ...

    def list_group_children(self, group_id: int) -> list[Group]:
        """List the direct child groups of a group."""
        ...

    def list_inventory_groups(self, inventory_id: int) -> list[Group]:
        """List all groups of an inventory."""
        ...


class HostGatewayPort(Protocol):
    """Protocol for host CRUD and listing."""

    def create_host(self, host: Host) -> Host:
        """Create a host. Returns it with its assigned id."""
        ...

    def get_host(self, host_id: int) -> Host:
        """Get host by ID."""
        ...

    def update_host(self, host_id: int, host: Host) -> Host:
        """Replace a host's fields."""
        ...

    def delete_host(self, host_id: int) -> None:
        """Delete a host."""
        ...

    def list_host_groups(self, host_id: int) -> list[Group]:
        """List the groups a host belongs to directly."""
        ...

    def list_inventory_hosts(self, inventory_id: int) -> list[Host]:
        """List all hosts of an inventory."""
        ...


class AssociationGatewayPort(Protocol):
    """Protocol for pairwise membership endpoints."""

    def add_child_to_group(self, parent_id: int, child_id: int) -> None:
        """Associate child group with parent group."""
        ...

    def remove_child_from_group(self, parent_id: int, child_id: int) -> None:
        """Disassociate child group from parent group."""
        ...

    def add_group_to_host(self, host_id: int, group_id: int) -> None:
        """Associate host with group."""
        ...

    def remove_group_from_host(self, host_id: int, group_id: int) -> None:
        """Disassociate host from group."""
        ...


class ControllerGatewayPort(
    InventoryGatewayPort,
    GroupGatewayPort,
    HostGatewayPort,
    AssociationGatewayPort,
    Protocol,
):
    """Full controller protocol (all operations).

    Every call may raise GatewayError.
    """
