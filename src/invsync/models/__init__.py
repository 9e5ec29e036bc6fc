"""Domain models for invsync."""

from invsync.models.entities import ControllerModel, Group, Host, Inventory, Page
from invsync.models.state import GroupState, HostState, InventoryState

__all__ = [
    "ControllerModel",
    "Group",
    "GroupState",
    "Host",
    "HostState",
    "Inventory",
    "InventoryState",
    "Page",
]
