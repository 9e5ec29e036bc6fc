"""Port interfaces for invsync.

Ports define the contracts that adapters must implement. The
reconciler depends only on these abstractions, not on a concrete
HTTP client.
"""

from invsync.ports.gateway import (
    AssociationGatewayPort,
    ControllerGatewayPort,
    GroupGatewayPort,
    HostGatewayPort,
    InventoryGatewayPort,
)

__all__ = [
    "AssociationGatewayPort",
    "ControllerGatewayPort",
    "GroupGatewayPort",
    "HostGatewayPort",
    "InventoryGatewayPort",
]
