"""Gateway adapters for the automation controller API."""

from invsync.gateway.controller import ControllerGateway

__all__ = ["ControllerGateway"]
