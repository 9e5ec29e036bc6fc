"""Reconciler runtime.

Wires configuration, logging and the controller gateway into a ready
InventoryReconciler, and closes the gateway afterwards.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx
from loguru import logger

from invsync.config.loader import load_config
from invsync.config.models import Config
from invsync.gateway.controller import ControllerGateway
from invsync.services.reconciler import InventoryReconciler
from invsync.utils.logging import configure_logging


@contextmanager
def open_reconciler(
    config: Config | None = None,
    config_path: Path | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> Iterator[InventoryReconciler]:
    """
    Yield a reconciler bound to the configured controller.

    Args:
        config: Optional pre-loaded configuration. If not provided, loads from config_path.
        config_path: Path to configuration file.
        transport: Optional httpx transport, passed through to the gateway.
    """
    if config is None:
        config = load_config(config_path)

    configure_logging(config.logging)
    controller = config.controller
    logger.info("Connecting to controller at {}{}", controller.url, controller.api_path)

    with ControllerGateway(controller, transport=transport) as gateway:
        yield InventoryReconciler(gateway, config.reconcile)
