"""Configuration management for invsync."""

from invsync.config.loader import load_config, load_inventory
from invsync.config.models import Config, ControllerConfig, LoggingConfig, ReconcileConfig

__all__ = [
    "Config",
    "ControllerConfig",
    "LoggingConfig",
    "ReconcileConfig",
    "load_config",
    "load_inventory",
]
