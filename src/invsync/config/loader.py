"""Configuration loading utilities."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from invsync.config.models import Config
from invsync.errors import ConfigurationError
from invsync.models.state import InventoryState


def _read_yaml_mapping(path: Path, what: str) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"{what} file not found: {path}")

    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {what.lower()} file: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping, not {type(data).__name__}")

    return data


def load_config(config_path: Path | None) -> Config:
    """
    Load configuration from YAML file or return defaults.

    Args:
        config_path: Path to YAML config file, or None for defaults.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config_path doesn't exist.
        ValueError: If YAML is invalid.
        ConfigurationError: If a setting has an invalid value.
    """
    if config_path is None:
        return Config()

    data = _read_yaml_mapping(config_path, "Config")
    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


def load_inventory(inventory_path: Path) -> InventoryState:
    """
    Load a desired inventory declaration from YAML.

    The document is the declarative shape of InventoryState: inventory
    fields at the root plus ``groups`` and ``hosts`` lists.

    Raises:
        FileNotFoundError: If inventory_path doesn't exist.
        ValueError: If YAML is invalid or the root is not a mapping.
        pydantic.ValidationError: If the declaration is invalid
            (for example two groups sharing a name).
    """
    return InventoryState.model_validate(_read_yaml_mapping(inventory_path, "Inventory"))
