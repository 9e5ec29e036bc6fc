"""Variables codec.

The controller stores inventory, group and host variables as a single
text field. invsync always writes a JSON object; on read the field may
also hold YAML written by other clients.
"""

import json
from collections.abc import Mapping
from typing import Any

import yaml

from invsync.errors import VariablesError


def encode_variables(variables: Mapping[str, str] | None) -> str | None:
    """
    Encode a variables mapping to its wire form.

    An empty mapping encodes to None (absent) rather than "{}" so an
    unset field never shows up as a difference on the next read.
    """
    if not variables:
        return None

    for key, value in variables.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise VariablesError(
                f"Variables must map strings to strings, got {key!r}: {type(value).__name__}"
            )

    return json.dumps(dict(variables), sort_keys=True)


def decode_variables(raw: str | None) -> dict[str, str]:
    """
    Decode a wire variables field to a mapping.

    Absent, empty and whitespace-only input decodes to an empty mapping.

    Raises:
        VariablesError: If the text is not a mapping of strings to strings.
    """
    if raw is None or not raw.strip():
        return {}

    data: Any
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise VariablesError(f"Could not parse variables: {e}", raw=raw) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise VariablesError(
            f"Variables must be a mapping, not {type(data).__name__}", raw=raw
        )

    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise VariablesError(
                f"Variable {key!r} must be a string, not {type(value).__name__}", raw=raw
            )

    return data
