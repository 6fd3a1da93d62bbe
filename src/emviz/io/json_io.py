# MIT License (see LICENSE)
"""
JSON loading and saving of overlay configuration.

Every VizConfig field may appear as a top-level key; omitted keys keep
their defaults. Unknown keys are rejected so that typos do not silently
fall back to a default.

Example file:
---------------------
{
  "field_spacing": 48,          # Grid spacing in pixels
  "cluster_factor": 1,          # One arrow per grid cell
  "max_vector_length": 40,      # Longest field arrow
  "min_force_threshold": 1e-6,  # Draw weaker forces too
  "pool_capacity": 200
}
"""
from __future__ import annotations
import json
from dataclasses import asdict
from typing import Any

from ..config import VizConfig

_INT_FIELDS = {
    "cluster_factor",
    "max_partial_arrows",
    "pool_capacity",
    "field_cache_limit",
    "force_cache_limit",
    "trail_length",
}


def load_config_raw(path: str) -> dict[str, Any]:
    """
    Load raw JSON data from a config file without validation.

    Args:
        path: Absolute or relative path to the JSON file.

    Returns:
        Dictionary containing the raw JSON data.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def config_from_json(d: dict[str, Any]) -> VizConfig:
    """
    Build a VizConfig from a dictionary.

    Raises:
        ValueError: On unknown keys, non-numeric values, or values that
            VizConfig itself rejects.
    """
    if not isinstance(d, dict):
        raise ValueError(f"config must be a JSON object, got {type(d).__name__}")

    known = set(VizConfig.field_names())
    unknown = sorted(set(d) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}
    for key, value in d.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Config value for '{key}' must be a number, got {value!r}")
        if key in _INT_FIELDS:
            if float(value) != int(value):
                raise ValueError(f"Config value for '{key}' must be an integer, got {value}")
            kwargs[key] = int(value)
        else:
            kwargs[key] = float(value)
    return VizConfig(**kwargs)


def load_config(path: str) -> VizConfig:
    """
    Load and validate a VizConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the contents are not a valid configuration.
    """
    return config_from_json(load_config_raw(path))


def config_to_json(config: VizConfig) -> dict[str, Any]:
    """
    Serialize a VizConfig to a dictionary.

    Only values that differ from the defaults are included.
    """
    defaults = asdict(VizConfig())
    return {k: v for k, v in asdict(config).items() if v != defaults[k]}


def save_config(config: VizConfig, path: str, indent: int = 2) -> None:
    """Save a VizConfig to a JSON file on disk."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_to_json(config), f, indent=indent)
