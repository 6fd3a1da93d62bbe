# MIT License (see LICENSE)
"""
Input/Output utilities.

This subpackage provides:
    - JSON configuration: load and save VizConfig tuning files.

Typical usage:
    from emviz.io import load_config, save_config

    config = load_config("overlay.json")
    save_config(config.replace(field_spacing=48), "overlay-dense.json")
"""
from .json_io import (
    load_config,
    load_config_raw,
    save_config,
    config_from_json,
    config_to_json,
)

__all__ = [
    # Loading
    "load_config",
    "load_config_raw",
    # Saving
    "save_config",
    # Serialization
    "config_from_json",
    "config_to_json",
]
