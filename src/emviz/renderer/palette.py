# MIT License (see LICENSE)
"""Overlay colours as 0xRRGGBB integers."""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ColorPalette:
    field_vector: int = 0xFFFFFF
    field_symbol: int = 0xFFFFFF
    velocity_vector: int = 0xFFFFFF
    magnetic_force_vector: int = 0x8E44AD  # deep violet
    total_force: int = 0xFF0000
    partial_force: int = 0x00AAFF


DEFAULT_PALETTE = ColorPalette()
