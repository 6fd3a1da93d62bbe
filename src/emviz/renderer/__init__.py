# MIT License (see LICENSE)
"""
Overlay rendering onto an abstract drawable surface.

This subpackage provides:
    - DrawableSurface: Abstract display-list API backends implement.
    - RecordingSurface: In-memory surface for tests and headless runs.
    - NullSurface: No-op surface for performance testing.
    - VectorOverlayRenderer: Field, force, velocity and symbol overlays.
    - VectorPool / OverlayRegistry: Drawable recycling and ownership.

The physics core has no rendering dependency; this layer only reads its
results.

Typical usage:
    from emviz.renderer import RecordingSurface, VectorOverlayRenderer

    renderer = VectorOverlayRenderer(RecordingSurface(800, 600))
    renderer.draw_electric_field(charges, calculator)
"""
from .surface import Drawable, DrawableSurface, RecordingSurface, NullSurface, Texture
from .pool import VectorPool
from .registry import OverlayCategory, OverlayRegistry
from .palette import ColorPalette, DEFAULT_PALETTE
from .overlay import VectorOverlayRenderer

__all__ = [
    # Surfaces
    "Drawable",
    "DrawableSurface",
    "RecordingSurface",
    "NullSurface",
    "Texture",
    # Bookkeeping
    "VectorPool",
    "OverlayCategory",
    "OverlayRegistry",
    # Rendering
    "ColorPalette",
    "DEFAULT_PALETTE",
    "VectorOverlayRenderer",
]
