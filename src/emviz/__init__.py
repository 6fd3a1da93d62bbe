# MIT License (see LICENSE)
"""
emviz - Electric and magnetic field overlays for point charges.

This package computes Coulomb fields and forces, Lorentz forces on moving
charges, and turns them into vector overlays on an abstract drawing
surface at interactive frame rates.

Main entry points:
    - ChargeScene: Charges, field state and the frame loop.
    - Charge: A point charge with polarity and kinematic state.
    - VizConfig: Tunable constants for calculation and drawing.
    - VectorOverlayRenderer: Draws overlays onto a DrawableSurface.

Submodules:
    - core: Field/force calculators, result caches, aggregation.
    - renderer: Surfaces, object pool, overlay registry and renderer.
    - io: JSON configuration files.

Example:
    from emviz import ChargeScene, VectorOverlayRenderer
    from emviz.renderer import RecordingSurface

    scene = ChargeScene(width=800, height=600, seed=1)
    scene.add_charge(5.0, "positive", position=(300, 300))
    scene.add_charge(5.0, "negative", position=(500, 300))
    renderer = VectorOverlayRenderer(RecordingSurface(800, 600))
    scene.frame(renderer)
"""
from .scene import ChargeScene
from .types import Charge, Polarity, Velocity, SimulationField, SimulationMode, AnimationState
from .config import VizConfig
from .renderer.overlay import VectorOverlayRenderer

__all__ = [
    # Simulation
    "ChargeScene",
    "Charge",
    "Polarity",
    "Velocity",
    "SimulationField",
    "SimulationMode",
    "AnimationState",
    # Configuration
    "VizConfig",
    # Rendering
    "VectorOverlayRenderer",
]
