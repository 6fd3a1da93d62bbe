# MIT License (see LICENSE)
"""
The charge scene and its frame loop.

ChargeScene is the explicit context object that owns:
- The charge collection (single logical owner; drag and animation mutate
  charges in place).
- The SimulationField (magnetic field, mode, animation state, force
  visibility).
- The cached calculator and the animation driver.

Redraws are driven by a dirty flag: any mutation marks the scene dirty and
the next frame() recomputes and redraws the overlays for the current mode.
A tick that moves any charge marks the scene dirty as well.

Structure:
    - Front end creates a ChargeScene and a VectorOverlayRenderer.
    - User actions call add_charge(), move_charge(), set_mode(), ...
    - The render loop calls scene.frame(renderer, dt) once per frame.
"""
from __future__ import annotations
import logging
import math
import uuid
from contextlib import nullcontext
from dataclasses import dataclass, field

import numpy as np

from .animation import AnimationDriver
from .config import VizConfig, DEFAULT_CONFIG
from .core.cache import CachedCalculator
from .profiler import Profiler
from .renderer.overlay import VectorOverlayRenderer
from .types import Charge, Polarity, SimulationField, SimulationMode, Velocity
from .util import f64

logger = logging.getLogger(__name__)

# New charges are placed at least this far from the canvas edge.
SPAWN_MARGIN = 40.0


@dataclass
class ChargeScene:
    """
    Charges plus global field state for one canvas.

    Attributes:
        width, height: Canvas size in pixels (bounds for random placement).
        config: Overlay and physics tuning.
        sim_field: Magnetic field, mode, animation state, force toggle.
        seed: Seed for random charge placement (None = nondeterministic).
        profiler: Optional Profiler timing each frame phase.
        charges: Charge collection, in insertion order.
        time: Accumulated frame time in seconds.
    """
    width: float = 800.0
    height: float = 600.0
    config: VizConfig = DEFAULT_CONFIG
    sim_field: SimulationField = field(default_factory=SimulationField)
    seed: int | None = None
    profiler: Profiler | None = None

    # Internal state
    charges: list[Charge] = field(default_factory=list)
    time: float = 0.0

    def __post_init__(self) -> None:
        self.calculator = CachedCalculator.from_config(self.config)
        self.animation = AnimationDriver(self.charges, self.sim_field)
        self._rng = np.random.default_rng(self.seed)
        self._dirty = True
        self._drawn_mode: SimulationMode | None = None
        self._dragging: str | None = None
        logger.info("scene created (%gx%g, mode=%s)", self.width, self.height, self.sim_field.mode.value)

    # -------------------------------------------------------------------------
    # Dirty flag
    # -------------------------------------------------------------------------

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        """Request a full recompute and redraw on the next frame."""
        self._dirty = True

    # -------------------------------------------------------------------------
    # Charge collection
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_magnitude(magnitude: float) -> float:
        magnitude = float(magnitude)
        if not math.isfinite(magnitude) or magnitude < 0:
            logger.warning("rejected charge magnitude %r", magnitude)
            raise ValueError(f"charge magnitude must be finite and non-negative, got {magnitude}")
        return magnitude

    @staticmethod
    def _check_position(position) -> np.ndarray:
        p = f64(position)
        if p.shape != (2,) or not np.all(np.isfinite(p)):
            logger.warning("rejected charge position %r", position)
            raise ValueError(f"charge position must be two finite numbers, got {position!r}")
        return p

    @staticmethod
    def _check_velocity(velocity: Velocity) -> Velocity:
        direction = f64(velocity.direction)
        magnitude = float(velocity.magnitude)
        if (not math.isfinite(magnitude) or magnitude < 0
                or direction.shape != (2,) or not np.all(np.isfinite(direction))):
            logger.warning("rejected charge velocity %r", velocity)
            raise ValueError(
                f"velocity must have a finite non-negative speed and a finite 2D direction, got {velocity!r}"
            )
        return Velocity(magnitude, direction)

    def random_position(self) -> np.ndarray:
        """Uniform random point inside the canvas, away from the edges."""
        mx = min(SPAWN_MARGIN, self.width / 2)
        my = min(SPAWN_MARGIN, self.height / 2)
        return np.array([
            self._rng.uniform(mx, self.width - mx),
            self._rng.uniform(my, self.height - my),
        ], dtype=np.float64)

    def add_charge(
        self,
        magnitude: float,
        polarity: Polarity | str = Polarity.POSITIVE,
        position=None,
        velocity: Velocity | None = None,
        charge_id: str | None = None,
    ) -> Charge:
        """
        Create a charge and add it to the scene.

        Args:
            magnitude: Non-negative, finite charge strength.
            polarity: Polarity enum or "positive"/"negative".
            position: Canvas position; random in-bounds when omitted.
            velocity: Initial velocity; at rest when omitted.
            charge_id: Explicit id; a uuid4 string when omitted.

        Returns:
            The new charge.

        Raises:
            ValueError: If magnitude, position or velocity is invalid, or the id
                is taken.
        """
        magnitude = self._check_magnitude(magnitude)
        pos = self.random_position() if position is None else self._check_position(position)
        cid = charge_id or str(uuid.uuid4())
        if any(c.id == cid for c in self.charges):
            raise ValueError(f"duplicate charge id: {cid}")

        charge = Charge(
            id=cid,
            magnitude=magnitude,
            polarity=Polarity(polarity),
            position=pos,
            velocity=self._check_velocity(velocity) if velocity is not None else Velocity(),
            trail_length=self.config.trail_length,
        )
        self.charges.append(charge)
        self.mark_dirty()
        return charge

    def get_charge(self, charge_id: str) -> Charge:
        """Raises KeyError for an unknown id."""
        for c in self.charges:
            if c.id == charge_id:
                return c
        raise KeyError(charge_id)

    def remove_charge(self, charge_id: str) -> None:
        charge = self.get_charge(charge_id)
        self.charges.remove(charge)
        if self._dragging == charge_id:
            self._dragging = None
        self.mark_dirty()

    def move_charge(self, charge_id: str, position) -> None:
        """Set a charge's position in place (drag, programmatic moves)."""
        charge = self.get_charge(charge_id)
        charge.position[:] = self._check_position(position)
        self.mark_dirty()

    def update_charge(
        self,
        charge_id: str,
        magnitude: float | None = None,
        polarity: Polarity | str | None = None,
        velocity: Velocity | None = None,
    ) -> Charge:
        """Change magnitude, polarity or velocity of an existing charge."""
        charge = self.get_charge(charge_id)
        if magnitude is not None:
            charge.magnitude = self._check_magnitude(magnitude)
        if polarity is not None:
            charge.polarity = Polarity(polarity)
        if velocity is not None:
            charge.velocity = self._check_velocity(velocity)
        self.mark_dirty()
        return charge

    # -------------------------------------------------------------------------
    # Drag interaction
    # -------------------------------------------------------------------------

    def begin_drag(self, charge_id: str) -> None:
        self.get_charge(charge_id)
        self._dragging = charge_id

    def drag_to(self, position) -> None:
        if self._dragging is not None:
            self.move_charge(self._dragging, position)

    def end_drag(self) -> None:
        self._dragging = None
        self.mark_dirty()

    @property
    def dragging(self) -> str | None:
        return self._dragging

    # -------------------------------------------------------------------------
    # Field and mode
    # -------------------------------------------------------------------------

    def set_magnetic_field(self, b) -> None:
        b = f64(b)
        if b.shape != (3,):
            raise ValueError(f"magnetic field must have 3 components, got {b.shape}")
        self.sim_field.magnetic_field = b
        self.mark_dirty()

    def set_mode(self, mode: SimulationMode | str) -> bool:
        """Switch mode; a running animation is reset. Returns True if changed."""
        changed = self.animation.set_mode(SimulationMode(mode))
        if changed:
            self.mark_dirty()
        return changed

    def set_show_forces(self, show: bool) -> None:
        self.sim_field.show_forces = bool(show)
        self.mark_dirty()

    def start(self) -> bool:
        started = self.animation.start()
        if started:
            self.mark_dirty()
        return started

    def stop(self) -> bool:
        stopped = self.animation.stop()
        if stopped:
            self.mark_dirty()
        return stopped

    def reset(self) -> None:
        self.animation.reset()
        self.mark_dirty()

    # -------------------------------------------------------------------------
    # Frame loop
    # -------------------------------------------------------------------------

    def _section(self, name: str):
        return self.profiler.section(name) if self.profiler else nullcontext()

    def _redraw(self, renderer: VectorOverlayRenderer) -> None:
        """Recompute and redraw every overlay of the current mode."""
        mode = self.sim_field.mode
        if self._drawn_mode is not mode:
            renderer.clear_all()
            self._drawn_mode = mode

        if mode is SimulationMode.ELECTRIC:
            with self._section("field"):
                renderer.draw_electric_field(self.charges, self.calculator)
            with self._section("forces"):
                if not self.sim_field.show_forces:
                    renderer.clear_forces()
                elif self._dragging is not None:
                    renderer.draw_electric_forces_during_drag(self.charges, self.calculator)
                else:
                    renderer.draw_electric_forces(self.charges, self.calculator)
        else:
            with self._section("magnetic"):
                renderer.draw_magnetic_field(self.sim_field)
                renderer.draw_magnetic_forces(self.charges, self.sim_field)
                renderer.draw_velocities(self.charges)

    def frame(self, renderer: VectorOverlayRenderer, dt: float = 1.0 / 60.0) -> bool:
        """
        Run one frame: advance the animation, then redraw if needed.

        Args:
            renderer: Overlay renderer bound to the display surface.
            dt: Frame duration in seconds.

        Returns:
            True if the overlays were redrawn.
        """
        surface = renderer.surface
        surface.begin_frame(self.time)

        with self._section("tick"):
            if self.animation.tick(dt):
                self.mark_dirty()

        redrawn = self._dirty
        if redrawn:
            self._redraw(renderer)
            self._dirty = False

        surface.end_frame()
        self.time += dt
        return redrawn
