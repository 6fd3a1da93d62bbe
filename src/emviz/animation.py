# MIT License (see LICENSE)
"""
Animation driver for magnetic-mode charge motion.

A small state machine over SimulationField.animation:

    STOPPED --start--> RUNNING --stop--> STOPPED
    any     --reset--> RESETTING --> STOPPED

start() snapshots every charge that has no snapshot yet, so a stop/start
sequence can still be reset to the original layout. Switching simulation
mode while running forces a reset.

Motion uses one explicit Euler step per tick under the Lorentz force in
canvas coordinates (dv/dt = F/m, dx/dt = v). The step is followed by a
speed rescale: a magnetic force does no work, so the speed is held at its
pre-step value and only the heading turns.
"""
from __future__ import annotations
import logging
from typing import Sequence

from .core.fields import lorentz_force_on_canvas
from .types import AnimationState, Charge, SimulationField, SimulationMode, Velocity
from .util import norm

logger = logging.getLogger(__name__)


class AnimationDriver:
    """
    Drives per-tick position/velocity updates of the charges.

    Attributes:
        charges: The scene's charge collection (shared, mutated in place).
        field: Shared field/mode/animation state.
        mass: Inertia applied to every charge (F = m·a).
    """

    def __init__(self, charges: Sequence[Charge], field: SimulationField, mass: float = 1.0):
        if mass <= 0:
            raise ValueError(f"mass must be positive, got {mass}")
        self.charges = charges
        self.field = field
        self.mass = mass

    @property
    def state(self) -> AnimationState:
        return self.field.animation

    @property
    def running(self) -> bool:
        return self.field.animation is AnimationState.RUNNING

    def start(self) -> bool:
        """Begin motion. Returns False if already running."""
        if self.running:
            logger.debug("start ignored: already running")
            return False
        for c in self.charges:
            c.take_snapshot()
        self.field.animation = AnimationState.RUNNING
        logger.info("animation started with %d charges", len(self.charges))
        return True

    def stop(self) -> bool:
        """Freeze motion, keeping snapshots. Returns False if not running."""
        if not self.running:
            logger.debug("stop ignored: state is %s", self.field.animation.value)
            return False
        self.field.animation = AnimationState.STOPPED
        logger.info("animation stopped")
        return True

    def reset(self) -> None:
        """Restore every charge from its snapshot, clear trails, and stop."""
        self.field.animation = AnimationState.RESETTING
        for c in self.charges:
            c.restore_snapshot()
            c.clear_trail()
        self.field.animation = AnimationState.STOPPED
        logger.info("animation reset")

    def set_mode(self, mode: SimulationMode) -> bool:
        """
        Switch simulation mode.

        A running animation is reset first. Derived electric force records
        are dropped since they belong to the previous mode's overlays.

        Returns:
            True if the mode changed.
        """
        if mode is self.field.mode:
            return False
        if self.running:
            self.reset()
        self.field.mode = mode
        for c in self.charges:
            c.electric_force = None
        logger.info("simulation mode set to %s", mode.value)
        return True

    def step_charge(self, charge: Charge, dt: float) -> bool:
        """
        Advance one charge by dt. Returns False for a charge at rest.
        """
        speed = charge.velocity.magnitude
        if speed == 0.0:
            return False

        force = lorentz_force_on_canvas(charge, self.field)[:2]
        v = charge.velocity.vector + (force / self.mass) * dt
        n = norm(v)
        if n == 0.0:
            return False
        v *= speed / n

        charge.velocity = Velocity(speed, v / speed)
        charge.position += v * dt
        charge.record_trail()
        return True

    def tick(self, dt: float) -> bool:
        """
        Advance all charges by dt when running.

        Returns:
            True if any charge moved.
        """
        if not self.running:
            return False
        moved = False
        for c in self.charges:
            moved = self.step_charge(c, dt) or moved
        return moved
