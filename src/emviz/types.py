# MIT License (see LICENSE)
"""
Core type definitions for the charge visualization.

Defines the data contract shared with the state layer:
- Charge: a point source with magnitude, polarity and kinematic state.
- PartialForce / TotalForce / ElectricForce: the derived force record.
- SimulationField: global field, mode and animation state, passed around
  explicitly as a context object.

The force record on a charge is a derived cache. It is recomputed on every
redraw pass and is never authoritative.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .util import f64, norm, unit


# =============================================================================
# Enumerations
# =============================================================================

class Polarity(Enum):
    """Binary sign of a charge."""
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @property
    def sign(self) -> int:
        return 1 if self is Polarity.POSITIVE else -1


class SimulationMode(Enum):
    """Mutually exclusive simulation modes."""
    ELECTRIC = "electric"
    MAGNETIC = "magnetic"


class AnimationState(Enum):
    """States of the animation driver. RESETTING is transient."""
    STOPPED = "stopped"
    RUNNING = "running"
    RESETTING = "resetting"


# =============================================================================
# Kinematics
# =============================================================================

@dataclass
class Velocity:
    """
    Velocity stored as speed plus unit direction.

    Attributes:
        magnitude: Speed in pixels per second.
        direction: Unit vector [dx, dy], or the zero vector when at rest.
    """
    magnitude: float = 0.0
    direction: np.ndarray | tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        self.direction = f64(self.direction)

    @property
    def vector(self) -> np.ndarray:
        """Velocity as a planar vector (magnitude × direction)."""
        return self.magnitude * self.direction

    @classmethod
    def from_vector(cls, v) -> "Velocity":
        """Split a raw planar vector into speed and unit direction."""
        v = f64(v)
        return cls(magnitude=norm(v), direction=unit(v))

    def copy(self) -> "Velocity":
        return Velocity(self.magnitude, self.direction.copy())


@dataclass
class MotionSnapshot:
    """Position and velocity captured before motion starts, used by reset."""
    position: np.ndarray
    velocity: Velocity


# =============================================================================
# Force record
# =============================================================================

@dataclass
class PartialForce:
    """
    Force on one charge attributable to a single other charge.

    Attributes:
        magnitude: Coulomb force magnitude k·|Qa|·|Qb|/r².
        direction: Unit vector of the force acting on the receiving charge.
        source_id: Id of the charge exerting the force.
    """
    magnitude: float
    direction: np.ndarray
    source_id: str | None = None

    @property
    def vector(self) -> np.ndarray:
        return self.magnitude * self.direction


@dataclass
class TotalForce:
    """
    Aggregated force on a charge.

    Two magnitudes are kept because the overlay uses them differently:
        magnitude: Scalar sum of the partial magnitudes. Sizes the arrow.
        resultant_magnitude: Length of the vector sum of the partials.
        direction: Unit vector of the vector sum. Orients the arrow.
    """
    magnitude: float
    direction: np.ndarray
    resultant_magnitude: float = 0.0

    @property
    def vector(self) -> np.ndarray:
        return self.magnitude * self.direction


@dataclass
class ElectricForce:
    """Partial forces (one per contributing charge) plus the total force."""
    partial_forces: list[PartialForce]
    total: TotalForce


# =============================================================================
# Charge
# =============================================================================

@dataclass
class Charge:
    """
    A point charge on the canvas.

    Attributes:
        id: Unique identifier.
        magnitude: Non-negative charge strength Q.
        polarity: POSITIVE or NEGATIVE.
        position: Canvas position [x, y] in pixels.
        velocity: Speed and unit direction.
        snapshot: Pre-motion state, present while an animation can be reset.
        trail: Recent positions, bounded by trail_length.
        electric_force: Derived force record, refreshed on every redraw.

    Note:
        Position is converted to a float64 numpy array on init, so drag and
        animation updates mutate it in place.
    """
    id: str
    magnitude: float
    polarity: Polarity = Polarity.POSITIVE
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    velocity: Velocity = field(default_factory=Velocity)
    snapshot: MotionSnapshot | None = None
    trail_length: int = 50
    trail: deque = field(default_factory=deque)
    electric_force: ElectricForce | None = None

    def __post_init__(self) -> None:
        self.position = f64(self.position)
        if isinstance(self.polarity, str):
            self.polarity = Polarity(self.polarity)
        self.trail = deque(self.trail, maxlen=self.trail_length)

    @property
    def is_positive(self) -> bool:
        return self.polarity is Polarity.POSITIVE

    @property
    def signed_magnitude(self) -> float:
        """Charge magnitude carrying the polarity sign."""
        return self.polarity.sign * self.magnitude

    def take_snapshot(self) -> None:
        """Record position and velocity unless a snapshot already exists."""
        if self.snapshot is None:
            self.snapshot = MotionSnapshot(self.position.copy(), self.velocity.copy())

    def restore_snapshot(self) -> None:
        """Restore position and velocity from the snapshot and drop it."""
        if self.snapshot is not None:
            self.position[:] = self.snapshot.position
            self.velocity = self.snapshot.velocity.copy()
            self.snapshot = None

    def record_trail(self) -> None:
        self.trail.append(self.position.copy())

    def clear_trail(self) -> None:
        self.trail.clear()


# =============================================================================
# Global simulation state
# =============================================================================

@dataclass
class SimulationField:
    """
    Field, mode and animation state shared by one scene.

    Attributes:
        magnetic_field: Uniform field [Bx, By, Bz]. Only Bz drives in-plane
            motion; Bx and By still enter the cross product.
        mode: ELECTRIC or MAGNETIC.
        animation: Current animation state.
        show_forces: Whether the electric force overlay is drawn.
    """
    magnetic_field: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    mode: SimulationMode = SimulationMode.ELECTRIC
    animation: AnimationState = AnimationState.STOPPED
    show_forces: bool = False

    def __post_init__(self) -> None:
        self.magnetic_field = f64(self.magnetic_field)

    @property
    def bz(self) -> float:
        return float(self.magnetic_field[2])
