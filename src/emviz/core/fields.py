# MIT License (see LICENSE)
"""
Field and force calculators for point charges.

Pure functions with no caching and no global state:
- electric_field_at: Coulomb field of one charge at a sample point.
- coulomb_force_between: force one charge feels from another.
- lorentz_force: magnetic force q(v × B) on a moving charge.
- lorentz_force_on_canvas: the same force in y-down canvas coordinates.
- normalize_and_scale: rescale a vector to a fixed length.

Every division is guarded. Coincident points, near-coincident pairs and
zero-length vectors short-circuit to a defined zero result (or None for an
absent pairwise force), so degenerate geometry never produces NaN or
Infinity. Non-finite inputs are not rejected and propagate unchanged.
"""
from __future__ import annotations
import math
from typing import Iterable

import numpy as np

from ..constants import K_COULOMB, MIN_PAIR_DISTANCE
from ..types import Charge, PartialForce, SimulationField
from ..util import f64, cross3, norm


def electric_field_at(
    charge_pos,
    magnitude: float,
    point,
    is_positive: bool,
    k: float = K_COULOMB,
) -> np.ndarray:
    """
    Electric field contributed by a point charge at a sample point.

    Implements E = k·Q/r² along the line from the charge to the point,
    reversed for a negative source.

    Args:
        charge_pos: Charge position [x, y].
        magnitude: Charge magnitude Q (non-negative).
        point: Sample point [x, y].
        is_positive: Polarity of the source.
        k: Coulomb constant.

    Returns:
        Field vector [Ex, Ey]. The zero vector when the point coincides
        with the charge.
    """
    dx = float(point[0]) - float(charge_pos[0])
    dy = float(point[1]) - float(charge_pos[1])
    r2 = dx * dx + dy * dy
    if r2 == 0.0:
        return np.zeros(2, dtype=np.float64)

    r = math.sqrt(r2)
    e = (k * magnitude) / r2
    if not is_positive:
        e = -e
    return np.array([e * dx / r, e * dy / r], dtype=np.float64)


def coulomb_force_between(a: Charge, b: Charge, k: float = K_COULOMB) -> PartialForce | None:
    """
    Coulomb force exerted on charge `a` by charge `b`.

    Implements |F| = k·|Qa|·|Qb|/r². The direction starts as the unit
    vector from a to b; it is kept for unlike polarities (attraction) and
    reversed for like polarities (repulsion).

    Args:
        a: The charge receiving the force.
        b: The charge exerting the force.
        k: Coulomb constant.

    Returns:
        PartialForce tagged with b.id, or None when the charges are closer
        than MIN_PAIR_DISTANCE (the pair contributes nothing).
    """
    dx = float(b.position[0] - a.position[0])
    dy = float(b.position[1] - a.position[1])
    r2 = dx * dx + dy * dy
    r = math.sqrt(r2)
    if r < MIN_PAIR_DISTANCE:
        return None

    magnitude = k * abs(a.magnitude) * abs(b.magnitude) / r2
    sign = -1.0 if a.polarity is b.polarity else 1.0
    direction = np.array([sign * dx / r, sign * dy / r], dtype=np.float64)
    return PartialForce(magnitude=magnitude, direction=direction, source_id=b.id)


def lorentz_force(charge: Charge, field: SimulationField | np.ndarray) -> np.ndarray:
    """
    Magnetic part of the Lorentz force on a moving charge.

    Implements F = q (v × B) with v = (vx, vy, 0). For a field with only a
    z-component the result lies in the plane, perpendicular to v, which
    yields circular motion under a uniform out-of-plane field.

    Args:
        charge: Moving charge; q carries the polarity sign.
        field: Either a SimulationField or a raw [Bx, By, Bz] vector.

    Returns:
        Force vector [Fx, Fy, Fz]. Exactly zero for a stationary charge.
    """
    b = field.magnetic_field if isinstance(field, SimulationField) else f64(field)
    v = charge.velocity.vector
    v3 = np.array([v[0], v[1], 0.0], dtype=np.float64)
    return charge.signed_magnitude * cross3(v3, b)


def lorentz_force_on_canvas(charge: Charge, field: SimulationField | np.ndarray) -> np.ndarray:
    """
    Lorentz force expressed in canvas coordinates.

    The canvas y axis points down while a positive Bz (drawn as dots)
    points toward the viewer, so (x, y, z) on screen is a left-handed
    frame. Mirroring one axis flips every cross product, hence the
    negation: a positive charge moving right through a dot field is
    pushed toward +y (down the screen).
    """
    return -lorentz_force(charge, field)


def normalize_and_scale(vector, scale: float) -> np.ndarray:
    """
    Rescale a 2D or 3D vector to length `scale`.

    A zero vector is returned unchanged in shape (a 3D input keeps a
    defined z of 0). Callers must check for it before dividing.
    """
    v = f64(vector)
    n = norm(v)
    if n == 0.0:
        return np.zeros_like(v)
    return (v / n) * scale


def net_field_at_point(charges: Iterable[Charge], point, k: float = K_COULOMB) -> np.ndarray:
    """Sum of the field contributions of all charges at one point."""
    total = np.zeros(2, dtype=np.float64)
    for c in charges:
        total += electric_field_at(c.position, c.magnitude, point, c.is_positive, k)
    return total
