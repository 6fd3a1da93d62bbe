# MIT License (see LICENSE)
"""
Aggregation of per-charge contributions into net fields and forces.

- sample_grid: the regularly spaced points at which the field is drawn.
- net_field_at_sample_points: net field per grid point plus the smallest
  and largest nonzero magnitudes (used for adaptive opacity).
- forces_on_all_charges: partial and total Coulomb forces per charge.

Both passes are O(N·P) and O(N²) respectively and go through a
CachedCalculator so unchanged charges hit the memo tables.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..types import Charge, ElectricForce, TotalForce
from ..util import norm
from .cache import CachedCalculator


@dataclass
class FieldSample:
    """Net field at one grid point."""
    point: tuple[float, float]
    vector: np.ndarray
    magnitude: float


@dataclass
class FieldGrid:
    """
    Net field over the sample grid.

    Attributes:
        samples: One FieldSample per grid point, zero samples included.
        min_magnitude: Smallest nonzero magnitude, None if all are zero.
        max_magnitude: Largest nonzero magnitude, None if all are zero.
    """
    samples: list[FieldSample]
    min_magnitude: float | None = None
    max_magnitude: float | None = None

    def nonzero(self) -> list[FieldSample]:
        return [s for s in self.samples if s.magnitude > 0]


def sample_grid(
    width: float,
    height: float,
    spacing: float,
    cluster_factor: int = 1,
) -> list[tuple[float, float]]:
    """
    Grid points covering [0, width) × [0, height).

    Column-major order (x outer, y inner). A cluster factor of 2 places one
    point per 2×2 block of the base spacing.
    """
    step = spacing * cluster_factor
    if step <= 0:
        raise ValueError(f"grid step must be positive, got {step}")
    xs = np.arange(0.0, width, step)
    ys = np.arange(0.0, height, step)
    return [(float(x), float(y)) for x in xs for y in ys]


def net_field_at_sample_points(
    charges: Sequence[Charge],
    grid: Sequence[tuple[float, float]],
    calculator: CachedCalculator,
) -> FieldGrid:
    """
    Sum the field of every charge at every grid point.

    Args:
        charges: Field sources.
        grid: Sample points, e.g. from sample_grid().
        calculator: Cached field calculator.

    Returns:
        FieldGrid with per-point vectors and the nonzero magnitude range.
        An empty charge list yields all-zero samples and no range.
    """
    samples: list[FieldSample] = []
    lo = None
    hi = None
    for point in grid:
        vec = np.zeros(2, dtype=np.float64)
        for c in charges:
            vec += calculator.electric_field_at(c.position, c.magnitude, point, c.is_positive)
        m = norm(vec)
        if m > 0:
            lo = m if lo is None else min(lo, m)
            hi = m if hi is None else max(hi, m)
        samples.append(FieldSample(point=point, vector=vec, magnitude=m))
    return FieldGrid(samples=samples, min_magnitude=lo, max_magnitude=hi)


def forces_on_all_charges(
    charges: Sequence[Charge],
    calculator: CachedCalculator,
) -> dict[str, ElectricForce] | None:
    """
    Partial and total Coulomb forces on every charge.

    For each ordered pair (i, j), i != j, the force exerted by j on i is a
    partial force of i. The total keeps two magnitudes:
        magnitude           = Σ |F_ij|      (sizes the rendered arrow)
        resultant_magnitude = |Σ F_ij|      (physical net force)
        direction           = Σ F_ij / |Σ F_ij|

    Pairs closer than MIN_PAIR_DISTANCE are absent from the partial list.
    A charge whose partials cancel (or that has none) gets a zero total.

    Returns:
        Mapping charge id -> ElectricForce, or None when fewer than two
        charges exist.
    """
    if len(charges) < 2:
        return None

    results: dict[str, ElectricForce] = {}
    for i, ci in enumerate(charges):
        partials = []
        resultant = np.zeros(2, dtype=np.float64)
        summed = 0.0
        for j, cj in enumerate(charges):
            if i == j:
                continue
            pf = calculator.coulomb_force_between(ci, cj)
            if pf is None:
                continue
            partials.append(pf)
            resultant += pf.direction * pf.magnitude
            summed += pf.magnitude

        r = norm(resultant)
        if r > 0:
            total = TotalForce(magnitude=summed, direction=resultant / r, resultant_magnitude=r)
        else:
            total = TotalForce(magnitude=0.0, direction=np.zeros(2, dtype=np.float64))
        results[ci.id] = ElectricForce(partial_forces=partials, total=total)
    return results


def apply_electric_forces(
    charges: Sequence[Charge],
    results: dict[str, ElectricForce] | None,
) -> None:
    """Store the derived force record on each charge (None clears it)."""
    for c in charges:
        c.electric_force = None if results is None else results.get(c.id)
