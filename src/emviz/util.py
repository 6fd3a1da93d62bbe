# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Low-level helpers shared by the calculator, aggregator and renderer.
Planar quantities are numpy arrays of shape (2,); the magnetic field and
the Lorentz force are carried as shape (3,) arrays.
"""
from __future__ import annotations
import math

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Lets callers pass tuples or lists for positions, points and fields.
    """
    return np.array(x, dtype=np.float64)


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a vector of any dimension."""
    return float(math.sqrt(float(np.dot(v, v))))


def unit(v: np.ndarray) -> np.ndarray:
    """
    Return a unit vector in the same direction as v.

    Returns a zero vector of the same shape if |v| == 0.
    """
    n = norm(v)
    if n == 0.0:
        return np.zeros_like(v, dtype=np.float64)
    return v / n


def cross3(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    3D cross product a × b written out component-wise.

    Used for v × B where v lies in the plane (vz = 0).
    """
    return np.array([
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ], dtype=np.float64)


def heading(v: np.ndarray) -> float:
    """Angle of a planar vector from the +x axis, in radians."""
    return float(math.atan2(v[1], v[0]))


def pixel_round(x: float) -> int:
    """
    Round a coordinate to the nearest integer pixel, halves rounded up.

    Unlike round(), 2.5 maps to 3 and -2.5 to -2.
    """
    return int(math.floor(x + 0.5))
