# MIT License (see LICENSE)
"""
Physical and fixed numeric constants used throughout the visualization.

Distances are canvas pixels; charge magnitudes are dimensionless slider
values. The Coulomb constant keeps its SI value so that field strengths
span the same orders of magnitude as the classroom formulas.
"""
from __future__ import annotations

# Coulomb's constant (electrostatic constant), k = 1/(4πε₀)
# Value: 8.9875517923 × 10⁹ N·m²/C²
# Reference: https://physics.nist.gov/cgi-bin/cuu/Value?k
K_COULOMB: float = 8.9875517923e9

# Pairs of charges closer than this contribute no Coulomb force.
MIN_PAIR_DISTANCE: float = 1.0

# Memoization ceilings; each cache is emptied in full once exceeded.
FIELD_CACHE_LIMIT: int = 10_000
FORCE_CACHE_LIMIT: int = 500

# Offset applied inside log10(m * offset + 1) when sizing force arrows.
FORCE_LENGTH_OFFSET: float = 1e10
