# MIT License (see LICENSE)
"""
Physics computation core.

This subpackage provides:
    - Calculators: electric field, Coulomb force, Lorentz force.
    - Result caches: bounded memo tables in front of the calculators.
    - Aggregation: net field on a sample grid, net/partial forces per charge.

Typical usage:
    from emviz.core import CachedCalculator, forces_on_all_charges

    calc = CachedCalculator.from_config(config)
    forces = forces_on_all_charges(charges, calc)
"""
from .fields import (
    electric_field_at,
    coulomb_force_between,
    lorentz_force,
    lorentz_force_on_canvas,
    normalize_and_scale,
    net_field_at_point,
)
from .cache import ResultCache, CachedCalculator, field_cache_key, force_cache_key
from .aggregate import (
    FieldSample,
    FieldGrid,
    sample_grid,
    net_field_at_sample_points,
    forces_on_all_charges,
    apply_electric_forces,
)

__all__ = [
    # Calculators
    "electric_field_at",
    "coulomb_force_between",
    "lorentz_force",
    "lorentz_force_on_canvas",
    "normalize_and_scale",
    "net_field_at_point",
    # Caching
    "ResultCache",
    "CachedCalculator",
    "field_cache_key",
    "force_cache_key",
    # Aggregation
    "FieldSample",
    "FieldGrid",
    "sample_grid",
    "net_field_at_sample_points",
    "forces_on_all_charges",
    "apply_electric_forces",
]
