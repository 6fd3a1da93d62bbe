# MIT License (see LICENSE)
"""
Tunable parameters for the calculator, caches and overlay renderer.

VizConfig collects every constant the core recognizes so that a front end
can adjust them in one place (or load them from JSON, see emviz.io).
Defaults reproduce the classroom canvas the overlays were designed for.
"""
from __future__ import annotations
from dataclasses import dataclass, fields, replace

from .constants import K_COULOMB, FIELD_CACHE_LIMIT, FORCE_CACHE_LIMIT


@dataclass(frozen=True)
class VizConfig:
    """
    Overlay and physics tuning.

    Attributes:
        coulomb_k: Coulomb constant used by the calculator.
        field_spacing: Base spacing of the field sample grid in pixels.
        cluster_factor: Grid coarsening; one arrow per factor×factor block.
        vector_length_scale: Field arrow length per unit field magnitude.
        max_vector_length: Upper bound on field arrow length.
        arrowhead_length: Arrowhead size in pixels.
        field_arrow_thickness: Line width of field arrows.
        mag_force_arrow_factor: Length of magnetic force / velocity arrows.
        min_alpha, max_alpha: Opacity range of field arrows.
        log_scale_factor: Field opacity is normalized^(1/log_scale_factor).
        min_force_threshold: Forces at or below this are not drawn.
        max_partial_arrows: Partial force arrows drawn per charge.
        partial_force_alpha: Resting opacity of partial force arrows.
        force_scale_factor: Multiplier on log10(m·1e10 + 1) force lengths.
        force_length_cap: Upper bound on force arrow length.
        pool_capacity: Vectors retained by the object pool.
        field_cache_limit, force_cache_limit: Cache size ceilings.
        narrow_viewport_width: Below this width arrows are scaled down.
        narrow_viewport_scale: Scale applied on narrow viewports.
        trail_length: Positions retained in each charge's motion trail.
        symbol_grid_factor: Magnetic symbol spacing is factor × field_spacing
            at zero strength.
        symbol_min_spacing: Densest magnetic symbol spacing.
        symbol_density_slope: Spacing lost per unit |Bz|.
    """
    coulomb_k: float = K_COULOMB
    field_spacing: float = 64.0
    cluster_factor: int = 2
    vector_length_scale: float = 0.0005
    max_vector_length: float = 30.0
    arrowhead_length: float = 8.0
    field_arrow_thickness: float = 2.0
    mag_force_arrow_factor: float = 40.0
    min_alpha: float = 0.1
    max_alpha: float = 1.0
    log_scale_factor: float = 2.0
    min_force_threshold: float = 1e-5
    max_partial_arrows: int = 5
    partial_force_alpha: float = 0.5
    force_scale_factor: float = 200.0
    force_length_cap: float = 300.0
    pool_capacity: int = 100
    field_cache_limit: int = FIELD_CACHE_LIMIT
    force_cache_limit: int = FORCE_CACHE_LIMIT
    narrow_viewport_width: float = 900.0
    narrow_viewport_scale: float = 0.6
    trail_length: int = 50
    symbol_grid_factor: float = 2.5
    symbol_min_spacing: float = 20.0
    symbol_density_slope: float = 4.0

    def __post_init__(self) -> None:
        """Reject values that would stall the grid loops or break the caches."""
        for name in ("field_spacing", "log_scale_factor", "symbol_min_spacing"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("cluster_factor", "field_cache_limit", "force_cache_limit", "trail_length"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.pool_capacity < 0 or self.max_partial_arrows < 0:
            raise ValueError("pool_capacity and max_partial_arrows must be non-negative")
        if not 0.0 <= self.min_alpha <= self.max_alpha <= 1.0:
            raise ValueError(
                f"alpha range must satisfy 0 <= min <= max <= 1, got "
                f"({self.min_alpha}, {self.max_alpha})"
            )

    @property
    def sample_spacing(self) -> float:
        """Effective spacing of the field grid after clustering."""
        return self.field_spacing * self.cluster_factor

    def responsive_scale(self, width: float) -> float:
        """Arrow scale for a viewport of the given width."""
        return self.narrow_viewport_scale if width < self.narrow_viewport_width else 1.0

    def replace(self, **changes) -> "VizConfig":
        """Return a copy with the given fields changed (validated again)."""
        return replace(self, **changes)

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


DEFAULT_CONFIG = VizConfig()
