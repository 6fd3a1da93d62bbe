# MIT License (see LICENSE)
"""
Vector overlays: field arrows, force arrows, velocity arrows, field symbols.

VectorOverlayRenderer turns aggregated physics samples into drawables on a
DrawableSurface. It redraws hundreds of arrows per frame, so:

- Force, magnetic-force and velocity arrows come from a VectorPool and go
  back to it when cleared.
- Field arrows are unlabeled and uncoloured per sample; each distinct
  (length, thickness, colour, head) is rendered to a texture once and
  reused as a sprite.
- Every drawable is registered under an OverlayCategory, so each clear
  removes exactly its own output and nothing else on the surface.

Arrow geometry is built along +x in local coordinates; the drawable's
position and rotation place it on the canvas.
"""
from __future__ import annotations
import logging
import math
from typing import Sequence

import numpy as np

from ..config import VizConfig, DEFAULT_CONFIG
from ..constants import FORCE_LENGTH_OFFSET
from ..core.aggregate import (
    sample_grid,
    net_field_at_sample_points,
    forces_on_all_charges,
    apply_electric_forces,
)
from ..core.cache import CachedCalculator
from ..core.fields import lorentz_force_on_canvas
from ..types import Charge, ElectricForce, PartialForce, SimulationField, TotalForce
from ..util import f64, heading, norm
from .palette import ColorPalette, DEFAULT_PALETTE
from .pool import VectorPool
from .registry import OverlayCategory, OverlayRegistry
from .surface import Drawable, DrawableSurface, Texture

logger = logging.getLogger(__name__)

FIELD_VECTOR_NAME = "fieldVector"
FIELD_SYMBOL_NAME = "magneticFieldSymbol"
TOTAL_FORCE_NAME = "electricForceVector"
PARTIAL_FORCE_PREFIX = "electricForceVector-from-"
LABEL_PREFIX = "label-for-"

FIELD_Z = 0
PARTIAL_FORCE_Z = 5
TOTAL_FORCE_Z = 6

HEAD_ANGLE = math.pi / 6
INDICATOR_RADIUS = 6.0
SYMBOL_SIZE = 6.0
SYMBOL_ALPHA = 0.7


def build_arrow(d: Drawable, length: float, head: float) -> Drawable:
    """Add a shaft of `length` and a filled head of size `head` along +x."""
    d.line(0.0, 0.0, length, 0.0)
    back = length - head * math.cos(HEAD_ANGLE)
    side = head * math.sin(HEAD_ANGLE)
    d.polygon(((length, 0.0), (back, -side), (back, side)))
    return d


class VectorOverlayRenderer:
    """
    Draws physics overlays onto a DrawableSurface.

    Attributes:
        surface: Target display surface.
        config: Overlay tuning.
        palette: Overlay colours.
        pool: Recycled vector drawables.
        registry: Drawables currently owned by each overlay category.

    Example:
        renderer = VectorOverlayRenderer(RecordingSurface(800, 600))
        calc = CachedCalculator.from_config(renderer.config)
        renderer.draw_electric_field(charges, calc)
        renderer.draw_electric_forces(charges, calc)
    """

    def __init__(
        self,
        surface: DrawableSurface,
        config: VizConfig = DEFAULT_CONFIG,
        palette: ColorPalette = DEFAULT_PALETTE,
    ):
        self.surface = surface
        self.config = config
        self.palette = palette
        self.pool = VectorPool(surface.create_vector, capacity=config.pool_capacity)
        self.registry = OverlayRegistry()
        self._arrow_textures: dict[tuple, Texture] = {}
        self._charge_labels: dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Bookkeeping
    # -------------------------------------------------------------------------

    def _add(self, category: OverlayCategory, d: Drawable, key=None) -> None:
        self.surface.add(d)
        self.registry.register(category, d, key)

    def _dispose(self, drawables: list[Drawable]) -> int:
        for d in drawables:
            self.surface.remove(d)
            if d.kind == "vector":
                self.pool.release(d)
        return len(drawables)

    def _remove_category(self, category: OverlayCategory) -> int:
        return self._dispose(self.registry.take(category))

    def charge_label(self, source_id: str) -> str:
        """Short tag ("C1", "C2", ...) for a source charge, assigned on first use."""
        label = self._charge_labels.get(source_id)
        if label is None:
            label = f"C{len(self._charge_labels) + 1}"
            self._charge_labels[source_id] = label
        return label

    def reset_charge_labels(self) -> None:
        self._charge_labels.clear()

    # -------------------------------------------------------------------------
    # Clearing
    # -------------------------------------------------------------------------

    def clear_fields(self) -> int:
        """Remove electric field arrows and magnetic field symbols."""
        return (self._remove_category(OverlayCategory.FIELD_VECTOR)
                + self._remove_category(OverlayCategory.MAGNETIC_FIELD_SYMBOL))

    def clear_forces(self) -> int:
        """Remove electric force arrows and their labels; forget label tags."""
        n = (self._remove_category(OverlayCategory.FORCE_VECTOR)
             + self._remove_category(OverlayCategory.FORCE_LABEL))
        self.reset_charge_labels()
        return n

    def clear_magnetic_forces(self) -> int:
        return self._remove_category(OverlayCategory.MAGNETIC_FORCE)

    def clear_velocities(self) -> int:
        return self._remove_category(OverlayCategory.VELOCITY)

    def clear_all(self) -> int:
        return (self.clear_fields() + self.clear_forces()
                + self.clear_magnetic_forces() + self.clear_velocities())

    # -------------------------------------------------------------------------
    # Electric field
    # -------------------------------------------------------------------------

    def field_arrow_alpha(self, magnitude: float, lo: float, hi: float) -> float:
        """
        Opacity of a field arrow.

        Log-normalizes the magnitude between the smallest and largest
        nonzero magnitudes on the grid, then compresses with the exponent
        1/log_scale_factor so weak far-field arrows stay legible.
        """
        cfg = self.config
        log_lo = math.log(lo)
        log_hi = math.log(hi)
        if log_hi > log_lo:
            t = (math.log(magnitude) - log_lo) / (log_hi - log_lo)
            t = min(max(t, 0.0), 1.0)
        else:
            t = 1.0
        return cfg.min_alpha + (cfg.max_alpha - cfg.min_alpha) * t ** (1.0 / cfg.log_scale_factor)

    def field_arrow_length(self, magnitude: float) -> float:
        return min(magnitude * self.config.vector_length_scale, self.config.max_vector_length)

    def _field_arrow_texture(self, length: float) -> Texture:
        cfg = self.config
        key = (round(length, 1), cfg.field_arrow_thickness, self.palette.field_vector, cfg.arrowhead_length)
        texture = self._arrow_textures.get(key)
        if texture is None:
            proto = self.surface.create_vector()
            proto.line_style(cfg.field_arrow_thickness, self.palette.field_vector)
            build_arrow(proto, key[0], cfg.arrowhead_length)
            texture = self.surface.generate_texture(proto, key)
            self._arrow_textures[key] = texture
        return texture

    def draw_electric_field(self, charges: Sequence[Charge], calculator: CachedCalculator) -> int:
        """
        Redraw the net electric field as a grid of arrows.

        The previous field overlay is removed first; there is no diffing.
        Samples with zero net field get no arrow.

        Returns:
            Number of arrows drawn.
        """
        self.clear_fields()
        if not charges:
            return 0

        cfg = self.config
        grid = sample_grid(self.surface.width, self.surface.height, cfg.field_spacing, cfg.cluster_factor)
        result = net_field_at_sample_points(charges, grid, calculator)
        if result.max_magnitude is None:
            return 0

        drawn = 0
        for sample in result.nonzero():
            sprite = self.surface.create_sprite(self._field_arrow_texture(self.field_arrow_length(sample.magnitude)))
            sprite.name = FIELD_VECTOR_NAME
            sprite.z_index = FIELD_Z
            sprite.alpha = self.field_arrow_alpha(sample.magnitude, result.min_magnitude, result.max_magnitude)
            sprite.set_position(*sample.point)
            sprite.rotation = heading(sample.vector)
            self._add(OverlayCategory.FIELD_VECTOR, sprite)
            drawn += 1

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("field overlay: %d arrows over %d samples", drawn, len(result.samples))
        return drawn

    # -------------------------------------------------------------------------
    # Electric forces
    # -------------------------------------------------------------------------

    def force_arrow_length(self, magnitude: float) -> float:
        """
        Arrow length for a Coulomb force.

        Raw magnitudes span many orders of magnitude, so the length grows
        with log10(m·1e10 + 1) and is capped.
        """
        cfg = self.config
        return min(cfg.force_scale_factor * math.log10(magnitude * FORCE_LENGTH_OFFSET + 1.0), cfg.force_length_cap)

    def _draw_force_arrow(
        self,
        position: np.ndarray,
        force: PartialForce | TotalForce,
        source_id: str | None = None,
    ) -> Drawable:
        cfg = self.config
        is_total = source_id is None
        color = self.palette.total_force if is_total else self.palette.partial_force
        alpha = 1.0 if is_total else cfg.partial_force_alpha
        length = self.force_arrow_length(force.magnitude)
        head = cfg.arrowhead_length * 1.2 if is_total else cfg.arrowhead_length

        arrow = self.pool.acquire()
        arrow.name = TOTAL_FORCE_NAME if is_total else f"{PARTIAL_FORCE_PREFIX}{source_id}"
        arrow.z_index = TOTAL_FORCE_Z if is_total else PARTIAL_FORCE_Z
        arrow.interactive = False
        arrow.line_style(3.0 if is_total else 2.0, color, alpha)
        arrow.set_position(position[0], position[1])
        arrow.rotation = heading(force.direction)
        build_arrow(arrow, length, head)

        if is_total:
            self._add(OverlayCategory.FORCE_VECTOR, arrow)
            return arrow

        # Source indicator halfway along the shaft, tagged with a short label
        arrow.circle(length * 0.5, 0.0, INDICATOR_RADIUS)
        self._add(OverlayCategory.FORCE_VECTOR, arrow, key=source_id)

        mid = f64(position) + force.direction * (length * 0.5)
        label = self.surface.create_text(self.charge_label(source_id), font_size=10.0, color=color)
        label.name = f"{LABEL_PREFIX}{arrow.name}"
        label.alpha = alpha
        label.z_index = PARTIAL_FORCE_Z
        label.interactive = False
        label.set_position(mid[0], mid[1] - 10.0)
        self._add(OverlayCategory.FORCE_LABEL, label, key=source_id)
        return arrow

    def significant_partials(self, force: ElectricForce) -> list[PartialForce]:
        """Partial forces above the threshold, largest first, truncated."""
        cfg = self.config
        kept = [pf for pf in force.partial_forces if pf.magnitude > cfg.min_force_threshold]
        kept.sort(key=lambda pf: pf.magnitude, reverse=True)
        return kept[:cfg.max_partial_arrows]

    def draw_electric_forces(
        self,
        charges: Sequence[Charge],
        calculator: CachedCalculator | None = None,
        forces: dict[str, ElectricForce] | None = None,
    ) -> dict[str, int]:
        """
        Redraw partial and total Coulomb forces on every charge.

        Forces are computed through `calculator` unless precomputed
        `forces` are supplied; either way the charges' electric_force
        records are refreshed. Per charge, up to max_partial_arrows partial
        forces above the threshold are drawn muted and labelled, then the
        total force on top if it is above the threshold.

        Returns:
            Counts {"total": n, "partial": m}.
        """
        self.clear_forces()
        counts = {"total": 0, "partial": 0}
        if len(charges) < 2:
            apply_electric_forces(charges, None)
            return counts

        if forces is None:
            if calculator is None:
                raise ValueError("either a calculator or precomputed forces is required")
            forces = forces_on_all_charges(charges, calculator)
        apply_electric_forces(charges, forces)
        if forces is None:
            return counts

        threshold = self.config.min_force_threshold
        for charge in charges:
            data = forces.get(charge.id)
            if data is None:
                continue
            for pf in self.significant_partials(data):
                self._draw_force_arrow(charge.position, pf, source_id=pf.source_id or "unknown")
                counts["partial"] += 1
            if data.total.magnitude > threshold:
                self._draw_force_arrow(charge.position, data.total)
                counts["total"] += 1

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("force overlay: %d total, %d partial arrows", counts["total"], counts["partial"])
        return counts

    def draw_electric_forces_during_drag(self, charges: Sequence[Charge], calculator: CachedCalculator) -> int:
        """
        Lightweight force pass used while a charge is being dragged.

        Only total forces are drawn, with a doubled threshold.
        """
        self.clear_forces()
        if len(charges) < 2:
            return 0
        forces = forces_on_all_charges(charges, calculator)
        apply_electric_forces(charges, forces)

        drawn = 0
        threshold = 2 * self.config.min_force_threshold
        for charge in charges:
            data = forces.get(charge.id)
            if data is None or data.total.magnitude <= threshold:
                continue
            self._draw_force_arrow(charge.position, data.total)
            drawn += 1
        return drawn

    def highlight_forces_from_charge(self, source_id: str, highlight: bool = True) -> int:
        """
        Emphasize the partial forces exerted by one charge.

        Matching arrows and labels go to full opacity (or back to the muted
        default when highlight is False); every other partial arrow and
        label is set to the muted default. Nothing is recomputed.

        Returns:
            Number of partial arrows belonging to source_id.
        """
        muted = self.config.partial_force_alpha
        matched = 0
        for category in (OverlayCategory.FORCE_VECTOR, OverlayCategory.FORCE_LABEL):
            for key, drawables in self.registry.keyed(category).items():
                alpha = 1.0 if (highlight and key == source_id) else muted
                for d in drawables:
                    d.alpha = alpha
                if category is OverlayCategory.FORCE_VECTOR and key == source_id:
                    matched += len(drawables)
        return matched

    # -------------------------------------------------------------------------
    # Magnetic mode
    # -------------------------------------------------------------------------

    def _draw_labelled_arrow(
        self,
        category: OverlayCategory,
        charge: Charge,
        direction: np.ndarray,
        color: int,
        letter: str,
    ) -> Drawable:
        cfg = self.config
        scale = cfg.responsive_scale(self.surface.width)
        length = cfg.mag_force_arrow_factor * scale

        arrow = self.pool.acquire()
        arrow.name = f"{category.value}-{charge.id}"
        arrow.z_index = FIELD_Z
        arrow.line_style(10.0 * scale, color, 1.0)
        arrow.set_position(charge.position[0], charge.position[1])
        arrow.rotation = heading(direction)
        build_arrow(arrow, length, cfg.arrowhead_length * scale)
        self._add(category, arrow, key=charge.id)

        end = charge.position + direction * length
        label = self.surface.create_text(letter, font_size=24.0 * scale, color=color)
        label.name = f"{category.value}-label-{charge.id}"
        label.set_position(end[0] + 10.0 * scale, end[1] - 10.0 * scale)
        self._add(category, label, key=charge.id)
        return arrow

    def draw_magnetic_force(self, charge: Charge, field: SimulationField | np.ndarray) -> bool:
        """
        Draw the in-plane Lorentz force on one charge, labelled "F".

        Replaces any previous magnetic force arrow of that charge. A charge
        with no in-plane force gets no arrow.
        """
        self._dispose(self.registry.discard(OverlayCategory.MAGNETIC_FORCE, charge.id))
        force = lorentz_force_on_canvas(charge, field)[:2]
        n = norm(force)
        if n == 0.0:
            return False
        self._draw_labelled_arrow(
            OverlayCategory.MAGNETIC_FORCE, charge, force / n, self.palette.magnetic_force_vector, "F",
        )
        return True

    def draw_magnetic_forces(self, charges: Sequence[Charge], field: SimulationField | np.ndarray) -> int:
        """Redraw magnetic force arrows for every charge; electric forces are cleared too."""
        self.clear_magnetic_forces()
        self.clear_forces()
        if not charges:
            return 0
        return sum(1 for c in charges if self.draw_magnetic_force(c, field))

    def draw_velocity(self, charge: Charge) -> bool:
        """Draw one charge's velocity direction, labelled "V". Skips charges at rest."""
        self._dispose(self.registry.discard(OverlayCategory.VELOCITY, charge.id))
        v = charge.velocity
        if v.magnitude == 0.0 or norm(v.direction) == 0.0:
            return False
        direction = v.direction / norm(v.direction)
        self._draw_labelled_arrow(OverlayCategory.VELOCITY, charge, direction, self.palette.velocity_vector, "V")
        return True

    def draw_velocities(self, charges: Sequence[Charge]) -> int:
        self.clear_velocities()
        if not charges:
            return 0
        return sum(1 for c in charges if self.draw_velocity(c))

    def magnetic_symbol_spacing(self, strength: float) -> float:
        """Grid spacing of field symbols; stronger fields draw denser grids."""
        cfg = self.config
        base = cfg.symbol_grid_factor * cfg.field_spacing
        return max(cfg.symbol_min_spacing, base - strength * cfg.symbol_density_slope)

    def draw_magnetic_field(self, field: SimulationField | np.ndarray) -> int:
        """
        Fill the canvas with field-direction symbols.

        Dots mark a field out of the plane (Bz > 0), crosses a field into
        it. Field and electric force overlays are cleared first; a zero Bz
        leaves the canvas empty.

        Returns:
            Number of symbols drawn.
        """
        self.clear_fields()
        self.clear_forces()

        b = field.magnetic_field if isinstance(field, SimulationField) else f64(field)
        bz = float(b[2])
        if bz == 0.0:
            return 0

        symbol = "dot" if bz > 0 else "cross"
        spacing = self.magnetic_symbol_spacing(abs(bz))
        w, h = self.surface.width, self.surface.height
        drawn = 0
        for x in np.arange(spacing / 2, w, spacing):
            for y in np.arange(spacing / 2, h, spacing):
                marker = self.surface.create_marker(symbol, SYMBOL_SIZE, self.palette.field_symbol, SYMBOL_ALPHA)
                marker.name = FIELD_SYMBOL_NAME
                marker.z_index = FIELD_Z
                marker.set_position(float(x), float(y))
                self._add(OverlayCategory.MAGNETIC_FIELD_SYMBOL, marker)
                drawn += 1
        return drawn
