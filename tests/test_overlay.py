import math

import numpy as np
import pytest

from emviz.config import VizConfig
from emviz.core.cache import CachedCalculator
from emviz.renderer import OverlayCategory, RecordingSurface, VectorOverlayRenderer
from emviz.renderer.overlay import FIELD_VECTOR_NAME, LABEL_PREFIX, PARTIAL_FORCE_PREFIX
from emviz.types import Charge, Polarity, SimulationField, Velocity


def _renderer(width=800, height=600, config=None):
    config = config or VizConfig()
    surface = RecordingSurface(width, height)
    return VectorOverlayRenderer(surface, config), surface, CachedCalculator.from_config(config)


def _three_in_a_row():
    return [
        Charge("a", 2.0, Polarity.POSITIVE, position=(100, 300)),
        Charge("b", 2.0, Polarity.NEGATIVE, position=(300, 300)),
        Charge("c", 2.0, Polarity.POSITIVE, position=(700, 300)),
    ]


# -----------------------------------------------------------------------------
# Electric field
# -----------------------------------------------------------------------------

def test_field_overlay_one_arrow_per_nonzero_sample():
    renderer, surface, calc = _renderer()
    n = renderer.draw_electric_field([Charge("q", 5.0, position=(100, 100))], calc)
    assert n == 35
    arrows = surface.named(FIELD_VECTOR_NAME)
    assert len(arrows) == 35
    assert all(a.kind == "sprite" for a in arrows)

    alphas = [a.alpha for a in arrows]
    assert min(alphas) == pytest.approx(0.1)
    assert max(alphas) == pytest.approx(1.0)


def test_field_overlay_skips_zero_sample():
    renderer, surface, calc = _renderer()
    assert renderer.draw_electric_field([Charge("q", 5.0, position=(128, 128))], calc) == 34


def test_field_overlay_empty_is_noop():
    renderer, surface, calc = _renderer()
    assert renderer.draw_electric_field([], calc) == 0
    assert surface.children == []


def test_field_overlay_reuses_textures():
    renderer, surface, calc = _renderer()
    charges = _three_in_a_row()
    renderer.draw_electric_field(charges, calc)
    generated = surface.textures_generated
    assert 0 < generated < 35

    renderer.draw_electric_field(charges, calc)
    assert surface.textures_generated == generated
    assert len(surface.named(FIELD_VECTOR_NAME)) == renderer.registry.count(OverlayCategory.FIELD_VECTOR)


def test_field_overlay_orientation():
    """A lone positive charge: arrows point away from it."""
    renderer, surface, calc = _renderer()
    renderer.draw_electric_field([Charge("q", 1.0, position=(100, 100))], calc)
    for a in surface.named(FIELD_VECTOR_NAME):
        away = math.atan2(a.position[1] - 100, a.position[0] - 100)
        assert math.isclose(math.cos(a.rotation - away), 1.0, abs_tol=1e-9)


def test_non_finite_charge_draws_no_field():
    """A charge with a NaN coordinate poisons every sample; nothing is drawn."""
    renderer, surface, calc = _renderer()
    bad = Charge("bad", 1.0, position=(math.nan, 10.0))
    assert renderer.draw_electric_field([bad], calc) == 0
    assert len(calc.field_cache) == 0
    assert renderer.draw_electric_field([bad, Charge("ok", 1.0, position=(100, 100))], calc) == 0
    assert surface.named(FIELD_VECTOR_NAME) == []


def test_non_finite_charge_forces_are_skipped():
    renderer, surface, calc = _renderer()
    charges = [
        Charge("bad", 1.0, position=(math.nan, 10.0)),
        Charge("b", 2.0, position=(300, 300)),
        Charge("c", 2.0, position=(500, 300)),
    ]
    # only the b/c pair is finite; every resultant includes a NaN term
    assert renderer.draw_electric_forces(charges, calc) == {"total": 0, "partial": 2}
    assert len(calc.force_cache) == 2


def test_field_arrow_alpha_degenerate_range():
    renderer, _, _ = _renderer()
    assert renderer.field_arrow_alpha(3.0, 3.0, 3.0) == pytest.approx(1.0)
    assert renderer.field_arrow_alpha(1.0, 1.0, 100.0) == pytest.approx(0.1)
    # log midpoint, compressed by the square root
    assert renderer.field_arrow_alpha(10.0, 1.0, 100.0) == pytest.approx(0.1 + 0.9 * math.sqrt(0.5))


def test_field_arrow_length_is_capped():
    renderer, _, _ = _renderer()
    assert renderer.field_arrow_length(1000.0) == pytest.approx(0.5)
    assert renderer.field_arrow_length(1e9) == 30.0


# -----------------------------------------------------------------------------
# Electric forces
# -----------------------------------------------------------------------------

def test_force_arrow_length():
    renderer, _, _ = _renderer()
    assert renderer.force_arrow_length(0.0) == 0.0
    assert renderer.force_arrow_length(1e-10) == pytest.approx(200 * math.log10(2.0))
    assert renderer.force_arrow_length(1e6) == 300.0


def test_force_overlay_counts_and_labels():
    renderer, surface, calc = _renderer()
    charges = _three_in_a_row()
    counts = renderer.draw_electric_forces(charges, calc)
    assert counts == {"total": 3, "partial": 6}
    assert len(surface.named(PARTIAL_FORCE_PREFIX)) == 6

    labels = surface.named(LABEL_PREFIX)
    assert sorted(l.text for l in labels) == ["C1", "C1", "C2", "C2", "C3", "C3"]
    for source in ("a", "b", "c"):
        texts = {l.text for l in renderer.registry.lookup(OverlayCategory.FORCE_LABEL, source)}
        assert len(texts) == 1
    assert all(c.electric_force is not None for c in charges)


def test_force_overlay_top_partials_only():
    renderer, surface, calc = _renderer()
    charges = [Charge(f"q{i}", 1.0, position=(60 + 90 * i, 80 + 50 * i)) for i in range(8)]
    counts = renderer.draw_electric_forces(charges, calc)
    assert counts == {"total": 8, "partial": 40}
    for c in charges:
        drawn = [d for d in renderer.registry.items(OverlayCategory.FORCE_VECTOR)
                 if np.array_equal(d.position, c.position) and d.name.startswith(PARTIAL_FORCE_PREFIX)]
        expected = sorted((pf.magnitude for pf in c.electric_force.partial_forces), reverse=True)[:5]
        assert len(drawn) == len(expected) == 5


def test_force_overlay_threshold():
    """With k = 1: forces at r = 100 are 1e-4 (drawn), at r >= 1000 below 1e-5."""
    renderer, surface, calc = _renderer(2000, 600, VizConfig(coulomb_k=1.0))
    charges = [
        Charge("a", 1.0, position=(0, 0)),
        Charge("b", 1.0, position=(100, 0)),
        Charge("c", 1.0, position=(1100, 0)),
    ]
    assert renderer.draw_electric_forces(charges, calc) == {"total": 2, "partial": 2}


def test_force_overlay_needs_two_charges():
    renderer, surface, calc = _renderer()
    lone = Charge("a", 1.0, position=(10, 10))
    assert renderer.draw_electric_forces([], calc) == {"total": 0, "partial": 0}
    assert renderer.draw_electric_forces([lone], calc) == {"total": 0, "partial": 0}
    assert lone.electric_force is None
    assert surface.children == []


def test_force_overlay_requires_a_source():
    renderer, _, _ = _renderer()
    with pytest.raises(ValueError):
        renderer.draw_electric_forces(_three_in_a_row())


def test_force_overlay_during_drag_draws_totals_only():
    renderer, surface, calc = _renderer()
    assert renderer.draw_electric_forces_during_drag(_three_in_a_row(), calc) == 3
    assert surface.named(PARTIAL_FORCE_PREFIX) == []
    assert surface.named(LABEL_PREFIX) == []


def test_highlight_forces_from_charge():
    renderer, surface, calc = _renderer()
    renderer.draw_electric_forces(_three_in_a_row(), calc)

    assert renderer.highlight_forces_from_charge("b") == 2
    reg = renderer.registry
    assert all(d.alpha == 1.0 for d in reg.lookup(OverlayCategory.FORCE_VECTOR, "b"))
    assert all(d.alpha == 1.0 for d in reg.lookup(OverlayCategory.FORCE_LABEL, "b"))
    assert all(d.alpha == 0.5 for d in reg.lookup(OverlayCategory.FORCE_VECTOR, "a"))

    assert renderer.highlight_forces_from_charge("b", highlight=False) == 2
    assert all(d.alpha == 0.5 for d in reg.lookup(OverlayCategory.FORCE_VECTOR, "b"))
    assert renderer.highlight_forces_from_charge("nobody") == 0


def test_clear_forces_leaves_field():
    renderer, surface, calc = _renderer()
    charges = _three_in_a_row()
    n_field = renderer.draw_electric_field(charges, calc)
    renderer.draw_electric_forces(charges, calc)

    renderer.clear_forces()
    assert len(surface.named(FIELD_VECTOR_NAME)) == n_field
    assert renderer.registry.count(OverlayCategory.FORCE_VECTOR) == 0
    assert surface.named(LABEL_PREFIX) == []
    assert len(surface.children) == n_field

    renderer.clear_fields()
    assert surface.children == []


def test_force_vectors_are_pooled():
    renderer, surface, calc = _renderer()
    charges = _three_in_a_row()
    renderer.draw_electric_forces(charges, calc)
    assert renderer.pool.created == 9
    renderer.draw_electric_forces(charges, calc)
    assert renderer.pool.created == 9
    assert renderer.pool.reused == 9


def test_labels_restart_after_clear():
    renderer, surface, calc = _renderer()
    renderer.draw_electric_forces(_three_in_a_row(), calc)
    renderer.clear_forces()
    assert renderer.charge_label("zzz") == "C1"


# -----------------------------------------------------------------------------
# Magnetic mode
# -----------------------------------------------------------------------------

def test_magnetic_field_symbols():
    renderer, surface, _ = _renderer()
    assert renderer.draw_magnetic_field(SimulationField(magnetic_field=(0, 0, 1.0))) == 20
    assert {m.symbol for m in surface.of_kind("marker")} == {"dot"}

    assert renderer.draw_magnetic_field(SimulationField(magnetic_field=(0, 0, -1.0))) == 20
    assert {m.symbol for m in surface.of_kind("marker")} == {"cross"}

    assert renderer.draw_magnetic_field(SimulationField(magnetic_field=(0, 0, 100.0))) > 20


def test_zero_magnetic_field_draws_nothing():
    renderer, surface, calc = _renderer()
    renderer.draw_electric_field(_three_in_a_row(), calc)
    assert renderer.draw_magnetic_field(np.array([1.0, 2.0, 0.0])) == 0
    assert surface.children == []


def test_magnetic_force_arrow():
    """
    q = +2, v = 10·x̂ (right), B = +ẑ (dots, toward the viewer):
      F = q v×B points down the screen, i.e. +y on the y-down canvas.
    """
    renderer, surface, _ = _renderer(1200, 800)
    c = Charge("q", 2.0, position=(500, 400), velocity=Velocity(10.0, (1.0, 0.0)))
    assert renderer.draw_magnetic_forces([c], SimulationField(magnetic_field=(0, 0, 1.0))) == 1

    arrows = renderer.registry.lookup(OverlayCategory.MAGNETIC_FORCE, "q")
    arrow = next(d for d in arrows if d.kind == "vector")
    label = next(d for d in arrows if d.kind == "text")
    assert arrow.rotation == pytest.approx(math.pi / 2)
    assert arrow.line_width == 10.0
    assert label.text == "F"
    assert label.position.tolist() == pytest.approx([510.0, 430.0])


def test_magnetic_force_responsive_scale():
    renderer, surface, _ = _renderer(800, 600)
    c = Charge("q", 1.0, position=(400, 300), velocity=Velocity(1.0, (0.0, 1.0)))
    renderer.draw_magnetic_force(c, np.array([0.0, 0.0, 1.0]))
    arrow = next(d for d in surface.of_kind("vector"))
    assert arrow.line_width == pytest.approx(6.0)
    assert arrow.segments[0][3] == pytest.approx(24.0)


def test_magnetic_force_follows_surface_resize():
    """Crossing the narrow-viewport width switches the arrow scale."""
    renderer, surface, _ = _renderer(800, 600)
    c = Charge("q", 1.0, position=(400, 300), velocity=Velocity(1.0, (0.0, 1.0)))
    field = np.array([0.0, 0.0, 1.0])
    renderer.draw_magnetic_force(c, field)
    assert surface.of_kind("vector")[0].line_width == pytest.approx(6.0)

    surface.resize(1200, 800)
    renderer.clear_magnetic_forces()
    renderer.draw_magnetic_force(c, field)
    assert surface.of_kind("vector")[0].line_width == pytest.approx(10.0)


def test_magnetic_force_absent_when_zero():
    renderer, surface, _ = _renderer()
    moving_along_b = Charge("q", 1.0, velocity=Velocity(5.0, (1.0, 0.0)))
    at_rest = Charge("r", 1.0)
    assert renderer.draw_magnetic_forces([moving_along_b, at_rest], np.array([1.0, 0.0, 0.0])) == 0
    assert surface.children == []


def test_magnetic_forces_clear_electric_forces():
    renderer, surface, calc = _renderer()
    charges = _three_in_a_row()
    renderer.draw_electric_forces(charges, calc)
    renderer.draw_magnetic_forces(charges, SimulationField(magnetic_field=(0, 0, 1.0)))
    assert renderer.registry.count(OverlayCategory.FORCE_VECTOR) == 0
    assert renderer.registry.count(OverlayCategory.FORCE_LABEL) == 0


def test_velocity_arrows():
    renderer, surface, _ = _renderer()
    moving = Charge("m", 1.0, position=(100, 100), velocity=Velocity(3.0, (0.0, -1.0)))
    still = Charge("s", 1.0, position=(200, 200))
    assert renderer.draw_velocities([moving, still]) == 1
    texts = [d.text for d in renderer.registry.items(OverlayCategory.VELOCITY) if d.kind == "text"]
    assert texts == ["V"]

    renderer.clear_velocities()
    assert surface.children == []
