import numpy as np
import pytest

from emviz.constants import K_COULOMB
from emviz.core.fields import (
    electric_field_at,
    coulomb_force_between,
    lorentz_force,
    lorentz_force_on_canvas,
    normalize_and_scale,
    net_field_at_point,
)
from emviz.types import Charge, Polarity, SimulationField, Velocity


def test_field_three_four_five():
    """
    Q = +5 at the origin, point (3, 4):
      |E| = k·5/25, direction (0.6, 0.8)
    """
    e = electric_field_at((0.0, 0.0), 5.0, (3.0, 4.0), True)
    mag = K_COULOMB * 5.0 / 25.0
    assert e[0] == pytest.approx(mag * 0.6, rel=1e-12)
    assert e[1] == pytest.approx(mag * 0.8, rel=1e-12)


def test_field_negative_source_is_negated():
    pos = electric_field_at((0.0, 0.0), 5.0, (3.0, 4.0), True)
    neg = electric_field_at((0.0, 0.0), 5.0, (3.0, 4.0), False)
    assert np.array_equal(neg, -pos)


def test_field_polarity_symmetry_random():
    rng = np.random.default_rng(7)
    for _ in range(50):
        c = rng.uniform(0, 800, 2)
        p = rng.uniform(0, 800, 2)
        m = float(rng.uniform(0.1, 10))
        assert np.array_equal(
            electric_field_at(c, m, p, True),
            -electric_field_at(c, m, p, False),
        )


@pytest.mark.parametrize("is_positive", [True, False])
def test_field_zero_distance(is_positive):
    """A sample point on top of the charge yields exactly the zero vector."""
    e = electric_field_at((12.5, -3.0), 7.0, (12.5, -3.0), is_positive)
    assert e.tolist() == [0.0, 0.0]
    assert np.all(np.isfinite(e))


def test_net_field_superposition():
    a = Charge("a", 2.0, Polarity.POSITIVE, position=(0, 0))
    b = Charge("b", 3.0, Polarity.NEGATIVE, position=(10, 0))
    p = (5.0, 5.0)
    expected = (electric_field_at(a.position, 2.0, p, True)
                + electric_field_at(b.position, 3.0, p, False))
    assert np.allclose(net_field_at_point([a, b], p), expected)


def test_coulomb_like_charges_repel():
    a = Charge("a", 1.0, Polarity.POSITIVE, position=(0, 0))
    b = Charge("b", 2.0, Polarity.POSITIVE, position=(10, 0))
    f = coulomb_force_between(a, b)
    assert f.magnitude == pytest.approx(K_COULOMB * 2.0 / 100.0)
    assert np.allclose(f.direction, [-1.0, 0.0])
    assert f.source_id == "b"


def test_coulomb_unlike_charges_attract():
    a = Charge("a", 1.0, Polarity.NEGATIVE, position=(0, 0))
    b = Charge("b", 2.0, Polarity.POSITIVE, position=(0, 20))
    f = coulomb_force_between(a, b)
    assert np.allclose(f.direction, [0.0, 1.0])


def test_coulomb_newton_third_law():
    rng = np.random.default_rng(3)
    for _ in range(30):
        a = Charge("a", float(rng.uniform(0.5, 5)), Polarity.POSITIVE, position=rng.uniform(0, 500, 2))
        b = Charge("b", float(rng.uniform(0.5, 5)),
                   Polarity.NEGATIVE if rng.random() < 0.5 else Polarity.POSITIVE,
                   position=rng.uniform(0, 500, 2))
        fab = coulomb_force_between(a, b)
        fba = coulomb_force_between(b, a)
        assert fab.magnitude == pytest.approx(fba.magnitude, rel=1e-12)
        assert np.allclose(fab.direction, -fba.direction)


def test_coulomb_near_coincident_absent():
    a = Charge("a", 1.0, position=(100.0, 100.0))
    b = Charge("b", 1.0, position=(100.6, 100.5))
    assert coulomb_force_between(a, b) is None
    assert coulomb_force_between(a, a) is None


def test_lorentz_stationary_charge_is_zero():
    c = Charge("c", 5.0, velocity=Velocity(0.0, (0.0, 0.0)))
    f = lorentz_force(c, SimulationField(magnetic_field=(3.0, -2.0, 9.0)))
    assert np.all(f == 0.0)


def test_lorentz_cross_product():
    """v = (1, 0, 0), B = (0, 1, 0), q = +2  =>  F = 2·(0, 0, 1)."""
    c = Charge("c", 2.0, Polarity.POSITIVE, velocity=Velocity(1.0, (1.0, 0.0)))
    f = lorentz_force(c, (0.0, 1.0, 0.0))
    assert np.allclose(f, [0.0, 0.0, 2.0])


def test_lorentz_out_of_plane_field_is_perpendicular():
    """With B = Bz·ẑ the force is in-plane and perpendicular to v."""
    c = Charge("c", 3.0, Polarity.NEGATIVE, velocity=Velocity(4.0, (0.6, 0.8)))
    f = lorentz_force(c, SimulationField(magnetic_field=(0.0, 0.0, 0.5)))
    assert f[2] == 0.0
    assert np.dot(f[:2], c.velocity.vector) == pytest.approx(0.0, abs=1e-12)
    assert np.linalg.norm(f) == pytest.approx(3.0 * 4.0 * 0.5)


def test_lorentz_on_canvas_is_mirrored():
    """
    q = +2, v = 10·x̂, B = +ẑ:
      physical q v×B = (0, -20, 0); on the y-down canvas the push is (0, +20).
    """
    c = Charge("c", 2.0, Polarity.POSITIVE, velocity=Velocity(10.0, (1.0, 0.0)))
    field = SimulationField(magnetic_field=(0.0, 0.0, 1.0))
    assert np.allclose(lorentz_force(c, field), [0.0, -20.0, 0.0])
    assert np.allclose(lorentz_force_on_canvas(c, field), [0.0, 20.0, 0.0])

    c.polarity = Polarity.NEGATIVE
    assert np.allclose(lorentz_force_on_canvas(c, field), [0.0, -20.0, 0.0])


def test_normalize_and_scale_basic():
    assert np.allclose(normalize_and_scale((3.0, 4.0), 10.0), [6.0, 8.0])
    assert np.allclose(normalize_and_scale((1.0, 2.0, 2.0), 6.0), [2.0, 4.0, 4.0])


def test_normalize_and_scale_idempotent():
    rng = np.random.default_rng(11)
    for _ in range(50):
        v = rng.normal(size=int(rng.integers(2, 4))) * 1e3
        s1, s2 = rng.uniform(0.1, 100, 2)
        out = normalize_and_scale(normalize_and_scale(v, s1), s2)
        assert np.linalg.norm(out) == pytest.approx(s2, rel=1e-9)


def test_normalize_and_scale_zero_vector():
    z2 = normalize_and_scale((0.0, 0.0), 10.0)
    z3 = normalize_and_scale((0.0, 0.0, 0.0), 10.0)
    assert z2.shape == (2,) and np.all(z2 == 0.0)
    assert z3.shape == (3,) and np.all(z3 == 0.0)
    assert np.all(np.isfinite(z3))


def test_velocity_from_vector():
    v = Velocity.from_vector((3.0, -4.0))
    assert v.magnitude == 5.0
    assert np.allclose(v.direction, [0.6, -0.8])
    assert np.allclose(v.vector, [3.0, -4.0])

    rest = Velocity.from_vector((0.0, 0.0))
    assert rest.magnitude == 0.0 and rest.direction.tolist() == [0.0, 0.0]
