"""
Tests for the CDF-equalization morph engine.
"""

import numpy as np
import pytest

from lineshapedb.core.exceptions import DegenerateInputError, EmptyDomainError
from lineshapedb.morph.curve import Curve
from lineshapedb.morph.engine import (
    Morph,
    morph_series,
    morph_steps,
    regularize,
    uniform_grid,
)


def test_uniform_grid_endpoints():
    """Test grid hits both ends exactly."""
    grid = uniform_grid(-1.3, 2.7, 7)
    assert len(grid) == 7
    assert grid[0] == -1.3
    assert grid[-1] == 2.7
    assert np.allclose(np.diff(grid), 4.0 / 6)

    with pytest.raises(DegenerateInputError):
        uniform_grid(0.0, 1.0, 1)


def test_identity_at_t_zero(gaussian):
    """Test t=0 reproduces f on the common domain."""
    f = gaussian(1.0)
    g = gaussian(2.0, center=1.0)

    with Morph(f, g, 2001) as morph:
        x = np.linspace(-5.0, 5.0, 101)
        expected = np.exp(-0.5 * x**2) / np.sqrt(2 * np.pi)
        assert np.allclose(morph.eval(0.0, x), expected, atol=1e-6)


def test_final_shape_at_t_one(gaussian):
    """Test t=1 reproduces g on the common domain."""
    f = gaussian(1.0)
    g = gaussian(1.5, center=2.0)

    with Morph(f, g, 4001) as morph:
        x = np.linspace(-3.0, 7.0, 101)
        expected = np.exp(-0.5 * ((x - 2.0) / 1.5) ** 2) / (1.5 * np.sqrt(2 * np.pi))
        assert np.allclose(morph.eval(1.0, x), expected, atol=2e-3)


@pytest.mark.parametrize("t", [0.0, 0.25, 0.5, 0.75, 1.0])
def test_mass_interpolates_linearly(gaussian, t):
    """Test area of the intermediate shape is (1-t)*norm_f + t*norm_g."""
    f = gaussian(1.0, area=1.0)
    g = gaussian(2.0, area=3.0)

    with Morph(f, g, 2001) as morph:
        curve = morph.sample(t)
        expected = (1 - t) * morph.norm_f + t * morph.norm_g
        assert np.isclose(curve.area(), expected, rtol=1e-3)


@pytest.mark.parametrize("t", [0.0, 0.3, 0.6, 1.0])
def test_normalize_gives_unit_area(gaussian, t):
    """Test normalized intermediate shapes have unit area."""
    f = gaussian(0.8, area=2.0)
    g = gaussian(1.6, center=0.5, area=0.5)

    with Morph(f, g, 2001) as morph:
        curve = morph.sample(t, normalize=True)
        assert np.isclose(curve.area(), 1.0, rtol=1e-3)


def test_identical_curves(gaussian):
    """Test morphing a curve with itself returns the same curve for all t."""
    f = gaussian(1.0)

    with Morph(f, f, 2001) as morph:
        x = np.linspace(-4.0, 4.0, 81)
        reference = morph.eval(0.0, x)
        for t in [0.2, 0.5, 0.9, 1.0]:
            assert np.allclose(morph.eval(t, x), reference, atol=1e-5)


def test_overlapping_triangles(triangles):
    """Test halfway morph of overlapping triangles stays inside [1, 2] and
    carries the average of the two masses."""
    f, g = triangles

    with Morph(f, g, 1001) as morph:
        assert morph.domain == (1.0, 2.0)
        curve = morph.sample(0.5)
        peak = curve.x[np.argmax(curve.y)]
        assert 1.0 < peak < 2.0
        assert np.all(curve.y >= 0)
        assert np.isclose(curve.area(), 0.5 * (morph.norm_f + morph.norm_g), rtol=1e-3)


def test_outside_domain_is_zero(gaussian):
    """Test points outside the common domain evaluate to 0."""
    f = gaussian(1.0, half_width=5.0)
    g = gaussian(1.0, center=1.0, half_width=5.0)

    with Morph(f, g, 501) as morph:
        assert morph.domain == (-4.0, 5.0)
        values = morph.eval(0.5, [-10.0, -4.5, 5.5, 12.0])
        assert np.all(values == 0.0)
        assert morph.eval(0.5, 0.0) > 0


def test_empty_domain():
    """Test disjoint supports raise EmptyDomainError."""
    f = Curve([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
    g = Curve([3.0, 4.0, 5.0], [0.0, 1.0, 0.0])
    with pytest.raises(EmptyDomainError):
        Morph(f, g, 101)

    # Touching at a single point is not an interval
    g = Curve([2.0, 3.0, 4.0], [0.0, 1.0, 0.0])
    with pytest.raises(EmptyDomainError):
        Morph(f, g, 101)


def test_zero_mass():
    """Test curves without intensity on the common domain are rejected."""
    f = Curve([0.0, 1.0, 2.0], [0.0, 0.0, 0.0])
    g = Curve([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
    with pytest.raises(DegenerateInputError):
        Morph(f, g, 101)


def test_invalid_fraction(triangles):
    """Test t outside [0, 1] is rejected."""
    f, g = triangles
    with Morph(f, g, 101) as morph:
        with pytest.raises(ValueError, match="within"):
            morph.eval(1.5, 1.5)
        with pytest.raises(ValueError):
            morph.eval(-0.1, 1.5)


def test_closed_morph(triangles):
    """Test a closed morph refuses evaluation."""
    f, g = triangles
    morph = Morph.build(f, g, 101)
    assert not morph.closed
    morph.close()
    assert morph.closed
    assert "closed" in repr(morph)
    with pytest.raises(RuntimeError):
        morph.eval(0.5, 1.5)


def test_accepts_xy_pairs():
    """Test plain (x, y) pairs are accepted as curves."""
    x = np.linspace(0.0, 4.0, 41)
    with Morph((x, np.exp(-((x - 1.5) ** 2))), (x, np.exp(-((x - 2.5) ** 2))), 501) as morph:
        assert morph.domain == (0.0, 4.0)
        assert morph.npoints == 501


def test_regularize():
    """Test regularization centers, scales and preserves area."""
    x = np.linspace(-10.0, 30.0, 801)
    y = np.exp(-0.5 * ((x - 10.0) / 3.0) ** 2)

    xr, yr, d, s = regularize(x, y)
    assert np.isclose(d, 10.0, atol=1e-6)
    # y^2 weighting halves the variance of a Gaussian
    assert np.isclose(s, 3.0 / np.sqrt(2), rtol=1e-4)
    assert np.isclose(np.trapezoid(yr, xr), np.trapezoid(y, x))

    with pytest.raises(DegenerateInputError):
        regularize(x, np.zeros_like(x))


def test_morph_steps():
    """Test interpretation of a single fraction or a number of steps."""
    assert morph_steps(0.3) == [0.3]
    assert morph_steps(1.0) == [1.0]
    with pytest.raises(ValueError):
        morph_steps(2.0)
    steps = morph_steps(5)
    assert steps == [0.0, 0.25, 0.5, 0.75, 1.0]

    with pytest.raises(ValueError, match="between 0 and 1"):
        morph_steps(1.5)
    with pytest.raises(ValueError):
        morph_steps(-0.2)


def test_morph_series(gaussian):
    """Test a series of morphs covers f to g."""
    f = gaussian(1.0)
    g = gaussian(2.0)

    curves = morph_series(f, g, [0.0, 0.5, 1.0], 1001)
    assert len(curves) == 3
    assert all(len(c) == 1001 for c in curves)

    widths = [np.sqrt(np.trapezoid(c.x**2 * c.y, c.x) / np.trapezoid(c.y, c.x)) for c in curves]
    assert widths[0] < widths[1] < widths[2]
    assert np.isclose(widths[0], 1.0, rtol=1e-2)
    assert np.isclose(widths[2], 2.0, rtol=1e-2)


def test_morph_series_regularized(gaussian):
    """Test regularized morph maps endpoints back to the original curves."""
    f = gaussian(1.0, center=-2.0)
    g = gaussian(2.0, center=3.0)

    first, last = morph_series(f, g, [0.0, 1.0], 2001, regularize_input=True)

    def centroid(c):
        return np.trapezoid(c.x * c.y, c.x) / np.trapezoid(c.y, c.x)

    assert np.isclose(centroid(first), -2.0, atol=1e-2)
    assert np.isclose(centroid(last), 3.0, atol=1e-2)
    assert np.isclose(first.area(), 1.0, rtol=1e-2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
