"""Unit tests for the Newton-Cotes rules."""

import math

import pytest

from adaptnum.quadrature.rules import (
    boole_rule,
    composite_midpoint,
    composite_rectangle,
    composite_simpson,
    composite_trapezoid,
    midpoint_rule,
    rectangle_rule,
    simpson38_rule,
    simpson_rule,
    simpson_samples,
    trapezoid_rule,
    trapezoid_samples,
)


def decay(x: float) -> float:
    return math.exp(-x)


class TestSinglePanelExactness:
    """Each rule integrates polynomials up to its degree exactly."""

    @pytest.mark.parametrize("rule", [midpoint_rule, trapezoid_rule])
    def test_linear(self, rule):
        assert rule(lambda x: 3 * x + 2, 0, 2) == pytest.approx(10.0, abs=1e-12)

    @pytest.mark.parametrize("rule", [simpson_rule, simpson38_rule])
    def test_cubic(self, rule):
        assert rule(lambda x: x**3 + x**2, 0, 1) == pytest.approx(7 / 12, abs=1e-12)

    def test_boole_quintic(self):
        assert boole_rule(lambda x: x**5, 0, 2) == pytest.approx(64 / 6, abs=1e-12)

    def test_trapezoid_not_exact_for_quadratic(self):
        assert trapezoid_rule(lambda x: x**2, 0, 1) == pytest.approx(0.5)

    def test_midpoint_value(self):
        assert midpoint_rule(lambda x: x**2, 0, 1) == pytest.approx(0.25)

    @pytest.mark.parametrize(
        "rule", [midpoint_rule, trapezoid_rule, simpson_rule, simpson38_rule, boole_rule]
    )
    def test_reversed_bounds_negate(self, rule):
        assert rule(math.exp, 1, 0) == -rule(math.exp, 0, 1)

    def test_non_finite_bound_raises(self):
        with pytest.raises(ValueError):
            simpson_rule(math.exp, 0, math.inf)


class TestComposite:
    def test_trapezoid_on_sine(self):
        assert abs(composite_trapezoid(math.sin, 0, math.pi) - 2.0) < 2e-4

    def test_midpoint_on_sine(self):
        assert abs(composite_midpoint(math.sin, 0, math.pi) - 2.0) < 1e-4

    def test_simpson_on_sine(self):
        assert abs(composite_simpson(math.sin, 0, math.pi) - 2.0) < 1e-7

    def test_trapezoid_error_quarters_when_panels_double(self):
        coarse = abs(composite_trapezoid(math.exp, 0, 1, n=16) - (math.e - 1))
        fine = abs(composite_trapezoid(math.exp, 0, 1, n=32) - (math.e - 1))
        assert 3.8 < coarse / fine < 4.2

    def test_simpson_rounds_odd_panels_up(self, recorder):
        f = recorder(lambda x: x**3)
        assert composite_simpson(f, 0, 1, n=3) == pytest.approx(0.25, abs=1e-14)
        assert f.calls == 5

    def test_trapezoid_uses_n_plus_one_samples(self, recorder):
        f = recorder(math.cos)
        composite_trapezoid(f, 0, 1, n=10)
        assert f.calls == 11

    def test_reversed_bounds_negate(self):
        assert composite_simpson(math.exp, 1, 0, n=8) == -composite_simpson(math.exp, 0, 1, n=8)

    @pytest.mark.parametrize("n", [0, -3, 2.5])
    def test_bad_panel_count_raises(self, n):
        with pytest.raises(ValueError, match="n"):
            composite_trapezoid(math.sin, 0, 1, n=n)


class TestRectangle:
    """Left and right rectangle rules, single-panel and composite."""

    @pytest.mark.parametrize("position", ["left", "midpoint", "right"])
    def test_constant_is_exact(self, position):
        assert rectangle_rule(lambda x: 4.0, 1, 3, position=position) == 8.0
        assert composite_rectangle(lambda x: 4.0, 1, 3, n=7, position=position) == pytest.approx(8.0, abs=1e-14)

    def test_single_panel_bounds_increasing_function(self):
        """For increasing f the left rectangle underestimates, the right overestimates."""
        exact = math.e - 1
        assert rectangle_rule(math.exp, 0, 1) == 1.0
        assert rectangle_rule(math.exp, 0, 1, position="right") == math.e
        assert rectangle_rule(math.exp, 0, 1) < exact < rectangle_rule(math.exp, 0, 1, position="right")

    @pytest.mark.parametrize("n", [1, 4, 32])
    def test_composite_bounds_decreasing_function(self, n):
        """For decreasing f the roles swap."""
        exact = 1 - math.exp(-2)
        left = composite_rectangle(decay, 0, 2, n=n)
        right = composite_rectangle(decay, 0, 2, n=n, position="right")
        assert right < exact < left

    def test_left_and_right_average_to_trapezoid(self):
        left = composite_rectangle(math.sin, 0, 1, n=10)
        right = composite_rectangle(math.sin, 0, 1, n=10, position="right")
        assert (left + right) / 2 == pytest.approx(composite_trapezoid(math.sin, 0, 1, n=10), rel=1e-13)

    def test_error_halves_when_panels_double(self):
        """First-order rule: doubling n halves the error."""
        coarse = abs(composite_rectangle(math.exp, 0, 1, n=64) - (math.e - 1))
        fine = abs(composite_rectangle(math.exp, 0, 1, n=128) - (math.e - 1))
        assert 1.9 < coarse / fine < 2.1

    def test_midpoint_position_matches_composite_midpoint(self):
        assert composite_rectangle(math.exp, 0, 1, n=9, position="midpoint") == pytest.approx(
            composite_midpoint(math.exp, 0, 1, n=9), rel=1e-15
        )

    def test_right_composite_samples_upper_bound_exactly(self, recorder):
        f = recorder(math.cos)
        composite_rectangle(f, 0.1, 0.7, n=3, position="right")
        assert f.calls == 3
        assert f.args[-1][0] == 0.7

    def test_reversed_bounds_negate(self):
        assert composite_rectangle(math.exp, 1, 0, n=5) == -composite_rectangle(math.exp, 0, 1, n=5)

    def test_position_is_case_insensitive(self):
        assert rectangle_rule(math.exp, 0, 1, position="RIGHT") == math.e

    def test_unknown_position_raises(self):
        with pytest.raises(ValueError, match="Unknown rectangle position"):
            rectangle_rule(math.exp, 0, 1, position="centre")
        with pytest.raises(ValueError, match="Unknown rectangle position"):
            composite_rectangle(math.exp, 0, 1, position="top")


class TestSampledRules:
    def test_trapezoid_samples(self):
        assert trapezoid_samples([0.0, 1.0, 2.0], 2.0) == pytest.approx(2.0)

    def test_trapezoid_samples_needs_two_values(self):
        with pytest.raises(ValueError):
            trapezoid_samples([1.0], 1.0)

    def test_simpson_samples(self):
        values = [x**2 for x in (0.0, 0.5, 1.0)]
        assert simpson_samples(values, 1.0) == pytest.approx(1 / 3)

    @pytest.mark.parametrize("count", [1, 2, 4])
    def test_simpson_samples_needs_odd_count(self, count):
        with pytest.raises(ValueError, match="odd number"):
            simpson_samples([1.0] * count, 1.0)
