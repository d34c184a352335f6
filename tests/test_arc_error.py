"""Test module for ArcErrorEstimator in arcfit.arc_error

The tests are run using pytest.
These tests ensure that the closed-form error bounds between cubic Bezier
curves and circular arcs remain working correctly after changes and refactoring.
"""

import math

import numpy as np
import pytest

from arcfit.arc_error import ArcErrorEstimator
from arcfit.bezier import CubicBezier
from arcfit.common import DegenerateGeometryError
from arcfit.geom import Arc, Circle, Point


def canonical_arc_bezier(radius: float, sweep: float) -> CubicBezier:
    """Standard Bezier approximation of an arc around the origin, symmetric to the x-axis."""
    a0 = -sweep / 2.0
    a1 = sweep / 2.0
    k = 4.0 / 3.0 * math.tan(sweep / 4.0)
    p0 = (radius * math.cos(a0), radius * math.sin(a0))
    p3 = (radius * math.cos(a1), radius * math.sin(a1))
    p1 = (p0[0] - p0[1] * k, p0[1] + p0[0] * k)
    p2 = (p3[0] + p3[1] * k, p3[1] - p3[0] * k)
    return CubicBezier.from_points([p0, p1, p2, p3])


###############################################################################
# max_dev
###############################################################################


class TestMaxDev:
    """Test class for the analytic maximum of the deviation cubic."""

    @staticmethod
    def brute_force(d0: float, d1: float) -> float:
        t = np.linspace(0.0, 1.0, 10001)
        return float(np.max(np.abs(3.0 * t * (1.0 - t) * (d0 * (1.0 - t) + d1 * t))))

    def test_equal_offsets(self):
        """Test that equal offsets peak at t=0.5 with 3/4 of the offset."""
        assert ArcErrorEstimator.max_dev(2.0, 2.0) == pytest.approx(1.5)
        assert ArcErrorEstimator.max_dev(-4.0, -4.0) == pytest.approx(3.0)
        assert ArcErrorEstimator.max_dev(0.0, 0.0) == 0.0

    def test_opposite_offsets(self):
        """Test an S-shaped deviation."""
        assert ArcErrorEstimator.max_dev(1.0, -1.0) == pytest.approx(self.brute_force(1.0, -1.0), abs=1e-6)

    def test_matches_brute_force(self):
        """Test the analytic maximum against dense sampling."""
        rng = np.random.default_rng(42)
        for d0, d1 in rng.uniform(-10.0, 10.0, size=(50, 2)):
            expected = self.brute_force(float(d0), float(d1))
            assert ArcErrorEstimator.max_dev(float(d0), float(d1)) == pytest.approx(expected, abs=1e-6)

    def test_is_symmetric_and_sign_invariant(self):
        """Test that swapping or negating both offsets does not change the maximum."""
        assert ArcErrorEstimator.max_dev(3.0, 1.0) == pytest.approx(ArcErrorEstimator.max_dev(1.0, 3.0))
        assert ArcErrorEstimator.max_dev(3.0, -1.0) == pytest.approx(ArcErrorEstimator.max_dev(-3.0, 1.0))

    def test_approx_is_upper_bound(self):
        """Test that the fast estimate never undercuts the exact maximum."""
        rng = np.random.default_rng(7)
        for d0, d1 in rng.uniform(-5.0, 5.0, size=(50, 2)):
            exact = ArcErrorEstimator.max_dev(float(d0), float(d1))
            assert ArcErrorEstimator.max_dev_approx(float(d0), float(d1)) >= exact - 1e-12

    def test_approx_values(self):
        """Test the two branches of the fast estimate."""
        assert ArcErrorEstimator.max_dev_approx(2.0, 2.0) == pytest.approx(1.5)
        assert ArcErrorEstimator.max_dev_approx(1.0, 0.0) == pytest.approx(4.0 / 9.0)


###############################################################################
# Line error
###############################################################################


class TestLineBezierError:
    """Test class for the distance from the chord."""

    def test_symmetric_bump(self):
        """Test a curve bulging two units above its chord."""
        b = CubicBezier.from_points([(0.0, 0.0), (0.0, 2.0), (10.0, 2.0), (10.0, 0.0)])
        assert ArcErrorEstimator.line_bezier_error(b) == pytest.approx(1.5)

    def test_straight_curve(self):
        """Test that a curve on its chord has no error."""
        b = CubicBezier.from_points([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0), (3.0, 3.0)])
        assert ArcErrorEstimator.line_bezier_error(b) == pytest.approx(0.0, abs=1e-12)

    def test_closed_curve(self):
        """Test a loop returning to its start point."""
        b = CubicBezier.from_points([(0.0, 0.0), (0.0, 4.0), (0.0, 4.0), (0.0, 0.0)])
        assert ArcErrorEstimator.line_bezier_error(b) == pytest.approx(3.0)


###############################################################################
# Arc errors
###############################################################################


class TestArcBezierError:
    """Test class for the error bounds between curves and arcs."""

    @pytest.mark.parametrize("sweep_deg", [15, 30, 45, 60, -15, -30, -45, -60])
    def test_canonical_arc_has_small_error(self, sweep_deg):
        """Test that a curve approximating an arc is recognized as such."""
        b = canonical_arc_bezier(1.0, math.radians(sweep_deg))
        error = ArcErrorEstimator.arc_bezier_error_improved(b)
        assert 0.0 <= error < 1e-3

    @pytest.mark.parametrize("sweep_deg", [75, 89, -75, -89])
    def test_wide_canonical_arc_error(self, sweep_deg):
        """Test that the bound grows beyond 1e-3 towards a quarter circle but stays small."""
        b = canonical_arc_bezier(1.0, math.radians(sweep_deg))
        error = ArcErrorEstimator.arc_bezier_error_improved(b)
        assert 1e-3 < error < 5e-3

    def test_canonical_arc_error_scales_with_radius(self):
        """Test that the bound grows linearly with the size of the curve."""
        small = ArcErrorEstimator.arc_bezier_error_improved(canonical_arc_bezier(1.0, math.radians(60)))
        large = ArcErrorEstimator.arc_bezier_error_improved(canonical_arc_bezier(100.0, math.radians(60)))
        assert large == pytest.approx(100.0 * small, rel=1e-6)

    def test_straight_curve_falls_back_to_line(self):
        """Test that collinear fit points give the chord distance."""
        b = CubicBezier.from_points([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)])
        assert ArcErrorEstimator.arc_bezier_error_improved(b) == pytest.approx(0.0, abs=1e-12)

    def test_hump_is_not_an_arc(self):
        """Test that a strongly curved hump has a large error."""
        b = CubicBezier.from_points([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
        error = ArcErrorEstimator.arc_bezier_error_improved(b)
        assert error == pytest.approx(13.41, abs=0.01)
        assert error > ArcErrorEstimator.sampled_arc_error(b, *self._three_point_circle(b))

    def test_mirrored_curve_has_same_error(self):
        """Test that the bound does not depend on the turning direction."""
        points = [(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)]
        b = CubicBezier.from_points(points)
        mirrored = CubicBezier.from_points([(x, -y) for x, y in points])
        assert ArcErrorEstimator.arc_bezier_error_improved(mirrored) == pytest.approx(
            ArcErrorEstimator.arc_bezier_error_improved(b)
        )

    def test_improved_error_on_asymmetric_curve(self):
        """Test that halving catches the error a single fit over the whole span misses."""
        b = CubicBezier.from_points([(0.0, 0.0), (15.0, -82.0), (79.0, 0.0), (100.0, 0.0)])
        center, radius = self._three_point_circle(b)
        naive = ArcErrorEstimator.arc_bezier_error(b, Circle(center, radius))
        improved = ArcErrorEstimator.arc_bezier_error_improved(b)
        assert improved > naive

    def test_arc_bezier_error_across_branch_cut(self):
        """Test an arc whose end angles lie on both sides of +-pi."""
        b = canonical_arc_bezier(1.0, math.radians(60))
        # rotate by 180 degrees so that the arc crosses the negative x-axis
        rotated = CubicBezier.from_points([(-x, -y) for x, y in b.to_array()])
        circle = Circle(Point(0.0, 0.0), 1.0)
        assert ArcErrorEstimator.arc_bezier_error(rotated, circle) == pytest.approx(
            ArcErrorEstimator.arc_bezier_error(b, circle), abs=1e-12
        )
        assert ArcErrorEstimator.arc_bezier_error(rotated, circle) < 1e-3

    def test_bezier_arc_error_of_own_approximation(self):
        """Test that an arc's own Bezier differs from it only by the intrinsic error."""
        arc = Arc.from_points(Point(1.0, 0.0), Point(0.0, 1.0), Point(math.sqrt(0.5), math.sqrt(0.5)))
        b, self_error = arc.approximate_bezier()
        assert ArcErrorEstimator.bezier_arc_error(b, arc) == pytest.approx(self_error)

    def test_bezier_arc_error_grows_with_distortion(self):
        """Test that moving an inner control point increases the bound."""
        arc = Arc.from_points(Point(1.0, 0.0), Point(0.0, 1.0), Point(math.sqrt(0.5), math.sqrt(0.5)))
        b, self_error = arc.approximate_bezier()
        distorted = CubicBezier(b.p0, Point(b.p1.x + 0.1, b.p1.y), b.p2, b.p3)
        assert ArcErrorEstimator.bezier_arc_error(distorted, arc) > self_error

    def test_bezier_arc_error_of_straight_arc_raises(self):
        """Test that a straight arc has no radius to measure against."""
        b = CubicBezier.from_points([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)])
        with pytest.raises(DegenerateGeometryError):
            ArcErrorEstimator.bezier_arc_error(b, Arc(b.p0, b.p3, 0.0))

    @staticmethod
    def _three_point_circle(b: CubicBezier):
        circle = Circle.from_points(b.p0, b.point(0.5), b.p3)
        return circle.center, circle.radius


###############################################################################
# Sampled error
###############################################################################


class TestSampledArcError:
    """Test class for the measured error used to validate the bounds."""

    def test_quarter_circle(self):
        """Test the known maximum radial error of the 90 degree approximation."""
        b = canonical_arc_bezier(1.0, math.pi / 2.0)
        error = ArcErrorEstimator.sampled_arc_error(b, Point(0.0, 0.0), 1.0)
        assert 2.5e-4 < error < 2.8e-4

    def test_line(self):
        """Test the distance from the chord when no center is given."""
        b = CubicBezier.from_points([(0.0, 0.0), (0.0, 2.0), (10.0, 2.0), (10.0, 0.0)])
        assert ArcErrorEstimator.sampled_arc_error(b, None, math.inf) == pytest.approx(1.5)

    def test_bound_exceeds_measurement(self):
        """Test that the closed-form bound is not below the sampled error."""
        for points in (
            [(0.0, 0.0), (0.0, 30.0), (30.0, 40.0), (50.0, 40.0)],
            [(0.0, 0.0), (15.0, -82.0), (79.0, 0.0), (100.0, 0.0)],
        ):
            b = CubicBezier.from_points(points)
            circle = Circle.from_points(b.p0, b.point(0.5), b.p3)
            measured = ArcErrorEstimator.sampled_arc_error(b, circle.center, circle.radius)
            assert ArcErrorEstimator.arc_bezier_error_improved(b) >= measured
