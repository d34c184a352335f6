"""Closed-form error bounds between cubic Bezier curves and circular arcs.

The bounds compare a curve with the canonical cubic Bezier approximation of an arc
sharing its end points. Both curves then differ only in their inner control points,
and the distance between them at parameter t is

    3 t (1-t) (v0 (1-t) + v1 t)

for the offsets v0 and v1 of the inner control points. The maximum of this cubic over
[0, 1] is found analytically by max_dev(), component by component, and then turned into
a radial distance bound. Adding the intrinsic error of the canonical approximation gives
the error bound between curve and arc.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np

from arcfit.bezier import CubicBezier
from arcfit.common import COLLINEAR_TOLERANCE, DegenerateGeometryError
from arcfit.geom import Arc, Circle, GeomMath, Line, Point, Vector

logger = logging.getLogger(__name__)


class ArcErrorEstimator:
    """Error estimation between cubic Bezier curves and circular arcs.

    All methods are static; the estimates are upper bounds computed without sampling.
    """

    @staticmethod
    def max_dev_approx(d0: float, d1: float) -> float:
        """Fast upper bound of max_dev(d0, d1)."""
        d0 = abs(d0)
        d1 = abs(d1)
        e0 = 3.0 / 4.0 * max(d0, d1)
        e1 = 4.0 / 9.0 * (d0 + d1)
        return min(e0, e1)

    @staticmethod
    def max_dev(d0: float, d1: float) -> float:
        """
        Return max(|3 t (1-t) (d0 (1-t) + d1 t)|) for 0 <= t <= 1.

        The candidates for the maximum are the interval ends and the roots of the
        derivative, which is a quadratic in t.

        Args:
            d0 (float): Offset of the first inner control point.
            d1 (float): Offset of the second inner control point.

        Returns:
            float: The maximum absolute deviation.
        """
        candidates: List[float] = [0.0, 1.0]
        if d0 == d1:
            candidates.append(0.5)
        else:
            delta = d0 * d0 - d0 * d1 + d1 * d1
            t2 = 1.0 / (3.0 * (d0 - d1))
            t0 = (2.0 * d0 - d1) * t2
            if delta == 0.0:
                candidates.append(t0)
            elif delta > 0.0:
                t1 = math.sqrt(delta) * t2
                candidates.append(t0 - t1)
                candidates.append(t0 + t1)

        e = 0.0
        for t in candidates:
            if t < 0.0 or t > 1.0:
                continue
            e = max(e, abs(3.0 * t * (1.0 - t) * (d0 * (1.0 - t) + d1 * t)))
        return e

    @staticmethod
    def _radial_bound(v0: Vector, v1: Vector, bx: Vector, end_radial: Vector, radius: float) -> float:
        """Turn control point offsets into a bound of the radial distance from the circle.

        Args:
            v0: Offset of the first inner control point.
            v1: Offset of the second inner control point.
            bx: Unit vector of the reference frame (perpendicular to the chord).
            end_radial: Radial direction at the arc end, given in the reference frame.
            radius: Radius of the arc.
        """
        v0 = v0.rebase(bx)
        v1 = v1.rebase(bx)
        bound = Vector(ArcErrorEstimator.max_dev(v0.dx, v1.dx), ArcErrorEstimator.max_dev(v0.dy, v1.dy))

        # max_dev() drops the signs, so the end direction is mirrored into the first quadrant
        end_radial = Vector(abs(end_radial.dx), abs(end_radial.dy))
        u = bound.rebase(end_radial)
        return math.sqrt((radius + u.dx) * (radius + u.dx) + u.dy * u.dy) - radius

    @staticmethod
    def bezier_arc_error(b0: CubicBezier, arc: Arc) -> float:
        """
        Error bound between the curve _b0_ and the _arc_ sharing its end points.

        Args:
            b0 (CubicBezier): The curve.
            arc (Arc): The arc from b0.p0 to b0.p3.

        Returns:
            float: Intrinsic error of the arc's Bezier approximation plus the bound of the
            distance between that approximation and _b0_.

        Raises:
            DegenerateGeometryError: If the arc is a straight line or the chord has zero length.
        """
        b1, ea = arc.approximate_bezier()

        v0 = b1.p1 - b0.p1
        v1 = b1.p2 - b0.p2

        bx = (b0.p3 - b0.p0).normal()
        end_radial = (b1.p3 - b1.p2).rebase(bx).normal()
        eb = ArcErrorEstimator._radial_bound(v0, v1, bx, end_radial, arc.radius())

        return ea + eb

    @staticmethod
    def arc_bezier_error(b: CubicBezier, circle: Circle) -> float:
        """
        Error bound between the curve _b_ and the arc of _circle_ between b.p0 and b.p3.

        The end points of _b_ are expected to lie on the circle. The arc is the shorter one
        between both end points (sweep angle in (-pi, pi]).

        Args:
            b (CubicBezier): The curve.
            circle (Circle): Circle through b.p0 and b.p3.

        Returns:
            float: Error bound ea + eb.
        """
        center = circle.center
        r0 = b.p0 - center
        r3 = b.p3 - center
        a0 = r0.angle()
        a4 = GeomMath.normalize_angle(r3.angle() - a0) / 4.0
        tan_factor = 4.0 / 3.0 * math.tan(a4)
        p1s = b.p0 + r0.perpendicular() * tan_factor
        p2s = b.p3 + (-r3).perpendicular() * tan_factor

        ea = 2.0 / 27.0 * circle.radius * math.sin(a4) ** 6 / (math.cos(a4) / 4.0) ** 2

        v0 = p1s - b.p1
        v1 = p2s - b.p2

        # bisector of both end radii
        bx = Vector(math.cos(a0 + 2.0 * a4), math.sin(a0 + 2.0 * a4))
        end_radial = r3.rebase(bx).normalized()
        eb = ArcErrorEstimator._radial_bound(v0, v1, bx, end_radial, circle.radius)

        return ea + eb

    @staticmethod
    def line_bezier_error(b: CubicBezier) -> float:
        """
        Maximum distance of the curve _b_ from the straight line through its end points.

        For a closed curve (b.p0 == b.p3) the distance from b.p0 is bounded instead.
        """
        chord = b.p3 - b.p0
        if chord.length() == 0.0:
            v1 = b.p1 - b.p0
            v2 = b.p2 - b.p0
            return math.hypot(ArcErrorEstimator.max_dev(v1.dx, v2.dx), ArcErrorEstimator.max_dev(v1.dy, v2.dy))

        line = Line.from_points(b.p0, b.p3)
        return ArcErrorEstimator.max_dev(line.signed_distance(b.p1), line.signed_distance(b.p2))

    @staticmethod
    def arc_bezier_error_improved(b: CubicBezier, collinear_tolerance: float = COLLINEAR_TOLERANCE) -> float:
        """
        Error bound between _b_ and the arc through its end points and its midpoint.

        The curve is halved and each half is measured against the same circle; fitting one
        arc over the whole span underestimates the error of asymmetric curves.
        If the three points are collinear, the distance from the chord is returned.

        Args:
            b (CubicBezier): The curve.
            collinear_tolerance (float): Relative tolerance for the collinearity check.

        Returns:
            float: The larger error of both halves.
        """
        first, second = b.halve()
        mid = second.p0
        try:
            circle = Circle.from_points(b.p0, mid, b.p3, collinear_tolerance)
        except DegenerateGeometryError:
            logger.debug("Collinear arc fit for %s, measuring against the chord", b)
            return ArcErrorEstimator.line_bezier_error(b)
        return max(ArcErrorEstimator.arc_bezier_error(first, circle), ArcErrorEstimator.arc_bezier_error(second, circle))

    @staticmethod
    def sampled_arc_error(
        b: CubicBezier, center: Optional[Point], radius: float, steps: int = 1000
    ) -> float:
        """
        Measured maximum distance between _b_ and a circle, sampled at _steps_ + 1 points.

        If _center_ is None, the distance from the straight line b.p0 -> b.p3 is measured.
        """
        points = b.polygonize(steps)
        if center is None:
            chord = b.p3 - b.p0
            if chord.length() == 0.0:
                return float(np.max(np.hypot(points[:, 0] - b.p0.x, points[:, 1] - b.p0.y)))
            normal = chord.normal()
            distances = (points[:, 0] - b.p0.x) * normal.dx + (points[:, 1] - b.p0.y) * normal.dy
            return float(np.max(np.abs(distances)))

        distances = np.hypot(points[:, 0] - center.x, points[:, 1] - center.y) - radius
        return float(np.max(np.abs(distances)))
