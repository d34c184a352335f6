"""Cubic Bezier curve handling for arc approximation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from arcfit.common import DegenerateGeometryError
from arcfit.geom import Circle, Point, Vector


@dataclass(frozen=True)
class CubicBezier:
    """Cubic Bezier curve defined by four control points over t in [0, 1].

    B(t) = (1-t)^3*P0 + 3*(1-t)^2*t*P1 + 3*(1-t)*t^2*P2 + t^3*P3

    All operations return new curves; sub-curves are exact reparametrizations
    of the original curve.
    """

    p0: Point
    p1: Point
    p2: Point
    p3: Point

    @classmethod
    def from_points(cls, points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]]) -> CubicBezier:
        """Create a curve from four (x, y) control points.

        Args:
            points: Control points as (x, y) or (x, y, type) rows.

        Returns:
            CubicBezier: The curve.

        Raises:
            ValueError: If the input is not four rows with at least two coordinates.
        """
        points_array = np.asarray(points, dtype=np.float64)
        if points_array.ndim != 2 or points_array.shape[0] != 4 or points_array.shape[1] < 2:
            raise ValueError(f"A cubic Bezier curve needs four (x, y) points, got shape {points_array.shape}")
        return cls(*(Point(float(x), float(y)) for x, y in points_array[:, :2]))

    def to_array(self) -> NDArray[np.float64]:
        """Control points as array of shape (4, 2)."""
        return np.array([p.to_tuple() for p in self.control_points], dtype=np.float64)

    @property
    def control_points(self) -> Tuple[Point, Point, Point, Point]:
        """Tuple[Point, Point, Point, Point]: The control points p0..p3."""
        return (self.p0, self.p1, self.p2, self.p3)

    ###########################################################################
    # Evaluation
    ###########################################################################

    def point(self, t: float) -> Point:
        """Point on the curve at parameter _t_."""
        omt = 1.0 - t
        omt2 = omt * omt
        t2 = t * t
        w0 = omt2 * omt
        w1 = 3.0 * omt2 * t
        w2 = 3.0 * omt * t2
        w3 = t2 * t
        return Point(
            w0 * self.p0.x + w1 * self.p1.x + w2 * self.p2.x + w3 * self.p3.x,
            w0 * self.p0.y + w1 * self.p1.y + w2 * self.p2.y + w3 * self.p3.y,
        )

    def tangent(self, t: float) -> Vector:
        """First derivative B'(t)."""
        omt = 1.0 - t
        d0 = self.p1 - self.p0
        d1 = self.p2 - self.p1
        d2 = self.p3 - self.p2
        return (d0 * (omt * omt) + d1 * (2.0 * omt * t) + d2 * (t * t)) * 3.0

    def d_tangent(self, t: float) -> Vector:
        """Second derivative B''(t)."""
        d0 = self.p1 - self.p0
        d1 = self.p2 - self.p1
        d2 = self.p3 - self.p2
        return ((d1 - d0) * (1.0 - t) + (d2 - d1) * t) * 6.0

    def curvature(self, t: float) -> float:
        """Signed curvature (y''*x' - x''*y') / |B'|^3 at _t_.

        Positive where the curve turns towards increasing angles.
        Returns 0.0 where the first derivative vanishes.
        """
        prime = self.tangent(t)
        prime2 = self.d_tangent(t)
        length = prime.length()
        if length == 0.0:
            return 0.0
        return (prime2.dy * prime.dx - prime2.dx * prime.dy) / (length * length * length)

    def osculating_circle(self, t: float) -> Circle:
        """Circle best matching the curve at _t_ (radius 1/|curvature|).

        Raises:
            DegenerateGeometryError: If the curvature at _t_ is zero.
        """
        curvature = self.curvature(t)
        if curvature == 0.0:
            raise DegenerateGeometryError(f"Curve has no curvature at t={t}, osculating circle is a line")
        normal = self.tangent(t).normal()
        return Circle(self.point(t) + normal * (1.0 / curvature), 1.0 / abs(curvature))

    ###########################################################################
    # Subdivision
    ###########################################################################

    def _blossom(self, a: float, b: float, c: float) -> Point:
        """Polar form of the curve; _blossom(t, t, t) == point(t)."""
        l0 = self.p0.lerp(self.p1, a)
        l1 = self.p1.lerp(self.p2, a)
        l2 = self.p2.lerp(self.p3, a)
        m0 = l0.lerp(l1, b)
        m1 = l1.lerp(l2, b)
        return m0.lerp(m1, c)

    def split(self, t: float) -> Tuple[CubicBezier, CubicBezier]:
        """Split the curve at _t_ into the parts covering [0, t] and [t, 1] (de Casteljau)."""
        p01 = self.p0.lerp(self.p1, t)
        p12 = self.p1.lerp(self.p2, t)
        p23 = self.p2.lerp(self.p3, t)
        p012 = p01.lerp(p12, t)
        p123 = p12.lerp(p23, t)
        p0123 = p012.lerp(p123, t)
        return CubicBezier(self.p0, p01, p012, p0123), CubicBezier(p0123, p123, p23, self.p3)

    def halve(self) -> Tuple[CubicBezier, CubicBezier]:
        """Split the curve at t=0.5."""
        return self.split(0.5)

    def segment(self, t0: float, t1: float) -> CubicBezier:
        """The part of the curve between _t0_ and _t1_ as an independent curve.

        The control points are the blossom values (t0,t0,t0), (t0,t0,t1), (t0,t1,t1) and
        (t1,t1,t1), which is exact for any pair of parameters, including t0 > t1
        (reversed traversal) and t0 == 1.
        """
        if t0 == 0.0 and t1 == 1.0:
            return self
        return CubicBezier(
            self._blossom(t0, t0, t0),
            self._blossom(t0, t0, t1),
            self._blossom(t0, t1, t1),
            self._blossom(t1, t1, t1),
        )

    ###########################################################################
    # Polygonization
    ###########################################################################

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """Sample the curve at _steps_ + 1 equidistant parameters.

        Uses direct evaluation with vectorized NumPy operations.

        Args:
            steps: Number of intervals, at least 1.

        Returns:
            Array of shape (steps + 1, 2) with the sampled (x, y) points.

        Raises:
            ValueError: If _steps_ is smaller than 1.
        """
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        points_array = self.to_array()

        t = np.linspace(0.0, 1.0, steps + 1, dtype=np.float64)
        omt = 1.0 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t

        x = (
            omt3 * points_array[0, 0]
            + 3 * omt2 * t * points_array[1, 0]
            + 3 * omt * t2 * points_array[2, 0]
            + t3 * points_array[3, 0]
        )
        y = (
            omt3 * points_array[0, 1]
            + 3 * omt2 * t * points_array[1, 1]
            + 3 * omt * t2 * points_array[2, 1]
            + t3 * points_array[3, 1]
        )
        return np.column_stack((x, y))

    def __str__(self):
        """Returns a string representation of the curve."""
        return "CubicBezier(" + ", ".join(f"({p.x:g}, {p.y:g})" for p in self.control_points) + ")"


def main():
    """Main"""
    bezier = CubicBezier.from_points([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
    print(bezier)
    for t in (0.0, 0.25, 0.5, 0.75, 1.0):
        print(f"t={t:.2f} point={bezier.point(t).to_tuple()} curvature={bezier.curvature(t):.6f}")


if __name__ == "__main__":
    main()
