"""Handling geometries: points, vectors, lines, circles and arcs"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from arcfit.common import COLLINEAR_TOLERANCE, DegenerateGeometryError, SweepDirection


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to angle handling."""

    @staticmethod
    def normalize_angle(angle: float) -> float:
        """Wrap an angle into the interval (-pi, pi]."""
        angle = math.remainder(angle, 2.0 * math.pi)
        if angle <= -math.pi:
            angle += 2.0 * math.pi
        return angle

    @staticmethod
    def positive_angle(angle: float) -> float:
        """Wrap an angle into the interval [0, 2*pi)."""
        angle = math.fmod(angle, 2.0 * math.pi)
        if angle < 0.0:
            angle += 2.0 * math.pi
        return angle


###############################################################################
# Vector
###############################################################################
@dataclass(frozen=True)
class Vector:
    """
    A 2D displacement.

    Attributes:
        dx (float): The displacement in x-direction.
        dy (float): The displacement in y-direction.
    """

    dx: float
    dy: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.dx + other.dx, self.dy + other.dy)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.dx - other.dx, self.dy - other.dy)

    def __mul__(self, factor: float) -> Vector:
        return Vector(self.dx * factor, self.dy * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vector:
        return Vector(self.dx / divisor, self.dy / divisor)

    def __neg__(self) -> Vector:
        return Vector(-self.dx, -self.dy)

    def dot(self, other: Vector) -> float:
        """Scalar product with _other_."""
        return self.dx * other.dx + self.dy * other.dy

    def cross(self, other: Vector) -> float:
        """z-component of the cross product with _other_."""
        return self.dx * other.dy - self.dy * other.dx

    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.hypot(self.dx, self.dy)

    def angle(self) -> float:
        """Direction of the vector in radians, in (-pi, pi]."""
        return math.atan2(self.dy, self.dx)

    def normalized(self) -> Vector:
        """
        Unit vector with the same direction.

        Raises:
            DegenerateGeometryError: If the vector has zero length.
        """
        length = self.length()
        if length == 0.0:
            raise DegenerateGeometryError("Cannot normalize a zero-length vector")
        return Vector(self.dx / length, self.dy / length)

    def perpendicular(self) -> Vector:
        """The vector rotated by +90 degrees."""
        return Vector(-self.dy, self.dx)

    def normal(self) -> Vector:
        """Unit vector perpendicular to this one (rotated by +90 degrees)."""
        return self.perpendicular().normalized()

    def rebase(self, bx: Vector) -> Vector:
        """
        Express the vector in the basis (_bx_, _bx_.perpendicular()).

        _bx_ is expected to be a unit vector. The x-component of the result is the
        part of the vector parallel to _bx_, the y-component the part perpendicular to it.

        Args:
            bx (Vector): Unit vector defining the new x-axis.

        Returns:
            Vector: The components in the new basis.
        """
        return Vector(self.dot(bx), self.dot(bx.perpendicular()))

    def to_tuple(self) -> Tuple[float, float]:
        """The vector as (dx, dy)."""
        return (self.dx, self.dy)


###############################################################################
# Point
###############################################################################
@dataclass(frozen=True)
class Point:
    """
    A 2D coordinate.

    Attributes:
        x (float): The x-coordinate.
        y (float): The y-coordinate.
    """

    x: float
    y: float

    def __add__(self, vector: Vector) -> Point:
        return Point(self.x + vector.dx, self.y + vector.dy)

    def __sub__(self, other: Union[Point, Vector]) -> Union[Vector, Point]:
        """Point - Point gives the Vector between them, Point - Vector a translated Point."""
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        return Point(self.x - other.dx, self.y - other.dy)

    def lerp(self, other: Point, t: float) -> Point:
        """Point at parameter _t_ on the straight line from self (t=0) to _other_ (t=1)."""
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def midpoint(self, other: Point) -> Point:
        """Point halfway between self and _other_."""
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def distance(self, other: Point) -> float:
        """Euclidean distance to _other_."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[float, float]:
        """The point as (x, y)."""
        return (self.x, self.y)


###############################################################################
# Line
###############################################################################
@dataclass(frozen=True)
class Line:
    """
    Infinite straight line through a point along a unit direction.

    Attributes:
        origin (Point): A point on the line.
        direction (Vector): Unit direction of the line.
    """

    origin: Point
    direction: Vector

    @classmethod
    def from_points(cls, p0: Point, p1: Point) -> Line:
        """
        Line through _p0_ and _p1_.

        Raises:
            DegenerateGeometryError: If both points coincide.
        """
        return cls(p0, (p1 - p0).normalized())

    def signed_distance(self, point: Point) -> float:
        """Distance of _point_ to the line, positive on the left side of the direction."""
        return (point - self.origin).dot(self.direction.perpendicular())

    def distance(self, point: Point) -> float:
        """Distance of _point_ to the line."""
        return abs(self.signed_distance(point))


###############################################################################
# Circle
###############################################################################
@dataclass(frozen=True)
class Circle:
    """
    A circle given by center and radius.

    Attributes:
        center (Point): The center of the circle.
        radius (float): The radius of the circle.
    """

    center: Point
    radius: float

    @classmethod
    def from_points(
        cls, p0: Point, p1: Point, p2: Point, tolerance: float = COLLINEAR_TOLERANCE
    ) -> Circle:
        """
        Circumcircle of three points.

        The points count as collinear if the area of the parallelogram spanned by them
        is at most _tolerance_ times the square of the longest side. This keeps the
        test independent of the scale of the coordinates.

        Args:
            p0 (Point): First point on the circle.
            p1 (Point): Second point on the circle.
            p2 (Point): Third point on the circle.
            tolerance (float): Relative collinearity tolerance.

        Returns:
            Circle: The circle through all three points.

        Raises:
            DegenerateGeometryError: If the points are collinear (or coincide).
        """
        b = p1 - p0
        c = p2 - p0
        cross = b.cross(c)
        b_sq = b.dot(b)
        c_sq = c.dot(c)
        scale_sq = max(b_sq, c_sq, (p2 - p1).dot(p2 - p1))
        if abs(cross) <= tolerance * scale_sq:
            raise DegenerateGeometryError(f"Points {p0}, {p1}, {p2} are collinear, no circle fits through them")

        inv = 1.0 / (2.0 * cross)
        ux = (c.dy * b_sq - b.dy * c_sq) * inv
        uy = (b.dx * c_sq - c.dx * b_sq) * inv
        return cls(Point(p0.x + ux, p0.y + uy), math.hypot(ux, uy))

    def angle_of(self, point: Point) -> float:
        """Angular position of _point_ seen from the center."""
        return (point - self.center).angle()

    def point_at(self, angle: float) -> Point:
        """Point on the circle at _angle_."""
        return Point(self.center.x + self.radius * math.cos(angle), self.center.y + self.radius * math.sin(angle))


###############################################################################
# Arc
###############################################################################
@dataclass(frozen=True)
class Arc:
    """
    Circular arc from p0 to p1.

    The shape is encoded by d = tan(sweep / 4), the tangent of a quarter of the signed
    sweep angle. d > 0 describes an arc traversed with increasing angle, d < 0 one
    traversed with decreasing angle and d == 0 a straight line.

    Attributes:
        p0 (Point): Start point.
        p1 (Point): End point.
        d (float): Shape parameter tan(sweep / 4).
    """

    p0: Point
    p1: Point
    d: float

    @classmethod
    def from_circle(cls, circle: Circle, p0: Point, p1: Point, pm: Point) -> Arc:
        """
        Arc on _circle_ from _p0_ to _p1_ that passes through _pm_.

        All three points are expected to lie on the circle.
        """
        a0 = circle.angle_of(p0)
        span = GeomMath.positive_angle(circle.angle_of(p1) - a0)
        span_m = GeomMath.positive_angle(circle.angle_of(pm) - a0)
        sweep = span if span_m <= span else span - 2.0 * math.pi
        return cls(p0, p1, math.tan(sweep / 4.0))

    @classmethod
    def from_points(cls, p0: Point, p1: Point, pm: Point, tolerance: float = COLLINEAR_TOLERANCE) -> Arc:
        """
        Arc from _p0_ to _p1_ passing through _pm_.

        Raises:
            DegenerateGeometryError: If the three points are collinear.
        """
        return cls.from_circle(Circle.from_points(p0, pm, p1, tolerance), p0, p1, pm)

    @property
    def sweep(self) -> float:
        """float: Signed sweep angle in radians."""
        return 4.0 * math.atan(self.d)

    @property
    def direction(self) -> SweepDirection:
        """SweepDirection: POSITIVE if the angle increases from p0 to p1."""
        return SweepDirection.POSITIVE if self.d >= 0.0 else SweepDirection.NEGATIVE

    def radius(self) -> float:
        """
        Radius of the supporting circle.

        Raises:
            DegenerateGeometryError: If the arc is a straight line.
        """
        if self.d == 0.0:
            raise DegenerateGeometryError("A straight arc has no finite radius")
        chord = (self.p1 - self.p0).length()
        return abs(chord * (self.d * self.d + 1.0) / (4.0 * self.d))

    def circle(self) -> Circle:
        """
        The supporting circle of the arc.

        Raises:
            DegenerateGeometryError: If the arc is a straight line.
        """
        radius = self.radius()
        dp = self.p1 - self.p0
        center = self.p0.midpoint(self.p1) + dp.perpendicular() * ((1.0 / self.d - self.d) / 4.0)
        return Circle(center, radius)

    def approximate_bezier(self):
        """
        Canonical cubic Bezier approximation of the arc.

        The inner control points sit on the end tangents at a distance of
        4/3 * r * tan(sweep / 4) from the end points.

        Returns:
            Tuple[CubicBezier, float]: The Bezier curve and its maximum distance from the arc.
        """
        from arcfit.bezier import CubicBezier  # pylint: disable=import-outside-toplevel

        dp = self.p1 - self.p0
        pp = dp.perpendicular()
        error = dp.length() * abs(self.d) ** 5 / (54.0 * (1.0 + self.d * self.d))

        along = dp * ((1.0 - self.d * self.d) / 3.0)
        across = pp * (2.0 * self.d / 3.0)
        p0s = self.p0 + along - across
        p1s = self.p1 - along - across
        return CubicBezier(self.p0, p0s, p1s, self.p1), error
