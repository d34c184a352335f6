"""Approximation of cubic Bezier curves by sequences of circular arcs."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from arcfit.arc_cut import ArcCutFinder
from arcfit.arc_error import ArcErrorEstimator
from arcfit.arc_refine import ArcCutRefiner, RefinementState
from arcfit.bezier import CubicBezier
from arcfit.common import ArcFitConfig, DegenerateGeometryError, SweepDirection
from arcfit.geom import Arc, Circle, Point

logger = logging.getLogger(__name__)

BezierLike = Union[CubicBezier, Sequence[Tuple[float, float]], NDArray[np.float64]]


###############################################################################
# FittedArc
###############################################################################
@dataclass(frozen=True)
class FittedArc:
    """
    Circular arc replacing the part of a Bezier curve between t0 and t1.

    A segment without curvature is reported as a straight line: center is None,
    radius is infinite and the sweep is zero.

    Attributes:
        t0 (float): Curve parameter where the arc starts.
        t1 (float): Curve parameter where the arc ends.
        start (Point): Start point of the arc, B(t0).
        end (Point): End point of the arc, B(t1).
        center (Optional[Point]): Center of the arc, None for a straight line.
        radius (float): Radius of the arc, inf for a straight line.
        start_angle (float): Angle of the start point seen from the center.
        sweep (float): Signed sweep angle from start to end.
        error (float): Estimated maximum deviation between arc and curve segment.
    """

    t0: float
    t1: float
    start: Point
    end: Point
    center: Optional[Point]
    radius: float
    start_angle: float
    sweep: float
    error: float

    @property
    def end_angle(self) -> float:
        """float: Angle of the end point; start_angle + sweep, so not wrapped into (-pi, pi]."""
        return self.start_angle + self.sweep

    @property
    def direction(self) -> SweepDirection:
        """SweepDirection: Whether the angle increases or decreases from start to end."""
        return SweepDirection.POSITIVE if self.sweep >= 0.0 else SweepDirection.NEGATIVE

    @property
    def is_line(self) -> bool:
        """bool: True if the segment is replaced by a straight line."""
        return self.center is None

    def measured_error(self, bezier: CubicBezier, steps: int = 1000) -> float:
        """Maximum distance between the arc's circle and the segment of _bezier_, sampled."""
        return ArcErrorEstimator.sampled_arc_error(bezier.segment(self.t0, self.t1), self.center, self.radius, steps)

    def to_dict(self) -> dict:
        """Convert the FittedArc instance to a dictionary."""
        return {
            "t0": self.t0,
            "t1": self.t1,
            "start": self.start.to_tuple(),
            "end": self.end.to_tuple(),
            "center": None if self.center is None else self.center.to_tuple(),
            "radius": self.radius,
            "start_angle": self.start_angle,
            "end_angle": self.end_angle,
            "sweep": self.sweep,
            "direction": self.direction.name,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> FittedArc:
        """Create a FittedArc instance from a dictionary."""
        center = data.get("center")
        return cls(
            t0=data["t0"],
            t1=data["t1"],
            start=Point(*data["start"]),
            end=Point(*data["end"]),
            center=None if center is None else Point(*center),
            radius=data.get("radius", math.inf),
            start_angle=data.get("start_angle", 0.0),
            sweep=data.get("sweep", 0.0),
            error=data.get("error", 0.0),
        )

    def __str__(self):
        """Returns a string representation of the FittedArc instance."""
        if self.is_line:
            return (
                f"Line([{self.t0:g}, {self.t1:g}] {self.start.to_tuple()} -> {self.end.to_tuple()}, "
                f"error={self.error:g})"
            )
        return (
            f"Arc([{self.t0:g}, {self.t1:g}] center={self.center.to_tuple()}, radius={self.radius:g}, "
            f"angles={self.start_angle:g}->{self.end_angle:g} ({self.direction.name}), error={self.error:g})"
        )


###############################################################################
# BezierArcApproximator
###############################################################################
class BezierArcApproximator:
    """Replaces cubic Bezier curves by a minimal sequence of circular arcs.

    The curve is segmented greedily from both ends, the interior cut points are
    balanced within the brackets spanned by both segmentations, and each final
    segment is replaced by the arc through its end points and its midpoint.
    """

    def __init__(self, config: Optional[ArcFitConfig] = None):
        self.config = config if config is not None else ArcFitConfig()

    def segment_errors(self, b: CubicBezier, cut_points: Sequence[float]) -> Tuple[float, ...]:
        """Error of each segment between consecutive _cut_points_."""
        return tuple(
            ArcCutRefiner.segment_error(b, cut_points[k], cut_points[k + 1], self.config.collinear_tolerance)
            for k in range(len(cut_points) - 1)
        )

    def segmentation(self, b: CubicBezier) -> RefinementState:
        """
        Cut points and segment errors for _b_.

        The refined segmentation is only used if its worst segment is not worse than
        the worst segment of the greedy left-anchored one.
        """
        config = self.config
        if not config.refine:
            left_cuts = ArcCutFinder.find_cut_points_left(b, config)
            return RefinementState(left_cuts, self.segment_errors(b, left_cuts))

        left_cuts, brackets = ArcCutFinder.find_cut_brackets(b, config)
        greedy = RefinementState(left_cuts, self.segment_errors(b, left_cuts))
        if not brackets:
            return greedy

        refined = ArcCutRefiner.refine(b, brackets, config.epsilon, config.refine_passes, config.collinear_tolerance)
        if refined.max_error > greedy.max_error:
            logger.debug(
                "Refined max error %g exceeds greedy max error %g, keeping greedy cuts",
                refined.max_error,
                greedy.max_error,
            )
            return greedy
        return refined

    def extract_arc(self, b: CubicBezier, t0: float, t1: float, error: float) -> FittedArc:
        """
        Arc through the end points and the midpoint of the segment [t0, t1] of _b_.

        Collinear segments yield a straight line (see FittedArc).
        """
        segment = b.segment(t0, t1)
        _, second = segment.halve()
        mid = second.p0
        try:
            circle = Circle.from_points(segment.p0, mid, segment.p3, self.config.collinear_tolerance)
        except DegenerateGeometryError:
            return FittedArc(t0, t1, segment.p0, segment.p3, None, math.inf, 0.0, 0.0, error)

        arc = Arc.from_circle(circle, segment.p0, segment.p3, mid)
        start_angle = circle.angle_of(segment.p0)
        return FittedArc(t0, t1, segment.p0, segment.p3, circle.center, circle.radius, start_angle, arc.sweep, error)

    def approximate(self, bezier: BezierLike) -> List[FittedArc]:
        """
        Approximate one cubic Bezier curve by arcs.

        Args:
            bezier: The curve, or its four control points.

        Returns:
            List[FittedArc]: Arcs covering the curve from t=0 to t=1 in order.

        Raises:
            ArcFitError: If the curve needs more than config.max_segments arcs.
        """
        b = bezier if isinstance(bezier, CubicBezier) else CubicBezier.from_points(bezier)
        state = self.segmentation(b)
        cuts = state.cut_points

        arcs = [self.extract_arc(b, cuts[k], cuts[k + 1], state.errors[k]) for k in range(len(cuts) - 1)]
        for arc in arcs:
            logger.debug("%s", arc)
        return arcs

    def approximate_path(self, segments: Iterable[BezierLike]) -> List[List[FittedArc]]:
        """Approximate each cubic Bezier segment of a path; one list of arcs per segment."""
        return [self.approximate(segment) for segment in segments]


def main():
    """Main"""
    logging.basicConfig(level=logging.INFO)

    bezier = CubicBezier.from_points([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
    approximator = BezierArcApproximator(ArcFitConfig(epsilon=1.0))
    arcs = approximator.approximate(bezier)

    print(f"{bezier}: {len(arcs)} arcs")
    for arc in arcs:
        print(arc)
        print(f"  Estim. arc max error {arc.error:g}")
        print(f"  Actual arc max error {arc.measured_error(bezier):g}")


if __name__ == "__main__":
    main()
