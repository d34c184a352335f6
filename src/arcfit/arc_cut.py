"""Cut-point search: partitioning a Bezier curve into segments that fit arcs."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Tuple

from arcfit.arc_error import ArcErrorEstimator
from arcfit.bezier import CubicBezier
from arcfit.common import ArcFitConfig, ArcFitError

logger = logging.getLogger(__name__)


class CutResult(NamedTuple):
    """Result of a cut-point search.

    Attributes:
        t: The cut parameter.
        error: Error of the segment between anchor and cut.
    """

    t: float
    error: float


class ArcCutFinder:
    """Bisection search for cut points and greedy segmentation of a curve.

    The search assumes that the error of a segment grows with its length as seen from
    the anchor. For curves violating this, the result is still a parameter where the
    error crosses epsilon, just not necessarily the farthest one.
    """

    ###########################################################################
    # Single cut
    ###########################################################################

    @classmethod
    def find_cut_left(cls, b: CubicBezier, i: float, config: ArcFitConfig) -> CutResult:
        """
        Find the largest t in [i, 1] such that segment [i, t] fits an arc within epsilon.

        Args:
            b (CubicBezier): The curve.
            i (float): Anchor parameter, start of the segment.
            config (ArcFitConfig): Tolerance and iteration settings.

        Returns:
            CutResult: The cut (1.0 if the whole remaining curve fits) and its error.
        """
        epsilon = config.epsilon
        tolerance = config.collinear_tolerance

        error = ArcErrorEstimator.arc_bezier_error_improved(b.segment(i, 1.0), tolerance)
        if error < epsilon:
            return CutResult(1.0, error)

        low = i
        low_error = 0.0
        high = 1.0
        cut_point = high
        for _ in range(config.max_iterations):
            cut_point = (low + high) / 2.0
            error = ArcErrorEstimator.arc_bezier_error_improved(b.segment(i, cut_point), tolerance)
            if error == epsilon:
                return CutResult(cut_point, error)
            if error < epsilon:
                low = cut_point
                low_error = error
            else:
                high = cut_point

        # The converged cut might be slightly above epsilon
        if cls._overshoots(error, config) and low > i:
            return CutResult(low, low_error)
        return CutResult(cut_point, error)

    @classmethod
    def find_cut_right(cls, b: CubicBezier, j: float, config: ArcFitConfig) -> CutResult:
        """
        Find the smallest t in [0, j] such that segment [t, j] fits an arc within epsilon.

        Mirror of find_cut_left(); returns 0.0 if the whole curve up to _j_ fits.
        """
        epsilon = config.epsilon
        tolerance = config.collinear_tolerance

        error = ArcErrorEstimator.arc_bezier_error_improved(b.segment(0.0, j), tolerance)
        if error < epsilon:
            return CutResult(0.0, error)

        low = 0.0
        high = j
        high_error = 0.0
        cut_point = low
        for _ in range(config.max_iterations):
            cut_point = (low + high) / 2.0
            error = ArcErrorEstimator.arc_bezier_error_improved(b.segment(cut_point, j), tolerance)
            if error == epsilon:
                return CutResult(cut_point, error)
            if error < epsilon:
                high = cut_point
                high_error = error
            else:
                low = cut_point

        if cls._overshoots(error, config) and high < j:
            return CutResult(high, high_error)
        return CutResult(cut_point, error)

    @staticmethod
    def _overshoots(error: float, config: ArcFitConfig) -> bool:
        """Return True if _error_ exceeds epsilon by more than the configured overshoot tolerance."""
        if config.overshoot_tolerance is None:
            return False
        return error > config.epsilon + config.overshoot_tolerance

    @classmethod
    def binary_find_cut_left(cls, b: CubicBezier, i: float, epsilon: float) -> float:
        """Cut parameter of find_cut_left() with default settings and the given _epsilon_."""
        return cls.find_cut_left(b, i, ArcFitConfig(epsilon=epsilon)).t

    @classmethod
    def binary_find_cut_right(cls, b: CubicBezier, j: float, epsilon: float) -> float:
        """Cut parameter of find_cut_right() with default settings and the given _epsilon_."""
        return cls.find_cut_right(b, j, ArcFitConfig(epsilon=epsilon)).t

    ###########################################################################
    # Segmentation
    ###########################################################################

    @classmethod
    def find_cut_points_left(cls, b: CubicBezier, config: ArcFitConfig) -> Tuple[float, ...]:
        """
        Greedy segmentation walking from t=0 towards t=1.

        Returns:
            Tuple[float, ...]: Strictly increasing cut sequence (0.0, ..., 1.0).

        Raises:
            ArcFitError: If more than config.max_segments segments are needed.
        """
        cuts: List[float] = [0.0]
        t = 0.0
        while t < 1.0:
            if len(cuts) > config.max_segments:
                raise ArcFitError(f"{b} needs more than {config.max_segments} arcs at epsilon={config.epsilon}")
            result = cls.find_cut_left(b, t, config)
            logger.debug("Left cut %g -> %g, error %g", t, result.t, result.error)
            t = result.t
            cuts.append(t)
        return tuple(cuts)

    @classmethod
    def find_cut_points_right(cls, b: CubicBezier, config: ArcFitConfig) -> Tuple[float, ...]:
        """
        Greedy segmentation walking from t=1 towards t=0.

        Returns:
            Tuple[float, ...]: Strictly increasing cut sequence (0.0, ..., 1.0).

        Raises:
            ArcFitError: If more than config.max_segments segments are needed.
        """
        cuts: List[float] = [1.0]
        t = 1.0
        while t > 0.0:
            if len(cuts) > config.max_segments:
                raise ArcFitError(f"{b} needs more than {config.max_segments} arcs at epsilon={config.epsilon}")
            result = cls.find_cut_right(b, t, config)
            logger.debug("Right cut %g -> %g, error %g", t, result.t, result.error)
            t = result.t
            cuts.insert(0, t)
        return tuple(cuts)

    @classmethod
    def find_cut_brackets(
        cls, b: CubicBezier, config: ArcFitConfig
    ) -> Tuple[Tuple[float, ...], Optional[Tuple[Tuple[float, float], ...]]]:
        """
        Brackets [cut_low, cut_high] for each interior cut point.

        cut_high[k] is the k-th interior cut of the left-anchored walk (the farthest the
        k-th cut can be placed), cut_low[k] the k-th interior cut of the right-anchored walk.

        Returns:
            Tuple: The left-anchored cut sequence and the brackets, or None instead of the
            brackets if both walks disagree on the number of segments.
        """
        left_cuts = cls.find_cut_points_left(b, config)
        right_cuts = cls.find_cut_points_right(b, config)

        if len(left_cuts) != len(right_cuts):
            logger.warning(
                "Left and right segmentation of %s differ (%d vs. %d arcs), skipping refinement",
                b,
                len(left_cuts) - 1,
                len(right_cuts) - 1,
            )
            return left_cuts, None

        brackets = tuple(zip(right_cuts[1:-1], left_cuts[1:-1]))
        for cut_low, cut_high in brackets:
            logger.debug("Cut range: [%g %g]", cut_low, cut_high)
        return left_cuts, brackets
