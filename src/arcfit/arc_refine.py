"""Refinement of a segmentation by balancing the errors of adjacent segments."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Sequence, Tuple

from arcfit.arc_error import ArcErrorEstimator
from arcfit.bezier import CubicBezier
from arcfit.common import COLLINEAR_TOLERANCE, REFINE_PASSES

logger = logging.getLogger(__name__)

# 2^(1 + curvature) overflows a float beyond this exponent
_MAX_STEP_EXPONENT: float = 1000.0


class RefinementState(NamedTuple):
    """Cut sequence and the error of each segment between consecutive cuts.

    Attributes:
        cut_points: Strictly increasing cuts (0.0, ..., 1.0).
        errors: Error of segment k = [cut_points[k], cut_points[k + 1]].
    """

    cut_points: Tuple[float, ...]
    errors: Tuple[float, ...]

    @property
    def max_error(self) -> float:
        """float: The largest segment error."""
        return max(self.errors)


class ArcCutRefiner:
    """Greedy relaxation of interior cut points within their brackets.

    Each pass visits the interior cut points in order and moves each one towards the
    neighbouring segment with the larger error, so that segment shrinks. Later cut points
    of a pass see the already updated segments. Every pass produces a new state.
    """

    @staticmethod
    def segment_error(
        b: CubicBezier, t0: float, t1: float, collinear_tolerance: float = COLLINEAR_TOLERANCE
    ) -> float:
        """Error of the arc fit of _b_ between _t0_ and _t1_."""
        return ArcErrorEstimator.arc_bezier_error_improved(b.segment(t0, t1), collinear_tolerance)

    @classmethod
    def initial_state(
        cls,
        b: CubicBezier,
        brackets: Sequence[Tuple[float, float]],
        collinear_tolerance: float = COLLINEAR_TOLERANCE,
    ) -> RefinementState:
        """State with each interior cut in the middle of its bracket."""
        cuts = (0.0,) + tuple((low + high) / 2.0 for low, high in brackets) + (1.0,)
        errors = tuple(
            cls.segment_error(b, cuts[k], cuts[k + 1], collinear_tolerance) for k in range(len(cuts) - 1)
        )
        return RefinementState(cuts, errors)

    @classmethod
    def refine_pass(
        cls,
        b: CubicBezier,
        brackets: Sequence[Tuple[float, float]],
        state: RefinementState,
        epsilon: float,
        collinear_tolerance: float = COLLINEAR_TOLERANCE,
    ) -> RefinementState:
        """
        One relaxation pass over all interior cut points.

        For the cut between segments k and k+1 the step size is

            |error[k+1] - error[k]| / (2^(1 + curvature) * epsilon)

        with the curvature of _b_ at the cut, capped to 1. The cut moves by step size times
        the distance to the bracket bound on the side of the worse segment.

        Args:
            b: The original curve.
            brackets: (cut_low, cut_high) per interior cut point.
            state: State before the pass.
            epsilon: Error tolerance.
            collinear_tolerance: Relative tolerance for the collinearity check.

        Returns:
            RefinementState: State after the pass.
        """
        cuts: List[float] = list(state.cut_points)
        errors: List[float] = list(state.errors)

        for k, (cut_low, cut_high) in enumerate(brackets):
            cut = cuts[k + 1]
            error_diff = abs(errors[k + 1] - errors[k])
            exponent = 1.0 + b.curvature(cut)
            if error_diff == 0.0 or exponent > _MAX_STEP_EXPONENT:
                continue
            scale = 2.0**exponent * epsilon
            step_size = 1.0 if scale == 0.0 else min(error_diff / scale, 1.0)

            if errors[k + 1] > errors[k]:
                new_cut = cut + step_size * (cut_high - cut)
            else:
                new_cut = cut - step_size * (cut - cut_low)
            if new_cut == cut or not cuts[k] < new_cut < cuts[k + 2]:
                continue

            cuts[k + 1] = new_cut
            errors[k] = cls.segment_error(b, cuts[k], new_cut, collinear_tolerance)
            errors[k + 1] = cls.segment_error(b, new_cut, cuts[k + 2], collinear_tolerance)

        return RefinementState(tuple(cuts), tuple(errors))

    @classmethod
    def refine(
        cls,
        b: CubicBezier,
        brackets: Sequence[Tuple[float, float]],
        epsilon: float,
        passes: int = REFINE_PASSES,
        collinear_tolerance: float = COLLINEAR_TOLERANCE,
    ) -> RefinementState:
        """
        Balance the segment errors of _b_ by moving the interior cut points.

        Args:
            b: The original curve.
            brackets: (cut_low, cut_high) per interior cut point, in increasing order.
            epsilon: Error tolerance.
            passes: Number of relaxation passes.
            collinear_tolerance: Relative tolerance for the collinearity check.

        Returns:
            RefinementState: Final cut points and segment errors.
        """
        state = cls.initial_state(b, brackets, collinear_tolerance)
        for pass_number in range(passes):
            state = cls.refine_pass(b, brackets, state, epsilon, collinear_tolerance)
            logger.debug("Refinement pass %d: max error %g", pass_number + 1, state.max_error)
        return state
