"""Central module containing constants, exceptions and configuration for arc fitting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

###############################################################################
# Consts
###############################################################################

# Bisection steps per cut-point search
MAX_ITERS: int = 20
# Relaxation passes over the interior cut points
REFINE_PASSES: int = 9
# Default tolerance (in curve units)
EPSILON: float = 1.0
# Relative tolerance below which three points count as collinear
COLLINEAR_TOLERANCE: float = 1.0e-9
# Upper limit of segments per Bezier curve
MAX_SEGMENTS: int = 10000


###############################################################################
# Exceptions
###############################################################################


class ArcFitError(Exception):
    """Base exception for arc fitting errors."""


class DegenerateGeometryError(ArcFitError):
    """Raised when geometry is degenerate, e.g. a circle through three collinear points."""


###############################################################################
# Enums
###############################################################################


class SweepDirection(Enum):
    """Enum to define the direction in which an arc is traversed."""

    POSITIVE = auto()  # increasing angle (counter-clockwise in a y-up system)
    NEGATIVE = auto()  # decreasing angle


###############################################################################
# ArcFitConfig
###############################################################################


@dataclass(frozen=True)
class ArcFitConfig:
    """Parameters controlling the approximation of Bezier curves by arcs.

    Attributes:
        epsilon: Maximum allowed deviation between a curve segment and its arc.
        max_iterations: Number of bisection steps per cut-point search.
        refine_passes: Number of relaxation passes balancing the segment errors.
        refine: If False, the greedy left-anchored segmentation is used as is.
        overshoot_tolerance: Accepted error above epsilon for a bisection result.
            None accepts whatever the bisection converged to.
        collinear_tolerance: Relative tolerance for detecting collinear circle fits.
        max_segments: Maximum number of segments per curve before giving up.
    """

    epsilon: float = EPSILON
    max_iterations: int = MAX_ITERS
    refine_passes: int = REFINE_PASSES
    refine: bool = True
    overshoot_tolerance: Optional[float] = None
    collinear_tolerance: float = COLLINEAR_TOLERANCE
    max_segments: int = MAX_SEGMENTS

    def __post_init__(self):
        if not math.isfinite(self.epsilon) or self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be a positive finite number, got {self.epsilon}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.refine_passes < 0:
            raise ValueError(f"refine_passes must not be negative, got {self.refine_passes}")
        if self.overshoot_tolerance is not None and self.overshoot_tolerance < 0.0:
            raise ValueError(f"overshoot_tolerance must not be negative, got {self.overshoot_tolerance}")
        if self.collinear_tolerance < 0.0:
            raise ValueError(f"collinear_tolerance must not be negative, got {self.collinear_tolerance}")
        if self.max_segments < 1:
            raise ValueError(f"max_segments must be at least 1, got {self.max_segments}")

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary for serialization."""
        return {
            "epsilon": self.epsilon,
            "max_iterations": self.max_iterations,
            "refine_passes": self.refine_passes,
            "refine": self.refine,
            "overshoot_tolerance": self.overshoot_tolerance,
            "collinear_tolerance": self.collinear_tolerance,
            "max_segments": self.max_segments,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ArcFitConfig:
        """Create an ArcFitConfig from a dictionary."""
        return cls(
            epsilon=data.get("epsilon", EPSILON),
            max_iterations=data.get("max_iterations", MAX_ITERS),
            refine_passes=data.get("refine_passes", REFINE_PASSES),
            refine=data.get("refine", True),
            overshoot_tolerance=data.get("overshoot_tolerance"),
            collinear_tolerance=data.get("collinear_tolerance", COLLINEAR_TOLERANCE),
            max_segments=data.get("max_segments", MAX_SEGMENTS),
        )
