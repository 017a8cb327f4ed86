"""Conversion of region statistics into intensity bounds."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .Errors import PreconditionViolationError
from .StatisticsComputer import RegionStatistics

# Multiplier used while the region is still growing.
EXPLORATORY_MULTIPLIER = 1.5

# Approximate 99% confidence multiplier (2.58), doubled.
FINAL_MULTIPLIER = 2 * 2.58

# Numerator of the small-sample widening term, 20 / sqrt(N).
SMALL_SAMPLE_CORRECTION = 20.0


@dataclass(frozen=True)
class ThresholdBounds:
    """Inclusive intensity range [lower, upper]."""

    lower: int
    upper: int

    def contains(self, value: int) -> bool:
        return self.lower <= value <= self.upper

    def to_dict(self) -> dict:
        return {"lower": self.lower, "upper": self.upper}


class ThresholdPolicy:
    """Maps statistics to bounds with a fixed confidence multiplier.

    ``upper = mean + (upper_deviation * k + 20 / sqrt(N))`` and
    ``lower = mean - (lower_deviation * k + 20 / sqrt(N))``, both truncated
    toward zero.
    """

    def __init__(self, multiplier: float):
        self.multiplier = multiplier

    def compute_bounds(self, stats: RegionStatistics, sample_count: int) -> ThresholdBounds:
        """Compute bounds from statistics.

        Args:
            stats: Region statistics.
            sample_count: Number of samples the statistics were computed over.

        Returns:
            ThresholdBounds.

        Raises:
            PreconditionViolationError: If sample_count is not positive.
        """
        return compute_bounds(stats, sample_count, self.multiplier)

    def __repr__(self) -> str:
        return f"ThresholdPolicy(multiplier={self.multiplier})"


def compute_bounds(stats: RegionStatistics, sample_count: int, k: float) -> ThresholdBounds:
    """Compute ``(lower, upper)`` bounds for multiplier ``k``."""
    if sample_count <= 0:
        raise PreconditionViolationError(f"Sample count must be positive, got {sample_count}")

    correction = SMALL_SAMPLE_CORRECTION / math.sqrt(sample_count)
    upper = int(stats.mean + (stats.upper_deviation * k + correction))
    lower = int(stats.mean - (stats.lower_deviation * k + correction))
    return ThresholdBounds(lower=lower, upper=upper)
