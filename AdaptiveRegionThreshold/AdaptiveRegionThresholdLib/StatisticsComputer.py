"""Two-sided intensity statistics for a grown region.

The region mean splits the samples into an upper half (values >= mean) and
a lower half (values <= mean). Each half gets its own population standard
deviation around its own mean, which lets the thresholds widen
asymmetrically when the structure has a long tail on one side.

All arithmetic is integer arithmetic: divisions truncate toward zero and
square roots are truncated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .Errors import DegenerateStatisticsError, PreconditionViolationError
from .VolumeView import Point, VolumeView

logger = logging.getLogger(__name__)


def truncating_divide(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero (C semantics, unlike ``//``)."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@dataclass(frozen=True)
class RegionStatistics:
    """Summary statistics of a region's intensities."""

    mean: int
    """Truncated average of all region values."""

    upper_deviation: int
    """Population std-dev of values >= mean around their own mean."""

    lower_deviation: int
    """Population std-dev of values <= mean around their own mean."""

    sample_count: int
    """Number of region values."""

    upper_count: int = 0
    lower_count: int = 0


class StatisticsComputer:
    """Computes :class:`RegionStatistics` over a set of points."""

    def compute(self, points: Iterable[Point], volume: VolumeView) -> RegionStatistics:
        """Compute two-sided statistics for the given points.

        Args:
            points: Region points, all inside ``volume``.
            volume: Volume to read values from.

        Returns:
            RegionStatistics for the points.

        Raises:
            PreconditionViolationError: If there are no points.
            DegenerateStatisticsError: If the upper or lower half is empty.
        """
        values = volume.values_at(points)
        if values.size == 0:
            raise PreconditionViolationError("Cannot compute statistics of an empty region")
        return self.compute_from_values(values)

    def compute_from_values(self, values: np.ndarray) -> RegionStatistics:
        """Compute two-sided statistics from integer sample values.

        Args:
            values: 1D int64 array of sample values.

        Returns:
            RegionStatistics for the values.
        """
        count = int(values.size)
        if count == 0:
            raise PreconditionViolationError("Cannot compute statistics of an empty region")

        mean = truncating_divide(int(values.sum()), count)

        upper = values[values >= mean]
        lower = values[values <= mean]
        if upper.size == 0 or lower.size == 0:
            logger.debug(
                f"Degenerate split: min {int(values.min())} max {int(values.max())} mean {mean}"
            )
            raise DegenerateStatisticsError(
                f"Empty statistical half around mean {mean} "
                f"(upper={upper.size}, lower={lower.size}, samples={count})"
            )

        return RegionStatistics(
            mean=mean,
            upper_deviation=self._deviation(upper),
            lower_deviation=self._deviation(lower),
            sample_count=count,
            upper_count=int(upper.size),
            lower_count=int(lower.size),
        )

    def _deviation(self, half: np.ndarray) -> int:
        """Truncated population standard deviation around the half's own mean."""
        n = int(half.size)
        half_mean = truncating_divide(int(half.sum()), n)
        diff = half - half_mean
        variance = int(np.dot(diff, diff)) // n
        return math.isqrt(variance)
