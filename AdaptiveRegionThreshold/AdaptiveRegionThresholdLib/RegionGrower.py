"""Adaptive seeded region growing threshold estimator.

Starting from a seed voxel, the grower floods outward through the
26-connected neighborhood and keeps re-estimating the intensity bounds of
the structure it is growing into:

1. Seeding: the seed and all of its in-bounds neighbors are admitted
   without any intensity test, and a first set of exploratory bounds is
   computed from them.
2. Growing: breadth-first expansion admits neighbors whose value lies
   inside the current bounds. Each time the region doubles in size relative
   to the last estimate, the exploratory bounds are recomputed over the
   whole region.
3. Finalizing: the final bounds are computed over the grown region with the
   wider final multiplier.

The final bounds are meant to be handed to a connected-threshold fill that
produces the actual segmentation mask.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from .Errors import PreconditionViolationError
from .GrowthConfig import GrowthConfig
from .Region import Region
from .StatisticsComputer import RegionStatistics, StatisticsComputer
from .ThresholdPolicy import ThresholdBounds, ThresholdPolicy
from .VolumeView import Point, VolumeView

logger = logging.getLogger(__name__)

# Called for every voxel admitted during the growing phase with
# (point, value, bounds in effect, region size after admission).
AcceptCallback = Callable[[Point, int, ThresholdBounds, int], None]


class GrowthPhase(Enum):
    SEEDING = "seeding"
    GROWING = "growing"
    FINALIZING = "finalizing"
    DONE = "done"


class GrowthStatus(Enum):
    """How growth terminated."""

    COMPLETED = "completed"  # Frontier exhausted
    TRUNCATED = "truncated"  # Iteration cap reached, bounds from partial region


def should_recompute(region_size: int, last_recompute_size: int) -> bool:
    """Return True once the region has at least doubled since the last estimate."""
    return region_size // last_recompute_size >= 2


@dataclass
class GrowthState:
    """Mutable state of a single estimation call."""

    region: Region = field(default_factory=Region)
    frontier: deque = field(default_factory=deque)
    bounds: Optional[ThresholdBounds] = None
    last_recompute_size: int = 0
    iterations: int = 0
    recompute_count: int = 0
    phase: GrowthPhase = GrowthPhase.SEEDING

    def admit(self, point: Point) -> bool:
        """Add a point to the region and the back of the frontier if it is new."""
        if not self.region.add(point):
            return False
        self.frontier.append(point)
        return True

    def needs_recompute(self) -> bool:
        return should_recompute(len(self.region), self.last_recompute_size)


@dataclass(frozen=True)
class GrowthResult:
    """Outcome of one estimation."""

    bounds: ThresholdBounds
    status: GrowthStatus
    statistics: RegionStatistics
    region_size: int
    iterations: int
    recompute_count: int
    elapsed_ms: float = 0.0
    region: Optional[Region] = field(default=None, compare=False, repr=False)

    @property
    def truncated(self) -> bool:
        return self.status is GrowthStatus.TRUNCATED

    def to_dict(self) -> dict:
        return {
            "lower": self.bounds.lower,
            "upper": self.bounds.upper,
            "status": self.status.value,
            "mean": self.statistics.mean,
            "upper_deviation": self.statistics.upper_deviation,
            "lower_deviation": self.statistics.lower_deviation,
            "region_size": self.region_size,
            "iterations": self.iterations,
            "recompute_count": self.recompute_count,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }


class RegionGrower:
    """Grows a region from a seed and estimates its intensity bounds.

    A grower only reads from its volume, so several growers may run over the
    same VolumeView concurrently. Each :meth:`estimate` call owns a fresh
    GrowthState.
    """

    def __init__(
        self,
        volume: VolumeView,
        config: Optional[GrowthConfig] = None,
        statistics_computer: Optional[StatisticsComputer] = None,
        on_accept: Optional[AcceptCallback] = None,
    ):
        """Initialize the grower.

        Args:
            volume: Volume to grow in.
            config: Growth parameters. Defaults to GrowthConfig().
            statistics_computer: Statistics implementation.
            on_accept: Optional observer of growing-phase admissions.

        Raises:
            PreconditionViolationError: If the config is invalid.
        """
        self.volume = volume
        self.config = config or GrowthConfig()
        self.statistics_computer = statistics_computer or StatisticsComputer()
        self.on_accept = on_accept

        errors = self.config.validate()
        if errors:
            raise PreconditionViolationError("Invalid growth config: " + "; ".join(errors))

        self.exploratory_policy = ThresholdPolicy(self.config.exploratory_multiplier)
        self.final_policy = ThresholdPolicy(self.config.final_multiplier)

    def estimate(self, seed: Iterable[int]) -> GrowthResult:
        """Run the full Seeding -> Growing -> Finalizing sequence.

        Args:
            seed: Seed coordinate (x, y, z) inside the volume.

        Returns:
            GrowthResult with the final bounds and termination status.

        Raises:
            PreconditionViolationError: If the seed lies outside the volume.
            DegenerateStatisticsError: If the region statistics break down.
        """
        start_time = time.perf_counter()
        seed = Point(*(int(c) for c in seed))
        if not self.volume.contains(seed):
            raise PreconditionViolationError(
                f"Seed {tuple(seed)} outside volume of size {self.volume.size}"
            )

        state = GrowthState()
        self._seed(state, seed)
        status = self._grow(state)
        stats, bounds = self._finalize(state)

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Region growing from {tuple(seed)}: {len(state.region)} voxels, "
            f"{state.iterations} iterations, {state.recompute_count} recomputes, "
            f"bounds [{bounds.lower}, {bounds.upper}] ({status.value}, {elapsed:.1f}ms)"
        )

        return GrowthResult(
            bounds=bounds,
            status=status,
            statistics=stats,
            region_size=len(state.region),
            iterations=state.iterations,
            recompute_count=state.recompute_count,
            elapsed_ms=elapsed,
            region=state.region,
        )

    def _seed(self, state: GrowthState, seed: Point) -> None:
        """Admit the seed and its neighbors unconditionally, then estimate."""
        state.phase = GrowthPhase.SEEDING
        # The seed itself is not expanded; only its neighbors enter the frontier.
        state.region.add(seed)
        for neighbor in self.volume.neighbors(seed):
            state.admit(neighbor)

        logger.debug(f"Seeded region with {len(state.region)} voxels around {tuple(seed)}")
        self._recompute(state)

    def _grow(self, state: GrowthState) -> GrowthStatus:
        """Breadth-first expansion until the frontier empties or the cap is hit."""
        state.phase = GrowthPhase.GROWING
        max_iterations = self.config.max_iterations
        region = state.region
        frontier = state.frontier
        volume = self.volume

        while frontier:
            if state.iterations >= max_iterations:
                logger.warning(
                    f"Region growing stopped after {state.iterations} iterations with "
                    f"{len(frontier)} voxels left in the frontier; bounds are computed "
                    f"from a partial region of {len(region)} voxels"
                )
                return GrowthStatus.TRUNCATED
            state.iterations += 1

            point = frontier.popleft()
            for neighbor in volume.neighbors(point):
                if neighbor in region:
                    continue
                value = volume.value_at(neighbor)
                if not state.bounds.contains(value):
                    continue

                accepted_bounds = state.bounds
                state.admit(neighbor)
                if self.on_accept is not None:
                    self.on_accept(neighbor, value, accepted_bounds, len(region))

                if state.needs_recompute():
                    self._recompute(state)

        return GrowthStatus.COMPLETED

    def _finalize(self, state: GrowthState) -> tuple[RegionStatistics, ThresholdBounds]:
        state.phase = GrowthPhase.FINALIZING
        stats = self.statistics_computer.compute(state.region, self.volume)
        bounds = self.final_policy.compute_bounds(stats, len(state.region))
        logger.debug(
            f"mgv {stats.mean} upper_dev {stats.upper_deviation} "
            f"lower_dev {stats.lower_deviation}"
        )
        logger.debug(f"final thresholds {bounds.upper} {bounds.lower}")
        state.bounds = bounds
        state.phase = GrowthPhase.DONE
        return stats, bounds

    def _recompute(self, state: GrowthState) -> None:
        """Replace the current bounds with exploratory bounds over the whole region."""
        stats = self.statistics_computer.compute(state.region, self.volume)
        state.bounds = self.exploratory_policy.compute_bounds(stats, len(state.region))
        state.last_recompute_size = len(state.region)
        state.recompute_count += 1
        logger.debug(
            f"mgv {stats.mean} upper_dev {stats.upper_deviation} "
            f"lower_dev {stats.lower_deviation}"
        )
        logger.debug(
            f"{state.phase.value} thresholds {state.bounds.upper} {state.bounds.lower} "
            f"(region {state.last_recompute_size})"
        )


def estimate_thresholds(
    volume: VolumeView,
    seed: Iterable[int],
    config: Optional[GrowthConfig] = None,
) -> GrowthResult:
    """Estimate connected-threshold bounds for the structure containing ``seed``.

    Args:
        volume: Volume to analyze.
        seed: Seed coordinate (x, y, z).
        config: Growth parameters.

    Returns:
        GrowthResult with the final bounds and status.
    """
    return RegionGrower(volume, config).estimate(seed)
