"""AdaptiveRegionThresholdLib - Adaptive seeded region growing thresholds.

This library estimates connected-threshold intensity bounds for the 3D
structure containing a seed voxel, and wraps the estimate in a small
SimpleITK segmentation pipeline.
"""

from .Errors import DegenerateStatisticsError, PreconditionViolationError, ThresholdEstimationError
from .GrowthConfig import GrowthConfig, PipelineConfig
from .Region import Region
from .RegionGrower import GrowthResult, GrowthStatus, RegionGrower, estimate_thresholds
from .StatisticsComputer import RegionStatistics, StatisticsComputer
from .ThresholdPolicy import (
    EXPLORATORY_MULTIPLIER,
    FINAL_MULTIPLIER,
    ThresholdBounds,
    ThresholdPolicy,
)
from .VolumeView import NEIGHBOR_OFFSETS, Point, VolumeView

__version__ = "0.1.0"

__all__ = [
    "VolumeView",
    "Point",
    "NEIGHBOR_OFFSETS",
    "Region",
    "StatisticsComputer",
    "RegionStatistics",
    "ThresholdPolicy",
    "ThresholdBounds",
    "EXPLORATORY_MULTIPLIER",
    "FINAL_MULTIPLIER",
    "RegionGrower",
    "GrowthResult",
    "GrowthStatus",
    "estimate_thresholds",
    "GrowthConfig",
    "PipelineConfig",
    "ThresholdEstimationError",
    "PreconditionViolationError",
    "DegenerateStatisticsError",
]
