"""Seeded segmentation pipeline built on SimpleITK.

Reads a volume, smooths it with curvature flow, estimates connected
threshold bounds by adaptive region growing, paints the connected region
inside those bounds and writes an 8-bit mask.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import SimpleITK as sitk

from .GrowthConfig import PipelineConfig
from .RegionGrower import GrowthResult, RegionGrower
from .ThresholdPolicy import ThresholdBounds
from .VolumeView import VolumeView

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a pipeline run."""

    growth: GrowthResult
    segmented_voxels: int
    output_path: Path

    @property
    def bounds(self) -> ThresholdBounds:
        return self.growth.bounds

    def to_dict(self) -> dict:
        result = self.growth.to_dict()
        result["segmented_voxels"] = self.segmented_voxels
        result["output_path"] = str(self.output_path)
        return result


def read_volume(path: PathLike) -> sitk.Image:
    """Read a volume as 32-bit float.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        RuntimeError: If SimpleITK cannot read the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Volume not found: {path}")

    image = sitk.ReadImage(str(path), sitk.sitkFloat32)
    logger.info(f"Read {path.name}: size={image.GetSize()}")
    return image


def write_volume(image: sitk.Image, path: PathLike) -> Path:
    """Write a volume, creating the parent directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sitk.WriteImage(image, str(path))
    logger.info(f"Wrote {path}")
    return path


def smooth_volume(image: sitk.Image, iterations: int = 2, time_step: float = 0.05) -> sitk.Image:
    """Edge-preserving curvature flow smoothing.

    Args:
        image: Float volume.
        iterations: Number of curvature flow iterations. 0 disables smoothing.
        time_step: Curvature flow time step.

    Returns:
        Smoothed float volume.
    """
    if iterations <= 0:
        return image

    return sitk.CurvatureFlow(image, timeStep=time_step, numberOfIterations=iterations)


def connected_threshold(
    image: sitk.Image,
    seed: Iterable[int],
    bounds: ThresholdBounds,
    replace_value: int = 255,
) -> sitk.Image:
    """Paint the region connected to ``seed`` whose values lie within ``bounds``.

    Args:
        image: Input volume.
        seed: Seed point (x, y, z).
        bounds: Inclusive intensity bounds.
        replace_value: Value written into the painted region.

    Returns:
        Mask image with ``replace_value`` inside the region and 0 elsewhere.
    """
    sitkSeed = tuple(int(c) for c in seed)
    return sitk.ConnectedThreshold(
        image,
        seedList=[sitkSeed],
        lower=float(bounds.lower),
        upper=float(bounds.upper),
        replaceValue=int(replace_value),
    )


def cast_to_uint8(image: sitk.Image) -> sitk.Image:
    return sitk.Cast(image, sitk.sitkUInt8)


def estimate_from_image(
    image: sitk.Image,
    seed: Iterable[int],
    config: Optional[PipelineConfig] = None,
    smooth: bool = True,
) -> GrowthResult:
    """Smooth an image (optionally) and estimate bounds from ``seed``.

    Args:
        image: Float volume.
        seed: Seed point (x, y, z).
        config: Pipeline configuration.
        smooth: Whether to apply curvature flow smoothing first.

    Returns:
        GrowthResult of the estimation.
    """
    config = config or PipelineConfig()
    if smooth:
        image = smooth_volume(image, config.smoothing_iterations, config.smoothing_time_step)

    return RegionGrower(VolumeView.from_sitk(image), config.growth).estimate(seed)


def run_pipeline(
    input_path: PathLike,
    output_path: PathLike,
    seed: Iterable[int],
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Segment the structure containing ``seed`` and write the mask.

    Args:
        input_path: Input volume file.
        output_path: Output mask file.
        seed: Seed point (x, y, z).
        config: Pipeline configuration.

    Returns:
        PipelineResult with the estimated bounds and output statistics.
    """
    config = config or PipelineConfig()
    seed = tuple(int(c) for c in seed)
    start_time = time.perf_counter()

    image = read_volume(input_path)
    smoothed = smooth_volume(image, config.smoothing_iterations, config.smoothing_time_step)

    growth = RegionGrower(VolumeView.from_sitk(smoothed), config.growth).estimate(seed)

    mask = cast_to_uint8(connected_threshold(smoothed, seed, growth.bounds, config.replace_value))
    written = write_volume(mask, output_path)

    segmented = int(np.count_nonzero(sitk.GetArrayViewFromImage(mask)))
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"Segmented {segmented} voxels with bounds "
        f"[{growth.bounds.lower}, {growth.bounds.upper}] in {elapsed:.1f}ms"
    )

    return PipelineResult(growth=growth, segmented_voxels=segmented, output_path=written)


def copy_raw_volume(input_path: PathLike, output_path: PathLike) -> Path:
    """Copy a MetaImage (.mhd/.raw) volume as signed 16-bit voxels.

    Any existing output is removed first. The written volume is identical in
    content and size to the input.

    Returns:
        Path of the written header.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    if not input_path.exists():
        raise FileNotFoundError(f"Volume not found: {input_path}")

    output_path.unlink(missing_ok=True)

    image = sitk.ReadImage(str(input_path), sitk.sitkInt16)
    size_x, size_y, size_z = image.GetSize()
    logger.info(f"x: {size_x} y: {size_y} z: {size_z}, layer size {size_x * size_y}")

    return write_volume(image, output_path)
