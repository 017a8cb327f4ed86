"""Command line interface.

Usage:
    # Segment the structure containing voxel (120, 95, 40)
    adaptive-threshold segment input.nii.gz mask.nii.gz 120 95 40

    # Only print the estimated bounds as JSON
    adaptive-threshold estimate input.nii.gz 120 95 40 --config growth.yaml

    # Copy a 16-bit MetaImage volume
    adaptive-threshold copy-raw in.mhd out.mhd
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from .Errors import ThresholdEstimationError
from .GrowthConfig import PipelineConfig
from .SegmentationPipeline import copy_raw_volume, estimate_from_image, read_volume, run_pipeline

logger = logging.getLogger(__name__)


def _add_seed_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("seed_x", type=int, help="Seed x index")
    parser.add_argument("seed_y", type=int, help="Seed y index")
    parser.add_argument("seed_z", type=int, help="Seed z index")


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument(
        "--max-iterations",
        type=int,
        help="Override the growth iteration cap",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adaptive-threshold",
        description="Seeded segmentation with adaptive region growing thresholds",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    segment = subparsers.add_parser("segment", help="Estimate bounds and write a mask")
    segment.add_argument("input", help="Input volume")
    segment.add_argument("output", help="Output mask")
    _add_seed_arguments(segment)
    _add_config_arguments(segment)

    estimate = subparsers.add_parser("estimate", help="Print estimated bounds as JSON")
    estimate.add_argument("input", help="Input volume")
    _add_seed_arguments(estimate)
    _add_config_arguments(estimate)
    estimate.add_argument(
        "--no-smoothing",
        action="store_true",
        help="Estimate on the raw volume instead of the smoothed one",
    )

    copy_raw = subparsers.add_parser("copy-raw", help="Copy a 16-bit MetaImage volume")
    copy_raw.add_argument("input", help="Input .mhd header")
    copy_raw.add_argument("output", help="Output .mhd header")

    return parser


def _load_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.load(args.config) if args.config else PipelineConfig()
    if args.max_iterations is not None:
        config.growth.max_iterations = args.max_iterations
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line interface.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        if args.command == "copy-raw":
            copy_raw_volume(args.input, args.output)
            return 0

        config = _load_config(args)
        seed = (args.seed_x, args.seed_y, args.seed_z)

        if args.command == "segment":
            result = run_pipeline(args.input, args.output, seed, config)
            print(json.dumps(result.to_dict(), indent=2))
        else:
            growth = estimate_from_image(
                read_volume(args.input), seed, config, smooth=not args.no_smoothing
            )
            print(json.dumps(growth.to_dict(), indent=2))
    except (ThresholdEstimationError, FileNotFoundError, RuntimeError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
