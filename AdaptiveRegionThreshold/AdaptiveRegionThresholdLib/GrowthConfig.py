"""YAML configuration for threshold estimation and the segmentation pipeline.

Example YAML:
    growth:
      exploratory_multiplier: 1.5
      final_multiplier: 5.16
      max_iterations: 10000000
    pipeline:
      smoothing_iterations: 2
      smoothing_time_step: 0.05
      replace_value: 255
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

from .Errors import PreconditionViolationError
from .ThresholdPolicy import EXPLORATORY_MULTIPLIER, FINAL_MULTIPLIER

logger = logging.getLogger(__name__)

# Hard cap on frontier dequeues for a single estimation.
DEFAULT_MAX_ITERATIONS = 10_000_000


def _check_keys(section: str, data: object, allowed: set[str]) -> None:
    if not isinstance(data, dict):
        raise PreconditionViolationError(
            f"{section} section must be a mapping, got {type(data).__name__}"
        )
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise PreconditionViolationError(f"Unknown {section} option(s): {', '.join(unknown)}")


def _is_number(value: object) -> bool:
    # bool is an int subclass but never a meaningful setting here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class GrowthConfig:
    """Parameters of the region growing estimator."""

    exploratory_multiplier: float = EXPLORATORY_MULTIPLIER
    final_multiplier: float = FINAL_MULTIPLIER
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    @classmethod
    def from_dict(cls, data: dict | None) -> GrowthConfig:
        if data is None:
            data = {}
        _check_keys("growth", data, {f.name for f in fields(cls)})
        return cls(**data)

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        for name in ("exploratory_multiplier", "final_multiplier"):
            value = getattr(self, name)
            if not _is_number(value) or value < 0:
                errors.append(f"{name} must be a non-negative number")
        if not _is_integer(self.max_iterations) or self.max_iterations < 0:
            errors.append("max_iterations must be a non-negative integer")

        return errors

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PipelineConfig:
    """Settings of the read / smooth / estimate / fill / write pipeline."""

    smoothing_iterations: int = 2
    smoothing_time_step: float = 0.05
    replace_value: int = 255
    growth: GrowthConfig = field(default_factory=GrowthConfig)

    # Source path (set when loading)
    source_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | str) -> PipelineConfig:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file.

        Returns:
            Validated PipelineConfig.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            PreconditionViolationError: If the config is invalid.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise PreconditionViolationError(f"Cannot parse config {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PreconditionViolationError(f"Config root must be a mapping: {config_path}")

        config = cls.from_dict(data)
        config.source_path = config_path

        errors = config.validate()
        if errors:
            raise PreconditionViolationError(
                f"Invalid config {config_path}: " + "; ".join(errors)
            )

        logger.info(f"Loaded config from {config_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> PipelineConfig:
        """Build a config from a parsed YAML dictionary."""
        _check_keys("top-level", data, {"growth", "pipeline"})

        pipeline = data.get("pipeline")
        if pipeline is None:
            pipeline = {}
        _check_keys("pipeline", pipeline, {"smoothing_iterations", "smoothing_time_step", "replace_value"})

        return cls(
            smoothing_iterations=pipeline.get("smoothing_iterations", 2),
            smoothing_time_step=pipeline.get("smoothing_time_step", 0.05),
            replace_value=pipeline.get("replace_value", 255),
            growth=GrowthConfig.from_dict(data.get("growth")),
        )

    def validate(self) -> list[str]:
        """Validate configuration, including the nested growth settings.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = self.growth.validate()

        if not _is_integer(self.smoothing_iterations) or self.smoothing_iterations < 0:
            errors.append("smoothing_iterations must be a non-negative integer")
        if not _is_number(self.smoothing_time_step) or self.smoothing_time_step <= 0:
            errors.append("smoothing_time_step must be a positive number")
        if not _is_integer(self.replace_value) or not 0 < self.replace_value <= 255:
            errors.append("replace_value must be an integer in 1..255")

        return errors

    def to_dict(self) -> dict:
        """Convert to the YAML dictionary layout."""
        return {
            "growth": self.growth.to_dict(),
            "pipeline": {
                "smoothing_iterations": self.smoothing_iterations,
                "smoothing_time_step": self.smoothing_time_step,
                "replace_value": self.replace_value,
            },
        }
