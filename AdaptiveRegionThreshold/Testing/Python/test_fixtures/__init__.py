"""Test fixtures and synthetic data generators for AdaptiveRegionThreshold tests."""

from .synthetic_image import (
    create_bimodal_image,
    create_noisy_sphere,
    create_spike_image,
    create_uniform_image,
)

__all__ = [
    "create_uniform_image",
    "create_spike_image",
    "create_bimodal_image",
    "create_noisy_sphere",
]
