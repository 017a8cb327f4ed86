"""Pytest configuration and fixtures for AdaptiveRegionThreshold tests."""

import os
import sys

import numpy as np
import pytest

# Add library path for imports when the package is not installed
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))
_MODULE_DIR = os.path.dirname(os.path.dirname(_THIS_DIR))
if _MODULE_DIR not in sys.path:
    sys.path.insert(0, _MODULE_DIR)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow (large volumes)")


@pytest.fixture
def uniform_image_array():
    """Create a uniform intensity numpy array (8x8x8, value 100)."""
    return np.full((8, 8, 8), fill_value=100, dtype=np.float32)


@pytest.fixture
def spike_image_array():
    """
    Create the 5x5x5 spike volume.

    Every voxel is 100 except (x, y, z) = (2, 2, 3) which is 500.
    """
    image = np.full((5, 5, 5), fill_value=100, dtype=np.float32)
    image[3, 2, 2] = 500
    return image


@pytest.fixture
def seed_at_center():
    """Seed at the center of the 5x5x5 spike volume."""
    return (2, 2, 2)  # (x, y, z)
