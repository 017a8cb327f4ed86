"""Read-only access to a 3D scalar volume.

Voxel coordinates are (x, y, z) points. Arrays follow the numpy/SimpleITK
convention and are indexed as ``array[z, y, x]``.
"""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, NamedTuple

import numpy as np
import SimpleITK as sitk

from .Errors import PreconditionViolationError

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    """Integer voxel coordinate (x, y, z)."""

    x: int
    y: int
    z: int

    def offset(self, dx: int, dy: int, dz: int) -> Point:
        """Return the point shifted by (dx, dy, dz)."""
        return Point(self.x + dx, self.y + dy, self.z + dz)


# The 26-connected neighborhood: every offset in {-1, 0, 1}^3 except the center.
NEIGHBOR_OFFSETS: tuple[tuple[int, int, int], ...] = tuple(
    offset for offset in itertools.product((-1, 0, 1), repeat=3) if offset != (0, 0, 0)
)


class VolumeView:
    """Immutable view over a 3D scalar grid.

    Values are read as Python ints, truncating float voxels toward zero.
    The underlying array is never written to.
    """

    def __init__(self, array: np.ndarray):
        """Wrap a 3D array.

        Args:
            array: Volume array with (z, y, x) ordering.

        Raises:
            PreconditionViolationError: If the array is not 3D or is empty.
        """
        array = np.asarray(array)
        if array.ndim != 3:
            raise PreconditionViolationError(f"Expected 3D volume, got {array.ndim}D")
        if array.size == 0:
            raise PreconditionViolationError("Volume has no voxels")

        self._array = array
        # (sizeX, sizeY, sizeZ)
        self.size: tuple[int, int, int] = (array.shape[2], array.shape[1], array.shape[0])

    @classmethod
    def from_sitk(cls, image: sitk.Image) -> VolumeView:
        """Create a view over a SimpleITK image.

        Args:
            image: 3D scalar SimpleITK image.

        Returns:
            VolumeView over a copy of the image's voxel data.
        """
        if image.GetDimension() != 3:
            raise PreconditionViolationError(
                f"Expected 3D image, got {image.GetDimension()}D"
            )
        array = sitk.GetArrayFromImage(image)
        logger.debug(
            f"Volume from {image.GetPixelIDTypeAsString()} image, "
            f"size={image.GetSize()} spacing={image.GetSpacing()}"
        )
        return cls(array)

    def contains(self, point: Iterable[int]) -> bool:
        """Check whether a point lies inside the volume on every axis."""
        x, y, z = point
        size_x, size_y, size_z = self.size
        return 0 <= x < size_x and 0 <= y < size_y and 0 <= z < size_z

    def value_at(self, point: Iterable[int]) -> int:
        """Return the voxel value at (x, y, z) as a truncated integer."""
        x, y, z = point
        return int(self._array[z, y, x])

    def values_at(self, points: Iterable[Point]) -> np.ndarray:
        """Return the values of many points as an int64 array.

        Args:
            points: Points inside the volume.

        Returns:
            1D int64 array, one value per point, in iteration order.
        """
        coords = np.array(list(points), dtype=np.intp).reshape(-1, 3)
        values = self._array[coords[:, 2], coords[:, 1], coords[:, 0]]
        # astype truncates floats toward zero
        return values.astype(np.int64)

    def neighbors(self, point: Point) -> Iterable[Point]:
        """Yield the in-bounds 26-connected neighbors of a point."""
        for dx, dy, dz in NEIGHBOR_OFFSETS:
            neighbor = point.offset(dx, dy, dz)
            if self.contains(neighbor):
                yield neighbor

    def __repr__(self) -> str:
        return f"VolumeView(size={self.size}, dtype={self._array.dtype})"
