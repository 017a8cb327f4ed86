"""Grow-only set of visited voxels."""

from __future__ import annotations

from typing import Iterator

from .VolumeView import Point


class Region:
    """Unique points discovered by region growing.

    Points are keyed by their coordinate triple, so two distinct voxels can
    never share a key. A point is added at most once and never removed.
    Iteration follows insertion order.
    """

    def __init__(self) -> None:
        self._points: dict[Point, Point] = {}

    def add(self, point: Point) -> bool:
        """Add a point.

        Args:
            point: Voxel coordinate.

        Returns:
            True if the point was new, False if it was already present.
        """
        if point in self._points:
            return False
        self._points[point] = point
        return True

    def __contains__(self, point: object) -> bool:
        return point in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"Region(size={len(self._points)})"
