"""Tests for VolumeView, Point and the 26-neighbor offset table."""

import unittest

import numpy as np
import SimpleITK as sitk

from AdaptiveRegionThresholdLib.Errors import PreconditionViolationError
from AdaptiveRegionThresholdLib.Region import Region
from AdaptiveRegionThresholdLib.VolumeView import NEIGHBOR_OFFSETS, Point, VolumeView


class TestNeighborOffsets(unittest.TestCase):
    """Tests for the precomputed neighborhood."""

    def test_has_26_unique_offsets(self):
        self.assertEqual(len(NEIGHBOR_OFFSETS), 26)
        self.assertEqual(len(set(NEIGHBOR_OFFSETS)), 26)

    def test_excludes_center(self):
        self.assertNotIn((0, 0, 0), NEIGHBOR_OFFSETS)

    def test_offsets_within_unit_cube(self):
        for offset in NEIGHBOR_OFFSETS:
            self.assertTrue(all(c in (-1, 0, 1) for c in offset), offset)


class TestVolumeView(unittest.TestCase):
    """Tests for bounds checking and value lookup."""

    def setUp(self):
        # shape (z, y, x) = (4, 3, 2)
        self.array = np.arange(24, dtype=np.float32).reshape(4, 3, 2)
        self.volume = VolumeView(self.array)

    def test_size_is_xyz(self):
        self.assertEqual(self.volume.size, (2, 3, 4))

    def test_value_at_uses_zyx_indexing(self):
        self.assertEqual(self.volume.value_at(Point(1, 2, 3)), int(self.array[3, 2, 1]))
        self.assertEqual(self.volume.value_at((0, 1, 2)), int(self.array[2, 1, 0]))

    def test_value_at_returns_int(self):
        self.assertIsInstance(self.volume.value_at((1, 1, 1)), int)

    def test_float_values_truncate_toward_zero(self):
        array = np.array([[[2.9, -2.9]]], dtype=np.float32)
        volume = VolumeView(array)

        self.assertEqual(volume.value_at((0, 0, 0)), 2)
        self.assertEqual(volume.value_at((1, 0, 0)), -2)

    def test_values_at_matches_value_at(self):
        points = [Point(0, 0, 0), Point(1, 2, 3), Point(1, 0, 2)]
        values = self.volume.values_at(points)

        self.assertEqual(values.dtype, np.int64)
        self.assertEqual(list(values), [self.volume.value_at(p) for p in points])

    def test_values_at_accepts_region(self):
        region = Region()
        region.add(Point(1, 1, 1))
        region.add(Point(0, 2, 3))

        self.assertEqual(len(self.volume.values_at(region)), 2)

    def test_contains_rejects_every_face(self):
        inside = Point(1, 1, 1)
        self.assertTrue(self.volume.contains(inside))

        for outside in [(-1, 1, 1), (2, 1, 1), (1, -1, 1), (1, 3, 1), (1, 1, -1), (1, 1, 4)]:
            self.assertFalse(self.volume.contains(outside), outside)

    def test_rejects_non_3d_array(self):
        with self.assertRaises(PreconditionViolationError):
            VolumeView(np.zeros((4, 4)))

    def test_rejects_empty_array(self):
        with self.assertRaises(ValueError):
            VolumeView(np.zeros((0, 4, 4)))

    def test_from_sitk(self):
        image = sitk.GetImageFromArray(self.array)
        with self.assertLogs("AdaptiveRegionThresholdLib.VolumeView", level="DEBUG") as logs:
            volume = VolumeView.from_sitk(image)

        self.assertEqual(volume.size, image.GetSize())
        self.assertEqual(volume.value_at((1, 2, 3)), self.volume.value_at((1, 2, 3)))
        self.assertIn("size=(2, 3, 4)", logs.output[0])

    def test_from_sitk_rejects_2d_image(self):
        image = sitk.Image(4, 4, sitk.sitkFloat32)
        with self.assertRaises(PreconditionViolationError):
            VolumeView.from_sitk(image)


class TestNeighbors(unittest.TestCase):
    """Tests for in-bounds neighbor enumeration on a 4x4x4 volume."""

    def setUp(self):
        self.volume = VolumeView(np.zeros((4, 4, 4), dtype=np.int16))

    def test_interior_point_has_26_neighbors(self):
        self.assertEqual(len(list(self.volume.neighbors(Point(1, 2, 1)))), 26)

    def test_corner_has_7_neighbors(self):
        for corner in [Point(0, 0, 0), Point(3, 3, 3), Point(3, 0, 3)]:
            neighbors = list(self.volume.neighbors(corner))
            self.assertEqual(len(neighbors), 7, corner)
            self.assertTrue(all(self.volume.contains(n) for n in neighbors))

    def test_face_points_have_17_neighbors(self):
        for face_point in [(0, 1, 2), (3, 1, 2), (1, 0, 2), (1, 3, 2), (1, 2, 0), (1, 2, 3)]:
            neighbors = list(self.volume.neighbors(Point(*face_point)))
            self.assertEqual(len(neighbors), 17, face_point)

    def test_point_offset(self):
        self.assertEqual(Point(1, 2, 3).offset(-1, 0, 1), Point(0, 2, 4))


class TestRegion(unittest.TestCase):
    """Tests for the grow-only region."""

    def test_add_is_idempotent(self):
        region = Region()

        self.assertTrue(region.add(Point(1, 2, 3)))
        self.assertFalse(region.add(Point(1, 2, 3)))
        self.assertEqual(len(region), 1)

    def test_distinct_points_never_merge(self):
        # These collide under the product-based key x*y*z + 100x + 10y + z
        region = Region()
        region.add(Point(0, 10, 0))
        region.add(Point(1, 0, 0))

        self.assertEqual(len(region), 2)

    def test_iterates_in_insertion_order(self):
        region = Region()
        points = [Point(2, 0, 0), Point(0, 0, 1), Point(1, 1, 1)]
        for point in points:
            region.add(point)

        self.assertEqual(list(region), points)
        self.assertIn(Point(0, 0, 1), region)
        self.assertIn((0, 0, 1), region)


if __name__ == "__main__":
    unittest.main()
