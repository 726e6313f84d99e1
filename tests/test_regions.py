import unittest

import numpy as np

from facecollage.regions import (
    DENSE_REGIONS,
    REGIONS,
    compute_region_bounds,
    region_bounds,
    resolve_regions,
)
from facecollage.types import FaceLandmarks


def make_landmarks(n=478, x=0.5, y=0.5):
    norm = np.zeros((n, 3), dtype=np.float64)
    norm[:, 0] = x
    norm[:, 1] = y
    return FaceLandmarks(normalized=norm, pixel=np.zeros((n, 2), dtype=np.int32))


class TestRegionBounds(unittest.TestCase):

    def test_floor_and_min_max(self):
        lms = make_landmarks()
        lms.normalized[33, :2] = (0.25, 0.375)
        lms.normalized[133, :2] = (0.625, 0.5)
        b = region_bounds(lms, REGIONS["left_eye"], 80, 160)
        self.assertEqual((b.x1, b.y1, b.x2, b.y2), (20, 60, 50, 80))
        self.assertEqual(b.width, 30)
        self.assertEqual(b.height, 20)

    def test_floors_fractional_pixels(self):
        lms = make_landmarks()
        lms.normalized[1, :2] = (0.1, 0.1)
        lms.normalized[2, :2] = (0.2, 0.2)
        # 0.1 * 15 = 1.5, 0.2 * 15 = 3.0
        b = region_bounds(lms, [1, 2], 15, 15)
        self.assertEqual((b.x1, b.y1, b.x2, b.y2), (1, 1, 3, 3))

    def test_clamps_to_frame_edges(self):
        lms = make_landmarks()
        lms.normalized[10, :2] = (-0.125, -0.5)
        lms.normalized[338, :2] = (1.25, 1.5)
        b = region_bounds(lms, [10, 338], 80, 40)
        self.assertEqual((b.x1, b.y1, b.x2, b.y2), (0, 0, 80, 40))

    def test_single_point_region_is_empty(self):
        lms = make_landmarks()
        b = region_bounds(lms, [5], 100, 100)
        self.assertEqual((b.width, b.height), (0, 0))

    def test_empty_indices_rejected(self):
        with self.assertRaises(ValueError):
            region_bounds(make_landmarks(), [], 100, 100)

    def test_index_out_of_range_rejected(self):
        with self.assertRaises(ValueError):
            region_bounds(make_landmarks(n=468), REGIONS["nose"] + [470], 100, 100)
        with self.assertRaises(ValueError):
            region_bounds(make_landmarks(), [-1], 100, 100)


class TestRegionTable(unittest.TestCase):

    def test_region_order_and_dense_set(self):
        self.assertEqual(
            list(REGIONS),
            [
                "left_eye", "right_eye", "nose", "mouth", "forehead", "chin",
                "left_cheek", "right_cheek", "jawline_left", "jawline_right", "temples",
            ],
        )
        self.assertEqual(DENSE_REGIONS, {"forehead", "chin", "jawline_left", "jawline_right", "temples"})
        self.assertTrue(DENSE_REGIONS <= set(REGIONS))

    def test_indices_fit_refined_mesh(self):
        for name, idxs in REGIONS.items():
            self.assertTrue(all(0 <= i < 478 for i in idxs), name)

    def test_compute_region_bounds_keeps_order(self):
        bounds = compute_region_bounds(make_landmarks(), 64, 48)
        self.assertEqual(list(bounds), list(REGIONS))

    def test_resolve_regions_overrides_and_appends(self):
        regions = resolve_regions({"regions": {"nose": [1, 2], "left_brow": [70, 63]}})
        self.assertEqual(regions["nose"], [1, 2])
        self.assertEqual(list(regions)[-1], "left_brow")
        self.assertEqual(list(regions).index("nose"), 2)
        # the module table is not modified
        self.assertEqual(REGIONS["nose"], [2, 98, 327, 195, 5, 4, 1])

    def test_resolve_regions_without_cfg(self):
        self.assertEqual(resolve_regions(None), REGIONS)


if __name__ == "__main__":
    unittest.main()
