import logging
import math
import unittest

import pytest

from trajclean.core.point import GeoPoint
from trajclean.modules.simplification.douglas_peucker import douglas_peucker
from trajclean.modules.simplification.engine import Algorithm, Simplifier
from trajclean.modules.simplification.perpendicular import (
    adaptive_perpendicular_distance,
    perpendicular_distance_simplify,
    perpendicular_distance_windowed,
)
from trajclean.modules.simplification.reumann_witkam import reumann_witkam
from trajclean.modules.simplification.visvalingam import visvalingam_whyatt
from trajclean.modules.simplification.geometry import (
    local_curvature,
    perpendicular_distance,
    triangle_area,
)

ALGORITHMS = ["DOUGLAS_PEUCKER", "VISVALINGAM", "REUMANN_WITKAM", "PERPENDICULAR_DISTANCE"]


def create_point(i, lat, lng):
    return GeoPoint(lat=lat, lng=lng, timestamp=i * 1000)


def collinear(n=10):
    # due north, ~111 m apart
    return [create_point(i, i * 0.001, 0.0) for i in range(n)]


def zigzag(n=7):
    return [create_point(i, i * 0.001, 0.001 * (i % 2)) for i in range(n)]


def sinusoid(n=20):
    return [create_point(i, i * 0.001, math.sin(i * 0.1) * 0.001) for i in range(n)]


def is_ordered_subset(result, points):
    indices = [points.index(p) for p in result]
    return indices == sorted(indices) and len(set(indices)) == len(indices)


class TestSimplifier(unittest.TestCase):
    def setUp(self):
        self.simplifier = Simplifier()

    def test_empty_input(self):
        self.assertEqual(self.simplifier.simplify([], 5.0), [])
        self.assertEqual(self.simplifier.simplify(None, 5.0), [])

    def test_below_min_point_count_unchanged(self):
        points = zigzag(2)
        self.assertEqual(self.simplifier.simplify(points, 5.0), points)
        points = collinear(4)
        self.assertEqual(self.simplifier.simplify(points, 5.0, min_point_count=5), points)

    def test_collinear_perpendicular_distance(self):
        points = collinear(10)
        result = self.simplifier.simplify(points, 1.0, "PERPENDICULAR_DISTANCE")
        self.assertEqual(result, [points[0], points[-1]])

    def test_collinear_douglas_peucker(self):
        points = collinear(10)
        result = self.simplifier.simplify(points, 1.0, "DOUGLAS_PEUCKER")
        self.assertEqual(result, [points[0], points[-1]])

    def test_higher_tolerance_removes_more(self):
        points = sinusoid(20)
        fine = self.simplifier.simplify(points, 1.0, "DOUGLAS_PEUCKER")
        coarse = self.simplifier.simplify(points, 10.0, "DOUGLAS_PEUCKER")
        self.assertLess(len(coarse), len(fine))
        self.assertLess(len(fine), len(points))

    def test_perpendicular_distance_higher_tolerance_removes_more(self):
        points = sinusoid(20)
        fine = self.simplifier.simplify(points, 1.0, "PERPENDICULAR_DISTANCE")
        coarse = self.simplifier.simplify(points, 10.0, "PERPENDICULAR_DISTANCE")
        self.assertLess(len(coarse), len(fine))
        self.assertEqual(coarse[0], points[0])
        self.assertEqual(coarse[-1], points[-1])

    def test_visvalingam_huge_tolerance_keeps_endpoints(self):
        points = sinusoid(20)
        result = self.simplifier.simplify(points, 1e12, "VISVALINGAM")
        self.assertGreaterEqual(len(result), 2)
        self.assertEqual(result, [points[0], points[-1]])

    def test_unknown_algorithm_falls_back_to_douglas_peucker(self):
        points = sinusoid(20)
        with self.assertLogs("trajclean.modules.simplification.engine", level=logging.WARNING):
            fallback = self.simplifier.simplify(points, 5.0, "INVALID")
        self.assertEqual(fallback, self.simplifier.simplify(points, 5.0, "DOUGLAS_PEUCKER"))

    def test_algorithm_name_case_insensitive(self):
        points = sinusoid(20)
        self.assertEqual(
            self.simplifier.simplify(points, 5.0, "visvalingam"),
            self.simplifier.simplify(points, 5.0, Algorithm.VISVALINGAM),
        )

    def test_endpoints_and_order_preserved(self):
        points = sinusoid(20)
        for algorithm in ALGORITHMS:
            result = self.simplifier.simplify(points, 5.0, algorithm)
            self.assertGreaterEqual(len(result), 2, algorithm)
            self.assertEqual(result[0], points[0], algorithm)
            self.assertEqual(result[-1], points[-1], algorithm)
            self.assertTrue(is_ordered_subset(result, points), algorithm)

    def test_input_not_mutated(self):
        points = sinusoid(20)
        snapshot = list(points)
        for algorithm in ALGORITHMS:
            self.simplifier.simplify(points, 10.0, algorithm)
        self.assertEqual(points, snapshot)

    def test_stats(self):
        points = collinear(10)
        result = self.simplifier.simplify(points, 1.0)
        stats = self.simplifier.stats(points, result)
        self.assertEqual(stats.original_count, 10)
        self.assertEqual(stats.compressed_count, 2)
        self.assertEqual(stats.removed_count, 8)
        self.assertAlmostEqual(stats.compression_rate, 80.0)
        self.assertAlmostEqual(stats.distance_preservation_rate, 100.0, places=3)

    def test_catalogue(self):
        self.assertEqual(Simplifier.supported_algorithms(), ALGORITHMS)
        self.assertIn("Visvalingam", Simplifier.algorithm_description("visvalingam"))
        self.assertEqual(Simplifier.algorithm_description("FOO"), "Unknown algorithm")
        self.assertIn("O(n)", Simplifier.algorithm_complexity("REUMANN_WITKAM"))
        self.assertEqual(Simplifier.algorithm_complexity("FOO"), "Unknown")

    def test_variants_handle_none(self):
        self.assertEqual(self.simplifier.perpendicular_distance_windowed(None, 1.0), [])
        self.assertEqual(self.simplifier.adaptive_perpendicular_distance(None, 1.0), [])


class TestDouglasPeucker(unittest.TestCase):
    def test_zero_tolerance_keeps_every_vertex(self):
        points = zigzag(7)
        self.assertEqual(douglas_peucker(points, 0.0), points)

    def test_keeps_the_peak(self):
        points = [
            create_point(0, 0.0, 0.0),
            create_point(1, 0.001, 0.0005),
            create_point(2, 0.002, 0.001),
            create_point(3, 0.003, 0.0005),
            create_point(4, 0.004, 0.0),
        ]
        self.assertEqual(douglas_peucker(points, 5.0), [points[0], points[2], points[4]])

    def test_long_straight_track(self):
        points = collinear(5000)
        self.assertEqual(douglas_peucker(points, 1.0), [points[0], points[-1]])


class TestOtherAlgorithms(unittest.TestCase):
    def test_visvalingam_collinear(self):
        points = collinear(10)
        self.assertEqual(visvalingam_whyatt(points, 1.0), [points[0], points[-1]])

    def test_visvalingam_keeps_large_triangles(self):
        points = zigzag(7)
        self.assertEqual(visvalingam_whyatt(points, 1.0), points)

    def test_reumann_witkam_anchors(self):
        points = collinear(10)
        # points within 500 m of the anchor are skipped
        self.assertEqual(reumann_witkam(points, 500.0), [points[0], points[5], points[9]])
        self.assertEqual(reumann_witkam(points, 1.0), points)

    def test_perpendicular_without_endpoints(self):
        points = collinear(10)
        self.assertEqual(perpendicular_distance_simplify(points, 1.0, keep_endpoints=False), [points[0]])

    def test_windowed(self):
        self.assertEqual(len(perpendicular_distance_windowed(zigzag(7), 1.0)), 7)
        points = collinear(10)
        result = perpendicular_distance_windowed(points, 1.0, window_size=0)
        self.assertEqual(result, [points[0], points[-1]])

    def test_adaptive_tightens_in_bends(self):
        # right angle at the middle point, ~3.9 m off the chord
        d = 0.00005
        points = [create_point(0, 0.0, 0.0), create_point(1, 0.0, d), create_point(2, d, d)]
        self.assertEqual(perpendicular_distance_simplify(points, 6.0), [points[0], points[2]])
        self.assertEqual(adaptive_perpendicular_distance(points, 6.0), points)

    def test_adaptive_straight_line(self):
        points = collinear(10)
        self.assertEqual(adaptive_perpendicular_distance(points, 1.0), [points[0], points[-1]])

    def test_short_inputs_returned_as_is(self):
        points = zigzag(2)
        for fn in (douglas_peucker, visvalingam_whyatt, reumann_witkam, perpendicular_distance_simplify,
                   perpendicular_distance_windowed, adaptive_perpendicular_distance):
            self.assertEqual(fn(points, 1.0), points)


def test_degenerate_chord_uses_nearest_endpoint():
    a = create_point(0, 0.0, 0.0)
    p = create_point(1, 0.001, 0.0)
    assert perpendicular_distance(p, a, a) == pytest.approx(a.distance_to(p))


def test_collinear_triangle_area_is_negligible():
    a, b, c = collinear(3)
    assert triangle_area(a, b, c) < 1.0


def test_local_curvature():
    points = [create_point(0, 0.0, 0.0), create_point(1, 0.0, 0.001), create_point(2, 0.001, 0.001),
              create_point(3, 0.001, 0.001), create_point(4, 0.002, 0.001)]
    curvatures = local_curvature(points)
    assert len(curvatures) == len(points)
    assert curvatures[0] == 0.0 and curvatures[-1] == 0.0
    assert curvatures[1] == pytest.approx(1.0)
    # points 2 and 3 coincide
    assert curvatures[2] == 0.0
    assert curvatures[3] == 0.0
