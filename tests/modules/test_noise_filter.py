import logging
import unittest

from trajclean.core.point import GeoPoint
from trajclean.modules.noise_filter.filter import (
    NoiseFilter,
    filter_by_accuracy,
    filter_by_distance,
    filter_by_speed,
    filter_by_time_interval,
)

# 0.00045 deg of latitude is ~50 m, 0.009 deg is ~1 km.
STEP_50M = 0.00045
STEP_1KM = 0.009


class TestNoiseFilter(unittest.TestCase):
    def setUp(self):
        self.noise_filter = NoiseFilter()
        self.base_lat = 39.9
        self.base_lng = 116.4

    def create_point(self, seconds, lat_offset=0.0, **kwargs):
        return GeoPoint(
            lat=self.base_lat + lat_offset,
            lng=self.base_lng,
            timestamp=int(seconds * 1000),
            **kwargs
        )

    def walk(self, n):
        # 50 m every 10 s, 18 km/h
        return [self.create_point(10 * i, STEP_50M * i) for i in range(n)]

    def test_empty_and_single(self):
        self.assertEqual(self.noise_filter.filter([]), [])
        self.assertEqual(self.noise_filter.filter(None), [])
        single = [self.create_point(0)]
        self.assertEqual(self.noise_filter.filter(single), single)

    def test_clean_track_untouched(self):
        points = self.walk(10)
        self.assertEqual(self.noise_filter.filter(points), points)

    def test_distance_jump_removed(self):
        # ~400 km in one second
        points = [self.create_point(0), self.create_point(1, 3.6)]
        self.assertEqual(self.noise_filter.filter(points), [points[0]])

    def test_poor_accuracy_removed(self):
        points = self.walk(3)
        noisy = self.create_point(25, STEP_50M * 2.5, accuracy=150.0)
        track = points[:2] + [noisy] + points[2:]
        self.assertEqual(self.noise_filter.filter(track), points)

    def test_time_gap_removed(self):
        points = [self.create_point(0), self.create_point(400, STEP_50M)]
        self.assertEqual(self.noise_filter.filter(points), [points[0]])

    def test_overspeed_removed(self):
        # 1 km in 10 s is 360 km/h
        points = [self.create_point(0), self.create_point(10, STEP_1KM)]
        self.assertEqual(self.noise_filter.filter(points), [points[0]])

    def test_stationary_drift_removed(self):
        # ~1 m in 10 s
        points = [self.create_point(0), self.create_point(10, 0.00001)]
        self.assertEqual(self.noise_filter.filter(points), [points[0]])

    def test_same_timestamp_skips_speed_checks(self):
        points = [self.create_point(0), self.create_point(0, 0.00001)]
        self.assertEqual(self.noise_filter.filter(points), points)

    def test_altitude_jump_removed(self):
        points = [
            self.create_point(0, altitude=50.0),
            self.create_point(10, STEP_50M, altitude=2050.0),
        ]
        self.assertEqual(self.noise_filter.filter(points), [points[0]])

    def test_rejected_point_is_not_reference(self):
        points = self.walk(3)
        outlier = self.create_point(15, 3.6)
        track = [points[0], points[1], outlier, points[2]]
        self.assertEqual(self.noise_filter.filter(track), points)

    def test_idempotent(self):
        points = self.walk(6)
        track = points[:3] + [self.create_point(25, 1.0), self.create_point(27, 0.0, accuracy=500.0)] + points[3:]
        once = self.noise_filter.filter(track)
        self.assertEqual(self.noise_filter.filter(once), once)

    def test_rejections_logged_at_debug(self):
        points = [self.create_point(0), self.create_point(1, 3.6)]
        with self.assertLogs("trajclean.modules.noise_filter.filter", level=logging.DEBUG) as logs:
            self.noise_filter.filter(points)
        self.assertTrue(any("jump" in line for line in logs.output))

    def test_is_valid(self):
        a = self.create_point(0)
        self.assertTrue(self.noise_filter.is_valid(self.create_point(10, STEP_50M), a))
        self.assertFalse(self.noise_filter.is_valid(self.create_point(10, STEP_1KM), a))

    def test_stats(self):
        original = self.walk(4)
        stats = self.noise_filter.stats(original, original[:3])
        self.assertEqual(stats.original_count, 4)
        self.assertEqual(stats.filtered_count, 3)
        self.assertEqual(stats.removed_count, 1)
        self.assertAlmostEqual(stats.removal_rate, 25.0)
        self.assertIn("removed=1", str(stats))

        empty = self.noise_filter.stats([], [])
        self.assertEqual(empty.removal_rate, 0.0)


class TestSingleCriterionFilters(unittest.TestCase):
    def create_point(self, seconds, lat, accuracy=None):
        return GeoPoint(lat=lat, lng=0.0, timestamp=int(seconds * 1000), accuracy=accuracy)

    def test_filter_by_speed(self):
        # second hop is 360 km/h, the third is reached from the first at 36 km/h
        points = [self.create_point(0, 0.0), self.create_point(10, 0.009), self.create_point(100, 0.009)]
        self.assertEqual(filter_by_speed(points, 120.0), [points[0], points[2]])
        self.assertEqual(filter_by_speed(points, 400.0), points)

    def test_filter_by_accuracy_checks_first_point(self):
        points = [self.create_point(0, 0.0, 200.0), self.create_point(1, 0.0, 5.0), self.create_point(2, 0.0)]
        self.assertEqual(filter_by_accuracy(points, 50.0), points[1:])

    def test_filter_by_distance(self):
        points = [self.create_point(0, 0.0), self.create_point(1, 1.0), self.create_point(2, 0.0001)]
        self.assertEqual(filter_by_distance(points, 1000.0), [points[0], points[2]])

    def test_filter_by_time_interval(self):
        points = [self.create_point(0, 0.0), self.create_point(600, 0.0), self.create_point(60, 0.0)]
        self.assertEqual(filter_by_time_interval(points, 300000), [points[0], points[2]])

    def test_short_inputs(self):
        for fn, arg in ((filter_by_speed, 1.0), (filter_by_distance, 1.0), (filter_by_time_interval, 1)):
            self.assertEqual(fn([], arg), [])
            self.assertEqual(fn(None, arg), [])
            single = [self.create_point(0, 0.0)]
            self.assertEqual(fn(single, arg), single)
