import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from trajclean.core.point import GeoPoint
from trajclean.metrics.compression import CompressionStats, compression_stats
from .douglas_peucker import douglas_peucker
from .perpendicular import (
    adaptive_perpendicular_distance,
    perpendicular_distance_simplify,
    perpendicular_distance_windowed,
)
from .reumann_witkam import reumann_witkam
from .visvalingam import visvalingam_whyatt

LOGGER = logging.getLogger(__name__)


class Algorithm(str, Enum):
    DOUGLAS_PEUCKER = "DOUGLAS_PEUCKER"
    VISVALINGAM = "VISVALINGAM"
    REUMANN_WITKAM = "REUMANN_WITKAM"
    PERPENDICULAR_DISTANCE = "PERPENDICULAR_DISTANCE"

    @classmethod
    def parse(cls, name) -> Optional["Algorithm"]:
        """Case-insensitive lookup; None for unknown names."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None


_DESCRIPTIONS: Dict[Algorithm, str] = {
    Algorithm.DOUGLAS_PEUCKER: "Douglas-Peucker: recursive splitting at the farthest point, keeps shape features; suits winding tracks",
    Algorithm.VISVALINGAM: "Visvalingam-Whyatt: removes the point with the smallest effective triangle area first",
    Algorithm.REUMANN_WITKAM: "Reumann-Witkam: single forward pass against a moving anchor; simple and fast",
    Algorithm.PERPENDICULAR_DISTANCE: "Perpendicular distance: distance to the line through the neighbouring points; suits smooth tracks",
}

_COMPLEXITY: Dict[Algorithm, str] = {
    Algorithm.DOUGLAS_PEUCKER: "time O(n log n) average, O(n^2) worst; space O(n)",
    Algorithm.VISVALINGAM: "time O(n^2); space O(n)",
    Algorithm.REUMANN_WITKAM: "time O(n); space O(1)",
    Algorithm.PERPENDICULAR_DISTANCE: "time O(n); space O(1)",
}


class Simplifier:
    """
    Dispatches polyline simplification to one of four interchangeable algorithms.
    Unknown algorithm names fall back to Douglas-Peucker rather than failing.
    """

    def simplify(
        self,
        points: Optional[Sequence[GeoPoint]],
        tolerance: float,
        algorithm: str = "DOUGLAS_PEUCKER",
        keep_endpoints: bool = True,
        min_point_count: int = 3,
    ) -> List[GeoPoint]:
        """
        Simplifies a trajectory.

        Args:
            points: Trajectory in path order. None is treated as empty.
            tolerance: Distance tolerance in meters (square meters for Visvalingam).
            algorithm: Algorithm name, case-insensitive.
            keep_endpoints: Keep the true first and last points.
            min_point_count: Inputs shorter than this are returned unchanged.

        Returns:
            The retained points in input order.
        """
        if not points:
            return []
        if len(points) < min_point_count:
            LOGGER.debug("Only %d points (< %d), skipping simplification", len(points), min_point_count)
            return list(points)

        selected = Algorithm.parse(algorithm)
        if selected is None:
            LOGGER.warning("Unsupported simplification algorithm %r, using DOUGLAS_PEUCKER", algorithm)
            selected = Algorithm.DOUGLAS_PEUCKER

        LOGGER.debug("Simplifying %d points: tolerance=%sm, algorithm=%s, keep_endpoints=%s",
                     len(points), tolerance, selected.value, keep_endpoints)

        if selected is Algorithm.VISVALINGAM:
            result = visvalingam_whyatt(points, tolerance)
        elif selected is Algorithm.REUMANN_WITKAM:
            result = reumann_witkam(points, tolerance)
        elif selected is Algorithm.PERPENDICULAR_DISTANCE:
            result = perpendicular_distance_simplify(points, tolerance, keep_endpoints)
        else:
            result = douglas_peucker(points, tolerance, keep_endpoints)

        removed = len(points) - len(result)
        LOGGER.debug("Simplification done: %d -> %d points (%.2f%% removed)",
                     len(points), len(result), 100.0 * removed / len(points))
        return result

    def perpendicular_distance_windowed(
        self,
        points: Optional[Sequence[GeoPoint]],
        tolerance: float,
        keep_endpoints: bool = True,
        window_size: int = 3,
    ) -> List[GeoPoint]:
        return perpendicular_distance_windowed(points or [], tolerance, keep_endpoints, window_size)

    def adaptive_perpendicular_distance(
        self,
        points: Optional[Sequence[GeoPoint]],
        base_tolerance: float,
        keep_endpoints: bool = True,
    ) -> List[GeoPoint]:
        return adaptive_perpendicular_distance(points or [], base_tolerance, keep_endpoints)

    def stats(self, original: Sequence[GeoPoint], compressed: Sequence[GeoPoint]) -> CompressionStats:
        return compression_stats(original, compressed)

    @staticmethod
    def supported_algorithms() -> List[str]:
        return [a.value for a in Algorithm]

    @staticmethod
    def algorithm_description(name: str) -> str:
        selected = Algorithm.parse(name)
        return _DESCRIPTIONS[selected] if selected else "Unknown algorithm"

    @staticmethod
    def algorithm_complexity(name: str) -> str:
        selected = Algorithm.parse(name)
        return _COMPLEXITY[selected] if selected else "Unknown"
