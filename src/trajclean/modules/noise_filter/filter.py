import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from trajclean.core.point import GeoPoint

LOGGER = logging.getLogger(__name__)

# Below minSpeed a hop shorter than this is treated as stationary drift.
STATIONARY_DISTANCE_M = 10.0
# Altitude jumps larger than ALTITUDE_JUMP_M over less than
# ALTITUDE_JUMP_MAX_DISTANCE_M of horizontal movement are rejected.
ALTITUDE_JUMP_M = 1000.0
ALTITUDE_JUMP_MAX_DISTANCE_M = 100.0


@dataclass(frozen=True)
class FilterStats:
    original_count: int
    filtered_count: int
    removed_count: int
    removal_rate: float

    def __str__(self) -> str:
        return (
            f"Filter stats: original={self.original_count}, kept={self.filtered_count}, "
            f"removed={self.removed_count}, removal rate={self.removal_rate:.2f}%"
        )


def _fold(points: Sequence[GeoPoint], accept: Callable[[GeoPoint, GeoPoint], Optional[str]]) -> List[GeoPoint]:
    """
    Runs a single pass keeping the first point unconditionally and comparing every
    later point with the last accepted one. `accept` returns None to keep the
    candidate or a short rejection reason.
    """
    accepted = [points[0]]
    for i in range(1, len(points)):
        current = points[i]
        reason = accept(current, accepted[-1])
        if reason is None:
            accepted.append(current)
        else:
            LOGGER.debug("Rejected point %d (lat=%s, lng=%s, t=%s): %s",
                         i, current.lat, current.lng, current.timestamp, reason)
    return accepted


class NoiseFilter:
    """
    Drops implausible GPS fixes (drift, jumps, stale or inaccurate readings).

    Each point is checked against the last *accepted* point, in order:
    accuracy, time gap, distance jump, speed bounds and altitude jump. The first
    failing check rejects the point, and rejected points never become the reference.
    """

    def __init__(
        self,
        max_speed: float = 180.0,
        min_speed: float = 0.5,
        max_accuracy: float = 100.0,
        max_time_interval: int = 300000,
        max_distance: float = 10000.0,
    ):
        """
        Args:
            max_speed: Upper speed bound in km/h.
            min_speed: Lower speed bound in km/h for stationary-drift suppression.
            max_accuracy: Largest accepted horizontal accuracy in meters.
            max_time_interval: Largest accepted gap to the reference, in milliseconds.
            max_distance: Largest accepted jump from the reference, in meters.
        """
        self.max_speed = max_speed
        self.min_speed = min_speed
        self.max_accuracy = max_accuracy
        self.max_time_interval = max_time_interval
        self.max_distance = max_distance

    def rejection_reason(self, current: GeoPoint, previous: GeoPoint) -> Optional[str]:
        if current.accuracy is not None and current.accuracy > self.max_accuracy:
            return f"accuracy {current.accuracy}m > {self.max_accuracy}m"

        time_diff = current.time_diff_to(previous)
        if time_diff > self.max_time_interval:
            return f"time gap {time_diff}ms > {self.max_time_interval}ms"

        distance = current.distance_to(previous)
        if distance > self.max_distance:
            return f"jump {distance:.1f}m > {self.max_distance}m"

        if time_diff > 0:
            speed = current.average_speed_to(previous)
            if speed > self.max_speed:
                return f"speed {speed:.1f}km/h > {self.max_speed}km/h"
            if speed < self.min_speed and distance < STATIONARY_DISTANCE_M:
                return f"stationary drift {speed:.2f}km/h over {distance:.1f}m"

        if current.altitude is not None and previous.altitude is not None:
            altitude_diff = abs(current.altitude - previous.altitude)
            if altitude_diff > ALTITUDE_JUMP_M and distance < ALTITUDE_JUMP_MAX_DISTANCE_M:
                return f"altitude jump {altitude_diff:.0f}m over {distance:.1f}m"

        return None

    def is_valid(self, current: GeoPoint, previous: GeoPoint) -> bool:
        return self.rejection_reason(current, previous) is None

    def filter(self, points: Optional[Sequence[GeoPoint]]) -> List[GeoPoint]:
        """
        Filters a trajectory. The first point is always kept; fewer than two points
        are returned unchanged.
        """
        if not points:
            return []
        if len(points) < 2:
            return list(points)

        result = _fold(points, self.rejection_reason)
        LOGGER.debug("Noise filter: %d -> %d points (%d removed)",
                     len(points), len(result), len(points) - len(result))
        return result

    def stats(self, original: Sequence[GeoPoint], filtered: Sequence[GeoPoint]) -> FilterStats:
        removed = len(original) - len(filtered)
        rate = 100.0 * removed / len(original) if original else 0.0
        return FilterStats(
            original_count=len(original),
            filtered_count=len(filtered),
            removed_count=removed,
            removal_rate=rate,
        )


def filter_by_speed(points: Optional[Sequence[GeoPoint]], max_speed: float) -> List[GeoPoint]:
    """Keeps points reachable from the last kept point at or below max_speed (km/h)."""
    if not points or len(points) < 2:
        return list(points or [])

    def accept(current: GeoPoint, previous: GeoPoint) -> Optional[str]:
        if current.time_diff_to(previous) == 0:
            return None
        speed = current.average_speed_to(previous)
        return None if speed <= max_speed else f"speed {speed:.1f}km/h > {max_speed}km/h"

    return _fold(points, accept)


def filter_by_accuracy(points: Optional[Sequence[GeoPoint]], max_accuracy: float) -> List[GeoPoint]:
    """Drops any point whose declared accuracy exceeds max_accuracy; the first point included."""
    if not points:
        return []
    return [p for p in points if p.accuracy is None or p.accuracy <= max_accuracy]


def filter_by_distance(points: Optional[Sequence[GeoPoint]], max_distance: float) -> List[GeoPoint]:
    if not points or len(points) < 2:
        return list(points or [])

    def accept(current: GeoPoint, previous: GeoPoint) -> Optional[str]:
        distance = current.distance_to(previous)
        return None if distance <= max_distance else f"jump {distance:.1f}m > {max_distance}m"

    return _fold(points, accept)


def filter_by_time_interval(points: Optional[Sequence[GeoPoint]], max_time_interval: int) -> List[GeoPoint]:
    if not points or len(points) < 2:
        return list(points or [])

    def accept(current: GeoPoint, previous: GeoPoint) -> Optional[str]:
        time_diff = current.time_diff_to(previous)
        return None if time_diff <= max_time_interval else f"time gap {time_diff}ms > {max_time_interval}ms"

    return _fold(points, accept)
