import dataclasses
import math
from dataclasses import dataclass
from typing import Optional, Sequence

EARTH_RADIUS_M = 6371000.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance in meters between two lat/lng pairs (degrees).
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


@dataclass(frozen=True)
class GeoPoint:
    """
    Represents a single GPS fix.
    frozen=True makes the class immutable: stages that move a point build a new one.

    Attributes:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        timestamp: Milliseconds since the epoch.
        altitude: Meters, optional.
        speed: km/h as reported by the device, optional.
        bearing: Degrees 0-360, optional.
        accuracy: Horizontal accuracy in meters, optional.
    """
    lat: float
    lng: float
    timestamp: int
    altitude: Optional[float] = None
    speed: Optional[float] = None
    bearing: Optional[float] = None
    accuracy: Optional[float] = None

    def distance_to(self, other: "GeoPoint") -> float:
        """Haversine distance in meters."""
        return haversine_distance(self.lat, self.lng, other.lat, other.lng)

    def time_diff_to(self, other: "GeoPoint") -> int:
        """Absolute time difference in milliseconds."""
        return abs(other.timestamp - self.timestamp)

    def average_speed_to(self, other: "GeoPoint") -> float:
        """
        Average speed in km/h between the two fixes.
        Returns 0.0 when both share a timestamp; callers must read that as undefined.
        """
        time_diff = self.time_diff_to(other)
        if time_diff == 0:
            return 0.0
        return self.distance_to(other) / (time_diff / 1000.0) * 3.6

    def with_coordinates(self, lat: float, lng: float) -> "GeoPoint":
        return dataclasses.replace(self, lat=lat, lng=lng)


def path_length(points: Sequence[GeoPoint]) -> float:
    """Sum of consecutive distances over a sequence, in meters."""
    if not points or len(points) < 2:
        return 0.0
    return sum(points[i].distance_to(points[i + 1]) for i in range(len(points) - 1))
