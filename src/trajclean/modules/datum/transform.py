"""
Datum conversion between WGS84 (GPS native), GCJ02 and BD09.

Direct formulas exist for WGS84 <-> GCJ02 and GCJ02 <-> BD09. The two remaining
pairs, WGS84 <-> BD09, are composed through GCJ02, so their rounding is that of
two consecutive conversions.
"""
import logging
import math
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from trajclean.core.point import GeoPoint

LOGGER = logging.getLogger(__name__)

# Krasovsky 1940 ellipsoid used by the GCJ02 offset.
_KRASOVSKY_A = 6378245.0
_KRASOVSKY_EE = 0.00669342162296594323

Coordinate = Tuple[float, float]


class Datum(str, Enum):
    WGS84 = "WGS84"
    GCJ02 = "GCJ02"
    BD09 = "BD09"

    @classmethod
    def parse(cls, name) -> Optional["Datum"]:
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None


def _offset_lat(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320 * math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _offset_lng(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret


def wgs84_to_gcj02(lat: float, lng: float) -> Coordinate:
    d_lat = _offset_lat(lng - 105.0, lat - 35.0)
    d_lng = _offset_lng(lng - 105.0, lat - 35.0)
    rad_lat = lat / 180.0 * math.pi
    magic = math.sin(rad_lat)
    magic = 1 - _KRASOVSKY_EE * magic * magic
    sqrt_magic = math.sqrt(magic)
    d_lat = (d_lat * 180.0) / ((_KRASOVSKY_A * (1 - _KRASOVSKY_EE)) / (magic * sqrt_magic) * math.pi)
    d_lng = (d_lng * 180.0) / (_KRASOVSKY_A / sqrt_magic * math.cos(rad_lat) * math.pi)
    return lat + d_lat, lng + d_lng


def gcj02_to_wgs84(lat: float, lng: float) -> Coordinate:
    # Single-step inverse: the forward offset at the GCJ02 point is subtracted.
    shifted_lat, shifted_lng = wgs84_to_gcj02(lat, lng)
    return lat - (shifted_lat - lat), lng - (shifted_lng - lng)


def gcj02_to_bd09(lat: float, lng: float) -> Coordinate:
    x, y = lng, lat
    z = math.sqrt(x * x + y * y) + 0.00002 * math.sin(y * math.pi)
    theta = math.atan2(y, x) + 0.000003 * math.cos(x * math.pi)
    return z * math.sin(theta) + 0.006, z * math.cos(theta) + 0.0065


def bd09_to_gcj02(lat: float, lng: float) -> Coordinate:
    x = lng - 0.0065
    y = lat - 0.006
    z = math.sqrt(x * x + y * y) - 0.00002 * math.sin(y * math.pi)
    theta = math.atan2(y, x) - 0.000003 * math.cos(x * math.pi)
    return z * math.sin(theta), z * math.cos(theta)


def _wgs84_to_bd09(lat: float, lng: float) -> Coordinate:
    return gcj02_to_bd09(*wgs84_to_gcj02(lat, lng))


def _bd09_to_wgs84(lat: float, lng: float) -> Coordinate:
    return gcj02_to_wgs84(*bd09_to_gcj02(lat, lng))


_CONVERSIONS: Dict[Tuple[Datum, Datum], Callable[[float, float], Coordinate]] = {
    (Datum.WGS84, Datum.GCJ02): wgs84_to_gcj02,
    (Datum.GCJ02, Datum.WGS84): gcj02_to_wgs84,
    (Datum.GCJ02, Datum.BD09): gcj02_to_bd09,
    (Datum.BD09, Datum.GCJ02): bd09_to_gcj02,
    (Datum.WGS84, Datum.BD09): _wgs84_to_bd09,
    (Datum.BD09, Datum.WGS84): _bd09_to_wgs84,
}


def transform_coordinate(lat: float, lng: float, source, target) -> Coordinate:
    """
    Converts one coordinate pair between datums.

    Args:
        lat: Latitude in the source datum.
        lng: Longitude in the source datum.
        source: Source datum name or Datum.
        target: Target datum name or Datum.

    Returns:
        (lat, lng) in the target datum. Unsupported pairs are logged and the
        input coordinates are returned unchanged.
    """
    src = Datum.parse(source)
    dst = Datum.parse(target)
    if src is not None and src == dst:
        return lat, lng

    conversion = _CONVERSIONS.get((src, dst))
    if conversion is None:
        LOGGER.warning("Unsupported datum conversion %s -> %s, coordinates left unchanged", source, target)
        return lat, lng
    return conversion(lat, lng)


class DatumTransformer:
    """
    Stateless per-point datum conversion stage.
    Every output point is a new GeoPoint; only lat/lng change.
    """

    def __init__(self, source: str = "WGS84", target: str = "GCJ02"):
        self.source = source
        self.target = target

    def transform_point(self, point: GeoPoint, source: Optional[str] = None, target: Optional[str] = None) -> GeoPoint:
        source = source if source is not None else self.source
        target = target if target is not None else self.target
        lat, lng = transform_coordinate(point.lat, point.lng, source, target)
        return point.with_coordinates(lat, lng)

    def transform(
        self,
        points: Optional[Sequence[GeoPoint]],
        source: Optional[str] = None,
        target: Optional[str] = None,
    ) -> List[GeoPoint]:
        """
        Converts a whole sequence.

        Args:
            points: Input trajectory. None is treated as empty.
            source: Override for the instance source datum.
            target: Override for the instance target datum.
        """
        if not points:
            return []

        source = source if source is not None else self.source
        target = target if target is not None else self.target
        LOGGER.debug("Datum transform %s -> %s on %d points", source, target, len(points))
        return [self.transform_point(p, source, target) for p in points]

    @staticmethod
    def is_supported(name) -> bool:
        return Datum.parse(name) is not None

    @staticmethod
    def supported_datums() -> List[str]:
        return [d.value for d in Datum]
