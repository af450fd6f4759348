"""
Triangle geometry over geodesic side lengths.

Side lengths are haversine distances, so perpendicular distances and areas are
in meters and square meters.
"""
import math
from typing import List, Sequence

from trajclean.core.point import GeoPoint

# Chords shorter than this (meters) are treated as a single point.
CHORD_EPSILON = 1e-10


def _heron(a: float, b: float, c: float) -> float:
    s = (a + b + c) / 2.0
    # Rounding can push the product slightly below zero for collinear points.
    product = s * (s - a) * (s - b) * (s - c)
    return math.sqrt(product) if product > 0.0 else 0.0


def triangle_area(a: GeoPoint, b: GeoPoint, c: GeoPoint) -> float:
    return _heron(a.distance_to(b), b.distance_to(c), c.distance_to(a))


def perpendicular_distance(p: GeoPoint, line_start: GeoPoint, line_end: GeoPoint) -> float:
    """
    Height of the triangle (line_start, line_end, p) over the chord, via Heron's formula.
    A degenerate chord falls back to the nearer of the two point-to-point distances.
    """
    a = p.distance_to(line_start)
    b = p.distance_to(line_end)
    c = line_start.distance_to(line_end)
    if c < CHORD_EPSILON:
        return min(a, b)
    return 2.0 * _heron(a, b, c) / c


def turn_angle(a: GeoPoint, b: GeoPoint, c: GeoPoint) -> float:
    """
    Angle ABC in degrees on planar lat/lng deltas (flat-earth approximation).
    Raises ZeroDivisionError when b coincides with a or c.
    """
    ba_x = a.lng - b.lng
    ba_y = a.lat - b.lat
    bc_x = c.lng - b.lng
    bc_y = c.lat - b.lat

    dot = ba_x * bc_x + ba_y * bc_y
    ba_len = math.sqrt(ba_x * ba_x + ba_y * ba_y)
    bc_len = math.sqrt(bc_x * bc_x + bc_y * bc_y)

    cos_angle = dot / (ba_len * bc_len)
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return math.degrees(math.acos(cos_angle))


def local_curvature(points: Sequence[GeoPoint]) -> List[float]:
    """
    Curvature in [0, 1] for every point of the sequence, from the turn angle as
    1 - |angle - 90| / 90. Endpoints, and interior points that share coordinates
    with a neighbour, get 0.
    """
    curvatures = [0.0] * len(points)
    for i in range(1, len(points) - 1):
        try:
            angle = turn_angle(points[i - 1], points[i], points[i + 1])
        except ZeroDivisionError:
            continue
        curvatures[i] = 1.0 - abs(angle - 90.0) / 90.0
    return curvatures
