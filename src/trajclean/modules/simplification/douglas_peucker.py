from typing import List, Sequence

from trajclean.core.point import GeoPoint
from .geometry import perpendicular_distance


def douglas_peucker(points: Sequence[GeoPoint], tolerance: float, keep_endpoints: bool = True) -> List[GeoPoint]:
    """
    Douglas-Peucker simplification.

    Splits [first, last] at the point farthest from the chord while that distance
    exceeds the tolerance. Ranges are processed from an explicit stack instead of
    recursion, so long near-straight inputs cannot exhaust the interpreter stack.

    Args:
        points: Trajectory to simplify.
        tolerance: Maximum perpendicular deviation in meters.
        keep_endpoints: Force the true first/last input points into the result.

    Returns:
        The retained points in input order.
    """
    if len(points) < 3:
        return list(points)

    keep = [False] * len(points)
    keep[0] = keep[-1] = True
    stack = [(0, len(points) - 1)]

    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_dist = 0.0
        index = first
        for i in range(first + 1, last):
            dist = perpendicular_distance(points[i], points[first], points[last])
            # Strict comparison: the earliest of equally distant points wins.
            if dist > max_dist:
                max_dist = dist
                index = i

        if max_dist > tolerance:
            keep[index] = True
            stack.append((index, last))
            stack.append((first, index))

    result = [p for p, kept in zip(points, keep) if kept]

    if keep_endpoints:
        if result[0] != points[0]:
            result.insert(0, points[0])
        if result[-1] != points[-1]:
            result.append(points[-1])

    return result
