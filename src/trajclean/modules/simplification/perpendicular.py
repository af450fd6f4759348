from typing import List, Sequence

from trajclean.core.point import GeoPoint
from .geometry import local_curvature, perpendicular_distance


def _append_last(result: List[GeoPoint], points: Sequence[GeoPoint]) -> None:
    if result[-1] != points[-1]:
        result.append(points[-1])


def perpendicular_distance_simplify(
    points: Sequence[GeoPoint],
    tolerance: float,
    keep_endpoints: bool = True,
) -> List[GeoPoint]:
    """
    Keeps an interior point when it lies farther than `tolerance` meters from the
    line joining the last retained point and its successor in the input.

    Args:
        points: Trajectory to simplify.
        tolerance: Perpendicular distance threshold in meters.
        keep_endpoints: Always keep the last point. Otherwise the last point is kept
            only if it deviates from the line through the last two retained points.
    """
    if len(points) < 3:
        return list(points)

    result = [points[0]]
    for i in range(1, len(points) - 1):
        distance = perpendicular_distance(points[i], result[-1], points[i + 1])
        if distance > tolerance:
            result.append(points[i])

    if keep_endpoints:
        _append_last(result, points)
    elif len(result) >= 2:
        if perpendicular_distance(points[-1], result[-2], result[-1]) > tolerance:
            result.append(points[-1])

    return result


def perpendicular_distance_windowed(
    points: Sequence[GeoPoint],
    tolerance: float,
    keep_endpoints: bool = True,
    window_size: int = 3,
) -> List[GeoPoint]:
    """
    Sliding-window variant: an interior point i is kept if any line through two
    other points within `window_size` indices of i puts it farther than `tolerance`.
    Costs O(n * window_size^2) distance evaluations.
    """
    if len(points) < 3:
        return list(points)

    window_size = max(window_size, 2)
    n = len(points)
    result = [points[0]]

    for i in range(1, n - 1):
        current = points[i]
        start = max(0, i - window_size)
        end = min(n - 1, i + window_size)

        keep = False
        for j in range(start, end - 1):
            if keep:
                break
            if j == i:
                continue
            for k in range(j + 1, end + 1):
                if k == i:
                    continue
                if perpendicular_distance(current, points[j], points[k]) > tolerance:
                    keep = True
                    break

        if keep:
            result.append(current)

    if keep_endpoints:
        _append_last(result, points)

    return result


def adaptive_perpendicular_distance(
    points: Sequence[GeoPoint],
    base_tolerance: float,
    keep_endpoints: bool = True,
) -> List[GeoPoint]:
    """
    Perpendicular-distance simplification with a per-point tolerance that
    tightens in bends: base * (1 - 0.5 * curvature), never below 10% of base.
    """
    if len(points) < 3:
        return list(points)

    curvatures = local_curvature(points)
    floor = base_tolerance * 0.1
    result = [points[0]]

    for i in range(1, len(points) - 1):
        tolerance = max(base_tolerance * (1.0 - curvatures[i] * 0.5), floor)
        distance = perpendicular_distance(points[i], result[-1], points[i + 1])
        if distance > tolerance:
            result.append(points[i])

    if keep_endpoints:
        _append_last(result, points)

    return result
