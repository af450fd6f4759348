from typing import List, Sequence

from trajclean.core.point import GeoPoint


def reumann_witkam(points: Sequence[GeoPoint], tolerance: float) -> List[GeoPoint]:
    """
    Single forward pass: from the current anchor, skip every point within
    `tolerance` meters of it; the first point beyond becomes the next anchor.
    The true last point is always appended.
    """
    if len(points) < 3:
        return list(points)

    result = [points[0]]
    n = len(points)
    i = 0
    while i < n - 1:
        anchor = points[i]
        j = i + 1
        while j < n and anchor.distance_to(points[j]) <= tolerance:
            j += 1
        if j >= n:
            break
        result.append(points[j])
        i = j

    if result[-1] != points[-1]:
        result.append(points[-1])
    return result
