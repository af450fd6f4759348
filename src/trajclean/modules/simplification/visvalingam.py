from typing import List, Sequence

from trajclean.core.point import GeoPoint
from .geometry import triangle_area


def visvalingam_whyatt(points: Sequence[GeoPoint], tolerance: float) -> List[GeoPoint]:
    """
    Visvalingam-Whyatt effective-area elimination.

    Each round removes the interior point whose triangle with its current
    neighbours has the smallest area, until that smallest area exceeds the
    tolerance (square meters) or only the two endpoints remain. Ties go to the
    lowest index.

    Areas are recomputed from scratch every round, which is O(n^2) overall. Fine for
    offline batches; a heap with lazy invalidation would be the way to
    scale it.
    """
    result = list(points)
    if len(result) < 3:
        return result

    while len(result) > 2:
        min_area = float('inf')
        min_index = -1

        for i in range(1, len(result) - 1):
            area = triangle_area(result[i - 1], result[i], result[i + 1])
            if area < min_area:
                min_area = area
                min_index = i

        if min_area > tolerance:
            break
        del result[min_index]

    return result
