from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from trajclean.core.point import GeoPoint
from .compression import calculate_compression_rate

BoundingBox = Tuple[float, float, float, float]


def _bounding_box(points: Sequence[GeoPoint]) -> BoundingBox:
    lats = np.fromiter((p.lat for p in points), dtype=float, count=len(points))
    lngs = np.fromiter((p.lng for p in points), dtype=float, count=len(points))
    return float(lats.min()), float(lngs.min()), float(lats.max()), float(lngs.max())


def _kinematics(points: Sequence[GeoPoint]) -> Dict[str, float]:
    """
    Distance, time and speed aggregates over consecutive pairs.
    Pairs sharing a timestamp carry no speed and are left out of the speed figures.
    """
    distance = 0.0
    total_time = 0
    speeds: List[float] = []

    for current, nxt in zip(points, points[1:]):
        distance += current.distance_to(nxt)
        time_diff = current.time_diff_to(nxt)
        total_time += time_diff
        if time_diff > 0:
            speeds.append(current.average_speed_to(nxt))

    speed_arr = np.asarray(speeds, dtype=float)
    has_speed = speed_arr.size > 0
    return {
        'total_distance': distance,
        'total_time': total_time,
        'average_speed': float(speed_arr.mean()) if has_speed else 0.0,
        'max_speed': float(speed_arr.max()) if has_speed else 0.0,
        'min_speed': float(speed_arr.min()) if has_speed else 0.0,
    }


@dataclass(frozen=True)
class ProcessingSummary:
    """
    Read-only aggregate of one pipeline run.

    Distance, time and speed figures describe the processed sequence; start/end
    points and the bounding box ([min_lat, min_lng, max_lat, max_lng]) describe
    the original one. Times are in milliseconds, distances in meters, speeds in km/h.
    """
    original_point_count: int
    processed_point_count: int
    compression_rate: float
    filtered_point_count: int
    coordinate_transform_count: int
    total_distance: float
    total_time: int
    average_speed: float
    max_speed: float
    min_speed: float
    start_point: GeoPoint
    end_point: GeoPoint
    bounding_box: BoundingBox
    processing_time: float

    @classmethod
    def from_points(
        cls,
        original: Optional[Sequence[GeoPoint]],
        processed: Optional[Sequence[GeoPoint]],
        processing_time: float,
        filtered_point_count: Optional[int] = None,
        coordinate_transform_count: int = 0,
    ) -> Optional["ProcessingSummary"]:
        """
        Builds the summary for one run.

        Args:
            original: Sequence fed into the pipeline.
            processed: Sequence the pipeline returned.
            processing_time: Elapsed time in milliseconds.
            filtered_point_count: Points removed by the noise filter. Defaults to
                original minus processed count.
            coordinate_transform_count: Points passed through the datum stage.

        Returns:
            The summary, or None when the original sequence is empty.
        """
        if not original:
            return None
        processed = list(processed or [])

        if filtered_point_count is None:
            filtered_point_count = len(original) - len(processed)

        return cls(
            original_point_count=len(original),
            processed_point_count=len(processed),
            compression_rate=calculate_compression_rate(len(original), len(processed)),
            filtered_point_count=filtered_point_count,
            coordinate_transform_count=coordinate_transform_count,
            start_point=original[0],
            end_point=original[-1],
            bounding_box=_bounding_box(original),
            processing_time=processing_time,
            **_kinematics(processed),
        )

    def to_dict(self) -> Dict:
        return asdict(self)

    def format_report(self) -> str:
        min_lat, min_lng, max_lat, max_lng = self.bounding_box
        lines = [
            "Trajectory summary:",
            f"Original points: {self.original_point_count}",
            f"Processed points: {self.processed_point_count}",
            f"Compression rate: {self.compression_rate:.2f}%",
            f"Filtered points: {self.filtered_point_count}",
            f"Coordinate transforms: {self.coordinate_transform_count}",
            f"Total distance: {self.total_distance:.2f} m",
            f"Total time: {self.total_time / 60000.0:.1f} min",
            f"Average speed: {self.average_speed:.2f} km/h",
            f"Max speed: {self.max_speed:.2f} km/h",
            f"Min speed: {self.min_speed:.2f} km/h",
            f"Start: ({self.start_point.lat:.6f}, {self.start_point.lng:.6f})",
            f"End: ({self.end_point.lat:.6f}, {self.end_point.lng:.6f})",
            f"Bounding box: [{min_lat:.6f}, {min_lng:.6f}, {max_lat:.6f}, {max_lng:.6f}]",
            f"Processing time: {self.processing_time:.1f} ms",
        ]
        return "\n".join(lines)
