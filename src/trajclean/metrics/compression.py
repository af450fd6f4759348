from dataclasses import dataclass
from typing import List

from trajclean.core.point import GeoPoint, path_length


def calculate_compression_rate(original_count: int, processed_count: int) -> float:
    """
    Calculates the compression rate.
    Rate = percentage of original points removed.

    Args:
        original_count: Number of points before processing.
        processed_count: Number of points after processing.

    Returns:
        Rate in percent (e.g. 80.0 when 10 points become 2). Returns 0.0 if original is empty.
    """
    if original_count <= 0:
        return 0.0
    return 100.0 * (original_count - processed_count) / original_count


@dataclass(frozen=True)
class CompressionStats:
    original_count: int
    compressed_count: int
    removed_count: int
    compression_rate: float
    distance_preservation_rate: float

    def __str__(self) -> str:
        return (
            f"Compression stats: original={self.original_count}, compressed={self.compressed_count}, "
            f"removed={self.removed_count}, rate={self.compression_rate:.2f}%, "
            f"distance preserved={self.distance_preservation_rate:.2f}%"
        )


def compression_stats(original: List[GeoPoint], compressed: List[GeoPoint]) -> CompressionStats:
    """
    Point-count and path-length comparison between a trajectory and its simplification.
    Distance preservation is 100% when the original path has zero length.
    """
    original_length = path_length(original)
    compressed_length = path_length(compressed)
    preservation = 100.0 * compressed_length / original_length if original_length > 0 else 100.0

    return CompressionStats(
        original_count=len(original),
        compressed_count=len(compressed),
        removed_count=len(original) - len(compressed),
        compression_rate=calculate_compression_rate(len(original), len(compressed)),
        distance_preservation_rate=preservation,
    )
