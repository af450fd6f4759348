"""Stage orchestration: datum transform -> noise filter -> simplification."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from trajclean.config import TrajectoryConfig
from trajclean.core.point import GeoPoint
from trajclean.errors import ConfigurationError
from trajclean.metrics.compression import calculate_compression_rate
from trajclean.metrics.summary import ProcessingSummary
from trajclean.modules.datum.transform import DatumTransformer
from trajclean.modules.noise_filter.filter import NoiseFilter
from trajclean.modules.simplification.engine import Simplifier

LOGGER = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


@dataclass(frozen=True)
class ProcessingResult:
    points: List[GeoPoint]
    summary: Optional[ProcessingSummary] = None

    @property
    def compression_rate(self) -> float:
        return self.summary.compression_rate if self.summary else 0.0

    @property
    def processing_time(self) -> float:
        return self.summary.processing_time if self.summary else 0.0

    def format(self) -> str:
        if self.summary is not None:
            return self.summary.format_report()
        return f"Processing complete: {len(self.points)} points"


class TrajectoryPipeline:
    """
    Runs the enabled stages in order over a complete trajectory. Each stage
    consumes the whole output of the previous one; a disabled stage passes the
    sequence through untouched. Inputs are never mutated.

    The configuration is validated on construction; an invalid one raises
    ConfigurationError before any point is processed.
    """

    def __init__(
        self,
        config: Optional[TrajectoryConfig] = None,
        transformer: Optional[DatumTransformer] = None,
        noise_filter: Optional[NoiseFilter] = None,
        simplifier: Optional[Simplifier] = None,
    ):
        self.config = config if config is not None else TrajectoryConfig()
        self.transformer = transformer or DatumTransformer(self.config.datum.source, self.config.datum.target)
        self.noise_filter = noise_filter or NoiseFilter(
            max_speed=self.config.filter.max_speed,
            min_speed=self.config.filter.min_speed,
            max_accuracy=self.config.filter.max_accuracy,
            max_time_interval=self.config.filter.max_time_interval,
            max_distance=self.config.filter.max_distance,
        )
        self.simplifier = simplifier or Simplifier()
        self.validate_config()

    def _run(self, points: Sequence[GeoPoint]) -> ProcessingResult:
        start = time.perf_counter()
        cfg = self.config

        result = list(points)
        transform_count = 0
        filtered_count = 0

        if cfg.datum.enabled:
            stage_start = time.perf_counter()
            result = self.transformer.transform(result, cfg.datum.source, cfg.datum.target)
            transform_count = len(result)
            LOGGER.debug("Datum transform finished in %.1f ms", _elapsed_ms(stage_start))

        if cfg.filter.enabled:
            stage_start = time.perf_counter()
            before = len(result)
            result = self.noise_filter.filter(result)
            filtered_count = before - len(result)
            LOGGER.debug("Noise filter removed %d points in %.1f ms", filtered_count, _elapsed_ms(stage_start))

        if cfg.simplify.enabled:
            stage_start = time.perf_counter()
            result = self.simplifier.simplify(
                result,
                cfg.simplify.tolerance,
                cfg.simplify.algorithm,
                cfg.simplify.keep_endpoints,
                cfg.simplify.min_point_count,
            )
            LOGGER.debug("Simplification finished in %.1f ms", _elapsed_ms(stage_start))

        total_ms = _elapsed_ms(start)

        summary = None
        if cfg.statistics.enabled:
            summary = ProcessingSummary.from_points(
                points,
                result,
                total_ms,
                filtered_point_count=filtered_count,
                coordinate_transform_count=transform_count,
            )

        if summary is not None and cfg.statistics.formatted_output:
            LOGGER.info("Trajectory processing complete:\n%s", summary.format_report())
        else:
            LOGGER.info(
                "Trajectory processing complete: original=%d, processed=%d, rate=%.2f%%, time=%.1fms",
                len(points), len(result), calculate_compression_rate(len(points), len(result)), total_ms,
            )

        return ProcessingResult(points=result, summary=summary)

    def process(self, points: Optional[Sequence[GeoPoint]]) -> List[GeoPoint]:
        """
        Runs the pipeline and returns the processed sequence.
        Empty or None input yields an empty list.
        """
        return self.process_with_result(points).points

    def process_with_result(self, points: Optional[Sequence[GeoPoint]]) -> ProcessingResult:
        """
        Runs the pipeline and returns the processed sequence with its summary
        (None when statistics are disabled).
        """
        if not self.config.enabled:
            LOGGER.info("Trajectory processing disabled, returning input unchanged")
            return ProcessingResult(points=list(points or []))
        if not points:
            LOGGER.warning("Empty trajectory, nothing to process")
            return ProcessingResult(points=[])

        LOGGER.info("Starting trajectory pipeline on %d points", len(points))
        LOGGER.debug("%s", self.config.describe())
        return self._run(points)

    def transform_only(self, points: Optional[Sequence[GeoPoint]]) -> List[GeoPoint]:
        if not self.config.datum.enabled:
            LOGGER.warning("Datum transform is disabled")
            return list(points or [])
        return self.transformer.transform(points, self.config.datum.source, self.config.datum.target)

    def filter_only(self, points: Optional[Sequence[GeoPoint]]) -> List[GeoPoint]:
        if not self.config.filter.enabled:
            LOGGER.warning("Noise filter is disabled")
            return list(points or [])
        return self.noise_filter.filter(points)

    def simplify_only(self, points: Optional[Sequence[GeoPoint]]) -> List[GeoPoint]:
        if not self.config.simplify.enabled:
            LOGGER.warning("Simplification is disabled")
            return list(points or [])
        cfg = self.config.simplify
        return self.simplifier.simplify(points, cfg.tolerance, cfg.algorithm, cfg.keep_endpoints, cfg.min_point_count)

    def pipeline_info(self) -> str:
        return "\n".join([
            "Trajectory pipeline",
            "====================",
            self.config.describe(),
            "Stages:",
            f"1. Datum transform: {', '.join(DatumTransformer.supported_datums())}",
            "2. Noise filter: accuracy / time gap / distance jump / speed / altitude",
            f"3. Simplification: {', '.join(Simplifier.supported_algorithms())}",
            "====================",
        ])

    def validate_config(self) -> None:
        try:
            self.config.validate()
        except ConfigurationError as exc:
            LOGGER.error("Invalid trajectory configuration: %s", exc)
            raise
        LOGGER.info("Trajectory configuration is valid")
