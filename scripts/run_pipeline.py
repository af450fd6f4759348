import argparse
import logging
import os
import sys

# Add src to sys.path so the script runs from a plain checkout
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.join(current_dir, "..")
sys.path.append(os.path.join(project_root, "src"))

from trajclean.config import TrajectoryConfig
from trajclean.core.stream import TrajectoryReader, points_to_frame
from trajclean.errors import ConfigurationError, TrajectoryFormatError
from trajclean.pipeline import TrajectoryPipeline


def build_config(args: argparse.Namespace) -> TrajectoryConfig:
    """Environment settings first, then whatever was given on the command line."""
    config = TrajectoryConfig.from_env()
    if args.algorithm:
        config.simplify.algorithm = args.algorithm
    if args.tolerance is not None:
        config.simplify.tolerance = args.tolerance
    if args.min_points is not None:
        config.simplify.min_point_count = args.min_points
    if args.no_keep_endpoints:
        config.simplify.keep_endpoints = False
    if args.filter:
        config.filter.enabled = True
    if args.transform:
        config.datum.enabled = True
        config.datum.source, config.datum.target = args.transform
    return config


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Clean and simplify a GPS trajectory CSV.")
    parser.add_argument("input", help="CSV with lat, lng, timestamp and optional altitude/speed/bearing/accuracy columns")
    parser.add_argument("-o", "--output", help="Write the processed points to this CSV")
    parser.add_argument("--algorithm", help="DOUGLAS_PEUCKER, VISVALINGAM, REUMANN_WITKAM or PERPENDICULAR_DISTANCE")
    parser.add_argument("--tolerance", type=float, help="Simplification tolerance in meters")
    parser.add_argument("--min-points", type=int, help="Skip simplification below this many points")
    parser.add_argument("--no-keep-endpoints", action="store_true", help="Do not force the first/last points")
    parser.add_argument("--filter", action="store_true", help="Enable the noise filter")
    parser.add_argument("--transform", nargs=2, metavar=("SOURCE", "TARGET"), help="Datum conversion, e.g. WGS84 GCJ02")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        pipeline = TrajectoryPipeline(build_config(args))
    except ConfigurationError:
        return 2

    try:
        points = TrajectoryReader(args.input).read()
    except (FileNotFoundError, TrajectoryFormatError) as exc:
        logging.error("Cannot load %s: %s", args.input, exc)
        return 1

    result = pipeline.process_with_result(points)
    print(result.format())

    if args.output:
        points_to_frame(result.points).to_csv(args.output, index=False)
        print(f"Saved {len(result.points)} points to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
