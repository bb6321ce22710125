#!/usr/bin/env python3
"""Run one water-balance query against a CSV dump of the measurement table."""

import argparse
from pathlib import Path
import sys

from waterbalance.analysis import (
    compare_with_previous,
    correlate_queries,
    filter_and_aggregate,
    kpi_request,
    statistics_request,
)
from waterbalance.config.settings import Settings
from waterbalance.readers.measurements import read_measurements_csv
from waterbalance.utils.logger import setup_logger


def parse_arguments() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Aggregate, describe and lag-correlate water balance measurements"
    )

    parser.add_argument(
        "--data",
        type=Path,
        required=True,
        help="CSV file with Date, Reservoir, Station, Measure, TimeOfDay, Value, Unit, Season",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/query.yaml"),
        help="Path to YAML settings file",
    )

    parser.add_argument(
        "--compare-previous",
        action="store_true",
        help="Also aggregate the previous water year and report differences",
    )

    parser.add_argument(
        "--lag-object",
        type=str,
        help="Second object for lag analysis against the configured one",
    )

    parser.add_argument(
        "--max-lag",
        type=int,
        help="Maximum lag in buckets (defaults to the configured value)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level",
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_arguments()
    logger = setup_logger("run_query", level=args.log_level)

    settings = Settings.from_yaml(args.config) if args.config.exists() else Settings()
    if not args.config.exists():
        logger.warning(f"Config {args.config} not found, using defaults")

    query = settings.query
    measurements = read_measurements_csv(args.data)

    points = filter_and_aggregate(measurements, query, settings.analytics)
    if not points:
        logger.warning("No data for the selected object, measure and period")
        return 1

    kpi = kpi_request(measurements, query, settings.analytics)
    logger.info(
        f"{query.object_name} {query.measure} {query.water_year}: "
        f"mean={kpi.mean:.3f} min={kpi.minimum:.3f} max={kpi.maximum:.3f} points={kpi.count}"
    )

    summary = statistics_request([p.value for p in points], settings.analytics)
    logger.info(f"Statistics: {summary.as_dict()}")

    if args.compare_previous:
        comparison = compare_with_previous(measurements, query, settings.analytics)
        logger.info(
            f"Previous year: {len(comparison.previous)} points, "
            f"{len(comparison.differences)} matched buckets"
        )
        for diff in comparison.differences:
            logger.info(
                f"{diff.date}: {diff.current:.3f} vs {diff.previous:.3f} ({diff.difference:+.3f})"
            )

    if args.lag_object:
        other = query.model_copy(update={"object_name": args.lag_object})
        lag = correlate_queries(
            measurements, query, other, max_lag=args.max_lag, settings=settings.analytics
        )
        if lag.is_empty:
            logger.warning("Not enough overlapping buckets for lag analysis")
        else:
            logger.info(
                f"Best lag {lag.best_lag} ({lag.direction}), r={lag.best_coefficient:.3f}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(main())
