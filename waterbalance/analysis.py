"""Analysis requests of the water-balance core.

These functions are the boundary consumed by charting and export
collaborators. Each takes the read-only measurement sequence and an immutable
:class:`QueryConfig`; all filtering, aggregation and unit semantics live here so
every view derives from the same numbers.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .config.settings import AnalyticsSettings, QueryConfig, default_settings
from .constants.periods import Granularity, UnitMode
from .hydro.aggregation import AggregatedPoint, aggregate
from .hydro.seasonality import (
    DifferencePoint,
    cumulative_series,
    difference_series,
    monthly_profile,
)
from .hydro.units import convert_points, should_convert
from .hydro.water_year import filter_measurements
from .readers.measurements import Measurement
from .timeseries_stats.cross_correlation import LagCorrelation, correlate_points
from .timeseries_stats.descriptive import DescriptiveStats, KpiSummary, describe, kpi_summary
from .utils.logger import setup_logger

logger = setup_logger("analysis")


@dataclass(frozen=True)
class ComparisonResult:
    """Current series, previous-year series and their bucket-wise difference."""

    current: list[AggregatedPoint]
    previous: list[AggregatedPoint]
    differences: list[DifferencePoint]


def _series(
    measurements: Iterable[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings,
    is_previous: bool,
) -> list[AggregatedPoint]:
    filtered = filter_measurements(measurements, config)
    points = aggregate(filtered, config.aggregation, is_previous=is_previous)
    if points and should_convert(config, settings.volume_keywords):
        points = convert_points(points, config.aggregation, settings.bucket_days)
    logger.debug(
        f"{config.object_name or '*'} / {config.measure or '*'}: "
        f"{len(filtered)} measurements -> {len(points)} {Granularity(config.aggregation).value} points"
    )
    return points


def filter_and_aggregate(
    measurements: Iterable[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None = None,
) -> list[AggregatedPoint]:
    """Filter, aggregate and (when required) convert to volume.

    Args:
        measurements: Full measurement sequence (not modified).
        config: Query configuration, including the year offset.
        settings: Analysis conventions; defaults to ``default_settings.analytics``.

    Returns:
        Aggregated points in ascending date order, flagged ``is_previous`` when
        the query looks at an earlier water year. Empty when nothing matches.
    """
    settings = settings or default_settings.analytics
    return _series(measurements, config, settings, is_previous=config.year_offset < 0)


def previous_year_series(
    measurements: Iterable[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None = None,
) -> list[AggregatedPoint]:
    """Same query one water year earlier, every point flagged ``is_previous``."""
    settings = settings or default_settings.analytics
    return _series(measurements, config.shifted(-1), settings, is_previous=True)


def compare_with_previous(
    measurements: Sequence[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None = None,
) -> ComparisonResult:
    """Current and previous water-year series with their differences."""
    current = filter_and_aggregate(measurements, config, settings)
    previous = previous_year_series(measurements, config, settings)
    return ComparisonResult(
        current=current,
        previous=previous,
        differences=difference_series(current, previous, config.aggregation),
    )


def seasonality_request(
    measurements: Iterable[Measurement], config: QueryConfig
) -> dict[int, float]:
    """Mean per calendar month over the filtered slice.

    Values are converted over a 30-day month only in explicit volume mode.
    """
    filtered = filter_measurements(measurements, config)
    return monthly_profile(filtered, convert=UnitMode(config.unit_mode) is UnitMode.VOLUME)


def cumulative_request(
    measurements: Iterable[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None = None,
) -> list[AggregatedPoint]:
    """Running total of the aggregated series."""
    return cumulative_series(filter_and_aggregate(measurements, config, settings))


def kpi_request(
    measurements: Iterable[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None = None,
) -> KpiSummary:
    """Mean / min / max / count of the current aggregated series."""
    return kpi_summary(filter_and_aggregate(measurements, config, settings))


def statistics_request(
    values: Iterable[float | None], settings: AnalyticsSettings | None = None
) -> DescriptiveStats:
    """Descriptive statistics with the configured percentile and ddof conventions."""
    settings = settings or default_settings.analytics
    return describe(values, percentiles=settings.percentiles, ddof=settings.std_ddof)


def correlation_request(
    points_a: Sequence[AggregatedPoint],
    points_b: Sequence[AggregatedPoint],
    max_lag: int | None = None,
    settings: AnalyticsSettings | None = None,
) -> LagCorrelation:
    """Lag analysis of two aggregated series of the same granularity."""
    settings = settings or default_settings.analytics
    return correlate_points(
        points_a,
        points_b,
        max_lag=settings.max_lag if max_lag is None else max_lag,
        min_overlap=settings.min_overlap,
    )


def correlate_queries(
    measurements: Sequence[Measurement],
    config_a: QueryConfig,
    config_b: QueryConfig,
    max_lag: int | None = None,
    settings: AnalyticsSettings | None = None,
) -> LagCorrelation:
    """Lag analysis between two slices, e.g. inflow and downstream discharge.

    Raises:
        ValueError: If the two queries aggregate at different granularities.
    """
    if Granularity(config_a.aggregation) is not Granularity(config_b.aggregation):
        raise ValueError(
            "Cannot correlate series of different granularity: "
            f"{Granularity(config_a.aggregation).value} vs {Granularity(config_b.aggregation).value}"
        )
    points_a = filter_and_aggregate(measurements, config_a, settings)
    points_b = filter_and_aggregate(measurements, config_b, settings)
    return correlation_request(points_a, points_b, max_lag=max_lag, settings=settings)


def compare_objects(
    measurements: Sequence[Measurement],
    config: QueryConfig,
    object_names: Iterable[str],
    settings: AnalyticsSettings | None = None,
) -> dict[str, list[AggregatedPoint]]:
    """Run the same query for several objects."""
    return {
        name: filter_and_aggregate(
            measurements, config.model_copy(update={"object_name": name}), settings
        )
        for name in object_names
    }
