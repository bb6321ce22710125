"""Hydrological analytics package for water-balance measurements.

Water-year resolution, calendar-aligned aggregation, unit conversion and the
derived seasonal / comparison series.
"""

from .aggregation import (
    AggregatedPoint,
    Bucket,
    aggregate,
    bucket_end,
    bucket_start,
    build_buckets,
    points_to_series,
)
from .seasonality import (
    DifferencePoint,
    align_previous,
    cumulative_series,
    difference_series,
    monthly_profile,
)
from .units import (
    bucket_days,
    convert_points,
    flow_to_volume,
    is_volume_measure,
    should_convert,
)
from .water_year import (
    WaterYear,
    available_water_years,
    date_predicate,
    filter_measurements,
    in_period,
    shift_date,
)

__all__ = [
    "WaterYear",
    "available_water_years",
    "date_predicate",
    "filter_measurements",
    "in_period",
    "shift_date",
    "AggregatedPoint",
    "Bucket",
    "aggregate",
    "bucket_start",
    "bucket_end",
    "build_buckets",
    "points_to_series",
    "bucket_days",
    "convert_points",
    "flow_to_volume",
    "is_volume_measure",
    "should_convert",
    "DifferencePoint",
    "align_previous",
    "cumulative_series",
    "difference_series",
    "monthly_profile",
]
