"""Time series statistics package for water-balance analytics.

Descriptive statistics and cross-correlation / lag analysis over aggregated
series.
"""

from .cross_correlation import (
    LagCorrelation,
    align_points,
    correlate_points,
    cross_correlate,
)
from .descriptive import (
    DescriptiveStats,
    KpiSummary,
    describe,
    describe_raw,
    kpi_summary,
)

__all__ = [
    "DescriptiveStats",
    "KpiSummary",
    "describe",
    "describe_raw",
    "kpi_summary",
    "LagCorrelation",
    "align_points",
    "correlate_points",
    "cross_correlate",
]
