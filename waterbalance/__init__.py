"""Water Balance - analytics core for hydrological measurement streams."""

__version__ = "0.1.0"
__author__ = "Water Balance Team"
__description__ = "Water-year filtering, bucketed aggregation, statistics and lag analysis"

from waterbalance.analysis import (
    compare_with_previous,
    correlation_request,
    filter_and_aggregate,
    statistics_request,
)
from waterbalance.config.settings import QueryConfig, Settings
from waterbalance.readers.measurements import Measurement, parse_value

__all__ = [
    "Settings",
    "QueryConfig",
    "Measurement",
    "parse_value",
    "filter_and_aggregate",
    "compare_with_previous",
    "statistics_request",
    "correlation_request",
]
