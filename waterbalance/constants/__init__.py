"""Constants module for water-balance analytics."""

from waterbalance.constants.periods import (
    INTER_VEGETATION_MONTHS,
    NOMINAL_BUCKET_DAYS,
    SECONDS_PER_DAY,
    VEGETATION_MONTHS,
    VOLUME_KEYWORDS,
    WATER_YEAR_START_MONTH,
    Granularity,
    PeriodClass,
    UnitMode,
)

__all__ = [
    "Granularity",
    "PeriodClass",
    "UnitMode",
    "VEGETATION_MONTHS",
    "INTER_VEGETATION_MONTHS",
    "WATER_YEAR_START_MONTH",
    "SECONDS_PER_DAY",
    "NOMINAL_BUCKET_DAYS",
    "VOLUME_KEYWORDS",
]
