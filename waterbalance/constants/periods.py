"""Calendar and unit constants shared by the resolver, aggregation and converter.

Enumerations accept the labels used by the dashboard front end as aliases
(``"decade"`` for a dekada, ``"m3/s"`` / ``"million-m3"`` for unit modes) so
that saved filter states load without translation.
"""

from __future__ import annotations

from enum import Enum


class PeriodClass(str, Enum):
    """Sub-range of a water year used to restrict measurements."""

    FULL_YEAR = "full-year"
    VEGETATION = "vegetation"
    INTER_VEGETATION = "inter-vegetation"
    CUSTOM = "custom"


class Granularity(str, Enum):
    """Calendar-aligned bucket size of the aggregation engine."""

    DAY = "day"
    DEKADA = "dekada"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def _missing_(cls, value: object) -> Granularity | None:
        if isinstance(value, str) and value.lower() in {"decade", "dekad", "10-day"}:
            return cls.DEKADA
        return None


class UnitMode(str, Enum):
    """Output unit of aggregated values."""

    NATIVE = "native"  # as measured, m³/s for flows
    VOLUME = "volume"  # million m³ accumulated over the bucket

    @classmethod
    def _missing_(cls, value: object) -> UnitMode | None:
        aliases = {"m3/s": cls.NATIVE, "million-m3": cls.VOLUME}
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


# Growing season and its complement, calendar months
VEGETATION_MONTHS = frozenset(range(4, 10))
INTER_VEGETATION_MONTHS = frozenset({10, 11, 12, 1, 2, 3})

# First month of the water year (October); Oct-Dec belong to the start year
WATER_YEAR_START_MONTH = 10

SECONDS_PER_DAY = 86_400

# Nominal bucket lengths used by the volume conversion.
# Month is a flat 30 days, matching historical exports.
NOMINAL_BUCKET_DAYS: dict[Granularity, int] = {
    Granularity.DAY: 1,
    Granularity.DEKADA: 10,
    Granularity.WEEK: 7,
    Granularity.MONTH: 30,
}

# Measure-name fragments that mark an accumulated-volume quantity
VOLUME_KEYWORDS: tuple[str, ...] = ("объем", "объём", "volume")
