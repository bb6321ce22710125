"""Flow-rate to accumulated-volume conversion."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING

from ..constants.periods import (
    NOMINAL_BUCKET_DAYS,
    SECONDS_PER_DAY,
    VOLUME_KEYWORDS,
    Granularity,
    UnitMode,
)
from .aggregation import AggregatedPoint

if TYPE_CHECKING:
    from ..config.settings import QueryConfig


def flow_to_volume(value: float, days: float) -> float:
    """Convert a mean flow rate (m³/s) over ``days`` days to million m³.

    Example:
        >>> round(flow_to_volume(11.574, 1), 3)
        1.0
    """
    return value * days * SECONDS_PER_DAY / 1_000_000


def bucket_days(
    granularity: Granularity, table: Mapping[Granularity, int] | None = None
) -> int:
    """Nominal length in days of a bucket (month is a flat 30)."""
    table = NOMINAL_BUCKET_DAYS if table is None else table
    return table[Granularity(granularity)]


def is_volume_measure(measure: str, keywords: Iterable[str] = VOLUME_KEYWORDS) -> bool:
    """Whether a measure name denotes a volume-type quantity."""
    name = measure.casefold()
    return any(keyword.casefold() in name for keyword in keywords)


def should_convert(config: QueryConfig, keywords: Iterable[str] = VOLUME_KEYWORDS) -> bool:
    """Volume conversion is on for volume mode or for volume-type measures."""
    return UnitMode(config.unit_mode) is UnitMode.VOLUME or is_volume_measure(
        config.measure, keywords
    )


def convert_points(
    points: Sequence[AggregatedPoint],
    granularity: Granularity,
    table: Mapping[Granularity, int] | None = None,
) -> list[AggregatedPoint]:
    """Rescale aggregated flow rates to volumes per bucket."""
    days = bucket_days(granularity, table)
    return [replace(p, value=flow_to_volume(p.value, days)) for p in points]
