"""Calendar-aligned aggregation of measurements.

Buckets are derived from an explicit date -> bucket-key mapping rather than a
sliding window, so every bucket boundary is calendar-exact:

* day: the date itself;
* dekada: days 1-10, 11-20 and 21-end of each month (8 to 11 days long);
* week: ISO weeks, Monday to Sunday, keyed by the Monday;
* month: one bucket per (year, month), keyed by the 1st.

Each bucket is reduced to the arithmetic mean of its numeric readings. Buckets
without a single numeric reading are dropped, never emitted as zero.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

from ..constants.periods import Granularity
from ..readers.measurements import Measurement, parse_value
from ..utils.logger import setup_logger

logger = setup_logger("aggregation")


def bucket_start(day: date, granularity: Granularity) -> date:
    """Map a date to the first calendar day of its bucket.

    Args:
        day: Measurement date.
        granularity: Bucket size.

    Returns:
        The bucket key, which is also the representative date of the bucket.
    """
    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return day
    if granularity is Granularity.DEKADA:
        if day.day <= 10:
            return day.replace(day=1)
        if day.day <= 20:
            return day.replace(day=11)
        return day.replace(day=21)
    if granularity is Granularity.WEEK:
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def bucket_end(start: date, granularity: Granularity) -> date:
    """Inclusive last day of the bucket starting at ``start``."""
    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return start
    if granularity is Granularity.WEEK:
        return start + timedelta(days=6)
    month_end = start.replace(day=calendar.monthrange(start.year, start.month)[1])
    if granularity is Granularity.DEKADA and start.day < 21:
        return start + timedelta(days=9)
    return month_end


@dataclass(frozen=True)
class Bucket:
    """Contiguous date range with the raw readings that fall inside it."""

    start: date
    end: date
    raw_values: tuple[str, ...]

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def values(self) -> list[float]:
        """Numeric readings, missing ones skipped."""
        return [v for v in (parse_value(raw) for raw in self.raw_values) if v is not None]

    @property
    def mean(self) -> float | None:
        values = self.values
        if not values:
            return None
        return sum(values) / len(values)


@dataclass(frozen=True)
class AggregatedPoint:
    """One bucket reduced to a single value."""

    date: date
    value: float
    is_previous: bool = False


def build_buckets(
    measurements: Iterable[Measurement], granularity: Granularity
) -> list[Bucket]:
    """Group measurements into calendar buckets.

    Only buckets that received at least one measurement are returned; a bucket
    may still hold nothing but missing readings.

    Returns:
        Buckets ordered by start date.
    """
    grouped: dict[date, list[str]] = {}
    for m in measurements:
        grouped.setdefault(bucket_start(m.date, granularity), []).append(m.raw_value)

    return [
        Bucket(start=start, end=bucket_end(start, granularity), raw_values=tuple(raw))
        for start, raw in sorted(grouped.items())
    ]


def aggregate(
    measurements: Iterable[Measurement],
    granularity: Granularity,
    is_previous: bool = False,
) -> list[AggregatedPoint]:
    """Reduce measurements to one mean value per calendar bucket.

    Args:
        measurements: Filtered measurement sequence.
        granularity: Bucket size.
        is_previous: Flag copied onto every point (previous-year series).

    Returns:
        Aggregated points in ascending date order. Empty when no measurement
        carries a numeric reading.
    """
    rows = [
        (bucket_start(m.date, granularity), value)
        for m in measurements
        if (value := m.value) is not None
    ]
    if not rows:
        logger.debug(f"No numeric readings to aggregate by {Granularity(granularity).value}")
        return []

    frame = pd.DataFrame(rows, columns=["bucket", "value"])
    means = frame.groupby("bucket", sort=True)["value"].mean()

    return [
        AggregatedPoint(date=bucket, value=float(value), is_previous=is_previous)
        for bucket, value in means.items()
    ]


def points_to_series(points: Sequence[AggregatedPoint], name: str = "value") -> pd.Series:
    """Aggregated points as a float series with a DatetimeIndex."""
    index = pd.DatetimeIndex([p.date for p in points], name="date")
    return pd.Series([p.value for p in points], index=index, name=name, dtype=float)
