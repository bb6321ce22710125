"""Seasonal profile and year-over-year comparison series.

These are the derived series behind the seasonality, comparison, difference
and accumulated-volume views of the dashboard. All functions work on values
already produced by the aggregation engine (or on filtered measurements for the
monthly profile) and never re-implement filtering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from ..constants.periods import Granularity
from ..readers.measurements import Measurement
from .aggregation import AggregatedPoint, bucket_start
from .units import bucket_days, flow_to_volume
from .water_year import shift_date


@dataclass(frozen=True)
class DifferencePoint:
    """Current-year bucket paired with the same bucket one year earlier."""

    date: date
    current: float
    previous: float
    difference: float
    percent_change: float | None


def monthly_profile(
    measurements: Iterable[Measurement], convert: bool = False
) -> dict[int, float]:
    """Mean numeric reading per calendar month.

    Args:
        measurements: Filtered measurements.
        convert: Express the monthly mean flow as a volume over a 30-day month.

    Returns:
        Mapping month number (1-12) -> mean, ordered January to December.
        Months without numeric readings are omitted.
    """
    rows = [(m.date.month, value) for m in measurements if (value := m.value) is not None]
    if not rows:
        return {}

    frame = pd.DataFrame(rows, columns=["month", "value"])
    means = frame.groupby("month", sort=True)["value"].mean()
    days = bucket_days(Granularity.MONTH)
    return {
        int(month): flow_to_volume(float(value), days) if convert else float(value)
        for month, value in means.items()
    }


def align_previous(
    points: Sequence[AggregatedPoint], granularity: Granularity, years: int = 1
) -> dict[date, float]:
    """Key previous-year points by the matching current-year bucket.

    Each date is moved forward by ``years`` and mapped back through the bucket
    mapping, so a weekly bucket lands on the Monday of the corresponding week.
    When two previous buckets collapse onto the same key their values are
    averaged.
    """
    collected: dict[date, list[float]] = {}
    for p in points:
        key = bucket_start(shift_date(p.date, years), granularity)
        collected.setdefault(key, []).append(p.value)
    return {key: float(np.mean(values)) for key, values in sorted(collected.items())}


def difference_series(
    current: Sequence[AggregatedPoint],
    previous: Sequence[AggregatedPoint],
    granularity: Granularity,
) -> list[DifferencePoint]:
    """Bucket-by-bucket change against the previous water year.

    Only buckets present in both series are returned. ``percent_change`` is
    None when the previous value is zero.
    """
    aligned = align_previous(previous, granularity)
    result = []
    for p in current:
        if p.date not in aligned:
            continue
        before = aligned[p.date]
        result.append(
            DifferencePoint(
                date=p.date,
                current=p.value,
                previous=before,
                difference=p.value - before,
                percent_change=(p.value - before) / abs(before) * 100 if before != 0 else None,
            )
        )
    return result


def cumulative_series(points: Sequence[AggregatedPoint]) -> list[AggregatedPoint]:
    """Running total of a (volume) series."""
    totals = np.cumsum([p.value for p in points])
    return [
        AggregatedPoint(date=p.date, value=float(total), is_previous=p.is_previous)
        for p, total in zip(points, totals)
    ]
