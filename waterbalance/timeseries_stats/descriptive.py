"""Descriptive statistics over numeric series.

Conventions (applied everywhere in the package):
- Missing readings (None) are skipped, never counted as zero.
- Standard deviation is the population one (ddof=0) unless a caller asks for
  the sample estimate explicitly.
- Percentiles use linear interpolation between order statistics.
- Empty input yields ``DescriptiveStats.empty()`` (count 0, every value None)
  instead of raising or returning NaN.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
import math
from typing import Any

import numpy as np
from scipy import stats

from ..hydro.aggregation import AggregatedPoint
from ..readers.measurements import parse_value
from ..utils.logger import setup_logger

logger = setup_logger("descriptive_stats")

DEFAULT_PERCENTILES: tuple[float, ...] = (5.0, 25.0, 50.0, 75.0, 95.0)


@dataclass(frozen=True)
class DescriptiveStats:
    """Summary of a numeric sequence."""

    count: int
    mean: float | None = None
    minimum: float | None = None
    maximum: float | None = None
    std: float | None = None
    median: float | None = None
    cv: float | None = None
    skewness: float | None = None
    percentiles: dict[float, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> DescriptiveStats:
        """The "no data" result."""
        return cls(count=0)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def as_dict(self) -> dict[str, Any]:
        """Flat dictionary, percentiles as ``p05``, ``p25``... keys."""
        result: dict[str, Any] = {
            "count": self.count,
            "mean": self.mean,
            "min": self.minimum,
            "max": self.maximum,
            "std": self.std,
            "median": self.median,
            "cv": self.cv,
            "skewness": self.skewness,
        }
        for p, value in self.percentiles.items():
            result[f"p{p:02g}"] = value
        return result


@dataclass(frozen=True)
class KpiSummary:
    """Headline figures of the currently selected series."""

    mean: float | None
    minimum: float | None
    maximum: float | None
    count: int


def describe(
    values: Iterable[float | None],
    percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    ddof: int = 0,
) -> DescriptiveStats:
    """Compute descriptive statistics, skipping missing values.

    Args:
        values: Numbers; None (and non-finite) entries are skipped.
        percentiles: Percentiles to report, each in [0, 100].
        ddof: Delta degrees of freedom of the standard deviation
            (0 population, 1 sample).

    Returns:
        Statistics record; ``DescriptiveStats.empty()`` for no usable values.

    Example:
        >>> describe([12.5, None, 7.3]).mean
        9.9
    """
    arr = np.array(
        [v for v in values if v is not None and math.isfinite(v)],
        dtype=float,
    )
    if arr.size == 0:
        logger.debug("No numeric values to describe")
        return DescriptiveStats.empty()

    mean = float(np.mean(arr))
    std = float(np.std(arr, ddof=ddof)) if arr.size > ddof else None

    skewness = None
    if arr.size >= 3 and std:
        skewness = float(stats.skew(arr, bias=ddof == 0))

    return DescriptiveStats(
        count=int(arr.size),
        mean=mean,
        minimum=float(np.min(arr)),
        maximum=float(np.max(arr)),
        std=std,
        median=float(np.median(arr)),
        cv=std / mean if std is not None and mean != 0 else None,
        skewness=skewness,
        percentiles={float(p): float(np.percentile(arr, p)) for p in percentiles},
    )


def describe_raw(
    raw_values: Iterable[Any],
    percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    ddof: int = 0,
) -> DescriptiveStats:
    """Parse raw readings first, then describe them."""
    return describe((parse_value(raw) for raw in raw_values), percentiles, ddof)


def kpi_summary(points: Sequence[AggregatedPoint]) -> KpiSummary:
    """Mean, minimum, maximum and count of an aggregated series."""
    summary = describe(p.value for p in points)
    return KpiSummary(
        mean=summary.mean,
        minimum=summary.minimum,
        maximum=summary.maximum,
        count=summary.count,
    )
