"""Cross-correlation and lag detection between two aggregated series.

For every lag k in [-L, L] value ``a[i]`` is paired with ``b[i + k]``; pairs
with a missing side are dropped and the Pearson coefficient is computed over
the rest. A positive best lag means B follows A by k buckets (e.g. outflow
gauge downstream of an inflow gauge), a negative one means B leads.

Lags with fewer than ``min_overlap`` pairs, or with a constant side, are
reported as undefined (None) rather than as a fabricated coefficient.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import math

import numpy as np
import pandas as pd
from scipy import stats

from ..hydro.aggregation import AggregatedPoint
from ..utils.logger import setup_logger

logger = setup_logger("cross_correlation")

DEFAULT_MIN_OVERLAP = 3


@dataclass(frozen=True)
class LagCorrelation:
    """Correlation coefficient per lag plus the dominant lag."""

    coefficients: dict[int, float | None] = field(default_factory=dict)
    pair_counts: dict[int, int] = field(default_factory=dict)
    best_lag: int | None = None
    best_coefficient: float | None = None

    @property
    def is_empty(self) -> bool:
        """True when no lag had enough overlap."""
        return self.best_lag is None

    @property
    def direction(self) -> str | None:
        """``"b_lags_a"``, ``"b_leads_a"`` or ``"synchronous"``."""
        if self.best_lag is None:
            return None
        if self.best_lag > 0:
            return "b_lags_a"
        if self.best_lag < 0:
            return "b_leads_a"
        return "synchronous"

    @property
    def relationship(self) -> str | None:
        """Sign of the best coefficient: ``"positive"`` or ``"negative"``."""
        if self.best_coefficient is None:
            return None
        return "positive" if self.best_coefficient >= 0 else "negative"


def _as_array(series: Sequence[float | None]) -> np.ndarray:
    """Float array with NaN in place of missing values (internal only)."""
    return np.array(
        [np.nan if v is None or not math.isfinite(v) else float(v) for v in series],
        dtype=float,
    )


def _pearson(x: np.ndarray, y: np.ndarray) -> float | None:
    """Pearson coefficient, None when either side is constant."""
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return None
    r = float(stats.pearsonr(x, y)[0])
    if not math.isfinite(r):
        return None
    # Guard against round-off slightly outside [-1, 1]
    return max(-1.0, min(1.0, r))


def _lag_pairs(a: np.ndarray, b: np.ndarray, lag: int) -> tuple[np.ndarray, np.ndarray]:
    """Overlapping slices of ``a[i]`` and ``b[i + lag]``, missing pairs removed."""
    if lag >= 0:
        n = min(len(a), len(b) - lag)
        x, y = a[:max(n, 0)], b[lag:lag + max(n, 0)]
    else:
        n = min(len(a) + lag, len(b))
        x, y = a[-lag:-lag + max(n, 0)], b[:max(n, 0)]
    mask = ~(np.isnan(x) | np.isnan(y))
    return x[mask], y[mask]


def cross_correlate(
    series_a: Sequence[float | None],
    series_b: Sequence[float | None],
    max_lag: int,
    min_overlap: int = DEFAULT_MIN_OVERLAP,
) -> LagCorrelation:
    """Correlate two positionally aligned series over a range of lags.

    Args:
        series_a: Reference series, one value per bucket (None = missing).
        series_b: Series shifted against the reference.
        max_lag: Largest absolute lag L in buckets; lags -L..L are evaluated.
        min_overlap: Minimum number of paired values for a coefficient.

    Returns:
        Coefficients per lag and the lag of maximum absolute correlation. Ties
        go to the smallest absolute lag, then to the negative lag.

    Raises:
        ValueError: If ``max_lag`` is negative or ``min_overlap`` is below 2.
    """
    if max_lag < 0:
        raise ValueError(f"max_lag must be non-negative, got {max_lag}")
    if min_overlap < 2:
        raise ValueError(f"min_overlap must be at least 2, got {min_overlap}")

    a = _as_array(series_a)
    b = _as_array(series_b)

    coefficients: dict[int, float | None] = {}
    pair_counts: dict[int, int] = {}
    for lag in range(-max_lag, max_lag + 1):
        x, y = _lag_pairs(a, b, lag)
        pair_counts[lag] = int(x.size)
        coefficients[lag] = _pearson(x, y) if x.size >= min_overlap else None

    defined = [(lag, r) for lag, r in coefficients.items() if r is not None]
    if not defined:
        logger.info(
            f"No lag in ±{max_lag} has {min_overlap} overlapping points "
            f"(series lengths {len(a)} and {len(b)})"
        )
        return LagCorrelation(coefficients=coefficients, pair_counts=pair_counts)

    # Coefficients equal up to round-off count as ties
    best_lag, best_r = min(
        defined, key=lambda item: (-round(abs(item[1]), 12), abs(item[0]), item[0])
    )
    return LagCorrelation(
        coefficients=coefficients,
        pair_counts=pair_counts,
        best_lag=best_lag,
        best_coefficient=best_r,
    )


def align_points(
    points_a: Sequence[AggregatedPoint], points_b: Sequence[AggregatedPoint]
) -> pd.DataFrame:
    """Put two aggregated series on the union of their bucket dates.

    Buckets missing from one series become NaN in its column, so positions in
    both columns refer to the same calendar bucket.
    """
    a = pd.Series({p.date: p.value for p in points_a}, dtype=float, name="a")
    b = pd.Series({p.date: p.value for p in points_b}, dtype=float, name="b")
    return pd.concat([a, b], axis=1).sort_index()


def correlate_points(
    points_a: Sequence[AggregatedPoint],
    points_b: Sequence[AggregatedPoint],
    max_lag: int,
    min_overlap: int = DEFAULT_MIN_OVERLAP,
) -> LagCorrelation:
    """Cross-correlate two aggregated series of the same granularity.

    Both series are aligned on their bucket dates first; see
    :func:`cross_correlate` for the lag convention.
    """
    if not points_a or not points_b:
        return cross_correlate([], [], max_lag, min_overlap)

    frame = align_points(points_a, points_b)
    series_a = [None if pd.isna(v) else float(v) for v in frame["a"]]
    series_b = [None if pd.isna(v) else float(v) for v in frame["b"]]
    return cross_correlate(series_a, series_b, max_lag, min_overlap)
