"""Tests for cross-correlation and lag detection."""

from datetime import date, timedelta

import pytest

from waterbalance.hydro.aggregation import AggregatedPoint
from waterbalance.timeseries_stats.cross_correlation import (
    align_points,
    correlate_points,
    cross_correlate,
)

from .conftest import pattern_value


def signal(n: int, shift: int = 0) -> list[float]:
    return [pattern_value(i - shift) for i in range(n)]


class TestCrossCorrelate:
    """Test lag scan over positionally aligned series."""

    def test_self_correlation(self):
        """Test that a series correlates perfectly with itself at lag 0."""
        a = signal(40)
        result = cross_correlate(a, a, max_lag=3)

        assert result.coefficients[0] == pytest.approx(1.0)
        assert result.best_lag == 0
        assert result.direction == "synchronous"
        assert sorted(result.coefficients) == [-3, -2, -1, 0, 1, 2, 3]

    def test_negated_series(self):
        """Test perfect negative correlation."""
        a = signal(40)
        result = cross_correlate(a, [-v for v in a], max_lag=2)

        assert result.best_lag == 0
        assert result.best_coefficient == pytest.approx(-1.0)
        assert result.relationship == "negative"

    def test_detects_positive_lag(self):
        """Test that B repeating A two buckets later is found at lag +2."""
        result = cross_correlate(signal(40), signal(40, shift=2), max_lag=5)

        assert result.best_lag == 2
        assert result.best_coefficient == pytest.approx(1.0)
        assert result.direction == "b_lags_a"
        assert result.pair_counts[2] == 38

    def test_detects_negative_lag(self):
        """Test that B preceding A is reported as leading."""
        result = cross_correlate(signal(40, shift=3), signal(40), max_lag=5)

        assert result.best_lag == -3
        assert result.direction == "b_leads_a"

    def test_coefficients_bounded(self):
        """Test every defined coefficient lies in [-1, 1]."""
        result = cross_correlate(signal(60), signal(60, shift=7), max_lag=10)

        defined = [r for r in result.coefficients.values() if r is not None]
        assert defined
        assert all(-1.0 <= r <= 1.0 for r in defined)

    def test_tie_prefers_smallest_lag(self):
        """Test that equal coefficients resolve to the smallest absolute lag."""
        linear = [float(i) for i in range(10)]
        result = cross_correlate(linear, linear, max_lag=2)

        assert all(r == pytest.approx(1.0) for r in result.coefficients.values())
        assert result.best_lag == 0

    def test_missing_pairs_dropped(self):
        """Test that pairs with a missing side are not counted."""
        a = signal(20)
        b = list(a)
        b[4] = None
        b[9] = None
        result = cross_correlate(a, b, max_lag=0)

        assert result.pair_counts[0] == 18
        assert result.coefficients[0] == pytest.approx(1.0)

    def test_insufficient_overlap(self):
        """Test that too few pairs leave every lag undefined."""
        result = cross_correlate([1.0, 2.0], [2.0, 1.0], max_lag=1)

        assert result.is_empty
        assert result.best_lag is None
        assert result.direction is None
        assert all(r is None for r in result.coefficients.values())

    def test_min_overlap_threshold(self):
        """Test a lag is defined only with at least min_overlap pairs."""
        a = signal(6)
        result = cross_correlate(a, a, max_lag=3, min_overlap=4)

        assert result.coefficients[2] is not None
        assert result.pair_counts[3] == 3
        assert result.coefficients[3] is None

    def test_constant_series(self):
        """Test that a constant side gives undefined coefficients, not NaN."""
        result = cross_correlate([5.0] * 10, signal(10), max_lag=2)

        assert result.is_empty
        assert all(r is None for r in result.coefficients.values())

    def test_invalid_arguments(self):
        """Test argument validation."""
        with pytest.raises(ValueError, match="max_lag"):
            cross_correlate([1.0], [1.0], max_lag=-1)
        with pytest.raises(ValueError, match="min_overlap"):
            cross_correlate([1.0], [1.0], max_lag=1, min_overlap=1)

    def test_empty_series(self):
        """Test empty input."""
        assert cross_correlate([], [], max_lag=3).is_empty


class TestCorrelatePoints:
    """Test date-aligned correlation of aggregated series."""

    @staticmethod
    def points(values, start=date(2024, 1, 1), skip=()):
        return [
            AggregatedPoint(start + timedelta(days=i), v)
            for i, v in enumerate(values)
            if i not in skip
        ]

    def test_alignment_with_gap(self):
        """Test that a missing bucket in one series does not shift the other."""
        values = signal(20)
        points_a = self.points(values)
        points_b = self.points(values, skip={5})

        frame = align_points(points_a, points_b)
        assert len(frame) == 20
        assert frame["b"].isna().sum() == 1

        result = correlate_points(points_a, points_b, max_lag=2)
        assert result.best_lag == 0
        assert result.pair_counts[0] == 19
        assert result.best_coefficient == pytest.approx(1.0)

    def test_lag_between_points(self):
        """Test lag detection on dated points."""
        points_a = self.points(signal(30))
        points_b = self.points(signal(30, shift=1))

        assert correlate_points(points_a, points_b, max_lag=3).best_lag == 1

    def test_one_side_empty(self):
        """Test that an empty series yields an empty result."""
        result = correlate_points(self.points(signal(10)), [], max_lag=2)

        assert result.is_empty
