"""Tests for descriptive statistics and KPI summaries."""

from datetime import date

import numpy as np
import pytest

from waterbalance.config.settings import AnalyticsSettings
from waterbalance.analysis import statistics_request
from waterbalance.hydro.aggregation import AggregatedPoint
from waterbalance.timeseries_stats.descriptive import (
    DescriptiveStats,
    describe,
    describe_raw,
    kpi_summary,
)


class TestDescribe:
    """Test descriptive statistics."""

    def test_raw_values_with_gaps(self):
        """Test that empty and non-numeric readings are skipped."""
        result = describe_raw(["12.5", "", "7.3", "abc"])

        assert result.count == 2
        assert result.mean == pytest.approx(9.9)
        assert result.minimum == 7.3
        assert result.maximum == 12.5

    def test_population_std(self):
        """Test population standard deviation by default."""
        result = describe([2, 4, 4, 4, 5, 5, 7, 9])

        assert result.mean == 5.0
        assert result.std == pytest.approx(2.0)
        assert result.cv == pytest.approx(0.4)
        assert result.median == 4.5

    def test_sample_std(self):
        """Test sample standard deviation on request."""
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        result = describe(values, ddof=1)

        assert result.std == pytest.approx(np.std(values, ddof=1))
        assert describe([3.0], ddof=1).std is None

    def test_linear_percentiles(self):
        """Test percentiles by linear interpolation."""
        result = describe([1, 2, 3, 4, 5], percentiles=[25, 50, 90])

        assert result.percentiles == pytest.approx({25.0: 2.0, 50.0: 3.0, 90.0: 4.6})

    def test_skewness(self):
        """Test skewness sign and degenerate cases."""
        assert describe([1, 2, 3]).skewness == pytest.approx(0.0)
        assert describe([1, 1, 1, 10]).skewness > 0
        assert describe([1, 2]).skewness is None

    def test_constant_series(self):
        """Test zero spread gives zero std and undefined skewness."""
        result = describe([5.0, 5.0, 5.0])

        assert result.std == 0.0
        assert result.cv == 0.0
        assert result.skewness is None

    def test_zero_mean_cv(self):
        """Test CV is undefined for a zero mean."""
        assert describe([-1.0, 1.0]).cv is None

    def test_empty(self):
        """Test the no-data result."""
        result = describe([None, float("nan")])

        assert result == DescriptiveStats.empty()
        assert result.is_empty
        assert result.mean is None
        assert result.std is None
        assert result.percentiles == {}

    def test_as_dict(self):
        """Test flat dictionary keys."""
        flat = describe([1, 2, 3, 4, 5]).as_dict()

        assert flat["count"] == 5
        assert flat["min"] == 1.0
        assert flat["p05"] == pytest.approx(1.2)
        assert flat["p95"] == pytest.approx(4.8)

    def test_statistics_request_uses_settings(self):
        """Test that percentile and ddof conventions come from settings."""
        settings = AnalyticsSettings(percentiles=[50], std_ddof=1)
        result = statistics_request([1.0, None, 3.0], settings)

        assert result.count == 2
        assert list(result.percentiles) == [50.0]
        assert result.std == pytest.approx(np.sqrt(2.0))


class TestKpiSummary:
    """Test the headline figures."""

    def test_kpi(self):
        """Test mean, min, max and count of points."""
        points = [
            AggregatedPoint(date(2024, 1, 1), 10.0),
            AggregatedPoint(date(2024, 2, 1), 30.0),
            AggregatedPoint(date(2024, 3, 1), 20.0),
        ]
        kpi = kpi_summary(points)

        assert kpi.mean == 20.0
        assert kpi.minimum == 10.0
        assert kpi.maximum == 30.0
        assert kpi.count == 3

    def test_kpi_empty(self):
        """Test KPI of an empty series."""
        kpi = kpi_summary([])

        assert kpi.count == 0
        assert kpi.mean is None
