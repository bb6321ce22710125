"""Tests for water-year and period resolution."""

from datetime import date

import pytest

from waterbalance.config.settings import QueryConfig
from waterbalance.constants.periods import PeriodClass
from waterbalance.hydro.water_year import (
    WaterYear,
    available_water_years,
    date_predicate,
    filter_measurements,
    in_period,
    shift_date,
)

from .conftest import GAUGE, RESERVOIR, make_measurement


class TestWaterYear:
    """Test the Oct-Sep water year."""

    def test_parse(self):
        """Test label parsing."""
        wy = WaterYear.parse("2023/2024")
        assert (wy.start_year, wy.end_year) == (2023, 2024)
        assert wy.label == "2023/2024"
        assert wy.first_day == date(2023, 10, 1)
        assert wy.last_day == date(2024, 9, 30)

    def test_parse_non_consecutive(self):
        """Test that non-consecutive years fail fast."""
        with pytest.raises(ValueError, match="consecutive"):
            WaterYear.parse("2023/2025")

    @pytest.mark.parametrize("label", ["2023-2024", "2023", "", "abcd/efgh"])
    def test_parse_malformed(self, label):
        """Test that malformed labels fail fast."""
        with pytest.raises(ValueError, match="YYYY/YYYY"):
            WaterYear.parse(label)

    @pytest.mark.parametrize("offset", [0, -1, 2])
    def test_month_split(self, offset):
        """Test Oct-Dec anchored to start year, Jan-Sep to end year."""
        wy = WaterYear(2023, 2024).shifted(offset)
        start, end = 2023 + offset, 2024 + offset

        for month in (10, 11, 12):
            assert wy.contains(date(start, month, 15))
            assert not wy.contains(date(end, month, 15))
        for month in range(1, 10):
            assert wy.contains(date(end, month, 15))
            assert not wy.contains(date(start, month, 15))

    def test_boundaries(self):
        """Test Sep 30 / Oct 1 boundaries on both ends."""
        wy = WaterYear(2023, 2024)
        assert wy.contains(date(2023, 10, 1))
        assert wy.contains(date(2024, 9, 30))
        assert not wy.contains(date(2023, 9, 30))
        assert not wy.contains(date(2024, 10, 1))

    def test_containing(self):
        """Test water year lookup from a date."""
        assert WaterYear.containing(date(2023, 10, 1)).label == "2023/2024"
        assert WaterYear.containing(date(2024, 9, 30)).label == "2023/2024"


class TestPeriods:
    """Test period-class restrictions."""

    def test_vegetation(self):
        """Test growing season Apr-Sep."""
        assert in_period(date(2024, 4, 1), PeriodClass.VEGETATION)
        assert in_period(date(2024, 9, 30), PeriodClass.VEGETATION)
        assert not in_period(date(2024, 3, 31), PeriodClass.VEGETATION)
        assert not in_period(date(2024, 10, 1), PeriodClass.VEGETATION)

    def test_inter_vegetation(self):
        """Test Oct-Mar."""
        assert in_period(date(2023, 10, 1), PeriodClass.INTER_VEGETATION)
        assert in_period(date(2024, 3, 31), PeriodClass.INTER_VEGETATION)
        assert not in_period(date(2024, 4, 1), PeriodClass.INTER_VEGETATION)

    def test_custom(self):
        """Test inclusive custom bounds."""
        start, end = date(2024, 1, 10), date(2024, 1, 20)
        assert in_period(date(2024, 1, 10), PeriodClass.CUSTOM, start, end)
        assert in_period(date(2024, 1, 20), PeriodClass.CUSTOM, start, end)
        assert not in_period(date(2024, 1, 21), PeriodClass.CUSTOM, start, end)

    def test_custom_without_bounds(self):
        """Test that a custom period without bounds is a contract violation."""
        with pytest.raises(ValueError, match="start and end"):
            in_period(date(2024, 1, 10), PeriodClass.CUSTOM)

    def test_custom_ignores_water_year(self):
        """Test that custom dates stand alone."""
        config = QueryConfig(
            water_year="2023/2024",
            period="custom",
            custom_start=date(2020, 1, 1),
            custom_end=date(2020, 1, 31),
        )
        predicate = date_predicate(config)
        assert predicate(date(2020, 1, 15))
        assert not predicate(date(2024, 1, 15))

    def test_custom_follows_year_offset(self):
        """Test custom bounds move with the comparison offset."""
        config = QueryConfig(
            period="custom",
            custom_start=date(2024, 2, 1),
            custom_end=date(2024, 2, 29),
            year_offset=-1,
        )
        predicate = date_predicate(config)
        assert predicate(date(2023, 2, 1))
        assert predicate(date(2023, 2, 28))
        assert not predicate(date(2024, 2, 15))

    def test_vegetation_within_water_year(self):
        """Test vegetation restricted to the selected water year."""
        predicate = date_predicate(QueryConfig(water_year="2023/2024", period="vegetation"))
        assert predicate(date(2024, 5, 1))
        assert not predicate(date(2023, 5, 1))
        assert not predicate(date(2023, 11, 1))

    def test_shift_date_leap_day(self):
        """Test Feb 29 clamps to Feb 28."""
        assert shift_date(date(2024, 2, 29), -1) == date(2023, 2, 28)
        assert shift_date(date(2023, 3, 1), 1) == date(2024, 3, 1)


class TestFilterMeasurements:
    """Test the full measurement filter."""

    @pytest.fixture
    def measurements(self):
        return [
            make_measurement(date(2023, 9, 30), "1"),
            make_measurement(date(2023, 10, 1), "2"),
            make_measurement(date(2024, 9, 30), "3"),
            make_measurement(date(2024, 10, 1), "4"),
            make_measurement(date(2023, 12, 1), "5", measure="Объем воды"),
            make_measurement(date(2023, 12, 1), "6", object_name=GAUGE),
        ]

    def test_object_measure_and_year(self, measurements):
        """Test object, measure and water-year predicates together."""
        config = QueryConfig(object_name=RESERVOIR, measure="ПРИТОК", water_year="2023/2024")
        selected = filter_measurements(measurements, config)
        assert [m.raw_value for m in selected] == ["2", "3"]

    def test_previous_year(self, measurements):
        """Test offset -1 selects the previous water year."""
        config = QueryConfig(object_name=RESERVOIR, measure="приток", water_year="2024/2025")
        selected = filter_measurements(measurements, config.shifted(-1))
        assert [m.raw_value for m in selected] == ["2", "3"]

    def test_measure_substring(self, measurements):
        """Test case-insensitive measure substring."""
        config = QueryConfig(object_name=RESERVOIR, measure="объем")
        assert [m.raw_value for m in filter_measurements(measurements, config)] == ["5"]

    def test_empty_filters_select_everything(self, measurements):
        """Test that empty object and measure filters are skipped."""
        assert len(filter_measurements(measurements, QueryConfig())) == len(measurements)

    def test_empty_result(self, measurements):
        """Test that no match is an empty list, not an error."""
        config = QueryConfig(object_name="нет такого", water_year="2010/2011")
        assert filter_measurements(measurements, config) == []

    def test_input_not_mutated(self, measurements):
        """Test that filtering leaves the input untouched."""
        before = list(measurements)
        filter_measurements(measurements, QueryConfig(water_year="2023/2024"))
        assert measurements == before


class TestAvailableWaterYears:
    """Test water-year listing."""

    def test_labels(self):
        """Test one label per calendar year in the data."""
        measurements = [
            make_measurement(date(2022, 11, 5), "1"),
            make_measurement(date(2024, 2, 1), "1"),
        ]
        assert available_water_years(measurements) == ["2022/2023", "2023/2024", "2024/2025"]

    def test_empty(self):
        """Test empty data."""
        assert available_water_years([]) == []
