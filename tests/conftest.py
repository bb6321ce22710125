"""Shared fixtures for water-balance tests."""

from datetime import date, timedelta

import pytest

from waterbalance.readers.measurements import Measurement

RESERVOIR = "Токтогульское вдхр."
GAUGE = "г/п Учтепа"


def make_measurement(
    day: date,
    raw_value: str,
    object_name: str = RESERVOIR,
    measure: str = "приток",
) -> Measurement:
    """Single measurement with sensible defaults."""
    return Measurement(
        date=day,
        object_name=object_name,
        measure=measure,
        raw_value=raw_value,
        time_of_day="08:00",
        unit="м3/с",
    )


def pattern_value(i: int) -> float:
    """Deterministic, non-linear daily signal."""
    return float((i * 37) % 101) + 0.5 * (i % 7)


@pytest.fixture
def two_water_years() -> list[Measurement]:
    """Daily inflow for 2022/2023 and 2023/2024 at the reservoir."""
    start = date(2022, 10, 1)
    end = date(2024, 9, 30)
    days = (end - start).days + 1
    return [
        make_measurement(start + timedelta(days=i), f"{pattern_value(i):.1f}".replace(".", ","))
        for i in range(days)
    ]


@pytest.fixture
def lagged_pair() -> list[Measurement]:
    """Reservoir inflow and a gauge repeating it two days later."""
    start = date(2023, 10, 1)
    measurements = []
    for i in range(120):
        day = start + timedelta(days=i)
        measurements.append(make_measurement(day, str(pattern_value(i))))
        measurements.append(
            make_measurement(day, str(pattern_value(i - 2)), object_name=GAUGE)
        )
    return measurements
