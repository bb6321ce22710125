"""Water-year and period resolution.

A water year runs from October 1 to September 30 and is labelled by both
calendar years it straddles, e.g. ``"2023/2024"``. October to December belong
to the start year and January to September to the end year; this asymmetric
split is what every filter in the package is anchored to.

The resolver turns a query configuration into a date predicate and applies it,
together with the object and measure filters, to a measurement sequence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
import re
from typing import TYPE_CHECKING

from ..constants.periods import (
    INTER_VEGETATION_MONTHS,
    VEGETATION_MONTHS,
    WATER_YEAR_START_MONTH,
    PeriodClass,
)
from ..readers.measurements import Measurement
from ..utils.logger import setup_logger

if TYPE_CHECKING:
    from ..config.settings import QueryConfig

logger = setup_logger("water_year")

_LABEL_RE = re.compile(r"^\s*(\d{4})\s*/\s*(\d{4})\s*$")


@dataclass(frozen=True)
class WaterYear:
    """Hydrological year from Oct 1 of ``start_year`` to Sep 30 of ``end_year``."""

    start_year: int
    end_year: int

    def __post_init__(self) -> None:
        if self.end_year != self.start_year + 1:
            raise ValueError(
                f"Water year must span consecutive years, got {self.start_year}/{self.end_year}"
            )

    @classmethod
    def parse(cls, label: str) -> WaterYear:
        """Parse a ``"YYYY/YYYY+1"`` label.

        Raises:
            ValueError: If the label is not two four-digit years or the years are
                not consecutive.
        """
        match = _LABEL_RE.match(label or "")
        if match is None:
            raise ValueError(f"Water year label must look like 'YYYY/YYYY', got {label!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def containing(cls, day: date) -> WaterYear:
        """Water year that ``day`` falls into."""
        start = day.year if day.month >= WATER_YEAR_START_MONTH else day.year - 1
        return cls(start, start + 1)

    @property
    def label(self) -> str:
        return f"{self.start_year}/{self.end_year}"

    @property
    def first_day(self) -> date:
        return date(self.start_year, WATER_YEAR_START_MONTH, 1)

    @property
    def last_day(self) -> date:
        return date(self.end_year, WATER_YEAR_START_MONTH - 1, 30)

    def shifted(self, offset: int) -> WaterYear:
        """Same water year moved by ``offset`` years (-1 is the previous one)."""
        return WaterYear(self.start_year + offset, self.end_year + offset)

    def contains(self, day: date) -> bool:
        if day.month >= WATER_YEAR_START_MONTH:
            return day.year == self.start_year
        return day.year == self.end_year


def shift_date(day: date, years: int) -> date:
    """Move a date by whole years, clamping Feb 29 to Feb 28."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def in_period(
    day: date,
    period: PeriodClass,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> bool:
    """Whether a date satisfies the period-class restriction.

    Args:
        day: Calendar date to test.
        period: Period class.
        custom_start: Inclusive start, used only with ``PeriodClass.CUSTOM``.
        custom_end: Inclusive end, used only with ``PeriodClass.CUSTOM``.

    Returns:
        True when the date belongs to the period.
    """
    period = PeriodClass(period)
    if period is PeriodClass.FULL_YEAR:
        return True
    if period is PeriodClass.VEGETATION:
        return day.month in VEGETATION_MONTHS
    if period is PeriodClass.INTER_VEGETATION:
        return day.month in INTER_VEGETATION_MONTHS
    if custom_start is None or custom_end is None:
        raise ValueError("Custom period requires both start and end dates")
    return custom_start <= day <= custom_end


def date_predicate(config: QueryConfig) -> Callable[[date], bool]:
    """Build the calendar predicate of a query.

    The water year is shifted by ``config.year_offset``. For a custom period the
    water-year restriction is not applied; the custom bounds are moved by the
    same offset so that a previous-year comparison covers the same dates one
    year earlier.
    """
    offset = config.year_offset
    period = PeriodClass(config.period)

    if period is PeriodClass.CUSTOM:
        start = shift_date(config.custom_start, offset)
        end = shift_date(config.custom_end, offset)
        return lambda day: start <= day <= end

    water_year = config.water_year_span()
    if water_year is None:
        return lambda day: in_period(day, period)

    target = water_year.shifted(offset)
    return lambda day: target.contains(day) and in_period(day, period)


def filter_measurements(
    measurements: Iterable[Measurement], config: QueryConfig
) -> list[Measurement]:
    """Select the measurements a query addresses.

    Applies, in order: exact object-name match, case-insensitive measure-name
    substring match, then the water-year / period predicate. Empty object or
    measure filters are skipped. The input is not modified.

    Args:
        measurements: Full measurement sequence.
        config: Query configuration.

    Returns:
        Matching measurements in input order (possibly empty).
    """
    predicate = date_predicate(config)
    measure_fragment = config.measure.casefold()

    selected = [
        m
        for m in measurements
        if (not config.object_name or m.object_name == config.object_name)
        and (not measure_fragment or measure_fragment in m.measure.casefold())
        and predicate(m.date)
    ]
    if not selected:
        logger.debug(
            f"No measurements for object={config.object_name!r} measure={config.measure!r} "
            f"water_year={config.water_year!r} period={PeriodClass(config.period).value} "
            f"offset={config.year_offset}"
        )
    return selected


def available_water_years(measurements: Sequence[Measurement]) -> list[str]:
    """Labels ``"Y/Y+1"`` for every calendar year covered by the data.

    Mirrors the dashboard's year selector: one label per calendar year from the
    earliest to the latest measurement date, oldest first.
    """
    if not measurements:
        return []
    first = min(m.date for m in measurements).year
    last = max(m.date for m in measurements).year
    return [WaterYear(year, year + 1).label for year in range(first, last + 1)]
