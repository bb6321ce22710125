"""Measurement records and raw value parsing.

The upstream data store delivers one row per observation with the value kept
as the operator typed it: decimal comma or dot, sometimes blank, "-" or a note
instead of a number. This module turns such rows into immutable
:class:`Measurement` values and exposes the parsed reading as ``float | None``;
``None`` always means "no reading" and is never replaced by zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
import math
from pathlib import Path
from typing import Any

import pandas as pd

from ..utils.logger import setup_logger

logger = setup_logger("measurement_reader")

# Column names of the source table
SOURCE_COLUMNS = {
    "date": "Date",
    "object_name": "Reservoir",
    "station": "Station",
    "measure": "Measure",
    "time_of_day": "TimeOfDay",
    "raw_value": "Value",
    "unit": "Unit",
    "season": "Season",
}

_MISSING_TOKENS = frozenset({"", "-", "—", "–"})


def parse_value(raw: Any) -> float | None:
    """Parse a locale-formatted reading into a float.

    Args:
        raw: Raw value, usually a string such as ``"12,5"`` or ``" 7.3 "``.
            Numbers are passed through.

    Returns:
        Parsed value, or None when the reading is missing or not numeric.

    Examples:
        >>> parse_value("12,5")
        12.5
        >>> parse_value("abc") is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None

    text = str(raw).strip()
    if text in _MISSING_TOKENS:
        return None

    # Spaces inside the number are thousands separators ("1 234,5")
    text = text.replace("\xa0", "").replace("\u202f", "").replace(" ", "")
    text = text.replace(",", ".")
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class Measurement:
    """One observation of one measure at one object on one day."""

    date: date
    object_name: str
    measure: str
    raw_value: str
    station: str | None = None
    time_of_day: str = ""
    unit: str = ""
    season: str = ""

    @property
    def value(self) -> float | None:
        """Parsed reading, None when missing or non-numeric."""
        return parse_value(self.raw_value)


def _coerce_date(value: Any) -> date:
    """Convert a source date cell to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        raise ValueError(f"Malformed measurement date: {value!r}")
    return ts.date()


def _optional_text(value: Any) -> str | None:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


def measurements_from_records(records: Iterable[Mapping[str, Any]]) -> list[Measurement]:
    """Build measurements from source rows.

    Args:
        records: Mappings keyed by the source column names (``Date``,
            ``Reservoir``, ``Station``, ``Measure``, ``TimeOfDay``, ``Value``,
            ``Unit``, ``Season``).

    Returns:
        Measurements in input order.

    Raises:
        ValueError: If a row has a missing or malformed date.
    """
    measurements = []
    for row_number, record in enumerate(records):
        try:
            day = _coerce_date(record.get(SOURCE_COLUMNS["date"]))
        except ValueError as e:
            raise ValueError(f"Row {row_number}: {e}") from e

        raw_value = record.get(SOURCE_COLUMNS["raw_value"])
        measurements.append(
            Measurement(
                date=day,
                object_name=_optional_text(record.get(SOURCE_COLUMNS["object_name"])) or "",
                measure=_optional_text(record.get(SOURCE_COLUMNS["measure"])) or "",
                raw_value="" if raw_value is None else str(raw_value),
                station=_optional_text(record.get(SOURCE_COLUMNS["station"])),
                time_of_day=_optional_text(record.get(SOURCE_COLUMNS["time_of_day"])) or "",
                unit=_optional_text(record.get(SOURCE_COLUMNS["unit"])) or "",
                season=_optional_text(record.get(SOURCE_COLUMNS["season"])) or "",
            )
        )
    logger.debug(f"Built {len(measurements)} measurements from records")
    return measurements


def read_measurements_csv(path: str | Path) -> list[Measurement]:
    """Load measurements from a CSV dump of the source table.

    Every column is read as text so raw values keep their original formatting.

    Args:
        path: CSV file with the source column names as header.

    Returns:
        Measurements in file order.
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    missing = {SOURCE_COLUMNS["date"], SOURCE_COLUMNS["raw_value"]} - set(frame.columns)
    if missing:
        raise ValueError(f"CSV {path} lacks required columns: {sorted(missing)}")
    logger.info(f"Loaded {len(frame)} rows from {path}")
    return measurements_from_records(frame.to_dict("records"))


def measurements_frame(measurements: Sequence[Measurement]) -> pd.DataFrame:
    """Tabular view of measurements with a parsed ``value`` column.

    Missing readings are NaN inside the frame only; the frame is a derived view
    and the measurement sequence itself is left untouched.
    """
    columns = [
        "date",
        "object_name",
        "station",
        "measure",
        "time_of_day",
        "raw_value",
        "value",
        "unit",
        "season",
    ]
    if not measurements:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(
        {
            "date": pd.to_datetime([m.date for m in measurements]),
            "object_name": [m.object_name for m in measurements],
            "station": [m.station for m in measurements],
            "measure": [m.measure for m in measurements],
            "time_of_day": [m.time_of_day for m in measurements],
            "raw_value": [m.raw_value for m in measurements],
            "value": [m.value for m in measurements],
            "unit": [m.unit for m in measurements],
            "season": [m.season for m in measurements],
        },
        columns=columns,
    )
    frame["value"] = frame["value"].astype(float)
    return frame


def ordered_objects(
    measurements: Iterable[Measurement], preferred: Sequence[str] = ()
) -> list[str]:
    """Distinct object names, preferred ones first.

    Args:
        measurements: Source measurements.
        preferred: Names listed in display order (e.g. upstream to downstream
            along the river). Names absent from the data are ignored.

    Returns:
        Names in ``preferred`` order followed by the remaining names sorted
        alphabetically (case-insensitive).
    """
    names = {m.object_name for m in measurements if m.object_name}
    rank = {name: i for i, name in enumerate(preferred)}
    head = sorted((n for n in names if n in rank), key=rank.__getitem__)
    tail = sorted((n for n in names if n not in rank), key=lambda n: (n.casefold(), n))
    return head + tail
