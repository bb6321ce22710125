"""Readers for raw measurement records."""

from .measurements import (
    SOURCE_COLUMNS,
    Measurement,
    measurements_frame,
    measurements_from_records,
    ordered_objects,
    parse_value,
    read_measurements_csv,
)

__all__ = [
    "SOURCE_COLUMNS",
    "Measurement",
    "parse_value",
    "measurements_from_records",
    "read_measurements_csv",
    "measurements_frame",
    "ordered_objects",
]
