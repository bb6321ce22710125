"""Configuration management for water-balance analytics.

A query is an immutable value passed into every computation; there is no
process-wide active filter. Analysis defaults (correlation thresholds,
statistics conventions, nominal bucket lengths) live in ``AnalyticsSettings``
and can be loaded together with a query from YAML.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants.periods import (
    NOMINAL_BUCKET_DAYS,
    VOLUME_KEYWORDS,
    Granularity,
    PeriodClass,
    UnitMode,
)
from ..hydro.water_year import WaterYear

# Display order of the Syr Darya basin objects, upstream to downstream
DEFAULT_OBJECT_ORDER = [
    "Токтогульское вдхр.",
    "Сброс с Учкурганская ГЭС",
    "Андижанское вдхр.",
    "г/п Учтепа",
    "г/п Каль",
    "Бахри Точик вдхр.",
    "г/п Кызылкишлак",
    "Рейка 01 выше Фархад. Пл",
    "Чарвакское вдхр.",
    "река Угам",
    "сброс Газалкентской ГЭС",
    "г/п Кокбулак",
    "г/п Келес",
    "Шардаринское вдхр.",
]


class QueryConfig(BaseModel):
    """One analytical slice of the measurement stream."""

    model_config = ConfigDict(frozen=True)

    object_name: str = Field(default="", description="Exact object name; empty disables the filter")
    measure: str = Field(default="", description="Case-insensitive measure-name fragment")
    water_year: str | None = Field(default=None, description="Water year label 'YYYY/YYYY'")
    period: PeriodClass = Field(default=PeriodClass.FULL_YEAR)
    custom_start: date | None = Field(default=None)
    custom_end: date | None = Field(default=None)
    aggregation: Granularity = Field(default=Granularity.DAY)
    unit_mode: UnitMode = Field(default=UnitMode.NATIVE)
    year_offset: int = Field(default=0, description="0 current, -1 previous water year")

    @field_validator("water_year", mode="before")
    @classmethod
    def validate_water_year(cls, v: Any) -> str | None:
        """Normalize the label; malformed labels fail fast."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return WaterYear.parse(str(v)).label

    @field_validator("custom_start", "custom_end", mode="before")
    @classmethod
    def blank_date_to_none(cls, v: Any) -> Any:
        """Unset date inputs arrive as empty strings."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_custom_period(self) -> QueryConfig:
        """A custom period needs both bounds in order."""
        if self.period is PeriodClass.CUSTOM:
            if self.custom_start is None or self.custom_end is None:
                raise ValueError("Custom period requires both custom_start and custom_end")
            if self.custom_start > self.custom_end:
                raise ValueError(
                    f"custom_start {self.custom_start} is after custom_end {self.custom_end}"
                )
        return self

    def water_year_span(self) -> WaterYear | None:
        """Parsed water year, before the year offset is applied."""
        return WaterYear.parse(self.water_year) if self.water_year else None

    def shifted(self, offset: int) -> QueryConfig:
        """Copy of this query with the year offset moved by ``offset``."""
        return self.model_copy(update={"year_offset": self.year_offset + offset})


class AnalyticsSettings(BaseModel):
    """Conventions and thresholds shared by the analysis requests."""

    min_overlap: int = Field(default=3, ge=2, description="Minimum paired points per lag")
    max_lag: int = Field(default=10, ge=0, description="Default maximum lag in buckets")
    std_ddof: int = Field(default=0, ge=0, le=1, description="0 population, 1 sample std")
    percentiles: list[float] = Field(default=[5.0, 25.0, 50.0, 75.0, 95.0])
    volume_keywords: list[str] = Field(default_factory=lambda: list(VOLUME_KEYWORDS))
    bucket_days: dict[Granularity, int] = Field(
        default_factory=lambda: dict(NOMINAL_BUCKET_DAYS)
    )
    object_order: list[str] = Field(default_factory=lambda: list(DEFAULT_OBJECT_ORDER))

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v: list[float]) -> list[float]:
        """Percentiles must lie in [0, 100]."""
        if not all(0 <= p <= 100 for p in v):
            raise ValueError("All percentiles must be between 0 and 100")
        return sorted(v)

    @field_validator("bucket_days")
    @classmethod
    def validate_bucket_days(cls, v: dict[Granularity, int]) -> dict[Granularity, int]:
        """Every granularity needs a positive nominal length."""
        missing = set(Granularity) - set(v)
        if missing:
            # Partial overrides keep the nominal lengths for the rest
            v = {**NOMINAL_BUCKET_DAYS, **v}
        if not all(days > 0 for days in v.values()):
            raise ValueError("bucket_days must be positive")
        return v


class Settings(BaseModel):
    """Main settings class containing all configuration."""

    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    query: QueryConfig = Field(default_factory=QueryConfig)

    @classmethod
    def from_yaml(cls, config_path: Path) -> Settings:
        """Load settings from a YAML file."""
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

    def to_yaml(self, output_path: Path) -> None:
        """Save settings to a YAML file."""
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )


# Create default settings instance
default_settings = Settings()
