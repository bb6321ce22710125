"""Configuration module."""

from .settings import AnalyticsSettings, QueryConfig, Settings, default_settings

__all__ = [
    "Settings",
    "AnalyticsSettings",
    "QueryConfig",
    "default_settings",
]
