"""
Configuration Package - Engine Settings.

Pydantic models validate YAML configuration at load time.
"""

from recovery_engine.config.loader import ConfigLoader, load_config, merge_settings
from recovery_engine.config.models import (
    CircuitBreakerSettings,
    EngineConfig,
    FallbackSettings,
    HealthSettings,
    HistorySettings,
    RetrySettings,
    StatisticsSettings,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "merge_settings",
    "CircuitBreakerSettings",
    "EngineConfig",
    "FallbackSettings",
    "HealthSettings",
    "HistorySettings",
    "RetrySettings",
    "StatisticsSettings",
]
