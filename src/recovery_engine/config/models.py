"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetrySettings(BaseModel):
    """Retry policy: exponential backoff bounded by max_retries."""

    max_retries: int = Field(default=3, ge=0)
    base_delay_ms: int = Field(default=1000, ge=0)
    exponential_base: float = Field(default=2.0, ge=1.0)


class CircuitBreakerSettings(BaseModel):
    """Circuit breaker thresholds."""

    failure_threshold: int = Field(default=5, ge=1)
    cooldown_seconds: float = Field(default=30.0, ge=0)


class HistorySettings(BaseModel):
    """Bounded error history."""

    capacity: int = Field(default=1000, ge=1)
    recent_errors_limit: int = Field(default=10, ge=0)


class StatisticsSettings(BaseModel):
    """Defaults for statistics queries."""

    default_time_window_seconds: float = Field(default=24 * 60 * 60, gt=0)
    top_errors_limit: int = Field(default=5, ge=1)


class HealthSettings(BaseModel):
    """Weights used for the system health score."""

    critical_penalty: int = Field(default=20, ge=0)
    high_penalty: int = Field(default=10, ge=0)
    medium_penalty: int = Field(default=5, ge=0)
    low_penalty: int = Field(default=2, ge=0)
    circuit_penalty: int = Field(default=15, ge=0)


class FallbackSettings(BaseModel):
    """Fallback registry defaults."""

    install_defaults: bool = True


class EngineConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    retry: RetrySettings = Field(default_factory=RetrySettings)
    circuit_breaker: CircuitBreakerSettings = Field(
        default_factory=CircuitBreakerSettings,
    )
    history: HistorySettings = Field(default_factory=HistorySettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)

    model_config = {"populate_by_name": True}
