"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import List

import pytest

from recovery_engine.config.models import (
    CircuitBreakerSettings,
    EngineConfig,
    RetrySettings,
)
from recovery_engine.domain.entities import ErrorRecord, ErrorSeverity, ErrorType
from recovery_engine.facade.resilience_facade import ResilienceEngine
from recovery_engine.observability.observability_manager import ObservabilityManager


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def reference_time() -> datetime:
    """Fixed reference time for reproducible tests."""
    return datetime(2024, 1, 15, 12, 0, 0)


@pytest.fixture
def clock(reference_time: datetime) -> FakeClock:
    """Fake clock starting at the reference time."""
    return FakeClock(reference_time)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep that returns immediately and records delays."""
    return RecordingSleep()


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def fixtures_path() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def default_config() -> EngineConfig:
    """Create default engine configuration."""
    return EngineConfig()


@pytest.fixture
def fast_config() -> EngineConfig:
    """Small thresholds for breaker and retry tests."""
    return EngineConfig(
        retry=RetrySettings(max_retries=3, base_delay_ms=1000),
        circuit_breaker=CircuitBreakerSettings(failure_threshold=3, cooldown_seconds=30),
    )


@pytest.fixture
def observability() -> ObservabilityManager:
    """Observability manager with console rendering."""
    return ObservabilityManager(use_json=False)


@pytest.fixture
def engine(
    default_config: EngineConfig,
    clock: FakeClock,
    recording_sleep: RecordingSleep,
    observability: ObservabilityManager,
) -> ResilienceEngine:
    """Engine with default config, fake clock and recording sleep."""
    return ResilienceEngine(
        config=default_config,
        clock=clock,
        sleep=recording_sleep,
        observability=observability,
    )


@pytest.fixture
def make_record(clock: FakeClock):
    """Factory for ErrorRecords stamped with the fake clock."""

    def _make(
        error_type: ErrorType = ErrorType.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        message: str = "test error",
        **context,
    ) -> ErrorRecord:
        return ErrorRecord(
            type=error_type,
            severity=severity,
            message=message,
            context=dict(context),
            timestamp=clock(),
        )

    return _make
