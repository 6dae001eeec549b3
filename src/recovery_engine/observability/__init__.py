"""
Observability Package - Error Metrics, Health, Structured Events.

This package provides:
    - ErrorMetricsAggregator: Bounded error history and statistics
    - HealthMonitor: Health score, bands and recommendations
    - ObservabilityManager: Structured event logging with correlation IDs

Design Principles:
    - Statistics are derived on demand, never cached
    - Structured JSON logging via structlog
"""

from recovery_engine.observability.error_metrics import ErrorMetricsAggregator
from recovery_engine.observability.health_monitor import HealthMonitor, health_band
from recovery_engine.observability.observability_manager import (
    ObservabilityManager,
)

__all__ = [
    "ErrorMetricsAggregator",
    "HealthMonitor",
    "health_band",
    "ObservabilityManager",
]
