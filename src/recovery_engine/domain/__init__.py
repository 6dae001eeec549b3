"""
Domain Layer - Error Taxonomy and Recovery Results.

Entities:
    - ErrorRecord: One reported failure
    - CircuitBreakerState, RetryState: Mutable bookkeeping

Value Objects:
    - RecoveryResult, CircuitStatus, ErrorStatistics, SystemHealth, ...
"""

from recovery_engine.domain.entities import (
    CircuitBreakerState,
    CircuitState,
    DegradationLevel,
    ErrorRecord,
    ErrorSeverity,
    ErrorType,
    InterventionType,
    RecoveryStrategy,
    RetryState,
)
from recovery_engine.domain.value_objects import (
    Classification,
    CircuitStatus,
    CircuitTransition,
    DegradationConfig,
    DegradationOutcome,
    ErrorStatistics,
    FallbackOutcome,
    RecoveryDashboard,
    RecoveryResult,
    RetryDecision,
    SystemHealth,
    TopError,
)

__all__ = [
    "CircuitBreakerState",
    "CircuitState",
    "DegradationLevel",
    "ErrorRecord",
    "ErrorSeverity",
    "ErrorType",
    "InterventionType",
    "RecoveryStrategy",
    "RetryState",
    "Classification",
    "CircuitStatus",
    "CircuitTransition",
    "DegradationConfig",
    "DegradationOutcome",
    "ErrorStatistics",
    "FallbackOutcome",
    "RecoveryDashboard",
    "RecoveryResult",
    "RetryDecision",
    "SystemHealth",
    "TopError",
]
