"""
Value Objects for Domain Layer.

Value objects are immutable results handed back to callers of the engine.
They carry no identity and are safe to render or serialize.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from recovery_engine.domain.entities import (
    CircuitState,
    DegradationLevel,
    ErrorSeverity,
    ErrorType,
    RecoveryStrategy,
)


# =============================================================================
# Type Aliases for improved readability
# =============================================================================

# Counts keyed by enum value ("network", "critical", ...)
CountsDict = Dict[str, int]


class Classification(BaseModel):
    """Canonical (type, severity) pair produced by the classifier."""

    type: ErrorType
    severity: ErrorSeverity

    model_config = {"frozen": True}


class RecoveryResult(BaseModel):
    """Structured outcome returned to the caller of handle_error."""

    error_id: str
    recovery_strategy: Optional[RecoveryStrategy] = None
    can_recover: bool = False
    error_type: ErrorType = ErrorType.UNKNOWN
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class CircuitStatus(BaseModel):
    """Answer to a circuit breaker query."""

    service_key: str
    state: CircuitState
    can_proceed: bool
    failure_count: int = 0
    next_attempt: Optional[datetime] = None

    model_config = {"frozen": True}


class CircuitTransition(BaseModel):
    """Notification emitted when a breaker changes state."""

    service_key: str
    previous: CircuitState
    current: CircuitState
    failure_count: int
    timestamp: datetime

    model_config = {"frozen": True}


class RetryDecision(BaseModel):
    """Bookkeeping result of one retry request."""

    retry_key: str
    success: bool
    retry_count: int
    max_retries: int
    delay_ms: Optional[int] = None
    terminal: bool = False

    model_config = {"frozen": True}


class FallbackOutcome(BaseModel):
    """Result of a fallback lookup and invocation."""

    success: bool
    service_type: str
    result: Any = None
    reason: Optional[str] = None

    model_config = {"frozen": True}


class DegradationConfig(BaseModel):
    """Feature flags implied by a degradation level."""

    disable_animations: bool = False
    reduced_features: bool = False
    offline_mode: bool = False

    model_config = {"frozen": True}


class DegradationOutcome(BaseModel):
    """Current degradation level after an escalation request."""

    success: bool = True
    level: DegradationLevel
    config: DegradationConfig
    changed: bool = False

    model_config = {"frozen": True}


class TopError(BaseModel):
    """One entry of the ranked error-type list."""

    type: str
    count: int

    model_config = {"frozen": True}


class ErrorStatistics(BaseModel):
    """Aggregate snapshot over a time window of the error history."""

    total: int = Field(default=0, ge=0)
    by_type: CountsDict = Field(default_factory=dict)
    by_severity: CountsDict = Field(default_factory=dict)
    by_strategy: CountsDict = Field(default_factory=dict)
    top_errors: List[TopError] = Field(default_factory=list)
    recovery_success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    time_window_seconds: Optional[float] = None

    model_config = {"frozen": True}


class SystemHealth(BaseModel):
    """0-100 health score and its band."""

    score: int = Field(ge=0, le=100)
    status: str

    model_config = {"frozen": True}


class RecoveryDashboard(BaseModel):
    """Read-only aggregate for the operator dashboard."""

    statistics: ErrorStatistics
    circuit_states: Dict[str, CircuitStatus] = Field(default_factory=dict)
    system_health: SystemHealth
    recent_errors: List[Dict[str, Any]] = Field(default_factory=list)
    recovery_recommendations: List[str] = Field(default_factory=list)
    degradation: DegradationOutcome
    generated_at: datetime

    model_config = {"frozen": True}
