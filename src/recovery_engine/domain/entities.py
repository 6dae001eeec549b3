"""
Core Domain Entities.

This module defines the error taxonomy shared by the whole dashboard and the
mutable records the resilience engine keeps while recovering from failures.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from recovery_engine.domain.value_objects import RecoveryResult


class ErrorType(str, Enum):
    """Canonical error types for the application."""

    NETWORK = "network"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    TRANSACTION = "transaction"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    SERVICE_UNAVAILABLE = "service_unavailable"
    DATA_CORRUPTION = "data_corruption"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Optional["ErrorType"]:
        """Parse enum member, value or name. Returns None if unmapped."""
        return _parse_enum(cls, value)


class ErrorSeverity(str, Enum):
    """Error severity levels, ordered from LOW to CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["ErrorSeverity"]:
        """Parse enum member, value or name. Returns None if unmapped."""
        return _parse_enum(cls, value)


_SEVERITY_RANK = {
    ErrorSeverity.LOW: 0,
    ErrorSeverity.MEDIUM: 1,
    ErrorSeverity.HIGH: 2,
    ErrorSeverity.CRITICAL: 3,
}


class RecoveryStrategy(str, Enum):
    """Recovery strategies the engine can select."""

    RETRY = "retry"
    FALLBACK = "fallback"
    CIRCUIT_BREAKER = "circuit_breaker"
    GRACEFUL_DEGRADATION = "graceful_degradation"
    USER_INTERVENTION = "user_intervention"


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if recovered


class DegradationLevel(str, Enum):
    """Process-wide degradation levels, ordered from NONE to SEVERE."""

    NONE = "none"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return _DEGRADATION_RANK[self]


_DEGRADATION_RANK = {
    DegradationLevel.NONE: 0,
    DegradationLevel.MODERATE: 1,
    DegradationLevel.SEVERE: 2,
}


class InterventionType(str, Enum):
    """What the user is asked to do when automated recovery is skipped."""

    LOGIN_REQUIRED = "login_required"
    PERMISSION_DENIED = "permission_denied"
    INPUT_CORRECTION = "input_correction"
    GENERIC_ERROR = "generic_error"


def _parse_enum(enum_cls: Any, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    # Tolerate legacy suffixed names such as "network_error"
    candidates = (normalized, normalized.removesuffix("_error"))
    for member in enum_cls:
        if member.value in candidates or member.name.lower() in candidates:
            return member
    return None


def generate_error_id() -> str:
    """Generate a unique error identifier."""
    return f"err_{uuid.uuid4().hex}"


@dataclass
class ErrorRecord:
    """One reported failure."""

    type: ErrorType
    severity: ErrorSeverity
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=generate_error_id)
    original_error_type: Optional[str] = None
    parent_error_id: Optional[str] = None
    recovery_strategy: Optional[RecoveryStrategy] = None
    recovery_result: Optional["RecoveryResult"] = None

    def attach_recovery_result(
        self,
        strategy: Optional[RecoveryStrategy],
        result: "RecoveryResult",
    ) -> None:
        """
        Attach the outcome of strategy execution.

        Raises:
            RecoveryResultAlreadyAttached: If a result was already attached
        """
        from recovery_engine.resilience.exceptions import (
            RecoveryResultAlreadyAttached,
        )

        if self.recovery_result is not None:
            raise RecoveryResultAlreadyAttached(
                f"Recovery result already attached to {self.id}"
            )
        self.recovery_strategy = strategy
        self.recovery_result = result

    @property
    def can_recover(self) -> bool:
        """Whether the attached recovery result reported success."""
        return self.recovery_result is not None and self.recovery_result.can_recover

    def to_summary(self) -> Dict[str, Any]:
        """Compact, display-safe representation."""
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "recovery_strategy": (
                self.recovery_strategy.value if self.recovery_strategy else None
            ),
            "can_recover": self.can_recover,
            "parent_error_id": self.parent_error_id,
        }


@dataclass
class CircuitBreakerState:
    """Mutable state for one circuit breaker."""

    service_key: str
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    last_failure_time: Optional[datetime] = None
    next_attempt_time: Optional[datetime] = None
    trial_in_flight: bool = False


@dataclass
class RetryState:
    """Mutable retry bookkeeping for one retry key."""

    retry_key: str
    max_retries: int
    attempt_count: int = 0
