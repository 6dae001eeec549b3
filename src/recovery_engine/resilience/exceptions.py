"""
Exceptions raised by the resilience helpers.

handle_error never raises these; they surface only from the wrapper helpers
(circuit breaker, transaction, rollback) where the caller asked the engine to
run an operation on its behalf.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class RecoveryEngineError(Exception):
    """Base class for recovery engine errors."""
    pass


class CircuitOpenError(RecoveryEngineError):
    """Raised when a call is rejected because its circuit breaker is open."""

    def __init__(self, service_key: str, next_attempt: Optional[datetime]) -> None:
        when = next_attempt.isoformat() if next_attempt else "unknown"
        super().__init__(
            f"Circuit {service_key} is open, next attempt available at {when}"
        )
        self.service_key = service_key
        self.next_attempt = next_attempt


class FallbackFailed(RecoveryEngineError):
    """Raised when a registered fallback operation itself fails."""

    def __init__(self, service_type: str) -> None:
        super().__init__(f"Fallback service for {service_type} failed")
        self.service_type = service_type


class TransactionFailed(RecoveryEngineError):
    """Raised when a wrapped transaction fails; rollback is left to the caller."""

    def __init__(self, error_id: str, rollback_available: bool) -> None:
        super().__init__(f"Transaction failed (error {error_id})")
        self.error_id = error_id
        self.rollback_available = rollback_available


class RollbackUnavailable(RecoveryEngineError):
    """Raised when no rollback is registered for a failed transaction."""
    pass


class RecoveryResultAlreadyAttached(RecoveryEngineError):
    """Raised when a recovery result is attached to a record twice."""
    pass
