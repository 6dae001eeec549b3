"""
Recovery Strategy Selector.

Picks one strategy per error, in priority order:

    1. CRITICAL severity          -> USER_INTERVENTION
    2. AUTHENTICATION             -> USER_INTERVENTION
    3. SERVICE_UNAVAILABLE        -> CIRCUIT_BREAKER
    4. NETWORK/TIMEOUT, breaker open for the service -> CIRCUIT_BREAKER
    5. NETWORK/TIMEOUT, retries left                 -> RETRY
    6. Fallback registered for the service type      -> FALLBACK
    7. Otherwise                  -> GRACEFUL_DEGRADATION

Safety-affecting errors always reach a human before any automated strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from recovery_engine.domain.entities import (
    CircuitState,
    ErrorRecord,
    ErrorSeverity,
    ErrorType,
    RecoveryStrategy,
)

RETRYABLE_TYPES = frozenset({ErrorType.NETWORK, ErrorType.TIMEOUT})


@dataclass(frozen=True)
class SelectionInputs:
    """Engine state the selector needs besides the record itself."""

    retry_available: bool = True
    fallback_available: bool = False
    circuit_state: CircuitState = CircuitState.CLOSED


def select_strategy(
    record: ErrorRecord,
    inputs: Optional[SelectionInputs] = None,
) -> RecoveryStrategy:
    """Select the recovery strategy for a classified error."""
    inputs = inputs or SelectionInputs()

    if record.severity == ErrorSeverity.CRITICAL:
        return RecoveryStrategy.USER_INTERVENTION

    if record.type == ErrorType.AUTHENTICATION:
        return RecoveryStrategy.USER_INTERVENTION

    if record.type == ErrorType.SERVICE_UNAVAILABLE:
        return RecoveryStrategy.CIRCUIT_BREAKER

    if record.type in RETRYABLE_TYPES:
        if inputs.circuit_state == CircuitState.OPEN:
            return RecoveryStrategy.CIRCUIT_BREAKER
        if inputs.retry_available:
            return RecoveryStrategy.RETRY

    if inputs.fallback_available:
        return RecoveryStrategy.FALLBACK

    return RecoveryStrategy.GRACEFUL_DEGRADATION
