"""
Resilience Package - Classification and Recovery Components.

This package provides the building blocks the facade composes:
    - ErrorClassifier: Failure -> (type, severity)
    - CircuitBreakerManager: Per-service breakers
    - RetryExecutor: Exponential backoff bookkeeping
    - FallbackRegistry: Alternate operations per service type
    - DegradationController: Process-wide feature reduction
    - select_strategy: Priority-ordered strategy selection

Design Principles:
    - Fail fast to a human for safety-affecting errors
    - Retry with backoff for transient errors
    - Circuit breaker for persistent failures
    - Degrade rather than crash
"""

from recovery_engine.resilience.circuit_breaker import CircuitBreakerManager
from recovery_engine.resilience.classifier import (
    ClassificationRule,
    ErrorClassifier,
    classify,
    infer_service_type,
)
from recovery_engine.resilience.degradation import DegradationController
from recovery_engine.resilience.exceptions import (
    CircuitOpenError,
    FallbackFailed,
    RecoveryEngineError,
    RecoveryResultAlreadyAttached,
    RollbackUnavailable,
    TransactionFailed,
)
from recovery_engine.resilience.fallback import (
    FallbackRegistry,
    register_default_fallbacks,
)
from recovery_engine.resilience.retry import RetryExecutor, build_retry_key
from recovery_engine.resilience.strategy import SelectionInputs, select_strategy

__all__ = [
    "CircuitBreakerManager",
    "ClassificationRule",
    "ErrorClassifier",
    "classify",
    "infer_service_type",
    "DegradationController",
    "CircuitOpenError",
    "FallbackFailed",
    "RecoveryEngineError",
    "RecoveryResultAlreadyAttached",
    "RollbackUnavailable",
    "TransactionFailed",
    "FallbackRegistry",
    "register_default_fallbacks",
    "RetryExecutor",
    "build_retry_key",
    "SelectionInputs",
    "select_strategy",
]
