"""
Resilience Facade - Main Entry Point.

The ResilienceEngine composes classification, strategy selection, the
recovery executors and metrics. handle_error is the single reporting entry
point; it always returns a RecoveryResult and never raises for bad input.

One engine is created per process and injected where needed; tests build a
fresh instance with a fake clock and sleep.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from recovery_engine.config.loader import load_config
from recovery_engine.config.models import EngineConfig
from recovery_engine.domain.entities import (
    CircuitState,
    DegradationLevel,
    ErrorRecord,
    ErrorSeverity,
    ErrorType,
    InterventionType,
    RecoveryStrategy,
)
from recovery_engine.domain.value_objects import (
    CircuitStatus,
    CircuitTransition,
    DegradationOutcome,
    ErrorStatistics,
    RecoveryDashboard,
    RecoveryResult,
    SystemHealth,
)
from recovery_engine.observability.error_metrics import ErrorMetricsAggregator
from recovery_engine.observability.health_monitor import HealthMonitor
from recovery_engine.observability.observability_manager import ObservabilityManager
from recovery_engine.resilience.circuit_breaker import CircuitBreakerManager
from recovery_engine.resilience.classifier import (
    ErrorClassifier,
    infer_service_type,
    intervention_type_for,
)
from recovery_engine.resilience.degradation import DegradationController
from recovery_engine.resilience.exceptions import (
    CircuitOpenError,
    FallbackFailed,
    RollbackUnavailable,
    TransactionFailed,
)
from recovery_engine.resilience.fallback import (
    FallbackOperation,
    FallbackRegistry,
    register_default_fallbacks,
)
from recovery_engine.resilience.redaction import redact_context, redact_text
from recovery_engine.resilience.retry import RetryExecutor, build_retry_key
from recovery_engine.resilience.strategy import (
    RETRYABLE_TYPES,
    SelectionInputs,
    select_strategy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[Any]]
Operation = Callable[[], Union[T, Awaitable[T]]]
InterventionListener = Callable[[ErrorRecord, InterventionType], None]
ErrorInput = Union[Mapping[str, Any], BaseException, str, None]

DEFAULT_MESSAGE = "An error occurred"


@dataclass(frozen=True)
class RecoveryPlan:
    """Strategy plus the keys its executor works on."""

    strategy: RecoveryStrategy
    service_key: str
    retry_key: str
    circuit_state: CircuitState
    retry_exhausted: bool = False


class ResilienceEngine:
    """
    Orchestrates error recovery.

    Workflow:
        1. Classify the reported failure and redact its context
        2. Record it in the bounded history
        3. Select a recovery strategy
        4. Execute it (retry / fallback / circuit breaker /
           degradation / user intervention)
        5. Attach the outcome to the record and return it
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleeper] = None,
        classifier: Optional[ErrorClassifier] = None,
        circuit_breakers: Optional[CircuitBreakerManager] = None,
        retry_executor: Optional[RetryExecutor] = None,
        fallbacks: Optional[FallbackRegistry] = None,
        degradation: Optional[DegradationController] = None,
        metrics: Optional[ErrorMetricsAggregator] = None,
        health_monitor: Optional[HealthMonitor] = None,
        observability: Optional[ObservabilityManager] = None,
    ) -> None:
        """
        Initialize engine with dependencies.

        Args:
            config: Engine configuration (defaults apply when None)
            clock: Time source shared by all components
            sleep: Awaitable sleep used by execute_with_retry
            classifier: Error classifier
            circuit_breakers: Circuit breaker manager
            retry_executor: Retry bookkeeping
            fallbacks: Fallback registry
            degradation: Degradation controller
            metrics: Error history and statistics
            health_monitor: Health scoring (optional)
            observability: Structured event log (optional)
        """
        self.config = config or EngineConfig()
        self._clock = clock or datetime.now
        self._sleep = sleep or asyncio.sleep

        self.classifier = classifier or ErrorClassifier()
        self.circuit_breakers = circuit_breakers or CircuitBreakerManager(
            self.config.circuit_breaker, clock=self._clock
        )
        self.retry_executor = retry_executor or RetryExecutor(self.config.retry)
        self.fallbacks = fallbacks or FallbackRegistry()
        self.degradation = degradation or DegradationController()
        self.metrics = metrics or ErrorMetricsAggregator(
            capacity=self.config.history.capacity,
            clock=self._clock,
            top_errors_limit=self.config.statistics.top_errors_limit,
            default_time_window=timedelta(
                seconds=self.config.statistics.default_time_window_seconds
            ),
        )
        self.observability = observability
        self.health_monitor = health_monitor or HealthMonitor(
            self.config.health, observability=observability
        )

        self._intervention_listeners: List[InterventionListener] = []
        self._pending_rollbacks: "OrderedDict[str, Operation[Any]]" = OrderedDict()

        if self.config.fallback.install_defaults:
            register_default_fallbacks(self.fallbacks)

        if self.observability is not None:
            self.circuit_breakers.add_listener(self.observability.log_circuit_transition)
            self.degradation.add_listener(self.observability.log_degradation_change)

        logger.info("Resilience engine initialized")

    # =========================================================================
    # Reporting
    # =========================================================================

    async def handle_error(
        self,
        error: ErrorInput,
        context: Optional[Mapping[str, Any]] = None,
    ) -> RecoveryResult:
        """
        Report a failure and run the selected recovery strategy.

        Args:
            error: Mapping {type?, severity?, message, original_error?},
                an exception, or a plain message
            context: Caller context (component, service_type, endpoint, ...)

        Returns:
            RecoveryResult; never raises for caller-supplied input
        """
        try:
            record = self._create_record(error, context)
        except Exception as e:
            logger.exception("Failed to build error record from report")
            record = self._internal_failure_record(e, parent=None, source="report")

        self.metrics.record(record)

        plan: Optional[RecoveryPlan] = None
        try:
            plan = self._plan_recovery(record)
            can_recover, details = await self._execute(plan, record)
        except FallbackFailed as e:
            derived = self._report_derived_error(
                record, e.__cause__ or e, source="fallback", reclassify=True
            )
            can_recover = False
            details = {
                "success": False,
                "message": "Fallback service failed",
                "service_type": e.service_type,
                "fallback_error_id": derived.id,
            }
        except Exception as e:
            logger.exception(f"Recovery failed for {record.id}")
            derived = self._report_derived_error(record, e, source="recovery")
            can_recover = False
            details = {
                "success": False,
                "message": "Recovery failed",
                "internal_error_id": derived.id,
            }

        if plan is not None and plan.retry_exhausted:
            details.setdefault("retry_exhausted", True)
            # Exhausted retries are terminal unless a fallback actually served
            if not (plan.strategy == RecoveryStrategy.FALLBACK and can_recover):
                can_recover = False
                details["success"] = False

        strategy = plan.strategy if plan else None
        result = RecoveryResult(
            error_id=record.id,
            recovery_strategy=strategy,
            can_recover=can_recover,
            error_type=record.type,
            severity=record.severity,
            details=details,
        )
        record.attach_recovery_result(strategy, result)

        self._emit_handled(record, result)
        return result

    def _create_record(
        self,
        error: ErrorInput,
        context: Optional[Mapping[str, Any]],
    ) -> ErrorRecord:
        message, original_error, explicit_type, explicit_severity, embedded = (
            _normalize_error_input(error)
        )
        merged_context: Dict[str, Any] = dict(embedded)
        if isinstance(context, Mapping):
            merged_context.update(context)

        classification = self.classifier.classify(
            message, original_error, hints=merged_context
        )

        try:
            redacted_context = redact_context(merged_context)
        except Exception:
            logger.exception("Failed to redact error context, dropping it")
            redacted_context = {}

        return ErrorRecord(
            type=ErrorType.parse(explicit_type) or classification.type,
            severity=ErrorSeverity.parse(explicit_severity) or classification.severity,
            message=redact_text(message),
            context=redacted_context,
            timestamp=self._clock(),
            original_error_type=(
                type(original_error).__name__ if original_error is not None else None
            ),
        )

    def _plan_recovery(self, record: ErrorRecord) -> RecoveryPlan:
        service_key = infer_service_type(record.context, record.type)
        retry_key = build_retry_key(record.type, record.context)
        circuit_state = self.circuit_breakers.check_circuit_breaker(service_key).state
        retry_available = self.retry_executor.retries_remaining(retry_key)

        strategy = select_strategy(
            record,
            SelectionInputs(
                retry_available=retry_available,
                fallback_available=self.fallbacks.has_fallback(service_key),
                circuit_state=circuit_state,
            ),
        )

        retry_exhausted = (
            record.type in RETRYABLE_TYPES
            and not retry_available
            and strategy != RecoveryStrategy.RETRY
        )
        if retry_exhausted:
            # Exhaustion is surfaced on this report; the next one starts fresh
            self.retry_executor.reset(retry_key)

        return RecoveryPlan(
            strategy=strategy,
            service_key=service_key,
            retry_key=retry_key,
            circuit_state=circuit_state,
            retry_exhausted=retry_exhausted,
        )

    async def _execute(
        self,
        plan: RecoveryPlan,
        record: ErrorRecord,
    ) -> Tuple[bool, Dict[str, Any]]:
        if plan.strategy == RecoveryStrategy.RETRY:
            return self._execute_retry(plan)
        if plan.strategy == RecoveryStrategy.FALLBACK:
            return await self._execute_fallback(plan, record)
        if plan.strategy == RecoveryStrategy.CIRCUIT_BREAKER:
            return self._execute_circuit_breaker(plan)
        if plan.strategy == RecoveryStrategy.GRACEFUL_DEGRADATION:
            return self._execute_degradation(record)
        return self._execute_user_intervention(record)

    def _execute_retry(self, plan: RecoveryPlan) -> Tuple[bool, Dict[str, Any]]:
        decision = self.retry_executor.execute_retry(plan.retry_key)
        details = decision.model_dump()
        if decision.terminal:
            details["message"] = "Max retries exceeded"
        else:
            details["message"] = f"Retry scheduled (attempt {decision.retry_count})"
        return decision.success, details

    async def _execute_fallback(
        self,
        plan: RecoveryPlan,
        record: ErrorRecord,
    ) -> Tuple[bool, Dict[str, Any]]:
        outcome = await self.fallbacks.execute_fallback(record, plan.service_key)
        details = outcome.model_dump()
        details["message"] = (
            "Fallback service activated" if outcome.success else "No fallback service available"
        )
        return outcome.success, details

    def _execute_circuit_breaker(self, plan: RecoveryPlan) -> Tuple[bool, Dict[str, Any]]:
        if plan.circuit_state == CircuitState.OPEN:
            status = self.circuit_breakers.check_circuit_breaker(plan.service_key)
            message = "Circuit breaker open, call rejected"
        else:
            status = self.circuit_breakers.record_failure(plan.service_key)
            message = (
                "Circuit breaker opened"
                if status.state == CircuitState.OPEN
                else "Circuit breaker monitoring"
            )

        details = {
            "success": status.can_proceed,
            "message": message,
            "service_key": plan.service_key,
            "state": status.state.value,
            "failure_count": status.failure_count,
            "threshold": self.circuit_breakers.threshold,
            "next_attempt": status.next_attempt,
        }
        return status.can_proceed, details

    def _execute_degradation(self, record: ErrorRecord) -> Tuple[bool, Dict[str, Any]]:
        outcome = self.degradation.execute_graceful_degradation(record)
        details = outcome.model_dump()
        details["message"] = "Graceful degradation activated"
        return outcome.success, details

    def _execute_user_intervention(
        self, record: ErrorRecord
    ) -> Tuple[bool, Dict[str, Any]]:
        intervention = intervention_type_for(record.type, record.message)

        if self.observability is not None:
            self.observability.log_intervention_required(record, intervention.value)
        for listener in list(self._intervention_listeners):
            try:
                listener(record, intervention)
            except Exception:
                logger.exception(f"Intervention listener failed for {record.id}")

        return False, {
            "success": False,
            "message": "User intervention requested",
            "intervention_type": intervention.value,
            "error_id": record.id,
        }

    def _report_derived_error(
        self,
        parent: ErrorRecord,
        cause: BaseException,
        source: str,
        reclassify: bool = False,
    ) -> ErrorRecord:
        """Record a failure that happened while recovering from parent."""
        try:
            if reclassify:
                classification = self.classifier.classify(str(cause), cause)
                derived = ErrorRecord(
                    type=classification.type,
                    severity=max(
                        classification.severity,
                        ErrorSeverity.HIGH,
                        key=lambda s: s.rank,
                    ),
                    message=redact_text(f"{source} failed: {cause}"),
                    context={"source": source, "service_type": parent.context.get("service_type")},
                    timestamp=self._clock(),
                    original_error_type=type(cause).__name__,
                    parent_error_id=parent.id,
                )
            else:
                derived = self._internal_failure_record(cause, parent, source)

            derived.attach_recovery_result(
                None,
                RecoveryResult(
                    error_id=derived.id,
                    can_recover=False,
                    error_type=derived.type,
                    severity=derived.severity,
                    details={
                        "success": False,
                        "message": f"Not recovered, derived from {parent.id}",
                    },
                ),
            )
        except Exception:
            logger.exception(f"Failed to record derived error for {parent.id}")
            derived = self._internal_failure_record(cause, parent, source)

        self.metrics.record(derived)
        if derived.recovery_result is not None:
            self._emit_handled(derived, derived.recovery_result)
        return derived

    def _internal_failure_record(
        self,
        cause: BaseException,
        parent: Optional[ErrorRecord],
        source: str,
    ) -> ErrorRecord:
        return ErrorRecord(
            type=ErrorType.UNKNOWN,
            severity=ErrorSeverity.HIGH,
            message=redact_text(f"Internal {source} failure: {cause}"),
            context={"source": source},
            timestamp=self._clock(),
            original_error_type=type(cause).__name__,
            parent_error_id=parent.id if parent else None,
        )

    def _emit_handled(self, record: ErrorRecord, result: RecoveryResult) -> None:
        try:
            if self.observability is None:
                self._log_record(record, result)
                return
            self.observability.log_error_handled(record, result)
            if record.severity == ErrorSeverity.CRITICAL:
                self.observability.log_critical_error(record, result)
        except Exception:
            logger.exception(f"Failed to emit handled event for {record.id}")

    def _log_record(self, record: ErrorRecord, result: RecoveryResult) -> None:
        strategy = result.recovery_strategy.value if result.recovery_strategy else "none"
        message = (
            f"Error {record.id} [{record.type.value}/{record.severity.value}]: "
            f"{record.message} -> {strategy} (can_recover={result.can_recover})"
        )
        if record.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
            logger.error(message)
        elif record.severity == ErrorSeverity.MEDIUM:
            logger.warning(message)
        else:
            logger.info(message)

    # =========================================================================
    # Circuit breakers
    # =========================================================================

    def check_circuit_breaker(self, service_key: str) -> CircuitStatus:
        """Query a circuit breaker; does not change its failure count."""
        return self.circuit_breakers.check_circuit_breaker(service_key)

    def reset_circuit_breaker(self, service_key: str) -> None:
        """Operator override: close a breaker."""
        self.circuit_breakers.reset_circuit_breaker(service_key)

    def add_circuit_listener(self, listener: Callable[[CircuitTransition], None]) -> None:
        self.circuit_breakers.add_listener(listener)

    async def execute_with_circuit_breaker(
        self,
        operation: Operation[T],
        service_key: str,
    ) -> T:
        """
        Run an operation guarded by a circuit breaker.

        Args:
            operation: Zero-argument callable (sync or async)
            service_key: Breaker to use

        Returns:
            Result of the operation

        Raises:
            CircuitOpenError: When the breaker is open, or half-open with
                another recovery call already running
        """
        status = self.circuit_breakers.acquire(service_key)
        if not status.can_proceed:
            raise CircuitOpenError(service_key, status.next_attempt)

        try:
            result = await _resolve(operation())
        except Exception:
            self.circuit_breakers.record_failure(service_key)
            raise
        except BaseException:
            # Cancelled: no verdict on the dependency
            self.circuit_breakers.release(service_key)
            raise

        self.circuit_breakers.record_success(service_key)
        return result

    # =========================================================================
    # Retry and transactions
    # =========================================================================

    def reset_retry(
        self,
        error_type: ErrorType,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Forget the retry count for a failure once the caller's retried
        operation has succeeded.

        Args:
            error_type: Type the failures were reported as
            context: Same context used when reporting them
        """
        retry_key = build_retry_key(error_type, context or {})
        self.retry_executor.reset(retry_key)
        logger.debug(f"Retry count reset for {retry_key}")

    async def execute_with_retry(
        self,
        operation: Operation[T],
        max_retries: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> T:
        """
        Run an operation, retrying with exponential backoff.

        The first attempt is followed by up to max_retries retries; the
        delay before retry n is base_delay * 2^(n-1).

        Args:
            operation: Zero-argument callable (sync or async)
            max_retries: Retry limit (defaults to config)
            context: Context reported if every attempt fails

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The last failure, after it has been reported
        """
        limit = self.config.retry.max_retries if max_retries is None else max_retries
        attempt = 0

        while True:
            try:
                result = await _resolve(operation())
                if attempt > 0:
                    logger.info(f"Operation succeeded after {attempt + 1} attempts")
                return result
            except Exception as e:
                last_error = e
                attempt += 1
                if attempt > limit:
                    break
                delay_ms = self.retry_executor.compute_delay_ms(attempt)
                logger.warning(
                    f"Operation failed (attempt {attempt}/{limit + 1}), "
                    f"retrying in {delay_ms}ms: {e}"
                )
                await self._sleep(delay_ms / 1000)

        logger.error(f"Operation failed after {attempt} attempts: {last_error}")
        await self.handle_error(
            {
                "type": ErrorType.UNKNOWN,
                "severity": ErrorSeverity.HIGH,
                "message": f"Operation failed after {attempt} attempts",
                "original_error": last_error,
            },
            context,
        )
        raise last_error

    async def execute_transaction(
        self,
        operation: Operation[T],
        rollback: Optional[Operation[Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> T:
        """
        Run a transaction; report failures without rolling back.

        Args:
            operation: Zero-argument callable (sync or async)
            rollback: Compensating action, run only via rollback_transaction
            context: Caller context for the report

        Returns:
            Result of the operation

        Raises:
            TransactionFailed: Carries error_id for rollback_transaction
        """
        try:
            return await _resolve(operation())
        except Exception as e:
            report_context: Dict[str, Any] = {
                "operation": getattr(operation, "__name__", type(operation).__name__),
            }
            report_context.update(context or {})
            result = await self.handle_error(
                {
                    "type": ErrorType.TRANSACTION,
                    "severity": ErrorSeverity.HIGH,
                    "message": "Transaction failed",
                    "original_error": e,
                },
                report_context,
            )
            if rollback is not None:
                self._remember_rollback(result.error_id, rollback)
            raise TransactionFailed(result.error_id, rollback is not None) from e

    async def rollback_transaction(self, error_id: str) -> None:
        """
        Run the rollback registered for a failed transaction.

        Raises:
            RollbackUnavailable: If no rollback is pending for error_id
            Exception: The rollback's own failure, after it is reported
        """
        rollback = self._pending_rollbacks.pop(error_id, None)
        if rollback is None:
            raise RollbackUnavailable(f"No rollback available for {error_id}")

        try:
            await _resolve(rollback())
        except Exception as e:
            await self.handle_error(
                {
                    "type": ErrorType.TRANSACTION,
                    "severity": ErrorSeverity.CRITICAL,
                    "message": "Rollback failed",
                    "original_error": e,
                },
                {"transaction_error_id": error_id},
            )
            raise

        logger.info(f"Transaction {error_id} rolled back successfully")

    def can_rollback(self, error_id: str) -> bool:
        return error_id in self._pending_rollbacks

    def _remember_rollback(self, error_id: str, rollback: Operation[Any]) -> None:
        self._pending_rollbacks[error_id] = rollback
        while len(self._pending_rollbacks) > self.config.history.capacity:
            dropped, _ = self._pending_rollbacks.popitem(last=False)
            logger.warning(f"Dropped pending rollback for {dropped}")

    # =========================================================================
    # Fallbacks, degradation, interventions
    # =========================================================================

    def register_fallback_service(
        self,
        service_type: str,
        operation: FallbackOperation,
    ) -> None:
        """Register the fallback for a service type (last wins)."""
        self.fallbacks.register_fallback_service(service_type, operation)

    def restore_service(self) -> DegradationOutcome:
        """Explicitly return from degraded mode to full functionality."""
        return self.degradation.restore_service()

    @property
    def degradation_level(self) -> DegradationLevel:
        return self.degradation.level

    def add_intervention_listener(self, listener: InterventionListener) -> None:
        """Register a callback for errors that need a human."""
        self._intervention_listeners.append(listener)

    # =========================================================================
    # Read models
    # =========================================================================

    def get_error_statistics(
        self,
        time_window: Union[timedelta, float, None] = None,
    ) -> ErrorStatistics:
        return self.metrics.get_error_statistics(time_window)

    def calculate_system_health(
        self,
        statistics: Optional[ErrorStatistics] = None,
    ) -> SystemHealth:
        """Health score for the given (or default-window) statistics."""
        statistics = statistics or self.metrics.get_error_statistics()
        return self.health_monitor.calculate_system_health(
            statistics,
            circuits_degraded=self.circuit_breakers.has_non_closed(),
        )

    def get_error_recovery_dashboard(
        self,
        time_window: Union[timedelta, float, None] = None,
    ) -> RecoveryDashboard:
        """Read-only aggregate for the recovery dashboard, recomputed per call."""
        statistics = self.metrics.get_error_statistics(time_window)
        circuit_states = self.circuit_breakers.get_all_states()
        circuits_degraded = any(
            status.state != CircuitState.CLOSED for status in circuit_states.values()
        )
        health = self.health_monitor.calculate_system_health(
            statistics, circuits_degraded=circuits_degraded
        )
        recent = [
            record.to_summary()
            for record in self.metrics.recent_errors(
                self.config.history.recent_errors_limit
            )
        ]

        return RecoveryDashboard(
            statistics=statistics,
            circuit_states=circuit_states,
            system_health=health,
            recent_errors=recent,
            recovery_recommendations=self.health_monitor.build_recommendations(
                statistics, circuit_states, self.degradation.level, health
            ),
            degradation=self.degradation.current(),
            generated_at=self._clock(),
        )

    def dispose(self) -> None:
        """Drop all engine state (history, breakers, retries, fallbacks)."""
        self.metrics.clear()
        self.circuit_breakers.clear()
        self.retry_executor.clear()
        self.fallbacks.clear()
        self.degradation.restore_service()
        self._pending_rollbacks.clear()
        logger.info("Resilience engine disposed")


def _normalize_error_input(
    error: ErrorInput,
) -> Tuple[str, Optional[BaseException], Any, Any, Mapping[str, Any]]:
    """Split a caller report into message, exception, type, severity, context."""
    if isinstance(error, BaseException):
        return (str(error) or type(error).__name__, error, None, None, {})

    if isinstance(error, Mapping):
        original = error.get("original_error", error.get("error"))
        if not isinstance(original, BaseException):
            original = None
        message = error.get("message")
        if message is None or str(message).strip() == "":
            message = str(original) if original is not None else DEFAULT_MESSAGE
        embedded = error.get("context")
        return (
            str(message),
            original,
            error.get("type"),
            error.get("severity"),
            embedded if isinstance(embedded, Mapping) else {},
        )

    if isinstance(error, str) and error.strip():
        return (error, None, None, None, {})

    return (DEFAULT_MESSAGE, None, None, None, {})


async def _resolve(value: Union[T, Awaitable[T]]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


def create_engine(
    config: Optional[EngineConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
    **dependencies: Any,
) -> ResilienceEngine:
    """
    Build a ResilienceEngine from a config object or YAML file.

    Args:
        config: Ready configuration (wins over config_path)
        config_path: YAML file to load
        profile: Optional profile merged on top of the file
        base_path: Base path for relative config paths
        **dependencies: Passed through to ResilienceEngine

    Returns:
        Configured engine
    """
    if config is None and config_path is not None:
        config = load_config(config_path, profile=profile, base_path=base_path)
    return ResilienceEngine(config=config, **dependencies)
