"""
Observability Manager - Structured Recovery Events.

Provides:
    - Structured JSON logging via structlog (routed through stdlib logging)
    - Correlation ID propagation
    - In-memory event and counter store for the dashboard

Design Notes:
    - Thread-safe event storage
    - Correlation IDs live in a ContextVar, so concurrent asyncio tasks
      each see their own
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

import structlog

from recovery_engine.domain.entities import (
    DegradationLevel,
    ErrorRecord,
    ErrorSeverity,
)
from recovery_engine.domain.value_objects import CircuitTransition, RecoveryResult

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_SEVERITY_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: "error",
    ErrorSeverity.HIGH: "error",
    ErrorSeverity.MEDIUM: "warning",
    ErrorSeverity.LOW: "info",
}


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def configure_structlog(use_json: bool = True) -> None:
    """Route structlog through stdlib logging with JSON or console rendering."""
    processors: List[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if use_json:
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


class ObservabilityManager:
    """
    Structured event log for the resilience engine.

    Every handled error, breaker transition and degradation change is
    logged and kept in a bounded in-memory buffer.
    """

    def __init__(
        self,
        service_name: str = "recovery_engine",
        use_json: bool = True,
        max_events: int = 1000,
        configure: bool = True,
    ) -> None:
        """
        Initialize observability manager.

        Args:
            service_name: Logger name for emitted events
            use_json: Render JSON (False: human-readable console output)
            max_events: Size of the in-memory event buffer
            configure: Apply structlog configuration
        """
        self.service_name = service_name
        self.use_json = use_json
        self._events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

        if configure:
            configure_structlog(use_json)
        self._logger = structlog.get_logger(service_name)

    def set_correlation_id(self, correlation_id: str) -> None:
        """Set correlation ID for current context."""
        set_correlation_id(correlation_id)
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    def generate_correlation_id(self) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())
        self.set_correlation_id(correlation_id)
        return correlation_id

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Log a structured event.

        Args:
            event_type: Type of event (e.g., "error_handled")
            data: Additional event data
            level: Log level (debug, info, warning, error)
        """
        event_data = {
            "event_type": event_type,
            "timestamp": datetime.now().isoformat(),
            "correlation_id": get_correlation_id(),
            **(data or {}),
        }

        with self._lock:
            self._events.append(event_data)
            self._counters[event_type] = self._counters.get(event_type, 0) + 1

        log_method = getattr(self._logger, level.lower(), self._logger.info)
        log_method(event_type, **{k: v for k, v in event_data.items() if k != "event_type"})

    # =========================================================================
    # Recovery events
    # =========================================================================

    def log_error_handled(self, record: ErrorRecord, result: RecoveryResult) -> None:
        """Log a handled error at a level matching its severity."""
        self.log_event(
            "error_handled",
            {
                "error_id": record.id,
                "error_type": record.type.value,
                "severity": record.severity.value,
                "message": record.message,
                "recovery_strategy": (
                    result.recovery_strategy.value if result.recovery_strategy else None
                ),
                "can_recover": result.can_recover,
                "context": record.context,
            },
            level=_SEVERITY_LOG_LEVELS.get(record.severity, "info"),
        )

    def log_critical_error(self, record: ErrorRecord, result: RecoveryResult) -> None:
        """Audit entry for critical errors."""
        self.log_event(
            "critical_error",
            {
                "error_id": record.id,
                "error_type": record.type.value,
                "message": record.message,
                "context": record.context,
                "recovery_success": result.can_recover,
            },
            level="error",
        )

    def log_circuit_transition(self, transition: CircuitTransition) -> None:
        level = "warning" if transition.current.value == "open" else "info"
        self.log_event(
            "circuit_state_changed",
            {
                "service_key": transition.service_key,
                "previous": transition.previous.value,
                "current": transition.current.value,
                "failure_count": transition.failure_count,
            },
            level=level,
        )

    def log_degradation_change(
        self,
        previous: DegradationLevel,
        current: DegradationLevel,
    ) -> None:
        self.log_event(
            "degradation_changed",
            {"previous": previous.value, "current": current.value},
            level="warning" if current.rank > previous.rank else "info",
        )

    def log_intervention_required(
        self,
        record: ErrorRecord,
        intervention_type: str,
    ) -> None:
        self.log_event(
            "intervention_required",
            {
                "error_id": record.id,
                "intervention_type": intervention_type,
                "message": record.message,
                "severity": record.severity.value,
            },
            level="warning",
        )

    def get_events(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get recorded events, optionally filtered by type."""
        with self._lock:
            events = list(self._events)
        if event_type is None:
            return events
        return [e for e in events if e["event_type"] == event_type]

    def get_counters(self) -> Dict[str, int]:
        """Number of events per event type since the last clear."""
        with self._lock:
            return dict(self._counters)

    def clear(self) -> None:
        """Clear all recorded events and counters."""
        with self._lock:
            self._events.clear()
            self._counters.clear()
