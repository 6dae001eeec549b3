"""
Circuit Breaker Manager - Per-Service Failure Guard.

Provides:
    - One breaker per service key (closed / open / half-open)
    - Lazy cooldown: OPEN becomes HALF_OPEN on the next check, no timers
    - One trial call at a time while HALF_OPEN (acquire / release)
    - Transition notifications for dependent UI

Design Notes:
    - Checking a breaker never touches failure_count
    - A failure while HALF_OPEN reopens the breaker immediately
    - reset_circuit_breaker is a manual override and always closes
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from threading import RLock
from typing import Callable, Dict, List, Optional

from recovery_engine.config.models import CircuitBreakerSettings
from recovery_engine.domain.entities import CircuitBreakerState, CircuitState
from recovery_engine.domain.value_objects import CircuitStatus, CircuitTransition

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
CircuitListener = Callable[[CircuitTransition], None]


class CircuitBreakerManager:
    """
    Tracks circuit breakers keyed by service.

    Features:
        - check / record_failure / record_success / reset
        - Listener notification on every state change
    """

    def __init__(
        self,
        settings: Optional[CircuitBreakerSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize circuit breaker manager.

        Args:
            settings: Threshold and cooldown configuration
            clock: Time source (defaults to datetime.now)
        """
        self.settings = settings or CircuitBreakerSettings()
        self._clock = clock or datetime.now
        self._breakers: Dict[str, CircuitBreakerState] = {}
        self._listeners: List[CircuitListener] = []
        self._lock = RLock()

    @property
    def threshold(self) -> int:
        return self.settings.failure_threshold

    def add_listener(self, listener: CircuitListener) -> None:
        """Register a callback for state transitions."""
        self._listeners.append(listener)

    def remove_listener(self, listener: CircuitListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def check_circuit_breaker(self, service_key: str) -> CircuitStatus:
        """
        Query a breaker.

        An OPEN breaker whose cooldown has elapsed reports HALF_OPEN.
        While a trial call admitted by acquire() is running, HALF_OPEN
        reports can_proceed=False.

        Args:
            service_key: Protected dependency

        Returns:
            CircuitStatus for the breaker
        """
        with self._lock:
            breaker = self._breakers.get(service_key)
            if breaker is None:
                return CircuitStatus(
                    service_key=service_key,
                    state=CircuitState.CLOSED,
                    can_proceed=True,
                )
            self._refresh(breaker)
            return self._status(breaker)

    def acquire(self, service_key: str) -> CircuitStatus:
        """
        Ask permission for one protected call.

        CLOSED always admits. HALF_OPEN admits a single trial call and rejects
        other callers until that call reports success, failure or release.

        Args:
            service_key: Protected dependency

        Returns:
            Status as seen before this call took the trial slot
        """
        with self._lock:
            breaker = self._breakers.get(service_key)
            if breaker is None:
                return self.check_circuit_breaker(service_key)
            self._refresh(breaker)
            status = self._status(breaker)
            if breaker.state == CircuitState.HALF_OPEN and status.can_proceed:
                breaker.trial_in_flight = True
                logger.info(f"Circuit {service_key} admitted trial call")
            return status

    def release(self, service_key: str) -> None:
        """Give back a trial slot without recording an outcome."""
        with self._lock:
            breaker = self._breakers.get(service_key)
            if breaker is not None:
                breaker.trial_in_flight = False

    def record_failure(self, service_key: str) -> CircuitStatus:
        """
        Record a failed call against a service.

        Args:
            service_key: Protected dependency

        Returns:
            Status after the failure was applied
        """
        with self._lock:
            breaker = self._get_or_create(service_key)
            self._refresh(breaker)
            now = self._clock()

            breaker.failure_count += 1
            breaker.last_failure_time = now
            breaker.trial_in_flight = False

            if breaker.state == CircuitState.HALF_OPEN:
                self._open(breaker, now)
                logger.warning(
                    f"Circuit {service_key} re-opened after failed trial call"
                )
            elif breaker.failure_count >= self.threshold:
                was_open = breaker.state == CircuitState.OPEN
                self._open(breaker, now)
                if not was_open:
                    logger.warning(
                        f"Circuit {service_key} opened after "
                        f"{breaker.failure_count} failures"
                    )

            return self._status(breaker)

    def record_success(self, service_key: str) -> CircuitStatus:
        """Record a successful call; closes the breaker."""
        with self._lock:
            breaker = self._breakers.get(service_key)
            if breaker is None:
                return self.check_circuit_breaker(service_key)
            self._refresh(breaker)
            if breaker.state != CircuitState.CLOSED:
                logger.info(f"Circuit {service_key} closed after recovery")
            self._close(breaker)
            return self._status(breaker)

    def reset_circuit_breaker(self, service_key: str) -> None:
        """Manual override: close the breaker regardless of its state."""
        with self._lock:
            breaker = self._get_or_create(service_key)
            self._close(breaker)
            logger.info(f"Circuit {service_key} reset to closed state")

    def get_circuit_state(self, service_key: str) -> CircuitState:
        """Get current state of a circuit breaker."""
        return self.check_circuit_breaker(service_key).state

    def get_all_states(self) -> Dict[str, CircuitStatus]:
        """Status of every known breaker."""
        with self._lock:
            for breaker in self._breakers.values():
                self._refresh(breaker)
            return {
                key: self._status(breaker)
                for key, breaker in sorted(self._breakers.items())
            }

    def has_non_closed(self) -> bool:
        """True if any breaker is OPEN or HALF_OPEN."""
        return any(
            status.state != CircuitState.CLOSED
            for status in self.get_all_states().values()
        )

    def clear(self) -> None:
        with self._lock:
            self._breakers.clear()

    def _get_or_create(self, service_key: str) -> CircuitBreakerState:
        if service_key not in self._breakers:
            self._breakers[service_key] = CircuitBreakerState(service_key=service_key)
        return self._breakers[service_key]

    def _refresh(self, breaker: CircuitBreakerState) -> None:
        """Apply the lazy OPEN -> HALF_OPEN transition."""
        if breaker.state != CircuitState.OPEN:
            return
        if breaker.next_attempt_time is None or self._clock() >= breaker.next_attempt_time:
            self._transition(breaker, CircuitState.HALF_OPEN)
            logger.info(f"Circuit {breaker.service_key} entering half-open state")

    def _open(self, breaker: CircuitBreakerState, now: datetime) -> None:
        breaker.next_attempt_time = now + timedelta(
            seconds=self.settings.cooldown_seconds
        )
        breaker.trial_in_flight = False
        self._transition(breaker, CircuitState.OPEN)

    def _close(self, breaker: CircuitBreakerState) -> None:
        breaker.failure_count = 0
        breaker.last_failure_time = None
        breaker.next_attempt_time = None
        breaker.trial_in_flight = False
        self._transition(breaker, CircuitState.CLOSED)

    def _transition(self, breaker: CircuitBreakerState, new_state: CircuitState) -> None:
        previous = breaker.state
        breaker.state = new_state
        if previous == new_state:
            return
        self._notify(
            CircuitTransition(
                service_key=breaker.service_key,
                previous=previous,
                current=new_state,
                failure_count=breaker.failure_count,
                timestamp=self._clock(),
            )
        )

    def _notify(self, transition: CircuitTransition) -> None:
        for listener in list(self._listeners):
            try:
                listener(transition)
            except Exception:
                logger.exception(
                    f"Circuit listener failed for {transition.service_key}"
                )

    def _status(self, breaker: CircuitBreakerState) -> CircuitStatus:
        return CircuitStatus(
            service_key=breaker.service_key,
            state=breaker.state,
            can_proceed=(
                breaker.state == CircuitState.CLOSED
                or (
                    breaker.state == CircuitState.HALF_OPEN
                    and not breaker.trial_in_flight
                )
            ),
            failure_count=breaker.failure_count,
            next_attempt=(
                breaker.next_attempt_time
                if breaker.state == CircuitState.OPEN
                else None
            ),
        )
