"""
Degradation Controller - Process-Wide Feature Reduction.

Severity drives the level: CRITICAL -> SEVERE, HIGH -> MODERATE, anything
lower leaves the level alone. The level only escalates; restore_service()
is the only way back to NONE. There is no timer-based auto-heal.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Dict, List, Optional

from recovery_engine.domain.entities import DegradationLevel, ErrorRecord, ErrorSeverity
from recovery_engine.domain.value_objects import DegradationConfig, DegradationOutcome

logger = logging.getLogger(__name__)

DegradationListener = Callable[[DegradationLevel, DegradationLevel], None]

LEVEL_CONFIGS: Dict[DegradationLevel, DegradationConfig] = {
    DegradationLevel.NONE: DegradationConfig(),
    DegradationLevel.MODERATE: DegradationConfig(
        disable_animations=True,
        reduced_features=True,
    ),
    DegradationLevel.SEVERE: DegradationConfig(
        disable_animations=True,
        reduced_features=True,
        offline_mode=True,
    ),
}

_SEVERITY_TARGETS = {
    ErrorSeverity.CRITICAL: DegradationLevel.SEVERE,
    ErrorSeverity.HIGH: DegradationLevel.MODERATE,
}


class DegradationController:
    """Holds the single degradation level for the process."""

    def __init__(self) -> None:
        self._level = DegradationLevel.NONE
        self._listeners: List[DegradationListener] = []
        self._lock = Lock()

    @property
    def level(self) -> DegradationLevel:
        return self._level

    @property
    def config(self) -> DegradationConfig:
        return LEVEL_CONFIGS[self._level]

    @property
    def is_degraded(self) -> bool:
        return self._level != DegradationLevel.NONE

    def add_listener(self, listener: DegradationListener) -> None:
        """Register a callback(previous, current) for level changes."""
        self._listeners.append(listener)

    def current(self) -> DegradationOutcome:
        return DegradationOutcome(level=self._level, config=self.config)

    def execute_graceful_degradation(self, record: ErrorRecord) -> DegradationOutcome:
        """
        Escalate the degradation level for an error.

        Args:
            record: Error whose severity decides the target level

        Returns:
            DegradationOutcome with the resulting level and its flags
        """
        target = _SEVERITY_TARGETS.get(record.severity)
        with self._lock:
            previous = self._level
            if target is not None and target.rank > previous.rank:
                self._level = target
            current = self._level

        changed = current != previous
        if changed:
            logger.warning(
                f"Graceful degradation activated: {current.value} "
                f"(was {previous.value}, error {record.id})"
            )
            self._notify(previous, current)

        return DegradationOutcome(
            success=True,
            level=current,
            config=LEVEL_CONFIGS[current],
            changed=changed,
        )

    def restore_service(self) -> DegradationOutcome:
        """Return to full functionality."""
        with self._lock:
            previous = self._level
            self._level = DegradationLevel.NONE

        if previous != DegradationLevel.NONE:
            logger.info("Service restored from degraded state")
            self._notify(previous, DegradationLevel.NONE)

        return DegradationOutcome(
            level=DegradationLevel.NONE,
            config=LEVEL_CONFIGS[DegradationLevel.NONE],
            changed=previous != DegradationLevel.NONE,
        )

    def _notify(self, previous: DegradationLevel, current: DegradationLevel) -> None:
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                logger.exception("Degradation listener failed")
