"""
Retry Executor - Exponential Backoff Bookkeeping.

The executor never sleeps and never runs the operation. Each call for a
retry key counts one attempt and returns the delay the caller should wait
before trying again. Going past max_retries is terminal and clears the key.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from recovery_engine.config.models import RetrySettings
from recovery_engine.domain.entities import ErrorType, RetryState
from recovery_engine.domain.value_objects import RetryDecision

logger = logging.getLogger(__name__)

_FINGERPRINT_KEYS = ("endpoint", "service_type", "component")


def build_retry_key(error_type: ErrorType, context: Mapping[str, Any]) -> str:
    """Opaque retry key: error type plus the first identifying context value."""
    for key in _FINGERPRINT_KEYS:
        value = context.get(key)
        if value:
            return f"{error_type.value}:{value}"
    return f"{error_type.value}:global"


class RetryExecutor:
    """Per-key retry counters with exponential backoff."""

    def __init__(self, settings: Optional[RetrySettings] = None) -> None:
        self.settings = settings or RetrySettings()
        self._states: Dict[str, RetryState] = {}
        self._lock = Lock()

    @property
    def max_retries(self) -> int:
        return self.settings.max_retries

    def compute_delay_ms(self, attempt: int) -> int:
        """Delay before the given attempt (1-based): base * factor^(attempt-1)."""
        return int(
            self.settings.base_delay_ms
            * (self.settings.exponential_base ** (max(attempt, 1) - 1))
        )

    def execute_retry(
        self,
        retry_key: str,
        max_retries: Optional[int] = None,
    ) -> RetryDecision:
        """
        Count one retry attempt for a key.

        Args:
            retry_key: Opaque key (see build_retry_key)
            max_retries: Override for this key's limit

        Returns:
            RetryDecision with the backoff delay, or a terminal failure
            once the limit is exceeded
        """
        with self._lock:
            state = self._states.get(retry_key)
            if state is None:
                limit = self.max_retries if max_retries is None else max_retries
                state = RetryState(retry_key=retry_key, max_retries=limit)
                self._states[retry_key] = state

            attempt = state.attempt_count + 1

            if attempt > state.max_retries:
                del self._states[retry_key]
                logger.warning(
                    f"Retry limit reached for {retry_key} "
                    f"({state.max_retries} attempts)"
                )
                return RetryDecision(
                    retry_key=retry_key,
                    success=False,
                    retry_count=attempt,
                    max_retries=state.max_retries,
                    terminal=True,
                )

            state.attempt_count = attempt

        delay_ms = self.compute_delay_ms(attempt)
        logger.info(
            f"Retrying {retry_key} (attempt {attempt}/{state.max_retries}) "
            f"after {delay_ms}ms"
        )
        return RetryDecision(
            retry_key=retry_key,
            success=True,
            retry_count=attempt,
            max_retries=state.max_retries,
            delay_ms=delay_ms,
        )

    def get_retry_count(self, retry_key: str) -> int:
        with self._lock:
            state = self._states.get(retry_key)
            return state.attempt_count if state else 0

    def retries_remaining(self, retry_key: str) -> bool:
        """True if another execute_retry would not be terminal."""
        with self._lock:
            state = self._states.get(retry_key)
            if state is None:
                return self.max_retries > 0
            return state.attempt_count < state.max_retries

    def reset(self, retry_key: str) -> None:
        """Forget a key, e.g. after the retried operation succeeded."""
        with self._lock:
            self._states.pop(retry_key, None)

    def clear(self) -> None:
        with self._lock:
            self._states.clear()
