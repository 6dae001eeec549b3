"""
Error Metrics Aggregator - Bounded History and Statistics.

Provides:
    - Capacity-bounded error history with O(1) oldest-first eviction
    - Windowed statistics: counts by type / severity / strategy,
      ranked top errors, recovery success rate
    - Recent errors for the dashboard

Design Notes:
    - The history is a deque(maxlen=capacity); appends past capacity
      drop the oldest record
    - Statistics are recomputed on every call, nothing is cached
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Deque, Dict, List, Optional, Union

from recovery_engine.domain.entities import ErrorRecord, RecoveryStrategy
from recovery_engine.domain.value_objects import ErrorStatistics, TopError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
TimeWindow = Union[timedelta, float, int, None]

# Strategies whose successful outcome counts as an automated recovery
RECOVERABLE_STRATEGIES = frozenset({RecoveryStrategy.RETRY, RecoveryStrategy.FALLBACK})

DEFAULT_TIME_WINDOW = timedelta(hours=24)


class ErrorMetricsAggregator:
    """Keeps the error history and derives statistics from it."""

    def __init__(
        self,
        capacity: int = 1000,
        clock: Optional[Clock] = None,
        top_errors_limit: int = 5,
        default_time_window: timedelta = DEFAULT_TIME_WINDOW,
    ) -> None:
        """
        Initialize aggregator.

        Args:
            capacity: Maximum number of records kept
            clock: Time source (defaults to datetime.now)
            top_errors_limit: Length of the ranked top-errors list
            default_time_window: Window used when none is given
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.top_errors_limit = top_errors_limit
        self.default_time_window = default_time_window
        self._clock = clock or datetime.now
        self._history: Deque[ErrorRecord] = deque(maxlen=capacity)
        self._evicted = 0
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._history)

    @property
    def evicted_count(self) -> int:
        """Records dropped because the history was full."""
        return self._evicted

    def record(self, record: ErrorRecord) -> None:
        """Append a record, evicting the oldest when at capacity."""
        with self._lock:
            if len(self._history) == self.capacity:
                self._evicted += 1
            self._history.append(record)

    def history(self) -> List[ErrorRecord]:
        """Snapshot of the history, oldest first."""
        with self._lock:
            return list(self._history)

    def find(self, error_id: str) -> Optional[ErrorRecord]:
        with self._lock:
            for record in reversed(self._history):
                if record.id == error_id:
                    return record
        return None

    def recent_errors(self, limit: int = 10) -> List[ErrorRecord]:
        """Most recent records, newest first."""
        with self._lock:
            if limit <= 0:
                return []
            return list(reversed(self._history))[:limit]

    def get_error_statistics(self, time_window: TimeWindow = None) -> ErrorStatistics:
        """
        Aggregate the records inside a time window.

        Args:
            time_window: timedelta or seconds; defaults to 24 hours

        Returns:
            ErrorStatistics snapshot
        """
        window = _to_timedelta(time_window, self.default_time_window)
        window_start = self._clock() - window

        with self._lock:
            records = [r for r in self._history if r.timestamp >= window_start]

        by_type = Counter(r.type.value for r in records)
        by_severity = Counter(r.severity.value for r in records)
        by_strategy = Counter(
            r.recovery_strategy.value for r in records if r.recovery_strategy
        )

        top_errors = [
            TopError(type=error_type, count=count)
            for error_type, count in sorted(
                by_type.items(), key=lambda item: (-item[1], item[0])
            )[: self.top_errors_limit]
        ]

        return ErrorStatistics(
            total=len(records),
            by_type=dict(by_type),
            by_severity=dict(by_severity),
            by_strategy=dict(by_strategy),
            top_errors=top_errors,
            recovery_success_rate=_recovery_success_rate(records),
            time_window_seconds=window.total_seconds(),
        )

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
            self._evicted = 0


def _recovery_success_rate(records: List[ErrorRecord]) -> float:
    """Share of handled errors recovered automatically by RETRY or FALLBACK."""
    if not records:
        return 0.0
    recovered = sum(
        1
        for r in records
        if r.recovery_strategy in RECOVERABLE_STRATEGIES and r.can_recover
    )
    return recovered / len(records)


def _to_timedelta(value: TimeWindow, default: timedelta) -> timedelta:
    if value is None:
        return default
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=float(value))
