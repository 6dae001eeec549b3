"""
Health Monitor - System Health Score and Recommendations.

Provides:
    - 0-100 health score from windowed error statistics
    - Health bands (excellent / good / fair / poor / critical)
    - Operator recommendations for the recovery dashboard

Design Notes:
    - Weighted penalties come from HealthSettings
    - A flat penalty applies while any circuit breaker is not CLOSED
    - Logs anomalies via ObservabilityManager if provided
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from recovery_engine.config.models import HealthSettings
from recovery_engine.domain.entities import (
    CircuitState,
    DegradationLevel,
    ErrorSeverity,
    ErrorType,
)
from recovery_engine.domain.value_objects import (
    CircuitStatus,
    ErrorStatistics,
    SystemHealth,
)

logger = logging.getLogger(__name__)

# (lower bound, status), checked top to bottom
HEALTH_BANDS = [
    (90, "excellent"),
    (75, "good"),
    (60, "fair"),
    (40, "poor"),
    (0, "critical"),
]


def health_band(score: int) -> str:
    """Map a score to its band."""
    for lower_bound, status in HEALTH_BANDS:
        if score >= lower_bound:
            return status
    return "critical"


class HealthMonitor:
    """
    Scores system health from error statistics and circuit status.

    Weights:
        CRITICAL x20, HIGH x10, MEDIUM x5, LOW x2, non-closed breaker 15
    """

    def __init__(
        self,
        settings: Optional[HealthSettings] = None,
        observability: Optional[Any] = None,
    ) -> None:
        """
        Initialize health monitor.

        Args:
            settings: Penalty weights
            observability: ObservabilityManager for logging (optional)
        """
        self.settings = settings or HealthSettings()
        self.observability = observability

    def calculate_system_health(
        self,
        statistics: ErrorStatistics,
        circuits_degraded: bool = False,
    ) -> SystemHealth:
        """
        Compute the health score.

        Args:
            statistics: Windowed error statistics
            circuits_degraded: True if any breaker is OPEN or HALF_OPEN

        Returns:
            SystemHealth with score clamped to 0-100 and its band
        """
        by_severity = statistics.by_severity
        penalties = {
            ErrorSeverity.CRITICAL: self.settings.critical_penalty,
            ErrorSeverity.HIGH: self.settings.high_penalty,
            ErrorSeverity.MEDIUM: self.settings.medium_penalty,
            ErrorSeverity.LOW: self.settings.low_penalty,
        }

        score = 100
        for severity, weight in penalties.items():
            score -= by_severity.get(severity.value, 0) * weight

        if circuits_degraded:
            score -= self.settings.circuit_penalty

        score = max(0, min(100, score))
        health = SystemHealth(score=score, status=health_band(score))

        if health.status in ("poor", "critical"):
            self._log_anomaly(health, statistics)

        return health

    def build_recommendations(
        self,
        statistics: ErrorStatistics,
        circuit_states: Dict[str, CircuitStatus],
        degradation_level: DegradationLevel,
        health: SystemHealth,
    ) -> List[str]:
        """
        Derive operator recommendations, most urgent first.

        Args:
            statistics: Windowed error statistics
            circuit_states: Status of every known breaker
            degradation_level: Current degradation level
            health: Score computed from the same statistics

        Returns:
            List of human-readable recommendations (may be empty)
        """
        recommendations: List[str] = []
        by_type = statistics.by_type
        critical = statistics.by_severity.get(ErrorSeverity.CRITICAL.value, 0)

        if critical:
            recommendations.append(
                f"Review {critical} critical error(s) awaiting user intervention"
            )

        for key, status in circuit_states.items():
            if status.state == CircuitState.OPEN:
                when = status.next_attempt.isoformat() if status.next_attempt else "soon"
                recommendations.append(
                    f"Investigate service '{key}': circuit breaker is open "
                    f"until {when}"
                )
            elif status.state == CircuitState.HALF_OPEN:
                recommendations.append(
                    f"Service '{key}' is being retried; reset its circuit breaker "
                    f"once the dependency is confirmed healthy"
                )

        if degradation_level != DegradationLevel.NONE:
            recommendations.append(
                f"Degradation level is {degradation_level.value}; restore service "
                f"after confirming recovery"
            )

        network_errors = by_type.get(ErrorType.NETWORK.value, 0) + by_type.get(
            ErrorType.TIMEOUT.value, 0
        )
        if statistics.total and network_errors / statistics.total >= 0.5:
            recommendations.append(
                "Network and timeout errors dominate; check connectivity and "
                "upstream latency"
            )

        if by_type.get(ErrorType.AUTHENTICATION.value, 0):
            recommendations.append(
                "Authentication failures reported; verify session handling and "
                "credentials"
            )

        if by_type.get(ErrorType.RATE_LIMIT.value, 0):
            recommendations.append(
                "Rate limits hit; reduce request volume or raise provider quotas"
            )

        if by_type.get(ErrorType.DATA_CORRUPTION.value, 0):
            recommendations.append(
                "Data corruption detected; validate cached and persisted payloads"
            )

        if statistics.total >= 10 and statistics.recovery_success_rate < 0.5:
            recommendations.append(
                f"Automated recovery rate is {statistics.recovery_success_rate:.0%}; "
                f"register fallbacks for the most frequent failing services"
            )

        if not recommendations and health.status in ("excellent", "good"):
            recommendations.append("No action needed; system is operating normally")

        return recommendations

    def _log_anomaly(self, health: SystemHealth, statistics: ErrorStatistics) -> None:
        message = f"System health {health.status} (score {health.score})"
        if self.observability:
            self.observability.log_event(
                "health_degraded",
                {
                    "score": health.score,
                    "status": health.status,
                    "total_errors": statistics.total,
                },
                level="warning",
            )
        else:
            logger.warning(message)
