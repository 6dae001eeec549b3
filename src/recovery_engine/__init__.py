"""
Recovery Engine - Error Classification and Automated Recovery.

A resilience layer for a financial dashboard. Failures are classified into a
fixed taxonomy, recorded in a bounded history and routed to one recovery
strategy: retry with backoff, fallback service, circuit breaker, graceful
degradation or user intervention.

Architecture:
    - Dependency Injection for testability (clock, sleep, components)
    - Strategy selection as a priority-ordered rule list
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Error taxonomy, ErrorRecord and result value objects
    - resilience: Classifier, breakers, retry, fallbacks, degradation
    - observability: Error metrics, health score, structured events
    - facade: ResilienceEngine, the single entry point
    - config: Configuration models and loaders

Example:
    >>> from recovery_engine import create_engine
    >>> engine = create_engine(config_path="config/default.yaml")
    >>> result = await engine.handle_error(ConnectionError("offline"), {"component": "prices"})
    >>> print(result.recovery_strategy)

"""

import logging

__version__ = "1.0.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the recovery engine.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import recovery_engine
        >>> recovery_engine.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("recovery_engine").setLevel(level)


from recovery_engine.domain.entities import (  # noqa: E402
    ErrorSeverity,
    ErrorType,
    RecoveryStrategy,
)
from recovery_engine.facade.resilience_facade import (  # noqa: E402
    ResilienceEngine,
    create_engine,
)

__all__ = [
    "__version__",
    "configure_logging",
    "ErrorSeverity",
    "ErrorType",
    "RecoveryStrategy",
    "ResilienceEngine",
    "create_engine",
]
