"""
Fallback Registry - Alternate Operations per Service Type.

One fallback per service type, last registration wins. Fallbacks may be
plain callables or coroutine functions; failures are raised as
FallbackFailed so the caller can report them instead of losing them.
"""

from __future__ import annotations

import inspect
import logging
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from recovery_engine.domain.entities import ErrorRecord
from recovery_engine.domain.value_objects import FallbackOutcome
from recovery_engine.resilience.classifier import infer_service_type
from recovery_engine.resilience.exceptions import FallbackFailed

logger = logging.getLogger(__name__)

FallbackOperation = Callable[..., Union[Any, Awaitable[Any]]]

NO_FALLBACK_REASON = "no fallback registered"


class FallbackRegistry:
    """Maps service types to fallback operations."""

    def __init__(self) -> None:
        self._services: Dict[str, FallbackOperation] = {}
        self._lock = Lock()

    def register_fallback_service(
        self,
        service_type: str,
        operation: FallbackOperation,
    ) -> None:
        """
        Register (or replace) the fallback for a service type.

        Args:
            service_type: Service identifier, e.g. "api"
            operation: Callable invoked with no arguments, or with the
                ErrorRecord if it accepts one positional parameter
        """
        if not callable(operation):
            raise TypeError(f"Fallback for {service_type} must be callable")
        with self._lock:
            replaced = service_type in self._services
            self._services[service_type] = operation
        logger.debug(
            f"Fallback service {'replaced' if replaced else 'registered'} "
            f"for {service_type}"
        )

    def unregister(self, service_type: str) -> None:
        with self._lock:
            self._services.pop(service_type, None)

    def has_fallback(self, service_type: Optional[str]) -> bool:
        if not service_type:
            return False
        with self._lock:
            return service_type in self._services

    def registered_services(self) -> List[str]:
        with self._lock:
            return sorted(self._services)

    async def execute_fallback(
        self,
        record: ErrorRecord,
        service_type: Optional[str] = None,
    ) -> FallbackOutcome:
        """
        Invoke the fallback for the record's service type.

        Args:
            record: Error being recovered
            service_type: Explicit service type (inferred from context if None)

        Returns:
            FallbackOutcome wrapping the fallback result

        Raises:
            FallbackFailed: When the fallback operation raises
        """
        service_type = service_type or infer_service_type(record.context, record.type)

        with self._lock:
            operation = self._services.get(service_type)

        if operation is None:
            return FallbackOutcome(
                success=False,
                service_type=service_type,
                reason=NO_FALLBACK_REASON,
            )

        try:
            result = operation(*self._arguments_for(operation, record))
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Fallback service for {service_type} failed: {e}")
            raise FallbackFailed(service_type) from e

        logger.info(f"Fallback service activated for {service_type}")
        return FallbackOutcome(success=True, service_type=service_type, result=result)

    def clear(self) -> None:
        with self._lock:
            self._services.clear()

    @staticmethod
    def _arguments_for(operation: FallbackOperation, record: ErrorRecord) -> tuple:
        try:
            signature = inspect.signature(operation)
        except (TypeError, ValueError):
            return ()
        positional = [
            p
            for p in signature.parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
            and p.default is p.empty
        ]
        return (record,) if len(positional) == 1 else ()


def register_default_fallbacks(registry: FallbackRegistry) -> None:
    """Install the stock fallbacks for api, storage and auth."""
    registry.register_fallback_service(
        "api",
        lambda: {
            "status": "degraded",
            "message": "Using cached data due to API unavailability",
        },
    )
    registry.register_fallback_service(
        "storage",
        lambda: {
            "status": "memory_only",
            "message": "Using in-memory storage due to persistent storage issues",
        },
    )
    registry.register_fallback_service(
        "auth",
        lambda: {
            "status": "guest_mode",
            "message": "Authentication service unavailable, using guest mode",
        },
    )
