"""
Unit Tests for FallbackRegistry.

Test Aspects Covered:
    ✅ Business Logic: Registration, invocation, service inference
    ✅ Error Handling: Failing fallbacks raise FallbackFailed
    ✅ Edge Cases: Async fallbacks, record-accepting fallbacks, replacement
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from recovery_engine.domain.entities import ErrorType
from recovery_engine.resilience.exceptions import FallbackFailed
from recovery_engine.resilience.fallback import (
    NO_FALLBACK_REASON,
    FallbackRegistry,
    register_default_fallbacks,
)


@pytest.fixture
def registry() -> FallbackRegistry:
    return FallbackRegistry()


class TestRegistration:
    """Test registering fallbacks."""

    def test_register_and_lookup(self, registry: FallbackRegistry) -> None:
        # Act
        registry.register_fallback_service("api", lambda: "cached")

        # Assert
        assert registry.has_fallback("api") is True
        assert registry.has_fallback("storage") is False

    def test_rejects_non_callable(self, registry: FallbackRegistry) -> None:
        with pytest.raises(TypeError):
            registry.register_fallback_service("api", "not callable")

    def test_unregister(self, registry: FallbackRegistry) -> None:
        # Arrange
        registry.register_fallback_service("api", lambda: None)

        # Act
        registry.unregister("api")

        # Assert
        assert registry.registered_services() == []

    def test_default_fallbacks(self, registry: FallbackRegistry) -> None:
        # Act
        register_default_fallbacks(registry)

        # Assert
        assert registry.registered_services() == ["api", "auth", "storage"]


@pytest.mark.asyncio
class TestExecuteFallback:
    """Test invoking fallbacks."""

    async def test_no_fallback(self, registry: FallbackRegistry, make_record) -> None:
        """
        SCENARIO: No fallback registered for the service
        EXPECTED: Unsuccessful outcome with a reason, no exception
        """
        # Act
        outcome = await registry.execute_fallback(make_record(), "api")

        # Assert
        assert outcome.success is False
        assert outcome.reason == NO_FALLBACK_REASON

    async def test_sync_fallback_called_once(self, registry, make_record) -> None:
        """
        SCENARIO: Registered fallback wrapped once
        EXPECTED: Invoked exactly once, result returned
        """
        # Arrange
        fallback = Mock(return_value={"status": "cached"})
        registry.register_fallback_service("api", fallback)

        # Act
        outcome = await registry.execute_fallback(make_record(), "api")

        # Assert
        assert fallback.call_count == 1
        assert outcome.success is True
        assert outcome.result == {"status": "cached"}

    async def test_async_fallback_awaited(self, registry, make_record) -> None:
        # Arrange
        async def from_cache():
            return [1, 2, 3]

        registry.register_fallback_service("api", from_cache)

        # Act
        outcome = await registry.execute_fallback(make_record(), "api")

        # Assert
        assert outcome.result == [1, 2, 3]

    async def test_fallback_receives_record(self, registry, make_record) -> None:
        # Arrange
        seen = []
        registry.register_fallback_service("api", lambda record: seen.append(record.id))
        record = make_record()

        # Act
        await registry.execute_fallback(record, "api")

        # Assert
        assert seen == [record.id]

    async def test_last_registration_wins(self, registry, make_record) -> None:
        # Arrange
        registry.register_fallback_service("api", lambda: "first")
        registry.register_fallback_service("api", lambda: "second")

        # Act
        outcome = await registry.execute_fallback(make_record(), "api")

        # Assert
        assert outcome.result == "second"

    async def test_failing_fallback_raises(self, registry, make_record) -> None:
        """
        SCENARIO: Fallback raises
        EXPECTED: FallbackFailed chained to the original exception
        """
        # Arrange
        registry.register_fallback_service("api", Mock(side_effect=IOError("disk")))

        # Act & Assert
        with pytest.raises(FallbackFailed) as exc_info:
            await registry.execute_fallback(make_record(), "api")

        assert exc_info.value.service_type == "api"
        assert isinstance(exc_info.value.__cause__, IOError)

    async def test_service_type_inferred(self, registry, make_record) -> None:
        # Arrange
        registry.register_fallback_service("api", lambda: "cached")
        record = make_record(ErrorType.UNKNOWN, endpoint="/api/portfolio")

        # Act
        outcome = await registry.execute_fallback(record)

        # Assert
        assert outcome.service_type == "api"
        assert outcome.success is True
