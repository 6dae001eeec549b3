"""
Unit Tests for RetryExecutor.

Test Aspects Covered:
    ✅ Business Logic: Exponential backoff, terminal exhaustion
    ✅ Edge Cases: Zero retries, per-key overrides, key fingerprinting
"""

from __future__ import annotations

import pytest

from recovery_engine.config.models import RetrySettings
from recovery_engine.domain.entities import ErrorType
from recovery_engine.resilience.retry import RetryExecutor, build_retry_key


@pytest.fixture
def executor() -> RetryExecutor:
    return RetryExecutor(RetrySettings(max_retries=3, base_delay_ms=1000))


class TestBackoff:
    """Test the delay policy."""

    def test_delays_double(self, executor: RetryExecutor) -> None:
        assert executor.compute_delay_ms(1) == 1000
        assert executor.compute_delay_ms(2) == 2000
        assert executor.compute_delay_ms(3) == 4000

    def test_custom_base(self) -> None:
        # Arrange
        executor = RetryExecutor(
            RetrySettings(base_delay_ms=100, exponential_base=3.0)
        )

        # Assert
        assert executor.compute_delay_ms(3) == 900


class TestExecuteRetry:
    """Test attempt counting."""

    def test_three_retries_then_terminal(self, executor: RetryExecutor) -> None:
        """
        SCENARIO: Same key retried four times with max_retries=3
        EXPECTED: 1000/2000/4000ms, then a terminal failure
        """
        # Act
        decisions = [executor.execute_retry("network:prices") for _ in range(4)]

        # Assert
        assert [d.delay_ms for d in decisions[:3]] == [1000, 2000, 4000]
        assert all(d.success for d in decisions[:3])
        assert decisions[3].success is False
        assert decisions[3].terminal is True
        assert decisions[3].delay_ms is None

    def test_terminal_clears_key(self, executor: RetryExecutor) -> None:
        """
        SCENARIO: Retry key exhausted
        EXPECTED: Counter removed, next retry starts from attempt 1
        """
        # Arrange
        for _ in range(4):
            executor.execute_retry("network:prices")

        # Act
        decision = executor.execute_retry("network:prices")

        # Assert
        assert executor.get_retry_count("network:prices") == 1
        assert decision.delay_ms == 1000

    def test_keys_are_independent(self, executor: RetryExecutor) -> None:
        # Act
        executor.execute_retry("a")
        executor.execute_retry("a")
        decision = executor.execute_retry("b")

        # Assert
        assert decision.retry_count == 1
        assert executor.get_retry_count("a") == 2

    def test_max_retries_override(self, executor: RetryExecutor) -> None:
        # Act
        first = executor.execute_retry("k", max_retries=1)
        second = executor.execute_retry("k")

        # Assert
        assert first.success is True
        assert second.terminal is True

    def test_zero_retries(self) -> None:
        # Arrange
        executor = RetryExecutor(RetrySettings(max_retries=0))

        # Act
        decision = executor.execute_retry("k")

        # Assert
        assert executor.retries_remaining("k") is False
        assert decision.terminal is True

    def test_retries_remaining(self, executor: RetryExecutor) -> None:
        # Arrange
        for _ in range(3):
            assert executor.retries_remaining("k") is True
            executor.execute_retry("k")

        # Assert
        assert executor.retries_remaining("k") is False

    def test_reset(self, executor: RetryExecutor) -> None:
        # Arrange
        executor.execute_retry("k")

        # Act
        executor.reset("k")

        # Assert
        assert executor.get_retry_count("k") == 0


class TestRetryKey:
    """Test retry key fingerprinting."""

    def test_endpoint_first(self) -> None:
        context = {"endpoint": "/api/quotes", "component": "ticker"}
        assert build_retry_key(ErrorType.NETWORK, context) == "network:/api/quotes"

    def test_component_used(self) -> None:
        assert build_retry_key(ErrorType.TIMEOUT, {"component": "ticker"}) == "timeout:ticker"

    def test_global_default(self) -> None:
        assert build_retry_key(ErrorType.NETWORK, {}) == "network:global"
