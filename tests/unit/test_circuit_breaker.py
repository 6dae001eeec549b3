"""
Unit Tests for CircuitBreakerManager.

Test Aspects Covered:
    ✅ Business Logic: Open on threshold, lazy half-open, close on success,
       one admitted caller while half-open
    ✅ Edge Cases: Unknown keys, idempotent checks, failing listeners
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import Mock

import pytest

from recovery_engine.config.models import CircuitBreakerSettings
from recovery_engine.domain.entities import CircuitState
from recovery_engine.resilience.circuit_breaker import CircuitBreakerManager


@pytest.fixture
def breakers(clock) -> CircuitBreakerManager:
    """Manager with threshold 3 and a 30s cooldown."""
    settings = CircuitBreakerSettings(failure_threshold=3, cooldown_seconds=30)
    return CircuitBreakerManager(settings, clock=clock)


def trip(breakers: CircuitBreakerManager, key: str = "api") -> None:
    for _ in range(breakers.threshold):
        breakers.record_failure(key)


class TestCircuitOpening:
    """Test failure counting and opening."""

    def test_unknown_key_is_closed(self, breakers: CircuitBreakerManager) -> None:
        """
        SCENARIO: Query a breaker that was never used
        EXPECTED: CLOSED, can proceed, nothing created
        """
        # Act
        status = breakers.check_circuit_breaker("never_seen")

        # Assert
        assert status.state == CircuitState.CLOSED
        assert status.can_proceed is True
        assert breakers.get_all_states() == {}

    def test_stays_closed_below_threshold(self, breakers: CircuitBreakerManager) -> None:
        # Act
        breakers.record_failure("api")
        status = breakers.record_failure("api")

        # Assert
        assert status.state == CircuitState.CLOSED
        assert status.failure_count == 2

    def test_opens_at_threshold(self, breakers: CircuitBreakerManager, clock) -> None:
        """
        SCENARIO: Failures reach the threshold
        EXPECTED: OPEN, calls rejected, next attempt after cooldown
        """
        # Act
        trip(breakers)
        status = breakers.check_circuit_breaker("api")

        # Assert
        assert status.state == CircuitState.OPEN
        assert status.can_proceed is False
        assert status.next_attempt == clock() + timedelta(seconds=30)

    def test_check_is_idempotent(self, breakers: CircuitBreakerManager) -> None:
        """
        SCENARIO: Repeated checks without new failures
        EXPECTED: Same status every time, failure count untouched
        """
        # Arrange
        breakers.record_failure("api")

        # Act
        first = breakers.check_circuit_breaker("api")
        second = breakers.check_circuit_breaker("api")

        # Assert
        assert first == second
        assert second.failure_count == 1

    def test_breakers_are_independent(self, breakers: CircuitBreakerManager) -> None:
        # Act
        trip(breakers, "api")

        # Assert
        assert breakers.get_circuit_state("api") == CircuitState.OPEN
        assert breakers.get_circuit_state("storage") == CircuitState.CLOSED


class TestCooldown:
    """Test the lazy OPEN -> HALF_OPEN transition."""

    def test_still_open_before_cooldown(self, breakers, clock) -> None:
        # Arrange
        trip(breakers)
        clock.advance(seconds=29)

        # Act
        status = breakers.check_circuit_breaker("api")

        # Assert
        assert status.state == CircuitState.OPEN

    def test_half_open_after_cooldown(self, breakers, clock) -> None:
        """
        SCENARIO: Cooldown elapsed
        EXPECTED: HALF_OPEN, one trial call allowed
        """
        # Arrange
        trip(breakers)
        clock.advance(seconds=30)

        # Act
        status = breakers.check_circuit_breaker("api")

        # Assert
        assert status.state == CircuitState.HALF_OPEN
        assert status.can_proceed is True
        assert status.next_attempt is None

    def test_failure_in_half_open_reopens(self, breakers, clock) -> None:
        """
        SCENARIO: Trial call fails while HALF_OPEN
        EXPECTED: OPEN again with a fresh cooldown
        """
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)
        breakers.check_circuit_breaker("api")

        # Act
        status = breakers.record_failure("api")

        # Assert
        assert status.state == CircuitState.OPEN
        assert status.next_attempt == clock() + timedelta(seconds=30)

    def test_success_in_half_open_closes(self, breakers, clock) -> None:
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)

        # Act
        status = breakers.record_success("api")

        # Assert
        assert status.state == CircuitState.CLOSED
        assert status.failure_count == 0


class TestHalfOpenAdmission:
    """Test that HALF_OPEN lets a single recovery call through."""

    def test_second_caller_rejected_while_first_runs(self, breakers, clock) -> None:
        """
        SCENARIO: Two callers acquire a half-open breaker
        EXPECTED: First admitted, second rejected until an outcome arrives
        """
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)

        # Act
        first = breakers.acquire("api")
        second = breakers.acquire("api")

        # Assert
        assert first.state == CircuitState.HALF_OPEN
        assert first.can_proceed is True
        assert second.state == CircuitState.HALF_OPEN
        assert second.can_proceed is False
        assert breakers.check_circuit_breaker("api").can_proceed is False

    def test_success_closes_and_admits_everyone(self, breakers, clock) -> None:
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)
        breakers.acquire("api")

        # Act
        breakers.record_success("api")

        # Assert
        assert breakers.acquire("api").can_proceed is True
        assert breakers.acquire("api").can_proceed is True

    def test_failure_reopens_and_next_cooldown_admits_again(self, breakers, clock) -> None:
        """
        SCENARIO: Admitted call fails, then another cooldown elapses
        EXPECTED: OPEN, then one new caller admitted
        """
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)
        breakers.acquire("api")

        # Act
        reopened = breakers.record_failure("api")
        clock.advance(seconds=31)
        retried = breakers.acquire("api")

        # Assert
        assert reopened.state == CircuitState.OPEN
        assert retried.state == CircuitState.HALF_OPEN
        assert retried.can_proceed is True

    def test_release_frees_slot(self, breakers, clock) -> None:
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)
        breakers.acquire("api")

        # Act
        breakers.release("api")

        # Assert
        assert breakers.acquire("api").can_proceed is True

    def test_check_does_not_take_slot(self, breakers, clock) -> None:
        # Arrange
        trip(breakers)
        clock.advance(seconds=31)

        # Act
        breakers.check_circuit_breaker("api")
        breakers.check_circuit_breaker("api")

        # Assert
        assert breakers.acquire("api").can_proceed is True

    def test_closed_and_unknown_always_admit(self, breakers) -> None:
        # Arrange
        breakers.record_failure("api")

        # Act & Assert
        assert breakers.acquire("api").can_proceed is True
        assert breakers.acquire("api").can_proceed is True
        assert breakers.acquire("never_seen").can_proceed is True
        assert "never_seen" not in breakers.get_all_states()


class TestResetAndListeners:
    """Test manual reset and transition notifications."""

    def test_reset_closes_open_breaker(self, breakers: CircuitBreakerManager) -> None:
        # Arrange
        trip(breakers)

        # Act
        breakers.reset_circuit_breaker("api")

        # Assert
        status = breakers.check_circuit_breaker("api")
        assert status.state == CircuitState.CLOSED
        assert status.failure_count == 0

    def test_listener_receives_transitions(self, breakers, clock) -> None:
        """
        SCENARIO: Breaker opens, half-opens and closes
        EXPECTED: Listener sees each transition in order
        """
        # Arrange
        listener = Mock()
        breakers.add_listener(listener)

        # Act
        trip(breakers)
        clock.advance(seconds=30)
        breakers.check_circuit_breaker("api")
        breakers.record_success("api")

        # Assert
        transitions = [call.args[0] for call in listener.call_args_list]
        assert [(t.previous, t.current) for t in transitions] == [
            (CircuitState.CLOSED, CircuitState.OPEN),
            (CircuitState.OPEN, CircuitState.HALF_OPEN),
            (CircuitState.HALF_OPEN, CircuitState.CLOSED),
        ]

    def test_failing_listener_does_not_break_manager(self, breakers) -> None:
        # Arrange
        breakers.add_listener(Mock(side_effect=RuntimeError("ui gone")))

        # Act
        trip(breakers)

        # Assert
        assert breakers.get_circuit_state("api") == CircuitState.OPEN

    def test_removed_listener_not_called(self, breakers) -> None:
        # Arrange
        listener = Mock()
        breakers.add_listener(listener)
        breakers.remove_listener(listener)

        # Act
        trip(breakers)

        # Assert
        listener.assert_not_called()

    def test_has_non_closed(self, breakers) -> None:
        # Arrange
        assert breakers.has_non_closed() is False

        # Act
        trip(breakers)

        # Assert
        assert breakers.has_non_closed() is True
