from __future__ import annotations

import pytest

from gemguard import BreakerState, CircuitBreakerPolicy, ManualClock, OfflineCircuitBreaker


def _breaker(clock: ManualClock, threshold: int = 3) -> OfflineCircuitBreaker:
    return OfflineCircuitBreaker(
        CircuitBreakerPolicy(failure_threshold=threshold, cooldown_s=300.0),
        clock=clock,
    )


def test_starts_online():
    breaker = _breaker(ManualClock())
    assert breaker.state is BreakerState.ONLINE
    assert breaker.should_use_offline_mode() is False


@pytest.mark.parametrize("threshold", [3, 4, 7])
def test_trips_after_threshold_consecutive_failures(threshold):
    breaker = _breaker(ManualClock(), threshold=threshold)
    for _ in range(threshold - 1):
        breaker.record_failure()
    assert breaker.should_use_offline_mode() is False

    breaker.record_failure()
    assert breaker.state is BreakerState.OFFLINE
    assert breaker.should_use_offline_mode() is True


def test_success_resets_counter_and_state():
    breaker = _breaker(ManualClock())
    for _ in range(5):
        breaker.record_failure()
    assert breaker.state is BreakerState.OFFLINE

    breaker.record_success()
    assert breaker.consecutive_failures == 0
    assert breaker.state is BreakerState.ONLINE


def test_success_between_failures_prevents_tripping():
    breaker = _breaker(ManualClock())
    breaker.record_failure()
    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()
    breaker.record_failure()
    assert breaker.should_use_offline_mode() is False


def test_lazy_recovery_after_cooldown():
    clock = ManualClock()
    breaker = _breaker(clock)
    for _ in range(3):
        breaker.record_failure()

    clock.advance(299.0)
    assert breaker.should_use_offline_mode() is True
    # State only changes when asked.
    clock.advance(1.0)
    assert breaker.state is BreakerState.OFFLINE
    assert breaker.should_use_offline_mode() is False
    assert breaker.consecutive_failures == 0
    assert breaker.state is BreakerState.ONLINE


def test_force_online_clears_everything():
    clock = ManualClock()
    breaker = _breaker(clock)
    for _ in range(3):
        breaker.record_failure()
    breaker.force_online()
    status = breaker.status()
    assert status.state is BreakerState.ONLINE
    assert status.consecutive_failures == 0
    assert status.next_retry_at_s is None
    assert status.retry_in_s == 0.0


def test_status_reports_remaining_cooldown():
    clock = ManualClock(1000.0)
    breaker = _breaker(clock)
    for _ in range(3):
        breaker.record_failure()
    clock.advance(100.0)
    status = breaker.status()
    assert status.state is BreakerState.OFFLINE
    assert status.next_retry_at_s == 1300.0
    assert status.retry_in_s == 200.0
