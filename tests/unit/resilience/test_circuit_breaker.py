"""Unit tests for circuit breaker functionality"""
import pytest
import pybreaker
from mission_engine.resilience.circuit_breaker import (
    MISSION_GENERATOR_BREAKER,
    with_circuit_breaker,
    CircuitBreakerListener,
)


def _test_breaker(listener: CircuitBreakerListener, fail_max: int = 5) -> pybreaker.CircuitBreaker:
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=60,
        name="test_breaker",
        listeners=[listener]
    )


@pytest.mark.asyncio
async def test_circuit_breaker_closes_on_success():
    """Test that circuit breaker remains CLOSED when calls succeed"""

    @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
    async def successful_function():
        return "success"

    for _ in range(10):
        assert await successful_function() == "success"

    assert MISSION_GENERATOR_BREAKER.current_state == pybreaker.STATE_CLOSED


@pytest.mark.asyncio
async def test_circuit_breaker_opens_after_failures():
    """Test that circuit breaker opens after threshold failures"""

    @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
    async def failing_function():
        raise Exception("Simulated failure")

    for _ in range(MISSION_GENERATOR_BREAKER.fail_max):
        with pytest.raises(Exception):
            await failing_function()

    assert MISSION_GENERATOR_BREAKER.current_state == pybreaker.STATE_OPEN


@pytest.mark.asyncio
async def test_circuit_breaker_fails_fast_when_open():
    """Test that an OPEN breaker never reaches the wrapped function"""
    call_count = 0

    @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
    async def tracked_function():
        nonlocal call_count
        call_count += 1
        return "success"

    MISSION_GENERATOR_BREAKER.open()

    with pytest.raises(pybreaker.CircuitBreakerError):
        await tracked_function()
    assert call_count == 0


@pytest.mark.asyncio
async def test_circuit_breaker_mixed_results():
    """Successes reset the failure count"""
    attempt = 0

    @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
    async def flaky_function():
        nonlocal attempt
        attempt += 1
        if attempt % 2 == 1:
            raise Exception("Flaky error")
        return "success"

    for i in range(8):
        if i % 2 == 0:
            with pytest.raises(Exception, match="Flaky error"):
                await flaky_function()
        else:
            assert await flaky_function() == "success"

    assert MISSION_GENERATOR_BREAKER.current_state == pybreaker.STATE_CLOSED


@pytest.mark.asyncio
async def test_circuit_breaker_listener_state_change():
    """Test that circuit breaker listener sees the CLOSED -> OPEN transition"""
    listener = CircuitBreakerListener()
    state_changes = []
    original_state_change = listener.state_change

    def tracked_state_change(cb, old_state, new_state):
        state_changes.append((old_state.name, new_state.name))
        original_state_change(cb, old_state, new_state)

    listener.state_change = tracked_state_change
    test_breaker = _test_breaker(listener, fail_max=2)

    @with_circuit_breaker(test_breaker)
    async def failing_function():
        raise Exception("Test failure")

    for _ in range(2):
        with pytest.raises(Exception):
            await failing_function()

    assert state_changes[-1][1] == pybreaker.STATE_OPEN


@pytest.mark.asyncio
async def test_circuit_breaker_listener_failure():
    """Test that circuit breaker listener tracks failures"""
    listener = CircuitBreakerListener()
    failures = []
    original_failure = listener.failure

    def tracked_failure(cb, exc):
        failures.append(exc)
        original_failure(cb, exc)

    listener.failure = tracked_failure
    test_breaker = _test_breaker(listener)

    @with_circuit_breaker(test_breaker)
    async def failing_function():
        raise ValueError("Test error")

    for _ in range(3):
        with pytest.raises(ValueError):
            await failing_function()

    assert len(failures) == 3
    assert all(isinstance(f, ValueError) for f in failures)


@pytest.mark.asyncio
async def test_circuit_breaker_listener_success():
    """Test that circuit breaker listener tracks successes"""
    listener = CircuitBreakerListener()
    successes = []
    original_success = listener.success

    def tracked_success(cb):
        successes.append(True)
        original_success(cb)

    listener.success = tracked_success
    test_breaker = _test_breaker(listener)

    @with_circuit_breaker(test_breaker)
    async def successful_function():
        return "success"

    for _ in range(5):
        await successful_function()

    assert len(successes) == 5


def test_circuit_breaker_configuration():
    """Test that the generator breaker is configured correctly"""
    assert MISSION_GENERATOR_BREAKER.name == "mission_generator"
    assert MISSION_GENERATOR_BREAKER.fail_max == 5
    assert MISSION_GENERATOR_BREAKER.reset_timeout == 60
