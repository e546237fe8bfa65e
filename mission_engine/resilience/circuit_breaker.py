"""Circuit breaker for the mission generator

Stops hammering the generator API during an outage: after repeated failures
the breaker opens and generation fails fast, which the mission store turns
into an empty set.

State Machine:
    CLOSED (normal) → OPEN (failing fast) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import pybreaker
import logging
from typing import Callable, Any, TypeVar
from functools import wraps

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitBreakerListener(pybreaker.CircuitBreakerListener):
    """Listener to log circuit breaker state changes and emit metrics"""

    def state_change(self, cb: pybreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        """Called when circuit breaker changes state"""
        logger.warning(
            f"[CIRCUIT_BREAKER] {cb.name}: {old_state.name} → {new_state.name}"
        )

        try:
            from mission_engine.resilience.metrics import record_circuit_breaker_state
            record_circuit_breaker_state(cb.name, new_state.name.lower())
        except Exception as e:
            logger.error(f"Failed to record circuit breaker state: {e}")

    def failure(self, cb: pybreaker.CircuitBreaker, exc: BaseException) -> None:
        """Called when circuit breaker records a failure"""
        logger.error(
            f"[CIRCUIT_BREAKER] {cb.name} recorded failure: {type(exc).__name__}: {exc}"
        )

        try:
            from mission_engine.resilience.metrics import record_api_failure
            record_api_failure(cb.name, type(exc).__name__)
        except Exception as e:
            logger.error(f"Failed to record API failure: {e}")

    def success(self, cb: pybreaker.CircuitBreaker) -> None:
        """Called when circuit breaker records a success"""
        logger.debug(f"[CIRCUIT_BREAKER] {cb.name} recorded success")


# 5 failures open the breaker, 60s before a HALF_OPEN trial call
MISSION_GENERATOR_BREAKER = pybreaker.CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="mission_generator",
    listeners=[CircuitBreakerListener()]
)


def with_circuit_breaker(breaker: pybreaker.CircuitBreaker) -> Callable:
    """
    Decorator to wrap async functions with circuit breaker protection.

    When the circuit is OPEN, calls fail immediately with CircuitBreakerError
    instead of reaching the underlying function.

    Example:
        @with_circuit_breaker(MISSION_GENERATOR_BREAKER)
        async def call_generator():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                # calling() counts exceptions raised inside the block as failures
                with breaker.calling():
                    return await func(*args, **kwargs)
            except pybreaker.CircuitBreakerError:
                logger.warning(
                    f"[CIRCUIT_BREAKER] {breaker.name} is OPEN - failing fast"
                )
                raise
        return wrapper
    return decorator
