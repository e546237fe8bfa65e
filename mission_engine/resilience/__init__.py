"""Resilience patterns for the mission generator

This module provides the circuit breaker, retry logic and metrics collection
that keep a failing generator from stalling the engine.
"""

from mission_engine.resilience.circuit_breaker import (
    MISSION_GENERATOR_BREAKER,
    with_circuit_breaker,
)
from mission_engine.resilience.retry import retry_with_backoff
from mission_engine.resilience.metrics import (
    record_circuit_breaker_state,
    record_api_call,
    record_api_failure,
    record_retry,
    record_mission_completion,
    record_mission_reset,
    record_stale_generation,
)

__all__ = [
    # Circuit Breakers
    "MISSION_GENERATOR_BREAKER",
    "with_circuit_breaker",
    # Retry
    "retry_with_backoff",
    # Metrics
    "record_circuit_breaker_state",
    "record_api_call",
    "record_api_failure",
    "record_retry",
    "record_mission_completion",
    "record_mission_reset",
    "record_stale_generation",
]
