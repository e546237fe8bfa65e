"""Prometheus metrics for the mission engine

Exposes metrics for the generator circuit breaker, generator calls, retries,
and the mission lifecycle (completions, resets, discarded responses).
"""

import logging
from prometheus_client import Counter, Histogram, Enum

logger = logging.getLogger(__name__)

# Circuit breaker state
# Values: closed, open, half-open
circuit_breaker_state = Enum(
    'mission_engine_circuit_breaker_state',
    'Current state of circuit breaker',
    ['api'],
    states=['closed', 'open', 'half-open']
)

# Labels: api (mission_generator), status (success/failure)
api_calls_total = Counter(
    'mission_engine_api_calls_total',
    'Total number of generator API calls',
    ['api', 'status']
)

api_call_duration = Histogram(
    'mission_engine_api_call_duration_seconds',
    'Duration of generator API calls in seconds',
    ['api'],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, float('inf'))
)

# Labels: api, error_type (TimeoutException/HTTPStatusError/etc)
api_failures_total = Counter(
    'mission_engine_api_failures_total',
    'Total number of generator API failures',
    ['api', 'error_type']
)

api_retries_total = Counter(
    'mission_engine_api_retries_total',
    'Total number of retry attempts',
    ['api']
)

# Labels: frequency (daily/weekly)
mission_completions_total = Counter(
    'mission_engine_mission_completions_total',
    'Missions marked completed',
    ['frequency']
)

mission_resets_total = Counter(
    'mission_engine_mission_resets_total',
    'Mission sets replaced after their reset time passed',
    ['frequency']
)

# Generation responses that arrived after a newer cycle started
stale_generations_total = Counter(
    'mission_engine_stale_generations_total',
    'Generation responses discarded because their cycle was superseded'
)


def record_circuit_breaker_state(api: str, state: str) -> None:
    """
    Record circuit breaker state change.

    Args:
        api: Breaker name (mission_generator)
        state: New state (closed, open, half-open)
    """
    try:
        circuit_breaker_state.labels(api=api).state(state)
        logger.debug(f"[METRICS] Circuit breaker {api} state: {state}")
    except Exception as e:
        logger.error(f"Failed to record circuit breaker state: {e}")


def record_api_call(api: str, success: bool, duration: float) -> None:
    """
    Record API call metrics.

    Args:
        api: API name
        success: Whether the call succeeded
        duration: Call duration in seconds
    """
    try:
        status = 'success' if success else 'failure'
        api_calls_total.labels(api=api, status=status).inc()
        api_call_duration.labels(api=api).observe(duration)
        logger.debug(f"[METRICS] API call {api}: {status}, duration: {duration:.2f}s")
    except Exception as e:
        logger.error(f"Failed to record API call metrics: {e}")


def record_api_failure(api: str, error_type: str) -> None:
    """Record API failure."""
    try:
        api_failures_total.labels(api=api, error_type=error_type).inc()
        logger.debug(f"[METRICS] API failure {api}: {error_type}")
    except Exception as e:
        logger.error(f"Failed to record API failure: {e}")


def record_retry(api: str) -> None:
    """Record retry attempt."""
    try:
        api_retries_total.labels(api=api).inc()
        logger.debug(f"[METRICS] Retry attempt for {api}")
    except Exception as e:
        logger.error(f"Failed to record retry: {e}")


def record_mission_completion(frequency: str) -> None:
    try:
        mission_completions_total.labels(frequency=frequency).inc()
    except Exception as e:
        logger.error(f"Failed to record mission completion: {e}")


def record_mission_reset(frequency: str) -> None:
    try:
        mission_resets_total.labels(frequency=frequency).inc()
    except Exception as e:
        logger.error(f"Failed to record mission reset: {e}")


def record_stale_generation() -> None:
    try:
        stale_generations_total.inc()
    except Exception as e:
        logger.error(f"Failed to record stale generation: {e}")
